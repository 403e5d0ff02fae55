from typing import Mapping, Optional


class StaticSettingsSource:
    """In-memory settings source, mostly useful in tests and for defaults."""

    def __init__(
        self,
        values: Mapping[str, str],
        name: str = "static settings",
        case_sensitive: bool = False,
    ):
        self.name = name
        self.case_sensitive = case_sensitive
        if case_sensitive:
            self._values = dict(values)
        else:
            self._values = {key.lower(): value for key, value in values.items()}

    def get_serialized_setting(self, key: str) -> Optional[str]:
        return self._values.get(key if self.case_sensitive else key.lower())

    def __len__(self) -> int:
        return len(self._values)
