"""Application settings file source.

Application-level key/value settings (the precedence list, abstract type
redirects, or whole serialized settings) can be kept in a dotenv-format file
next to the application. The file is read once, when the source is created.
"""

from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

from settingsflow.logging import get_logger

logger = get_logger(__name__)


class AppConfigSettingsSource:
    """Settings source backed by a dotenv-format application settings file.

    A missing file yields an empty source. Keys are matched
    case-insensitively.
    """

    name = "app config"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._values: Dict[str, str] = {}

        if self.path.is_file():
            for key, value in dotenv_values(self.path).items():
                if value is not None:
                    self._values[key.lower()] = value
            logger.debug(
                f"Loaded {len(self._values)} application settings from {self.path}"
            )

    def get_serialized_setting(self, key: str) -> Optional[str]:
        return self._values.get(key.lower())

    def __repr__(self) -> str:
        return f"AppConfigSettingsSource(path={str(self.path)!r})"
