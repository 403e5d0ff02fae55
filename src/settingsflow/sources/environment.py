import os
from typing import Mapping, Optional


class EnvironmentVariableSettingsSource:
    """Reads serialized settings from process environment variables.

    Lookups are case-sensitive: the variable must be named exactly like the
    flattened settings key.
    """

    name = "environment variable"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    def get_serialized_setting(self, key: str) -> Optional[str]:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(key)
