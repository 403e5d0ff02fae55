"""Settings sources.

Each source maps a flattened settings key to a serialized value. The
resolver consults them in order and uses the first non-blank answer.
"""

from .base import AnonymousSettingsSource, SettingsSource, create_source
from .environment import EnvironmentVariableSettingsSource
from .static import StaticSettingsSource
from .app_config import AppConfigSettingsSource
from .keyvault import KeyVaultSettingsSource, secret_name_for_key
from .directory import ConfigDirectorySource

__all__ = [
    "SettingsSource",
    "AnonymousSettingsSource",
    "create_source",
    "EnvironmentVariableSettingsSource",
    "StaticSettingsSource",
    "AppConfigSettingsSource",
    "KeyVaultSettingsSource",
    "secret_name_for_key",
    "ConfigDirectorySource",
]
