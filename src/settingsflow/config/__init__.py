"""Configuration of settingsflow itself.

This package exposes the pydantic-settings models that control where
settings folders, certificates and application settings are looked up.
"""

from .base import SettingsFlowBaseSettings
from .keyvault import KeyVaultSourceSettings
from .main import LibrarySettings, get_library_settings

__all__ = [
    "SettingsFlowBaseSettings",
    "KeyVaultSourceSettings",
    "LibrarySettings",
    "get_library_settings",
]
