import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import SettingsFlowBaseSettings
from .keyvault import KeyVaultSourceSettings


def _default_certificate_store() -> str:
    return os.path.join(os.path.expanduser("~"), ".settingsflow", "certificates")


class LibrarySettings(SettingsFlowBaseSettings):
    """Configuration of the settings resolution machinery itself.

    These are the knobs of the library, not application settings: where the
    ``.config`` folder lives, where the certificate store is, and which file
    holds application-level key/value settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SETTINGSFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    settings_directory: str = Field(
        default_factory=lambda: os.path.join(os.getcwd(), ".config"),
        description="Root folder containing <Key>.json files and one subfolder per precedence name"
    )
    certificate_store: str = Field(
        default_factory=_default_certificate_store,
        description="Folder of certificates (*.pem, *.pfx, *.p12) available to every settings folder"
    )
    app_config_file: Optional[str] = Field(
        default=None,
        description="dotenv-format file of application-level key/value settings. Defaults to app.env in the working directory."
    )
    log_level: str = Field(
        default="INFO",
        description="Log level used by setup_logging when configured from the command line"
    )
    keyvault: KeyVaultSourceSettings = Field(
        default_factory=KeyVaultSourceSettings,
        description="Azure Key Vault settings source configuration"
    )

    @property
    def app_config_path(self) -> Path:
        """Path of the application settings file."""
        if self.app_config_file:
            return Path(self.app_config_file)
        return Path(os.getcwd()) / "app.env"


# Singleton instance
_library_settings: Optional[LibrarySettings] = None


def get_library_settings(force_reload: bool = False) -> LibrarySettings:
    """Get the singleton library settings instance.

    Args:
        force_reload: If True, re-reads the environment even if an instance
                     already exists. Useful for testing or when environment
                     variables have changed.

    Returns:
        LibrarySettings: The singleton instance
    """
    global _library_settings

    if _library_settings is None or force_reload:
        _library_settings = LibrarySettings()

    return _library_settings
