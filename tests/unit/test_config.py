"""Tests for the library's own configuration."""

import os
from pathlib import Path

from settingsflow.config import KeyVaultSourceSettings, LibrarySettings, get_library_settings


class TestKeyVaultSourceSettings:

    def test_not_configured_without_url(self, monkeypatch):
        """Test not configured without URL."""
        monkeypatch.delenv("KEYVAULT_URL", raising=False)

        assert not KeyVaultSourceSettings().is_configured()

    def test_reads_prefixed_environment(self, monkeypatch):
        """Test reads prefixed environment."""
        monkeypatch.setenv("KEYVAULT_URL", "https://vault.vault.azure.net/")

        settings = KeyVaultSourceSettings()

        assert settings.is_configured()
        assert settings.url == "https://vault.vault.azure.net/"

    def test_disabled_vault_is_not_configured(self):
        """Test disabled vault is not configured."""
        settings = KeyVaultSourceSettings(url="https://vault.vault.azure.net/", use_keyvault=False)

        assert not settings.is_configured()


class TestLibrarySettings:

    def test_defaults(self, monkeypatch):
        """Test defaults."""
        monkeypatch.delenv("SETTINGSFLOW_SETTINGS_DIRECTORY", raising=False)
        monkeypatch.delenv("SETTINGSFLOW_APP_CONFIG_FILE", raising=False)

        settings = LibrarySettings()

        assert settings.settings_directory == os.path.join(os.getcwd(), ".config")
        assert settings.app_config_path == Path(os.getcwd()) / "app.env"

    def test_reads_prefixed_environment(self, monkeypatch, tmp_path):
        """Test reads prefixed environment."""
        monkeypatch.setenv("SETTINGSFLOW_SETTINGS_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("SETTINGSFLOW_APP_CONFIG_FILE", str(tmp_path / "settings.env"))
        monkeypatch.setenv("SETTINGSFLOW_KEYVAULT__URL", "https://vault.vault.azure.net/")

        settings = LibrarySettings()

        assert settings.settings_directory == str(tmp_path)
        assert settings.app_config_path == tmp_path / "settings.env"
        assert settings.keyvault.url == "https://vault.vault.azure.net/"

    def test_singleton(self, monkeypatch):
        """Test singleton."""
        first = get_library_settings(force_reload=True)

        assert get_library_settings() is first

        monkeypatch.setenv("SETTINGSFLOW_LOG_LEVEL", "DEBUG")
        reloaded = get_library_settings(force_reload=True)

        assert reloaded is not first
        assert reloaded.log_level == "DEBUG"
        get_library_settings(force_reload=True)
