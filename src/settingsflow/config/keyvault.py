"""Key Vault configuration settings.

This module contains only the configuration needed to reach Azure Key Vault.
The settings source that reads from the vault lives in
``settingsflow.sources.keyvault``.
"""

from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from .base import SettingsFlowBaseSettings


class KeyVaultSourceSettings(SettingsFlowBaseSettings):
    """Configuration settings for the Azure Key Vault settings source.

    When a vault URL is configured the vault is consulted right after
    environment variables and before any settings folder.
    """

    model_config = SettingsConfigDict(
        env_prefix="KEYVAULT_",
        case_sensitive=False,
        extra="ignore",
    )

    url: Optional[str] = Field(
        None,
        description="Azure Key Vault URL (https://vault-name.vault.azure.net/)"
    )
    use_keyvault: bool = Field(
        default=True,
        description="Whether to consult Key Vault when resolving settings"
    )

    tenant_id: Optional[str] = Field(
        None,
        description="Azure AD tenant ID for Key Vault authentication"
    )
    client_id: Optional[str] = Field(
        None,
        description="Azure client ID for Key Vault authentication"
    )
    client_secret: Optional[SecretStr] = Field(
        None,
        description="Azure client secret for Key Vault authentication"
    )

    def is_configured(self) -> bool:
        """Check if Key Vault is properly configured.

        Returns:
            True if Key Vault URL is provided and use_keyvault is enabled
        """
        return bool(self.use_keyvault and self.url)
