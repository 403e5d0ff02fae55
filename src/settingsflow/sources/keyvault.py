"""Azure Key Vault settings source.

This module provides the platform configuration source. When a vault URL is
configured, serialized settings and application settings are looked up as
vault secrets right after environment variables.
"""

import re
from typing import Optional, TYPE_CHECKING

from settingsflow.common.exceptions import source_error
from settingsflow.logging import get_logger

if TYPE_CHECKING:
    from azure.keyvault.secrets import SecretClient
    from settingsflow.config.keyvault import KeyVaultSourceSettings

logger = get_logger(__name__)

_INVALID_SECRET_CHARS = re.compile(r"[^0-9A-Za-z-]")


def secret_name_for_key(key: str) -> str:
    """Map a settings key to a valid Key Vault secret name.

    Secret names may only contain alphanumerics and dashes, so
    ``dict(str,Widget)`` becomes ``dict-str-Widget-`` and
    ``Its.Configuration.Settings.Precedence`` becomes
    ``Its-Configuration-Settings-Precedence``.
    """
    return _INVALID_SECRET_CHARS.sub("-", key)


class KeyVaultSettingsSource:
    """Settings source reading secrets from Azure Key Vault.

    The Azure SDK is imported lazily, the first time a secret is requested.
    A secret that does not exist is reported as absent; any other failure is
    raised as a ``SOURCE_ERROR`` without retrying.

    Attributes:
        kv_settings: Configuration settings for Key Vault
        _secret_client: Lazy-loaded Azure SecretClient instance
    """

    name = "Azure Key Vault"

    def __init__(
        self,
        settings: "KeyVaultSourceSettings",
        client: Optional["SecretClient"] = None,
    ):
        """Initialize the Key Vault settings source.

        Args:
            settings: Key Vault configuration settings
            client: Optional pre-built SecretClient, mainly for tests
        """
        self.kv_settings = settings
        self._secret_client = client

    @property
    def is_available(self) -> bool:
        return self._secret_client is not None or self.kv_settings.is_configured()

    def _credential(self):
        from azure.identity import ClientSecretCredential, DefaultAzureCredential

        kv = self.kv_settings
        if kv.tenant_id and kv.client_id and kv.client_secret:
            return ClientSecretCredential(
                tenant_id=kv.tenant_id,
                client_id=kv.client_id,
                client_secret=kv.client_secret.get_secret_value(),
            )
        return DefaultAzureCredential()

    @property
    def secret_client(self) -> Optional["SecretClient"]:
        """Vault client, created on first use. None while no vault is configured."""
        if self._secret_client is None and self.kv_settings.is_configured():
            from azure.keyvault.secrets import SecretClient

            self._secret_client = SecretClient(vault_url=self.kv_settings.url, credential=self._credential())
        return self._secret_client

    def get_serialized_setting(self, key: str) -> Optional[str]:
        """Retrieve the secret stored under the vault name for ``key``.

        Args:
            key: Flattened settings key

        Returns:
            The secret value, or None if the vault is not configured or has no such secret

        Raises:
            SettingsFlowError: If the vault cannot be reached
        """
        client = self.secret_client
        if client is None:
            return None

        from azure.core.exceptions import ResourceNotFoundError

        secret_name = secret_name_for_key(key)
        try:
            return client.get_secret(secret_name).value
        except ResourceNotFoundError:
            return None
        except Exception as e:
            raise source_error(
                f"Failed to retrieve secret '{secret_name}' for setting '{key}'",
                source_name=self.name,
                cause=e,
            ) from e
