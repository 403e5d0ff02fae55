"""settingsflow: typed, precedence-based settings and dependency-gated features.

Settings example:
    >>> from pydantic import BaseModel
    >>> from settingsflow import SettingsResolver
    >>>
    >>> class SmtpSettings(BaseModel):
    ...     host: str = "localhost"
    ...     port: int = 25
    >>>
    >>> resolver = SettingsResolver()
    >>> resolver.precedence = ("production",)
    >>> smtp = resolver.get(SmtpSettings)   # .config/production/SmtpSettings.json

Features example:
    >>> from settingsflow import BooleanFeatureActivator, BehaviorSubject
    >>>
    >>> database_up = BehaviorSubject(False)
    >>> cache = BooleanFeatureActivator(warm_cache, drop_cache, database_up)
    >>> cache.subscribe(print)
    False
"""

from settingsflow.__version__ import __version__
from settingsflow.common import ErrorCode, SettingsFlowError
from settingsflow.config import LibrarySettings, get_library_settings
from settingsflow.crypto import (
    CertificateEntry,
    certificates_from_directory,
    certificates_from_store,
    decrypt,
    encrypt,
    load_certificate_file,
)
from settingsflow.features import (
    BehaviorSubject,
    BooleanFeatureActivator,
    Feature,
    FeatureActivator,
    FeatureRegistry,
    OnOffFeature,
    SingleActivationFeature,
    SupportsAvailability,
    get_feature,
    is_available,
    register_feature,
)
from settingsflow.merge import deep_merge, merged_settings
from settingsflow.settings import (
    SettingsResolver,
    TypeSettings,
    flatten_type_name,
    get_resolver,
    get_settings,
)
from settingsflow.sources import (
    AppConfigSettingsSource,
    ConfigDirectorySource,
    EnvironmentVariableSettingsSource,
    KeyVaultSettingsSource,
    SettingsSource,
    StaticSettingsSource,
    create_source,
)

__all__ = [
    "__version__",
    # Errors
    "SettingsFlowError",
    "ErrorCode",
    # Configuration
    "LibrarySettings",
    "get_library_settings",
    # Settings
    "SettingsResolver",
    "TypeSettings",
    "flatten_type_name",
    "get_resolver",
    "get_settings",
    # Sources
    "SettingsSource",
    "create_source",
    "EnvironmentVariableSettingsSource",
    "StaticSettingsSource",
    "AppConfigSettingsSource",
    "KeyVaultSettingsSource",
    "ConfigDirectorySource",
    # Crypto
    "CertificateEntry",
    "load_certificate_file",
    "certificates_from_directory",
    "certificates_from_store",
    "encrypt",
    "decrypt",
    # Features
    "BehaviorSubject",
    "FeatureActivator",
    "BooleanFeatureActivator",
    "Feature",
    "FeatureRegistry",
    "OnOffFeature",
    "SingleActivationFeature",
    "SupportsAvailability",
    "is_available",
    "register_feature",
    "get_feature",
    # Merging
    "deep_merge",
    "merged_settings",
]
