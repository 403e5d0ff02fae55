"""Typed settings resolution.

``SettingsResolver`` turns a settings class into an instance populated from
the first source that has a value for the class's key::

    resolver = SettingsResolver()
    resolver.precedence = ("production",)
    smtp = resolver.get(SmtpSettings)

Sources are consulted in this order by default:

1. environment variable named after the key
2. Azure Key Vault, when configured
3. one settings folder per precedence name, ``<settings_directory>/<name>``
4. the root settings folder, ``<settings_directory>``
5. the application settings file

When no source has a value, the class is instantiated with no arguments.
Resolved instances are cached per type until ``reset()``.
"""

import inspect
import os
import threading
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Optional,
    Type,
    TypeVar,
    get_origin,
)

from pydantic import ValidationError

from settingsflow.common.exceptions import (
    SettingsFlowError,
    configuration_error,
    invalid_setting_error,
    missing_constructor_arguments_error,
    validation_error,
)
from settingsflow.config import LibrarySettings, get_library_settings
from settingsflow.crypto import CertificateEntry, certificates_from_store, load_certificates
from settingsflow.logging import get_logger, resolution_scope
from settingsflow.settings.cache import SettingsCache
from settingsflow.settings.deserialize import Deserializer, deserialize_default
from settingsflow.settings.keys import flatten_type_name
from settingsflow.settings.redirect import TypeRedirector, is_abstract
from settingsflow.sources.app_config import AppConfigSettingsSource
from settingsflow.sources.base import SettingsSource
from settingsflow.sources.directory import ConfigDirectorySource
from settingsflow.sources.environment import EnvironmentVariableSettingsSource
from settingsflow.sources.keyvault import KeyVaultSettingsSource
from settingsflow.utils.decorators import traced

logger = get_logger(__name__)

T = TypeVar("T")

GetSerializedSetting = Callable[[str], Optional[str]]

PRECEDENCE_SETTING = "Its.Configuration.Settings.Precedence"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _constructor(settings_type: Any) -> Any:
    origin = get_origin(settings_type)
    return origin if isinstance(origin, type) else settings_type


def _required_parameters(settings_type: Any) -> List[str]:
    try:
        signature = inspect.signature(settings_type)
    except (TypeError, ValueError):
        return []
    return [
        name for name, parameter in signature.parameters.items()
        if parameter.default is inspect.Parameter.empty
        and parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


class TypeSettings(Generic[T]):
    """Per-type overrides of how one settings type is resolved.

    Attributes:
        settings_type: The settings type these overrides apply to
        get_serialized_setting: Replaces the resolver's source lookup for this
            type when set
        deserialize: Replaces the resolver's deserializer for this type when set
    """

    def __init__(self, resolver: "SettingsResolver", settings_type: Type[T]):
        self._resolver = resolver
        self.settings_type = settings_type
        self._key: Optional[str] = None
        self.get_serialized_setting: Optional[GetSerializedSetting] = None
        self.deserialize: Optional[Deserializer] = None

    @property
    def key(self) -> str:
        """The key the settings are looked up under."""
        if self._key is None:
            self._key = self._resolver.build_key(self.settings_type)
        return self._key

    @key.setter
    def key(self, value: str) -> None:
        if value is None or not str(value).strip():
            raise validation_error(
                "The key cannot be None, empty, or consist entirely of whitespace.",
                field="key",
            )
        self._key = value

    @property
    def value(self) -> T:
        return self._resolver.get(self.settings_type)


class SettingsResolver:
    """Resolves typed settings from an ordered list of sources.

    Args:
        library_settings: Library configuration. Defaults to the values read
            from ``SETTINGSFLOW_*`` environment variables.
    """

    def __init__(self, library_settings: Optional[LibrarySettings] = None):
        self._explicit_library_settings = library_settings
        self._lock = threading.RLock()
        self._cache = SettingsCache()
        self.reset()

    def reset(self) -> None:
        """Restore the default behavior and drop every resolved instance."""
        with self._lock:
            self.library_settings = self._explicit_library_settings or get_library_settings(force_reload=True)
            self._cache.clear()
            self._type_settings: Dict[Any, TypeSettings] = {}
            self._settings_directory = Path(self.library_settings.settings_directory)
            self._precedence: Optional[tuple] = None
            self._sources: Optional[List[SettingsSource]] = None
            self._default_sources: Optional[List[SettingsSource]] = None
            self._keyvault_source = KeyVaultSettingsSource(self.library_settings.keyvault)
            self._app_config_source: Optional[AppConfigSettingsSource] = None
            self._redirector = TypeRedirector(self.app_setting)
            self.deserialize: Deserializer = deserialize_default
            self.get_serialized_setting: GetSerializedSetting = self.get_serialized_setting_default
            self.certificate_password: Callable[[str], Optional[str]] = lambda file_name: None

    # Configuration

    @property
    def settings_directory(self) -> Path:
        """Root folder where file-based settings are looked up."""
        return self._settings_directory

    @settings_directory.setter
    def settings_directory(self, value: Any) -> None:
        with self._lock:
            self._settings_directory = Path(value)
            self._default_sources = None

    @property
    def precedence(self) -> tuple:
        """Ordered names of the settings folders consulted before the root folder."""
        with self._lock:
            if self._precedence is None:
                configured = self.app_setting(PRECEDENCE_SETTING)
                self._precedence = tuple(
                    name.strip() for name in (configured or "").split("|") if name.strip()
                )
            return self._precedence

    @precedence.setter
    def precedence(self, value: Optional[Iterable[str]]) -> None:
        with self._lock:
            self._precedence = tuple(value or ())
            self._default_sources = None

    @property
    def sources(self) -> List[SettingsSource]:
        """Sources consulted in order. Assigning None restores the defaults."""
        with self._lock:
            if self._sources is not None:
                return list(self._sources)
            if self._default_sources is None:
                self._default_sources = self.get_default_sources()
            return list(self._default_sources)

    @sources.setter
    def sources(self, value: Optional[Iterable[SettingsSource]]) -> None:
        if value is None:
            with self._lock:
                self._sources = None
            return

        value = list(value)
        for source in value:
            if not isinstance(source, SettingsSource):
                raise validation_error(
                    f"{source!r} is not a settings source",
                    field="sources",
                )
        with self._lock:
            self._sources = value

    @property
    def app_config_source(self) -> AppConfigSettingsSource:
        with self._lock:
            if self._app_config_source is None:
                self._app_config_source = AppConfigSettingsSource(self.library_settings.app_config_path)
            return self._app_config_source

    def get_default_sources(self) -> List[SettingsSource]:
        """Build the default source list for the current precedence and folder."""
        sources: List[SettingsSource] = [EnvironmentVariableSettingsSource()]

        if self._keyvault_source.is_available:
            sources.append(self._keyvault_source)

        for name in self.precedence:
            sources.append(self._directory_source(self._find_folder(name)))

        sources.append(self._directory_source(self.settings_directory))
        sources.append(self.app_config_source)
        return sources

    def _directory_source(self, path: Path) -> ConfigDirectorySource:
        return ConfigDirectorySource(
            path,
            certificates=self.certificates,
            certificate_password=lambda file_name: self.certificate_password(file_name),
        )

    def _find_folder(self, name: str) -> Path:
        path = self.settings_directory / name
        if path.is_dir() or not self.settings_directory.is_dir():
            return path
        for candidate in self.settings_directory.iterdir():
            if candidate.is_dir() and candidate.name.lower() == name.lower():
                return candidate
        return path

    # Lookups

    def app_setting(self, key: str) -> Optional[str]:
        """Read an application setting.

        Environment variables are checked first, then Key Vault when it is
        configured, then the application settings file.
        """
        value = os.environ.get(key)
        if not _is_blank(value):
            return value

        if self._keyvault_source.is_available:
            value = self._keyvault_source.get_serialized_setting(key)
            if not _is_blank(value):
                return value

        return self.app_config_source.get_serialized_setting(key)

    def get_serialized_setting_default(self, key: str) -> Optional[str]:
        """Return the first non-blank value any source has for ``key``."""
        for source in self.sources:
            value = source.get_serialized_setting(key)
            if not _is_blank(value):
                logger.info(f"Resolved setting '{key}' from {source.name}")
                return value
        return None

    def get_files(self) -> List[Path]:
        """Files of the active settings folders.

        When several folders contain a file with the same name (compared
        case-insensitively) the one from the highest-precedence folder wins.
        """
        files: Dict[str, Path] = {}
        for source in self.sources:
            if isinstance(source, ConfigDirectorySource):
                for path in source.files:
                    files.setdefault(path.name.lower(), path)
        return list(files.values())

    def get_file(self, matching: Callable[[Path], bool]) -> Optional[Path]:
        """First file of the active settings folders that matches, or None."""
        return next((path for path in self.get_files() if matching(path)), None)

    def certificates(self) -> List[CertificateEntry]:
        """Certificates of the active settings folders plus the certificate store."""
        password = lambda file_name: self.certificate_password(file_name)
        return (
            load_certificates(self.get_files(), password)
            + certificates_from_store(self.library_settings.certificate_store, password)
        )

    # Resolution

    def for_type(self, settings_type: Type[T]) -> TypeSettings[T]:
        """Return the per-type overrides handle for ``settings_type``."""
        with self._lock:
            type_settings = self._type_settings.get(settings_type)
            if type_settings is None:
                type_settings = self._type_settings[settings_type] = TypeSettings(self, settings_type)
            return type_settings

    def set_key(self, settings_type: Any, key: str) -> None:
        self.for_type(settings_type).key = key

    def build_key(self, settings_type: Any) -> str:
        """Default key of ``settings_type``, following abstract type redirects."""
        return self._redirector.redirected_key(settings_type, flatten_type_name(settings_type))

    def get(self, settings_type: Type[T]) -> T:
        """Get the settings instance for ``settings_type``.

        Raises:
            SettingsFlowError: If the settings cannot be deserialized, or no
                settings exist and the type cannot be instantiated without them
        """
        return self._cache.get_or_add(settings_type, lambda: self._create(settings_type))

    def get_untyped(self, settings_type: Any) -> object:
        return self.get(settings_type)

    @traced(
        "settingsflow.resolve",
        attribute_getter=lambda self, settings_type: {"settingsflow.type": flatten_type_name(settings_type)},
    )
    def _create(self, settings_type: Any) -> Any:
        type_settings = self.for_type(settings_type)
        key = type_settings.key

        with resolution_scope(key):
            target = settings_type
            if is_abstract(settings_type):
                target = self._redirector.concrete_type(
                    settings_type, key, flatten_type_name(settings_type)
                )

            get_serialized_setting = type_settings.get_serialized_setting or self.get_serialized_setting
            serialized = get_serialized_setting(key)

            if not _is_blank(serialized):
                deserialize = type_settings.deserialize or self.deserialize
                try:
                    return deserialize(target, serialized)
                except SettingsFlowError:
                    raise
                except (ValueError, TypeError) as e:
                    raise invalid_setting_error(target, key, e) from e

            value = self._instantiate(target, key)
            logger.info(f"Resolved setting '{key}' from new instance. No configuration found.")
            return value

    def _instantiate(self, target: Any, key: str) -> Any:
        constructor = _constructor(target)
        try:
            return constructor()
        except ValidationError as e:
            missing = [
                ".".join(str(part) for part in error["loc"])
                for error in e.errors()
                if error["type"] == "missing"
            ]
            if missing:
                raise missing_constructor_arguments_error(target, key, missing, cause=e) from e
            raise invalid_setting_error(target, key, e) from e
        except TypeError as e:
            missing = _required_parameters(constructor)
            if missing:
                raise missing_constructor_arguments_error(target, key, missing, cause=e) from e
            raise configuration_error(
                f"Unable to create an instance of {getattr(target, '__name__', target)}",
                config_key=key,
                cause=e,
            ) from e


# Default resolver
_resolver: Optional[SettingsResolver] = None
_resolver_lock = threading.Lock()


def get_resolver(force_reload: bool = False) -> SettingsResolver:
    """Get the process-wide default resolver.

    Args:
        force_reload: If True, creates a new resolver even if one exists

    Returns:
        SettingsResolver: The default resolver
    """
    global _resolver

    with _resolver_lock:
        if _resolver is None or force_reload:
            _resolver = SettingsResolver()
        return _resolver


def get_settings(settings_type: Type[T]) -> T:
    """Resolve ``settings_type`` with the default resolver."""
    return get_resolver().get(settings_type)
