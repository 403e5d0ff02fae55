from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ErrorCode(Enum):
    """Standard error codes for settingsflow operations.

    Error codes categorize failures without requiring a dedicated exception
    class per failure mode. Each category has its own prefix.

    Attributes:
        CONFIG_*: Settings resolution and configuration errors
        CRYPTO_*: Certificate loading and decryption errors
        SOURCE_*: Settings source access errors
        VALIDATION_*: Invalid arguments passed to the public API
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_MISSING = "CONFIG_002"
    CONFIG_INVALID = "CONFIG_003"
    CONFIG_CONFLICT = "CONFIG_004"
    TYPE_REDIRECT_ERROR = "CONFIG_005"

    # Cryptography errors
    DECRYPTION_ERROR = "CRYPTO_001"
    CERTIFICATE_ERROR = "CRYPTO_002"

    # Source errors
    SOURCE_ERROR = "SOURCE_001"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"


class SettingsFlowError(Exception):
    """Base exception for all settingsflow errors.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize settingsflow error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # lazy import to avoid circular dependency
        from settingsflow.logging import get_logger
        logger = get_logger(__name__)
        logger.debug(
            message,
            extra={"error_code": error_code.value, "details": self.details},
            exc_info=cause,
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "SettingsFlowError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for SettingsFlowError

        Returns:
            SettingsFlowError instance
        """
        return cls(message=message, error_code=error_code, **kwargs)


def _type_name(settings_type: Any) -> str:
    module = getattr(settings_type, "__module__", None)
    qualname = getattr(settings_type, "__qualname__", None) or repr(settings_type)
    return f"{module}.{qualname}" if module else qualname


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
    **kwargs
) -> SettingsFlowError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Settings key that caused the error
        error_code: Specific configuration error code
        **kwargs: Additional error details

    Returns:
        SettingsFlowError with a CONFIG_* code
    """
    details = dict(kwargs.pop("details", None) or {})
    if config_key:
        details["config_key"] = config_key

    return SettingsFlowError(
        message=message,
        error_code=error_code,
        details=details,
        **kwargs
    )


def missing_constructor_arguments_error(
    settings_type: Any,
    config_key: str,
    missing: Iterable[str],
    cause: Optional[Exception] = None,
) -> SettingsFlowError:
    """Create an error for a settings type that cannot be default-constructed.

    Every missing argument is listed, not just the first one.
    """
    missing = list(missing)
    listed = ", ".join(f"'{name}'" for name in missing) or "(unknown)"
    noun = "argument" if len(missing) == 1 else "arguments"
    return configuration_error(
        f"Type {_type_name(settings_type)} cannot be instantiated without additional setup "
        f"because no setting named '{config_key}' was found and it requires the constructor "
        f"{noun} {listed}. Provide the setting, or register a deserializer with "
        f"resolver.for_type({getattr(settings_type, '__name__', settings_type)}).deserialize "
        f"that can instantiate this type.",
        config_key=config_key,
        error_code=ErrorCode.CONFIG_MISSING,
        details={"settings_type": _type_name(settings_type), "missing": missing},
        cause=cause,
    )


def invalid_setting_error(
    settings_type: Any,
    config_key: str,
    source_error: Exception,
) -> SettingsFlowError:
    """Create an error for a serialized setting that cannot be deserialized."""
    return configuration_error(
        f"The setting '{config_key}' could not be deserialized into {_type_name(settings_type)}",
        config_key=config_key,
        error_code=ErrorCode.CONFIG_INVALID,
        details={"settings_type": _type_name(settings_type)},
        cause=source_error,
    )


def conflicting_settings_error(path: str, config_key: str) -> SettingsFlowError:
    """Create an error for two settings files that map to the same key."""
    return configuration_error(
        f"Found conflicting settings file: {path}",
        config_key=config_key,
        error_code=ErrorCode.CONFIG_CONFLICT,
        details={"path": path},
    )


def type_redirect_error(
    settings_type: Any,
    config_key: str,
    candidates: Iterable[str] = (),
    redirect: Optional[str] = None,
) -> SettingsFlowError:
    """Create an error for an abstract settings type with no usable concrete type."""
    candidates = sorted(candidates)
    type_name = _type_name(settings_type)
    if len(candidates) > 1:
        message = (
            f"Settings resolution for abstract type {type_name} is ambiguous: "
            f"{', '.join(candidates)} all match '{redirect or config_key}'. "
            f"Redirect resolution to a single class by adding an application setting, "
            f"for example: {config_key}=NAME_OF_CONCRETE_TYPE"
        )
    elif redirect:
        message = (
            f"Settings resolution for abstract type {type_name} is redirected to '{redirect}', "
            f"but no concrete subclass with that name was found."
        )
    else:
        message = (
            f"Unable to create an instance of {type_name} because it is abstract. "
            f"You should either change the class definition to be concrete or redirect "
            f"settings resolution to another class by adding an application setting, "
            f"for example: {config_key}=NAME_OF_CONCRETE_TYPE"
        )
    return configuration_error(
        message,
        config_key=config_key,
        error_code=ErrorCode.TYPE_REDIRECT_ERROR,
        details={"settings_type": type_name, "candidates": candidates, "redirect": redirect},
    )


def decryption_error(
    message: str,
    path: Optional[str] = None,
    cause: Optional[Exception] = None,
) -> SettingsFlowError:
    """Create a decryption error, naming the offending file when known."""
    details: Dict[str, Any] = {}
    if path:
        details["path"] = path
        message = f"{message} ({path})"
    return SettingsFlowError(
        message=message,
        error_code=ErrorCode.DECRYPTION_ERROR,
        details=details,
        cause=cause,
    )


def certificate_error(
    message: str,
    path: Optional[str] = None,
    cause: Optional[Exception] = None,
) -> SettingsFlowError:
    """Create a certificate loading error."""
    details: Dict[str, Any] = {}
    if path:
        details["path"] = path
    return SettingsFlowError(
        message=message,
        error_code=ErrorCode.CERTIFICATE_ERROR,
        details=details,
        cause=cause,
    )


def source_error(
    message: str,
    source_name: str,
    cause: Optional[Exception] = None,
) -> SettingsFlowError:
    """Create an error for a settings source that failed to answer a lookup."""
    return SettingsFlowError(
        message=message,
        error_code=ErrorCode.SOURCE_ERROR,
        details={"source": source_name},
        cause=cause,
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    **kwargs
) -> SettingsFlowError:
    """Create a validation error for invalid public API arguments."""
    details = dict(kwargs.pop("details", None) or {})
    if field:
        details["field"] = field

    return SettingsFlowError(
        message=message,
        error_code=ErrorCode.VALIDATION_ERROR,
        details=details,
        **kwargs
    )
