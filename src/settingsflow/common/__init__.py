"""Common exceptions for settingsflow.

The exception system uses error codes for categorization rather than
numerous specific exception classes. All exceptions raised by the library
inherit from SettingsFlowError and carry structured error information.
"""

from settingsflow.common.exceptions import (
    SettingsFlowError,
    ErrorCode,
    # Helper functions
    configuration_error,
    missing_constructor_arguments_error,
    invalid_setting_error,
    conflicting_settings_error,
    type_redirect_error,
    decryption_error,
    certificate_error,
    source_error,
    validation_error,
)

__all__ = [
    # Base Exception and Error Codes
    "SettingsFlowError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "missing_constructor_arguments_error",
    "invalid_setting_error",
    "conflicting_settings_error",
    "type_redirect_error",
    "decryption_error",
    "certificate_error",
    "source_error",
    "validation_error",
]
