"""Typed settings resolution.

This package turns settings classes into populated instances. See
``settingsflow.settings.resolver`` for the lookup order.
"""

from .cache import SettingsCache
from .deserialize import Deserializer, deserialize_default
from .keys import flatten_type_name
from .redirect import TypeRedirector, is_abstract
from .resolver import (
    PRECEDENCE_SETTING,
    SettingsResolver,
    TypeSettings,
    get_resolver,
    get_settings,
)

__all__ = [
    "SettingsCache",
    "Deserializer",
    "deserialize_default",
    "flatten_type_name",
    "TypeRedirector",
    "is_abstract",
    "PRECEDENCE_SETTING",
    "SettingsResolver",
    "TypeSettings",
    "get_resolver",
    "get_settings",
]
