"""Redirection of abstract settings types to a concrete class.

An abstract settings type cannot be instantiated, so its settings are
resolved through a concrete subclass. The concrete class is chosen by the
application setting keyed by the abstract type's name, for example::

    IPaymentGateway=StripeGateway

The settings are then looked up under the concrete class name
(``StripeGateway.json``).
"""

import inspect
from abc import ABC
from typing import Any, Callable, List, Optional, Tuple, get_origin

from settingsflow.common.exceptions import type_redirect_error
from settingsflow.logging import get_logger

logger = get_logger(__name__)

AppSetting = Callable[[str], Optional[str]]


def _origin(settings_type: Any) -> Any:
    origin = get_origin(settings_type)
    return origin if isinstance(origin, type) else settings_type


def is_generic_definition(cls: type) -> bool:
    """True for unparametrized generics and parametrized pydantic models."""
    metadata = getattr(cls, "__pydantic_generic_metadata__", None)
    if metadata and (metadata.get("origin") is not None or metadata.get("parameters")):
        return True
    return bool(getattr(cls, "__parameters__", ()))


def is_abstract(settings_type: Any) -> bool:
    """Check whether ``settings_type`` must be redirected to a concrete class.

    A type is abstract if it has unimplemented abstract methods, directly
    subclasses ``abc.ABC``, or declares ``__abstract_settings__ = True`` in
    its own body.
    """
    cls = _origin(settings_type)
    if not isinstance(cls, type):
        return False
    if inspect.isabstract(cls):
        return True
    if ABC in cls.__bases__:
        return True
    return bool(cls.__dict__.get("__abstract_settings__", False))


def _subclasses(cls: type) -> List[type]:
    seen = []
    pending = list(cls.__subclasses__())
    while pending:
        sub = pending.pop(0)
        if sub in seen:
            continue
        seen.append(sub)
        pending.extend(sub.__subclasses__())
    return seen


class TypeRedirector:
    """Finds the concrete class behind an abstract settings type.

    Args:
        app_setting: Function reading application settings, used to look up
            the redirect entry of an abstract type
    """

    def __init__(self, app_setting: AppSetting):
        self._app_setting = app_setting

    def redirected_key(self, settings_type: Any, default_key: str) -> str:
        """Return the settings key for ``settings_type``.

        For an abstract type with a redirect entry this is the concrete class
        name; otherwise it is ``default_key`` unchanged.
        """
        if not is_abstract(settings_type):
            return default_key

        redirect = self._app_setting(default_key)
        if redirect and redirect.strip():
            logger.debug(f"Settings for abstract type '{default_key}' redirected to '{redirect.strip()}'")
            return redirect.strip()
        return default_key

    def candidates(self, settings_type: Any, name: str) -> List[type]:
        """Concrete, non-generic subclasses whose simple name matches ``name``."""
        wanted = name.lower()
        return [
            sub for sub in _subclasses(_origin(settings_type))
            if sub.__name__.lower() == wanted
            and not is_abstract(sub)
            and not is_generic_definition(sub)
        ]

    def concrete_type(self, settings_type: Any, key: str, default_key: Optional[str] = None) -> type:
        """Find the single concrete class named ``key`` for an abstract type.

        Raises:
            SettingsFlowError: TYPE_REDIRECT_ERROR if no class or more than one
                class matches
        """
        default_key = default_key or key
        matches = self.candidates(settings_type, key)
        if len(matches) == 1:
            return matches[0]

        redirect = key if key != default_key else None
        raise type_redirect_error(
            settings_type,
            default_key,
            candidates=[f"{sub.__module__}.{sub.__qualname__}" for sub in matches],
            redirect=redirect,
        )

    def resolve(self, settings_type: Any, default_key: str) -> Tuple[Any, str]:
        """Return the type to instantiate and the key to look up."""
        key = self.redirected_key(settings_type, default_key)
        if not is_abstract(settings_type):
            return settings_type, key
        return self.concrete_type(settings_type, key, default_key), key
