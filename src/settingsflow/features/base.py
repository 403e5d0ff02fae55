"""Base classes for features that manage their own activation."""

from abc import ABC, abstractmethod

from settingsflow.features.activator import BooleanFeatureActivator
from settingsflow.features.channel import BehaviorSubject, Observable, return_value


class OnOffFeature(ABC):
    """Feature that can be switched on and off at runtime.

    Switching on runs ``activate``, switching off after an activation runs
    ``deactivate``. Activation is lazy: it happens once something subscribes
    to ``availability``.

    Example:
        >>> class Maintenance(OnOffFeature):
        ...     def activate(self): show_banner()
        ...     def deactivate(self): hide_banner()
        >>> maintenance = Maintenance(on=False)
        >>> maintenance.is_on = True
    """

    def __init__(self, on: bool = False):
        self._switch = BehaviorSubject(bool(on))
        self._activator = BooleanFeatureActivator(self.activate, self.deactivate, self._switch)

    @abstractmethod
    def activate(self) -> None:
        ...

    @abstractmethod
    def deactivate(self) -> None:
        ...

    @property
    def is_on(self) -> bool:
        return self._switch.value

    @is_on.setter
    def is_on(self, value: bool) -> None:
        self._switch.on_next(bool(value))

    @property
    def availability(self) -> Observable[bool]:
        return self._activator


class SingleActivationFeature(ABC):
    """Feature activated once and never deactivated.

    Override ``can_activate`` to keep the feature unavailable when its
    prerequisites are missing.
    """

    def __init__(self):
        self._activator = BooleanFeatureActivator(self.activate, None, return_value(self.can_activate))

    @property
    def can_activate(self) -> bool:
        return True

    @abstractmethod
    def activate(self) -> None:
        ...

    @property
    def availability(self) -> Observable[bool]:
        return self._activator
