"""Feature wrapper channels.

A ``Feature`` holds the current instance of a feature type and republishes
it to subscribers. Its ``availability`` channel follows the instance: an
instance exposing its own ``availability`` channel (``SupportsAvailability``)
drives it, any other instance is available as soon as it exists.
"""

import threading
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from typing_extensions import Protocol, runtime_checkable

from settingsflow.features.channel import (
    Disposable,
    Observable,
    Observer,
    ReplaySubject,
    latest,
    return_value,
)

T = TypeVar("T")


@runtime_checkable
class SupportsAvailability(Protocol):
    """Capability of features that decide for themselves when they are available."""

    @property
    def availability(self) -> Observable[bool]:
        ...


def _feature_name(feature_type: Optional[type]) -> str:
    if feature_type is None:
        return "feature"
    explicit = getattr(feature_type, "__feature_name__", None)
    if explicit:
        return explicit
    return f"{feature_type.__module__}.{feature_type.__qualname__}"


class Feature(Observable[T], Generic[T]):
    """Replaying channel of a feature's current instance.

    Args:
        feature_type: The feature class, used for naming
        instance: Initial instance, published immediately
        factory: Creates the initial instance on first subscription. An
            exception raised by the factory is delivered to every subscriber
            as an error.
    """

    def __init__(
        self,
        feature_type: Optional[Type[T]] = None,
        *,
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
    ):
        if feature_type is None and instance is not None:
            feature_type = type(instance)
        self.feature_type = feature_type
        self._current: ReplaySubject[T] = ReplaySubject(buffer_size=1)
        self._factory = factory
        self._factory_lock = threading.Lock()
        self._factory_error: Optional[Exception] = None

        if instance is not None:
            self._current.on_next(instance)

    @property
    def name(self) -> str:
        """``__feature_name__`` of the feature type, or its qualified name."""
        return _feature_name(self.feature_type)

    def _initialize(self) -> None:
        with self._factory_lock:
            factory, self._factory = self._factory, None
            if factory is None:
                return
            try:
                value = factory()
            except Exception as e:
                self._factory_error = e
                return
        self._current.on_next(value)

    def _subscribe_core(self, observer: Observer) -> Disposable:
        self._initialize()
        if self._factory_error is not None:
            observer.on_error(self._factory_error)
            return Disposable.empty()

        return (
            self._current
            .filter(lambda instance: instance is not None)
            .distinct_until_changed()
            .subscribe(observer)
        )

    @property
    def availability(self) -> Observable[bool]:
        """True or False as the current instance becomes available or not."""

        def instance_availability(instance: Any) -> Observable[bool]:
            if isinstance(instance, SupportsAvailability):
                return instance.availability
            return return_value(True)

        return self.flat_map(instance_availability)

    @property
    def current(self) -> Optional[T]:
        """The latest instance, without triggering lazy creation."""
        values: List[T] = self._current.values
        return values[-1] if values else None

    def on_next(self, value: T) -> None:
        self._current.on_next(value)

    def on_error(self, error: Exception) -> None:
        self._current.on_error(error)

    def on_completed(self) -> None:
        self._current.on_completed()

    def __repr__(self) -> str:
        return f"Feature({self.name!r})"


def is_available(feature: SupportsAvailability) -> bool:
    """Most recent availability of ``feature``, False if none was published yet."""
    return bool(latest(feature.availability, False))
