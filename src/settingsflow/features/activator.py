"""Feature activation gated on dependency channels.

A ``FeatureActivator`` watches a set of boolean dependency channels. While
all of them report ``True`` the feature is active; when any reports
``False`` it is deactivated. Activation is lazy: nothing happens until the
first subscriber arrives.

Example:
    >>> database_up = BehaviorSubject(False)
    >>> activator = BooleanFeatureActivator(start_cache, stop_cache, database_up)
    >>> activator.subscribe(lambda active: print("cache active:", active))
    cache active: False
    >>> database_up.on_next(True)
    cache active: True
"""

import threading
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from settingsflow.common.exceptions import validation_error
from settingsflow.features.channel import (
    BehaviorSubject,
    Disposable,
    Observable,
    Observer,
    ReplaySubject,
    SingleAssignmentDisposable,
    combine_latest,
)
from settingsflow.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ActivationState(Enum):
    """Lifecycle of a feature activator."""
    UNACTIVATED = "unactivated"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    FAILED = "failed"


class FeatureActivator(Observable[T], Generic[T]):
    """Runs ``activate`` and ``deactivate`` as the dependencies come and go.

    Every subscriber shares one connection to the dependencies, so however
    many observers subscribe, from however many threads, each change of the
    combined dependency state runs the matching callback exactly once. The
    latest result is replayed to late subscribers.

    * combined state becomes True: ``activate()`` runs and its result is published
    * combined state becomes False after an activation: ``deactivate()`` runs
      and its result is published
    * combined state is False and nothing was activated yet: ``default`` is
      published without calling ``deactivate``

    An exception raised by a callback is published as an error to the
    subscribers and ends the channel. It is never raised to the caller of
    ``subscribe`` and activation is not retried.

    Args:
        activate: Called when all dependencies are available
        deactivate: Called when a dependency becomes unavailable after activation
        *depends_on: Boolean channels; with none the feature activates on first subscription
        default: Value published while waiting for the first activation
    """

    def __init__(
        self,
        activate: Callable[[], T],
        deactivate: Optional[Callable[[], T]] = None,
        *depends_on: Observable[bool],
        default: Optional[T] = None,
    ):
        if activate is None:
            raise validation_error("activate is required", field="activate")

        self._activate = activate
        self._deactivate = deactivate or (lambda: default)
        self._default = default
        self._dependencies = (BehaviorSubject(True),) + tuple(depends_on)

        self._results: ReplaySubject[T] = ReplaySubject(buffer_size=1)
        self._connect_lock = threading.Lock()
        self._transition_lock = threading.RLock()
        self._connection: Optional[SingleAssignmentDisposable] = None
        self._last_available: Optional[bool] = None
        self._activation_count = 0
        self.state = ActivationState.UNACTIVATED

    @property
    def has_been_activated(self) -> bool:
        return self._activation_count > 0

    @property
    def activation_count(self) -> int:
        return self._activation_count

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.is_disposed

    def _available(self) -> Observable[bool]:
        return combine_latest(
            self._dependencies,
            lambda *values: all(bool(value) for value in values),
        ).distinct_until_changed()

    def _on_available(self, available_now: bool) -> None:
        with self._transition_lock:
            if self.state is ActivationState.FAILED or available_now == self._last_available:
                return
            self._last_available = available_now
            try:
                if available_now:
                    result = self._activate()
                    self._activation_count += 1
                    self.state = ActivationState.ACTIVATED
                    logger.debug(f"Feature activated ({self._activation_count})")
                elif self.has_been_activated:
                    result = self._deactivate()
                    self.state = ActivationState.DEACTIVATED
                    logger.debug("Feature deactivated")
                else:
                    result = self._default
            except Exception as e:
                self.state = ActivationState.FAILED
                logger.warning(f"Feature activation failed: {e!r}")
                self._results.on_error(e)
                return

            self._results.on_next(result)

    def _connect(self) -> None:
        with self._connect_lock:
            if self._connection is not None and not self._connection.is_disposed:
                return
            connection = self._connection = SingleAssignmentDisposable()

        connection.set(
            self._available().subscribe(
                self._on_available,
                self._results.on_error,
                self._results.on_completed,
            )
        )

    def _subscribe_core(self, observer: Observer) -> Disposable:
        subscription = self._results.subscribe(observer)
        self._connect()
        return subscription

    def dispose(self) -> None:
        """Disconnect from the dependencies. Subscribers keep the last value.

        The next subscription reconnects. A dependency state that did not
        change while disconnected does not run a callback again.
        """
        with self._connect_lock:
            connection = self._connection
        if connection is not None:
            connection.dispose()


class BooleanFeatureActivator(FeatureActivator[bool]):
    """Activator for callbacks without a result.

    Subscribers receive ``True`` after ``activate`` runs and ``False`` after
    ``deactivate`` runs, or while the feature has never been activated.
    """

    def __init__(
        self,
        activate: Callable[[], Any],
        deactivate: Optional[Callable[[], Any]] = None,
        *depends_on: Observable[bool],
    ):
        if activate is None:
            raise validation_error("activate is required", field="activate")

        def activated() -> bool:
            activate()
            return True

        def deactivated() -> bool:
            if deactivate is not None:
                deactivate()
            return False

        super().__init__(activated, deactivated, *depends_on, default=False)
