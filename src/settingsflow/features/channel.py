"""Push-based notification channels.

Features publish their instances and availability through small observable
channels. An ``Observable`` delivers ``on_next`` notifications followed by at
most one terminal ``on_error`` or ``on_completed``. Subscribing returns a
``Disposable``; disposing it stops delivery to that subscriber only.

Subjects deliver notifications while holding their lock, so every observer
sees values in publication order and a subscriber joining a replaying
subject never misses or duplicates a value.
"""

import threading
from collections import deque
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from typing_extensions import Protocol, runtime_checkable

from settingsflow.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@runtime_checkable
class Observer(Protocol):
    """Receiver of channel notifications."""

    def on_next(self, value: Any) -> None:
        ...

    def on_error(self, error: Exception) -> None:
        ...

    def on_completed(self) -> None:
        ...


class Disposable:
    """Handle that runs its action at most once when disposed."""

    def __init__(self, action: Optional[Callable[[], None]] = None):
        self._action = action
        self._lock = threading.Lock()
        self.is_disposed = False

    @classmethod
    def empty(cls) -> "Disposable":
        return cls()

    def dispose(self) -> None:
        with self._lock:
            if self.is_disposed:
                return
            self.is_disposed = True
            action, self._action = self._action, None
        if action is not None:
            action()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


class CompositeDisposable(Disposable):
    """Disposes a group of disposables together.

    Disposables added after the group was disposed are disposed immediately.
    """

    def __init__(self, *disposables: Disposable):
        super().__init__()
        self._disposables: List[Disposable] = list(disposables)

    def add(self, disposable: Disposable) -> None:
        with self._lock:
            if not self.is_disposed:
                self._disposables.append(disposable)
                return
        disposable.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self.is_disposed:
                return
            self.is_disposed = True
            disposables, self._disposables = self._disposables, []
        for disposable in disposables:
            disposable.dispose()


class SingleAssignmentDisposable(Disposable):
    """Placeholder for a subscription that is only known after subscribing."""

    def __init__(self):
        super().__init__()
        self._inner: Optional[Disposable] = None

    def set(self, disposable: Disposable) -> None:
        with self._lock:
            if not self.is_disposed:
                self._inner = disposable
                return
        disposable.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self.is_disposed:
                return
            self.is_disposed = True
            inner, self._inner = self._inner, None
        if inner is not None:
            inner.dispose()


def _unhandled_error(error: Exception) -> None:
    logger.warning(f"Unhandled error in notification channel: {error!r}")


class AnonymousObserver:
    """Observer built from callbacks. Stops after the first terminal notification."""

    def __init__(
        self,
        on_next: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ):
        self._on_next = on_next
        self._on_error = on_error or _unhandled_error
        self._on_completed = on_completed
        self.is_stopped = False

    def on_next(self, value: Any) -> None:
        if not self.is_stopped and self._on_next is not None:
            self._on_next(value)

    def on_error(self, error: Exception) -> None:
        if not self.is_stopped:
            self.is_stopped = True
            self._on_error(error)

    def on_completed(self) -> None:
        if not self.is_stopped:
            self.is_stopped = True
            if self._on_completed is not None:
                self._on_completed()


class _DisposableObserver(AnonymousObserver):
    """Forwards to ``target`` until the subscription is disposed."""

    def __init__(self, target: Observer):
        super().__init__(target.on_next, target.on_error, target.on_completed)

    def stop(self) -> None:
        self.is_stopped = True


class Observable(Generic[T]):
    """Base class of every channel."""

    def subscribe(
        self,
        on_next: Any = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ) -> Disposable:
        """Subscribe an observer, or callbacks, to this channel.

        Args:
            on_next: An ``Observer``, or a callback receiving each value
            on_error: Callback receiving the terminal error
            on_completed: Callback run on completion

        Returns:
            Disposable that stops delivery to this subscriber
        """
        if on_next is not None and not callable(on_next) and isinstance(on_next, Observer):
            target = on_next
        else:
            target = AnonymousObserver(on_next, on_error, on_completed)

        observer = _DisposableObserver(target)
        subscription = self._subscribe_core(observer)
        return CompositeDisposable(Disposable(observer.stop), subscription)

    def _subscribe_core(self, observer: Observer) -> Disposable:
        raise NotImplementedError

    def map(self, selector: Callable[[T], R]) -> "Observable[R]":
        def subscribe(observer: Observer) -> Disposable:
            def on_next(value):
                try:
                    result = selector(value)
                except Exception as e:
                    observer.on_error(e)
                    return
                observer.on_next(result)

            return self.subscribe(on_next, observer.on_error, observer.on_completed)

        return AnonymousObservable(subscribe)

    def filter(self, predicate: Callable[[T], bool]) -> "Observable[T]":
        def subscribe(observer: Observer) -> Disposable:
            def on_next(value):
                try:
                    matched = predicate(value)
                except Exception as e:
                    observer.on_error(e)
                    return
                if matched:
                    observer.on_next(value)

            return self.subscribe(on_next, observer.on_error, observer.on_completed)

        return AnonymousObservable(subscribe)

    def distinct_until_changed(self) -> "Observable[T]":
        """Suppress values equal to the one delivered just before."""

        def subscribe(observer: Observer) -> Disposable:
            state = {"has_value": False, "last": None}
            lock = threading.Lock()

            def on_next(value):
                with lock:
                    if state["has_value"] and state["last"] == value:
                        return
                    state["has_value"] = True
                    state["last"] = value
                observer.on_next(value)

            return self.subscribe(on_next, observer.on_error, observer.on_completed)

        return AnonymousObservable(subscribe)

    def flat_map(self, selector: Callable[[T], "Observable[R]"]) -> "Observable[R]":
        """Merge the channels produced by ``selector`` for each value."""

        def subscribe(observer: Observer) -> Disposable:
            group = CompositeDisposable()
            lock = threading.Lock()
            state = {"active": 1}

            def completed_one():
                with lock:
                    state["active"] -= 1
                    done = state["active"] == 0
                if done:
                    observer.on_completed()

            def on_next(value):
                try:
                    inner = selector(value)
                except Exception as e:
                    observer.on_error(e)
                    return
                with lock:
                    state["active"] += 1
                group.add(inner.subscribe(observer.on_next, observer.on_error, completed_one))

            group.add(self.subscribe(on_next, observer.on_error, completed_one))
            return group

        return AnonymousObservable(subscribe)


class AnonymousObservable(Observable[T]):
    """Channel defined by a subscribe function."""

    def __init__(self, subscribe: Callable[[Observer], Disposable]):
        self._subscribe = subscribe

    def _subscribe_core(self, observer: Observer) -> Disposable:
        return self._subscribe(observer)


def return_value(value: T) -> Observable[T]:
    """Channel that delivers ``value`` and completes."""

    def subscribe(observer: Observer) -> Disposable:
        observer.on_next(value)
        observer.on_completed()
        return Disposable.empty()

    return AnonymousObservable(subscribe)


def never() -> Observable[Any]:
    """Channel that never delivers anything."""
    return AnonymousObservable(lambda observer: Disposable.empty())


def combine_latest(
    sources: Sequence[Observable[Any]],
    selector: Callable[..., R],
) -> Observable[R]:
    """Combine the latest value of every source once each has delivered one.

    The combined channel completes when every source has completed, or as
    soon as a source completes without ever delivering a value.
    """
    sources = list(sources)

    def subscribe(observer: Observer) -> Disposable:
        count = len(sources)
        values: List[Any] = [None] * count
        has_value = [False] * count
        done = [False] * count
        lock = threading.Lock()

        def on_next_at(index):
            def on_next(value):
                with lock:
                    values[index] = value
                    has_value[index] = True
                    if not all(has_value):
                        return
                    snapshot = list(values)
                try:
                    result = selector(*snapshot)
                except Exception as e:
                    observer.on_error(e)
                    return
                observer.on_next(result)
            return on_next

        def on_completed_at(index):
            def on_completed():
                with lock:
                    done[index] = True
                    finished = all(done) or not has_value[index]
                if finished:
                    observer.on_completed()
            return on_completed

        group = CompositeDisposable()
        for index, source in enumerate(sources):
            group.add(source.subscribe(on_next_at(index), observer.on_error, on_completed_at(index)))
        return group

    return AnonymousObservable(subscribe)


class Subject(Observable[T]):
    """Channel that is also an observer, broadcasting to every subscriber."""

    def __init__(self):
        self._lock = threading.RLock()
        self._observers: List[Observer] = []
        self._error: Optional[Exception] = None
        self.is_stopped = False

    def _replay(self, observer: Observer) -> None:
        pass

    def _subscribe_core(self, observer: Observer) -> Disposable:
        with self._lock:
            self._replay(observer)
            if self.is_stopped:
                if self._error is not None:
                    observer.on_error(self._error)
                else:
                    observer.on_completed()
                return Disposable.empty()
            self._observers.append(observer)

        def remove():
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return Disposable(remove)

    def _record(self, value: T) -> None:
        pass

    def on_next(self, value: T) -> None:
        with self._lock:
            if self.is_stopped:
                return
            self._record(value)
            for observer in list(self._observers):
                observer.on_next(value)

    def on_error(self, error: Exception) -> None:
        with self._lock:
            if self.is_stopped:
                return
            self.is_stopped = True
            self._error = error
            observers, self._observers = self._observers, []
            for observer in observers:
                observer.on_error(error)

    def on_completed(self) -> None:
        with self._lock:
            if self.is_stopped:
                return
            self.is_stopped = True
            observers, self._observers = self._observers, []
            for observer in observers:
                observer.on_completed()

    @property
    def has_observers(self) -> bool:
        with self._lock:
            return bool(self._observers)


class BehaviorSubject(Subject[T]):
    """Subject with a current value, delivered to each new subscriber."""

    def __init__(self, value: T):
        super().__init__()
        self._value = value

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def _record(self, value: T) -> None:
        self._value = value

    def _replay(self, observer: Observer) -> None:
        if not self.is_stopped:
            observer.on_next(self._value)


class ReplaySubject(Subject[T]):
    """Subject replaying its last ``buffer_size`` values to new subscribers."""

    def __init__(self, buffer_size: int = 1):
        super().__init__()
        self._buffer: deque = deque(maxlen=buffer_size)

    def _record(self, value: T) -> None:
        self._buffer.append(value)

    def _replay(self, observer: Observer) -> None:
        for value in list(self._buffer):
            observer.on_next(value)

    @property
    def values(self) -> List[T]:
        with self._lock:
            return list(self._buffer)


def latest(source: Observable[T], default: T) -> T:
    """Most recent value a channel delivers synchronously on subscribe, or ``default``."""
    received: List[T] = []
    subscription = source.subscribe(received.append, lambda error: None)
    subscription.dispose()
    return received[-1] if received else default


__all__ = [
    "Observer",
    "Observable",
    "AnonymousObserver",
    "AnonymousObservable",
    "Disposable",
    "CompositeDisposable",
    "SingleAssignmentDisposable",
    "Subject",
    "BehaviorSubject",
    "ReplaySubject",
    "combine_latest",
    "return_value",
    "never",
    "latest",
]
