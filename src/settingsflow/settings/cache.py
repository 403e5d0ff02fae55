import threading
from typing import Any, Callable, Dict, Hashable, Iterator


class SettingsCache:
    """Thread-safe get-or-create cache of resolved settings.

    The factory for a key runs at most once even when many threads ask for
    the same key at the same time. A factory that raises leaves nothing
    behind, so the next call tries again.
    """

    def __init__(self):
        self._values: Dict[Hashable, Any] = {}
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._lock = threading.Lock()

    def _key_lock(self, key: Hashable) -> threading.Lock:
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get_or_add(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        try:
            return self._values[key]
        except KeyError:
            pass

        with self._key_lock(key):
            if key in self._values:
                return self._values[key]
            value = factory()
            self._values[key] = value
            return value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._locks.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._values))
