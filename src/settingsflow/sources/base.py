"""Settings source protocol and helpers.

A settings source is anything that can map a settings key to a serialized
value. Sources are consulted in order by the resolver; the first one that
returns a non-blank string wins.
"""

from typing import Callable, Optional

from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class SettingsSource(Protocol):
    """Protocol defining the interface for settings sources.

    The protocol is marked as runtime_checkable to allow isinstance()
    checks when a custom source list is assigned to a resolver.
    """

    @property
    def name(self) -> str:
        """Human-readable name used in resolution log lines."""
        ...

    def get_serialized_setting(self, key: str) -> Optional[str]:
        """Return the serialized value stored under ``key``.

        Args:
            key: Flattened settings key

        Returns:
            The serialized value, or None when this source has nothing for the key
        """
        ...


class AnonymousSettingsSource:
    """Settings source backed by a plain callable."""

    def __init__(self, get_setting: Callable[[str], Optional[str]], name: Optional[str] = None):
        self._get_setting = get_setting
        self._name = name or getattr(get_setting, "__name__", None) or "anonymous source"

    @property
    def name(self) -> str:
        return self._name

    def get_serialized_setting(self, key: str) -> Optional[str]:
        return self._get_setting(key)

    def __repr__(self) -> str:
        return f"AnonymousSettingsSource(name={self._name!r})"


def create_source(
    get_setting: Callable[[str], Optional[str]],
    name: Optional[str] = None,
) -> SettingsSource:
    """Wrap a ``key -> value`` callable as a settings source.

    Example:
        >>> source = create_source(lambda key: '{"retries": 3}' if key == "Retry" else None, "inline")
        >>> source.get_serialized_setting("Retry")
        '{"retries": 3}'
    """
    return AnonymousSettingsSource(get_setting, name)
