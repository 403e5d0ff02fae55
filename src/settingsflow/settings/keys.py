"""Settings key naming.

Every settings type is looked up under a key derived from its name. Generic
types include their arguments, so ``Widget[SettingsTests]`` is looked up as
``Widget(SettingsTests)`` and ``Dict[str, Widget[int]]`` as
``dict(str,Widget(int))``.
"""

from typing import Any, Tuple, get_args, get_origin


def _origin_and_args(settings_type: Any) -> Tuple[Any, Tuple[Any, ...]]:
    # Parametrized pydantic models are real subclasses, not typing aliases
    metadata = getattr(settings_type, "__pydantic_generic_metadata__", None)
    if metadata and metadata.get("origin") is not None:
        return metadata["origin"], tuple(metadata.get("args") or ())

    origin = get_origin(settings_type)
    if origin is not None:
        return origin, get_args(settings_type)

    return settings_type, ()


def _simple_name(value: Any) -> str:
    return (
        getattr(value, "__name__", None)
        or getattr(value, "_name", None)
        or repr(value)
    )


def flatten_type_name(settings_type: Any) -> str:
    """Build the settings key for ``settings_type``.

    Args:
        settings_type: A class or a parametrized generic alias

    Returns:
        The flattened type name

    Example:
        >>> from typing import Dict, List
        >>> flatten_type_name(Dict[str, List[int]])
        'dict(str,list(int))'
    """
    origin, args = _origin_and_args(settings_type)
    name = _simple_name(origin)
    if not args:
        return name
    return f"{name}({','.join(flatten_type_name(arg) for arg in args)})"
