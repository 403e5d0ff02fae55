"""Default deserialization of settings documents.

Pydantic models, dataclasses, TypedDicts and builtin containers are
validated with a pydantic ``TypeAdapter``. Plain classes that pydantic cannot
build a schema for are created with their no-argument constructor and then
populated attribute by attribute from the JSON object.
"""

import json
from functools import lru_cache
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

Deserializer = Callable[[Any, str], Any]


@lru_cache(maxsize=256)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _populate(target_type: type, data: Any) -> Any:
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object to populate {target_type.__name__}, got {type(data).__name__}"
        )

    try:
        instance = target_type()
    except TypeError:
        return target_type(**data)

    for name, value in data.items():
        setattr(instance, name, value)
    return instance


def deserialize_default(target_type: Any, serialized: str) -> Any:
    """Deserialize a JSON document into ``target_type``.

    Args:
        target_type: The concrete settings type
        serialized: JSON text from a settings source

    Returns:
        An instance of ``target_type``

    Raises:
        ValueError: If the document is not valid for the type. pydantic's
            ValidationError is a ValueError.
    """
    try:
        adapter = _adapter(target_type)
    except (PydanticSchemaGenerationError, TypeError):
        return _populate(target_type, json.loads(serialized))

    try:
        return adapter.validate_json(serialized)
    except ValidationError:
        # A bare environment variable value for a str setting is not quoted JSON
        if target_type is str:
            return serialized
        raise
