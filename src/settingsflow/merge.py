"""Layered settings documents.

Unlike ``SettingsResolver``, which takes the whole document from the first
folder that has one, ``merged_settings`` deep-merges the same document from
the root settings folder and every precedence folder. Folders later in the
precedence list override earlier ones::

    .config/car.json           {"color": "blue"}
    .config/jane/car.json      {"make": "Ford", "options": {"roof": "sunroof"}}

    merged_settings("car", "jane")
    {"color": "blue", "make": "Ford", "options": {"roof": "sunroof"}}
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from settingsflow.logging import get_logger

logger = get_logger(__name__)

PRECEDENCE_VARIABLES = ("Its.Configuration.Precedence", "precedence")


def deep_merge(target: Dict[str, Any], *sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge ``sources`` into ``target`` in order, recursing into objects.

    A nested object replaces a scalar in the target; lists and scalars
    replace whatever the target holds.
    """
    for source in sources:
        for key, value in (source or {}).items():
            if isinstance(value, Mapping):
                if not isinstance(target.get(key), dict):
                    target[key] = {}
                deep_merge(target[key], value)
            else:
                target[key] = value
    return target


def _aspects(precedence: Union[str, Sequence[str], None]) -> List[str]:
    for variable in PRECEDENCE_VARIABLES:
        if os.environ.get(variable):
            precedence = os.environ[variable]
            break

    if isinstance(precedence, str):
        precedence = precedence.split("|")
    return [name for name in (precedence or ()) if name]


def _load(path: Path) -> Optional[Dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        document = json.loads(path.read_text(encoding="utf-8-sig"))
    except ValueError as e:
        logger.warning(f"Ignoring settings file {path}: {e}")
        return None
    return document if isinstance(document, dict) else None


def merged_settings(
    name: str,
    precedence: Union[str, Sequence[str], None] = None,
    settings_directory: Union[str, Path, None] = None,
) -> Dict[str, Any]:
    """Deep-merge ``<name>.json`` from the root folder and each precedence folder.

    Args:
        name: Settings file name, with or without the ``.json`` extension
        precedence: Pipe-delimited string or list of folder names. The
            ``Its.Configuration.Precedence`` and ``precedence`` environment
            variables override it.
        settings_directory: Root settings folder, defaulting to the library's

    Returns:
        The merged document; empty if no folder has the file
    """
    if settings_directory is None:
        from settingsflow.config import get_library_settings
        settings_directory = get_library_settings().settings_directory

    root = Path(settings_directory)
    file_name = name if name.lower().endswith(".json") else f"{name}.json"

    documents = [_load(root / file_name)]
    documents.extend(_load(root / aspect / file_name) for aspect in _aspects(precedence))
    return deep_merge({}, *documents)
