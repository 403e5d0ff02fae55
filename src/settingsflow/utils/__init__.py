"""Utility helpers for settingsflow."""

from settingsflow.utils.decorators import traced

__all__ = [
    "traced",
]
