"""
Deep UTF-8 normalization of lists, dicts and textual leaves.

Strict only: the first leaf that cannot be coerced raises UTF8CoercionError
and the walk stops there. Use coerce_utf8 per value for lossy behaviour.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .bytetext import ByteText
from .normalize import ensure_utf8_inplace

TEXTUAL_TYPES = (ByteText, bytes, bytearray, str)


def ensure_utf8_object(value: Any) -> Any:
    if isinstance(value, list):
        return ensure_utf8_list(value)
    if isinstance(value, dict):
        return ensure_utf8_dict(value)
    if isinstance(value, TEXTUAL_TYPES):
        return ensure_utf8_inplace(value)
    return value


def ensure_utf8_list(values: List[Any]) -> List[Any]:
    for index, element in enumerate(values):
        values[index] = ensure_utf8_object(element)
    return values


def ensure_utf8_dict(mapping: Dict[Any, Any]) -> Dict[Any, Any]:
    """Normalize values in place; keys are left exactly as they are."""
    for key, value in mapping.items():
        mapping[key] = ensure_utf8_object(value)
    return mapping
