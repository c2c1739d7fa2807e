"""Typed access to backend property tables.

Backends hand back loosely shaped metadata: numbers, strings, nested
tables and lists of tables. Every getter here returns None when the key is
missing or the value has an unexpected type, so callers never assume shape.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

PropertyTable = Mapping[str, Any]


def get_number(table: Optional[PropertyTable], key: str) -> Optional[float]:
    """Numeric value as float. Booleans are not numbers here."""
    if table is None:
        return None
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_int(table: Optional[PropertyTable], key: str) -> Optional[int]:
    """Integral value. Floats with a fractional part are rejected."""
    if table is None:
        return None
    value = table.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def get_string(table: Optional[PropertyTable], key: str) -> Optional[str]:
    if table is None:
        return None
    value = table.get(key)
    return value if isinstance(value, str) else None


def get_table(table: Optional[PropertyTable], key: str) -> Optional[PropertyTable]:
    """Nested table stored under key."""
    if table is None:
        return None
    value = table.get(key)
    return value if isinstance(value, Mapping) else None


def get_list(table: Optional[PropertyTable], key: str) -> Optional[Sequence[Any]]:
    """Ordered list stored under key. Strings and bytes do not count."""
    if table is None:
        return None
    value = table.get(key)
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return None
    return value
