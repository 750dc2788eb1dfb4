"""Primitive kinds and the single-value predicates behind them."""

from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from enum import StrEnum
from typing import Final, cast


class Kind(StrEnum):
    """Primitive type tags usable directly as field validators."""

    STRING = "string"
    FLOAT = "float"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"
    UNDEFINED = "undefined"


class _MissingType(enum.Enum):
    MISSING = "undefined"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Stands in for a key that is absent from the candidate mapping.
MISSING: Final = _MissingType.MISSING


def is_valid_number(value: object) -> bool:
    """Return True for finite real numbers. Booleans are not numbers."""

    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return False


def is_valid_float(value: object) -> bool:
    return is_valid_number(value)


def is_valid_integer(value: object) -> bool:
    if not is_valid_number(value):
        return False
    if isinstance(value, int):
        return True
    return cast(float, value).is_integer()


def is_array(value: object) -> bool:
    return isinstance(value, (list, tuple))


def validate_simple_type(kind: Kind | str | None, value: object) -> bool:
    """Test ``value`` against a single primitive kind.

    Unknown kind tags are rejected rather than raised so this stays a pure
    predicate; declarations are checked for bad tags when they are built.
    """

    if kind is None:
        return value is None
    if kind == Kind.STRING:
        return isinstance(value, str)
    if kind == Kind.FLOAT:
        return is_valid_float(value)
    if kind == Kind.INTEGER:
        return is_valid_integer(value)
    if kind == Kind.BOOLEAN:
        return isinstance(value, bool)
    if kind == Kind.OBJECT:
        return isinstance(value, Mapping)
    if kind == Kind.ARRAY:
        return is_array(value)
    if kind == Kind.NULL:
        return value is None
    if kind == Kind.UNDEFINED:
        return value is MISSING
    return False


__all__ = [
    "MISSING",
    "Kind",
    "is_array",
    "is_valid_float",
    "is_valid_integer",
    "is_valid_number",
    "validate_simple_type",
]
