"""Combinators that build field validators out of other validators.

Every combinator accepts a primitive kind, a field validator, or a nested
declaration, and returns a new immutable ``FieldValidator``. Inputs are never
mutated; malformed inputs raise ``SchemaDefinitionError`` when the validator is
built, not when it is used.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from devour.typecheck.conformance import accepts
from devour.typecheck.errors import SchemaDefinitionError
from devour.typecheck.formatting import join_values
from devour.typecheck.kinds import MISSING, is_array
from devour.typecheck.model import (
    FieldValidator,
    MetaKind,
    Validator,
    ValidatorShape,
    classify,
    describe,
    ensure_validator,
)

UNION_SEPARATOR: Final[str] = " | "
TUPLE_SEPARATOR: Final[str] = ", "


def optional_type(inner: object) -> FieldValidator:
    """Same as ``inner | MISSING``. ``None`` still has to satisfy ``inner``."""

    validator = ensure_validator(inner)

    def _accepts(value: object) -> bool:
        if value is MISSING:
            return True
        return accepts(value, validator)

    return FieldValidator(
        predicate=_accepts,
        type_string="(" + describe(validator) + ")?",
        meta_kind=MetaKind.OPTIONAL,
    )


def type_union_or(*alternatives: object) -> FieldValidator:
    """Accept a value satisfying any alternative, tried in order."""

    if not alternatives:
        raise SchemaDefinitionError("type_union_or needs at least one alternative")
    validators = tuple(ensure_validator(item) for item in alternatives)

    def _accepts(value: object) -> bool:
        return any(accepts(value, validator) for validator in validators)

    return FieldValidator(
        predicate=_accepts,
        type_string=join_values((describe(item) for item in validators), UNION_SEPARATOR),
        meta_kind=MetaKind.EXCLUSIVE_UNION,
    )


def typed_tuple(positions: Sequence[object]) -> FieldValidator:
    """Fixed-length array whose element ``i`` satisfies ``positions[i]``."""

    if isinstance(positions, (str, bytes)) or not isinstance(positions, Sequence):
        raise SchemaDefinitionError("typed_tuple expects a sequence of validators")
    validators = tuple(ensure_validator(item, where=f"position {index}") for index, item in enumerate(positions))

    def _accepts(value: object) -> bool:
        if not is_array(value) or len(value) != len(validators):  # type: ignore[arg-type]
            return False
        for item, validator in zip(value, validators):  # type: ignore[call-overload]
            if not accepts(item, validator):
                return False
        return True

    return FieldValidator(
        predicate=_accepts,
        type_string="[" + join_values((describe(item) for item in validators), TUPLE_SEPARATOR) + "]",
        meta_kind=MetaKind.TUPLE,
    )


def typed_array(element: object) -> FieldValidator:
    """Variable-length array where every element satisfies ``element``."""

    validator = ensure_validator(element)

    def _accepts(value: object) -> bool:
        if not is_array(value):
            return False
        return all(accepts(item, validator) for item in value)  # type: ignore[union-attr]

    return FieldValidator(
        predicate=_accepts,
        type_string=_element_type_string(validator) + "[]",
        meta_kind=MetaKind.LIST,
    )


typed_list = typed_array


def any_of_constants(literals: Sequence[str | int | float]) -> FieldValidator:
    """Accept exactly one of ``literals``.

    The literals are copied, so a caller reusing or mutating the source list
    afterwards cannot change what this validator accepts.
    """

    if isinstance(literals, (str, bytes)):
        raise SchemaDefinitionError("any_of_constants expects a sequence of literals, not a string")
    constants = tuple(literals)
    if not constants:
        raise SchemaDefinitionError("any_of_constants needs at least one literal")
    for constant in constants:
        if isinstance(constant, bool) or not isinstance(constant, (str, int, float)):
            raise SchemaDefinitionError(f"constants must be strings or numbers, got {constant!r}")

    strings = frozenset(constant for constant in constants if isinstance(constant, str))
    # JSON does not distinguish 2 from 2.0, so numbers compare by value.
    numbers = tuple(constant for constant in constants if not isinstance(constant, str))

    def _accepts(value: object) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, str):
            return value in strings
        if isinstance(value, (int, float)):
            return any(number == value for number in numbers)
        return False

    return FieldValidator(
        predicate=_accepts,
        type_string=join_values(constants, UNION_SEPARATOR),
        meta_kind=MetaKind.EXCLUSIVE_UNION,
    )


def _element_type_string(validator: Validator) -> str:
    if classify(validator) is ValidatorShape.FIELD:
        return "(" + describe(validator) + ")"
    return describe(validator)


class Fields:
    """Namespace grouping the combinators under short names."""

    optional = staticmethod(optional_type)
    union_or = staticmethod(type_union_or)
    tuple = staticmethod(typed_tuple)
    array = staticmethod(typed_array)
    list = staticmethod(typed_list)
    any_of_constants = staticmethod(any_of_constants)


__all__ = [
    "Fields",
    "any_of_constants",
    "optional_type",
    "type_union_or",
    "typed_array",
    "typed_list",
    "typed_tuple",
]
