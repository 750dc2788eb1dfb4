"""
devour — type checker data model

File: src/devour/typecheck/model.py
Last updated: 2026-10-19

Purpose
- Define the three validator shapes a declaration can hold: primitive kinds,
  tagged field validators, and nested declarations.
- Define the immutable schema node that carries structural constraints
  alongside its fields.

Functional requirements
- Every validator has a non-empty type string; it is the only diagnostic
  surface for that validator.
- Structural constraints are never visible as fields.

Non-functional requirements
- Everything here is immutable after construction and safe to share across
  threads.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeAlias, cast

from devour.typecheck.errors import SchemaDefinitionError
from devour.typecheck.kinds import Kind


class MetaKind(StrEnum):
    """Classification consulted by the evaluator's key-presence check."""

    PLAIN = "plain"
    OPTIONAL = "optional"
    EXCLUSIVE_UNION = "exclusive_union"
    ADDITIVE_UNION = "additive_union"
    TUPLE = "tuple"
    LIST = "list"


class ValidatorShape(StrEnum):
    KIND = "kind"
    FIELD = "field"
    DECLARATION = "declaration"


@dataclass(frozen=True, slots=True)
class FieldValidator:
    """A predicate tagged with its type description and meta-kind."""

    predicate: Callable[[object], bool]
    type_string: str
    meta_kind: MetaKind = MetaKind.PLAIN

    def __post_init__(self) -> None:
        if not callable(self.predicate):
            raise SchemaDefinitionError("field validator predicate must be callable")
        if not isinstance(self.type_string, str) or not self.type_string.strip():
            raise SchemaDefinitionError("field validator type string must not be empty")
        if not isinstance(self.meta_kind, MetaKind):
            raise SchemaDefinitionError(f"unknown meta kind: {self.meta_kind!r}")

    def __call__(self, value: object) -> bool:
        return bool(self.predicate(value))

    @property
    def is_optional(self) -> bool:
        return self.meta_kind is MetaKind.OPTIONAL


Validator: TypeAlias = Kind | FieldValidator | Mapping[str, Any]
ConstraintCheck: TypeAlias = Callable[[object, Mapping[str, Any]], "str | None"]


@dataclass(frozen=True, slots=True)
class StructuralConstraint:
    """A whole-object cardinality rule over a small set of sibling fields.

    ``check`` receives the candidate and the enclosing declaration and returns
    an error message or ``None``. ``admitted`` names the candidate keys the
    rule vouches for, so the enclosing closed declaration does not report
    them as extra.
    """

    rule: str
    declaration: Mapping[str, Any]
    check: ConstraintCheck
    admitted: Callable[[Mapping[str, Any]], frozenset[str]] | None = None

    def __call__(self, target: object, base_declaration: Mapping[str, Any]) -> str | None:
        return self.check(target, base_declaration)

    def admitted_keys(self, target: Mapping[str, Any]) -> frozenset[str]:
        if self.admitted is not None:
            return self.admitted(target)
        return frozenset(self.declaration)


class SchemaNode(Mapping[str, Any]):
    """Read-only declaration with attached structural constraints.

    Iterating, indexing and ``len`` only ever see the declared fields.
    ``strict=False`` tolerates keys that are not declared.
    """

    __slots__ = ("_constraints", "_fields", "_strict")

    def __init__(
        self,
        fields: Mapping[str, Any],
        constraints: Iterable[StructuralConstraint] = (),
        *,
        strict: bool = True,
    ) -> None:
        if not isinstance(fields, Mapping):
            raise SchemaDefinitionError(
                f"declaration fields must be a mapping, got {type(fields).__name__}"
            )
        normalized: dict[str, Any] = {}
        for key, validator in fields.items():
            if not isinstance(key, str) or not key:
                raise SchemaDefinitionError(f"declaration keys must be non-empty strings: {key!r}")
            normalized[key] = ensure_validator(validator, where=key)
        frozen_constraints = tuple(constraints)
        for constraint in frozen_constraints:
            if not isinstance(constraint, StructuralConstraint):
                raise SchemaDefinitionError(
                    f"expected a structural constraint, got {type(constraint).__name__}"
                )
        self._fields: Mapping[str, Any] = MappingProxyType(normalized)
        self._constraints = frozen_constraints
        self._strict = bool(strict)

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._fields

    @property
    def constraints(self) -> tuple[StructuralConstraint, ...]:
        return self._constraints

    @property
    def strict(self) -> bool:
        return self._strict

    def with_constraints(self, *constraints: StructuralConstraint) -> SchemaNode:
        """Return a new node with ``constraints`` appended."""

        return SchemaNode(self._fields, (*self._constraints, *constraints), strict=self._strict)

    def admitted_keys(self, target: Mapping[str, Any]) -> frozenset[str]:
        admitted: set[str] = set()
        for constraint in self._constraints:
            admitted.update(constraint.admitted_keys(target))
        return frozenset(admitted)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        rules = ", ".join(constraint.rule for constraint in self._constraints)
        return f"SchemaNode({describe(self)}, constraints=[{rules}], strict={self._strict})"


def classify(validator: object) -> ValidatorShape:
    """Return the shape of ``validator`` or raise for anything unrecognized."""

    if isinstance(validator, Kind):
        return ValidatorShape.KIND
    if isinstance(validator, FieldValidator):
        return ValidatorShape.FIELD
    if isinstance(validator, Mapping):
        return ValidatorShape.DECLARATION
    raise SchemaDefinitionError(
        f"unsupported validator {validator!r}; expected a Kind, a FieldValidator, or a declaration"
    )


def ensure_validator(validator: object, *, where: str | None = None) -> Validator:
    """Coerce kind strings to ``Kind`` and reject anything that is not a validator."""

    if isinstance(validator, str) and not isinstance(validator, Kind):
        try:
            return Kind(validator)
        except ValueError as exc:
            location = f" for {where}" if where else ""
            raise SchemaDefinitionError(f"unknown kind tag {validator!r}{location}") from exc
    try:
        classify(validator)
    except SchemaDefinitionError as exc:
        if where is None:
            raise
        raise SchemaDefinitionError(f"{where}: {exc}") from exc
    return validator  # type: ignore[return-value]


def describe(validator: object) -> str:
    """Render any validator to the type string used in messages.

    A declaration renders as compact JSON with nested declarations kept as
    JSON objects: ``{"outer":{"inner":"integer"}}``.
    """

    tree = _type_tree(validator)
    if isinstance(tree, str):
        return tree
    return json.dumps(tree, separators=(",", ":"), ensure_ascii=False)


def _type_tree(validator: object) -> str | dict[str, Any]:
    checked = ensure_validator(validator)
    shape = classify(checked)
    if shape is ValidatorShape.KIND:
        return str(checked)
    if isinstance(checked, FieldValidator):
        return checked.type_string
    return {str(key): _type_tree(item) for key, item in cast("Mapping[str, Any]", checked).items()}


def is_optional(validator: object) -> bool:
    return isinstance(validator, FieldValidator) and validator.is_optional


__all__ = [
    "ConstraintCheck",
    "FieldValidator",
    "MetaKind",
    "SchemaNode",
    "StructuralConstraint",
    "Validator",
    "ValidatorShape",
    "classify",
    "describe",
    "ensure_validator",
    "is_optional",
]
