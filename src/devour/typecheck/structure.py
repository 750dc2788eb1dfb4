"""
devour — structural constraints

File: src/devour/typecheck/structure.py
Last updated: 2026-10-19

Purpose
- Express cardinality rules over sibling fields (exactly, at least, or at
  most one of a set) that no single field validator can see.
- Attach those rules to a declaration through the ``Structure`` builder,
  producing an immutable ``SchemaNode``.

Functional requirements
- Once the cardinality rule holds, each present candidate field is checked
  against its own validator and reported with that field's message.
- Candidate keys are listed joined with ", " and found keys with " and ".
- Keys named by a constraint are admitted by the enclosing closed node.

Example
    CONTACT = Structure([
        Structure.exactly_one_of({"email": Kind.STRING, "phone": Kind.INTEGER}),
    ])({"name": Kind.STRING})
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from devour.typecheck.conformance import execute_validator_for_value
from devour.typecheck.errors import SchemaDefinitionError
from devour.typecheck.formatting import join_values, render_value
from devour.typecheck.kinds import Kind
from devour.typecheck.model import SchemaNode, StructuralConstraint, ensure_validator

FOUND_SEPARATOR = " and "


def _candidate_declaration(declaration: Mapping[str, Any], rule: str) -> Mapping[str, Any]:
    if not isinstance(declaration, Mapping) or not declaration:
        raise SchemaDefinitionError(f"{rule} expects a non-empty declaration of candidate fields")
    return SchemaNode(declaration).fields


def _keys_found(target: Mapping[str, Any], declaration: Mapping[str, Any]) -> list[str]:
    return [key for key in target if key in declaration]


def _not_an_object(target: object) -> str:
    return f'Object is expected to be of type "{Kind.OBJECT}", observed value: {render_value(target)}'


def validate_exactly_one_of(target: object, declaration: Mapping[str, Any]) -> str | None:
    if not isinstance(target, Mapping):
        return _not_an_object(target)
    found = _keys_found(target, declaration)
    candidates = join_values(declaration)
    if len(found) > 1:
        return f'Expected but 1 of "{candidates}" present, but found: {join_values(found, FOUND_SEPARATOR)}'
    if not found:
        return f'Expected but 1 of "{candidates}" present, but found none'
    key = found[0]
    return execute_validator_for_value(target[key], key, declaration[key])


def validate_at_least_one_of(target: object, declaration: Mapping[str, Any]) -> str | None:
    if not isinstance(target, Mapping):
        return _not_an_object(target)
    found = _keys_found(target, declaration)
    if not found:
        return f'Expected at least 1 of "{join_values(declaration)}" present, but found none'
    for key in found:
        error = execute_validator_for_value(target[key], key, declaration[key])
        if error is not None:
            return error
    return None


def validate_at_most_one_of(target: object, declaration: Mapping[str, Any]) -> str | None:
    if not isinstance(target, Mapping):
        return _not_an_object(target)
    found = _keys_found(target, declaration)
    if len(found) > 1:
        return (
            f'Expected at most 1 of "{join_values(declaration)}" present, '
            f"but found: {join_values(found, FOUND_SEPARATOR)}"
        )
    if found:
        key = found[0]
        return execute_validator_for_value(target[key], key, declaration[key])
    return None


def validate_field_name_by_value(target: object, source_key: str, validator: Any) -> str | None:
    if not isinstance(target, Mapping):
        return _not_an_object(target)
    if source_key not in target:
        return f'Expected field "{source_key}" naming another field, but found none'
    name = target[source_key]
    if not isinstance(name, str):
        return f"Field {source_key} is expected to name another field, observed value: {render_value(name)}"
    if name == source_key or name not in target:
        return f'Field {source_key} names "{name}", but no such field is present'
    return execute_validator_for_value(target[name], name, validator)


def exactly_one_of(declaration: Mapping[str, Any]) -> StructuralConstraint:
    """Require exactly one of the declared fields to be present."""

    fields = _candidate_declaration(declaration, "exactly_one_of")
    return StructuralConstraint(
        rule="exactly_one_of",
        declaration=fields,
        check=lambda target, _base: validate_exactly_one_of(target, fields),
    )


def at_least_one_of(declaration: Mapping[str, Any]) -> StructuralConstraint:
    """Require at least one of the declared fields to be present."""

    fields = _candidate_declaration(declaration, "at_least_one_of")
    return StructuralConstraint(
        rule="at_least_one_of",
        declaration=fields,
        check=lambda target, _base: validate_at_least_one_of(target, fields),
    )


def at_most_one_of(declaration: Mapping[str, Any]) -> StructuralConstraint:
    """Require at most one of the declared fields to be present."""

    fields = _candidate_declaration(declaration, "at_most_one_of")
    return StructuralConstraint(
        rule="at_most_one_of",
        declaration=fields,
        check=lambda target, _base: validate_at_most_one_of(target, fields),
    )


def field_name_by_value(source_key: str, validator: object) -> StructuralConstraint:
    """Require the field named by the value of ``source_key`` to be present and valid.

    ``{"primary": "email", "email": "a@b.c"}`` satisfies
    ``field_name_by_value("primary", Kind.STRING)``.
    """

    if not isinstance(source_key, str) or not source_key:
        raise SchemaDefinitionError("field_name_by_value expects a non-empty source key")
    checked = ensure_validator(validator, where=source_key)

    def _admitted(target: Mapping[str, Any]) -> frozenset[str]:
        name = target.get(source_key)
        if isinstance(name, str):
            return frozenset({source_key, name})
        return frozenset({source_key})

    return StructuralConstraint(
        rule="field_name_by_value",
        declaration={source_key: Kind.STRING},
        check=lambda target, _base: validate_field_name_by_value(target, source_key, checked),
        admitted=_admitted,
    )


class Structure:
    """Builder attaching structural constraints to a base declaration.

    ``Structure(constraints)(base)`` returns a new ``SchemaNode``; ``base`` is
    left untouched. Constraints already on a ``SchemaNode`` base run first.
    """

    exactly_one_of = staticmethod(exactly_one_of)
    at_least_one_of = staticmethod(at_least_one_of)
    at_most_one_of = staticmethod(at_most_one_of)
    field_name_by_value = staticmethod(field_name_by_value)

    __slots__ = ("_constraints", "_strict")

    def __init__(self, constraints: Iterable[StructuralConstraint] = (), *, strict: bool = True) -> None:
        self._constraints = tuple(constraints)
        for constraint in self._constraints:
            if not isinstance(constraint, StructuralConstraint):
                raise SchemaDefinitionError(
                    f"Structure expects structural constraints, got {type(constraint).__name__}"
                )
        self._strict = strict

    @property
    def constraints(self) -> tuple[StructuralConstraint, ...]:
        return self._constraints

    def __call__(self, base: Mapping[str, Any]) -> SchemaNode:
        if isinstance(base, SchemaNode):
            return SchemaNode(
                base.fields,
                (*base.constraints, *self._constraints),
                strict=base.strict and self._strict,
            )
        return SchemaNode(base, self._constraints, strict=self._strict)


__all__ = [
    "Structure",
    "at_least_one_of",
    "at_most_one_of",
    "exactly_one_of",
    "field_name_by_value",
    "validate_at_least_one_of",
    "validate_at_most_one_of",
    "validate_exactly_one_of",
    "validate_field_name_by_value",
]
