"""
devour — conformance evaluator

File: src/devour/typecheck/conformance.py
Last updated: 2026-10-19

Purpose
- Decide whether an untyped value conforms to a validator: a primitive kind,
  a field validator, or a (possibly constrained) declaration.
- Produce the human-readable error string callers log and print, plus an
  ordered trace from the root to the failing leaf for tooling.

What should be included in this file
- conforms_to_type: the string-or-None contract.
- check_conformance: the same walk, returning message and trace together.
- assert_conforms: raising variant for callers that prefer exceptions.
- execute_validator_for_value: the per-field step shared with structural
  constraints.

Functional requirements
- Never raise for ordinary invalid input. Malformed declarations raise
  SchemaDefinitionError.
- Short-circuit on the first failure. Order: non-object value, structural
  constraints, extra keys, missing keys, then fields in declaration order.
- Only OPTIONAL field validators excuse an absent key.

Non-functional requirements
- Pure and re-entrant; recursion is bounded by max_depth.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from devour.constants import DEFAULT_MAX_DEPTH, MAX_DEPTH_CEILING
from devour.typecheck.errors import ConformanceError, SchemaDefinitionError
from devour.typecheck.formatting import join_values, plural_suffix, render_value
from devour.typecheck.kinds import MISSING, Kind, validate_simple_type
from devour.typecheck.model import (
    FieldValidator,
    SchemaNode,
    ValidatorShape,
    classify,
    describe,
    ensure_validator,
    is_optional,
)

Path = tuple[str, ...]

# (depth, max_depth) of the declaration walk that is currently calling a combinator.
_depth_budget: ContextVar[tuple[int, int] | None] = ContextVar("devour_depth_budget", default=None)


@dataclass(frozen=True, slots=True)
class TraceEntry:
    path: Path
    expected_type: str
    observed_value: object

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True, slots=True)
class ConformanceResult:
    """Outcome of a single conformance check."""

    error: str | None
    trace: tuple[TraceEntry, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failing_path(self) -> Path:
        if not self.trace:
            return ()
        return self.trace[-1].path

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True, slots=True)
class _Failure:
    message: str
    trace: tuple[TraceEntry, ...]

    def nested_under(self, key: str, entry: TraceEntry) -> _Failure:
        return _Failure(
            message=f"Field {key} failed nested type check:\n\t{self.message}",
            trace=(entry, *self.trace),
        )


def conforms_to_type(
    value: object,
    validator: object,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str | None:
    """Return ``None`` when ``value`` conforms to ``validator``, else an error message."""

    return check_conformance(value, validator, max_depth=max_depth).error


def check_conformance(
    value: object,
    validator: object,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ConformanceResult:
    _check_max_depth(max_depth)
    failure = _evaluate(value, ensure_validator(validator), (), 0, max_depth)
    if failure is None:
        return ConformanceResult(error=None)
    return ConformanceResult(error=failure.message, trace=failure.trace)


def assert_conforms(
    value: object,
    validator: object,
    *,
    label: str | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> object:
    """Return ``value`` unchanged or raise ``ConformanceError``."""

    result = check_conformance(value, validator, max_depth=max_depth)
    if result.error is not None:
        raise ConformanceError(result.error, label=label)
    return value


def execute_validator_for_value(value: object, key: object, validator: object) -> str | None:
    """Validate one field value the way a declaration walk would."""

    depth, max_depth = _depth_budget.get() or (0, DEFAULT_MAX_DEPTH)
    failure = _check_field(value, str(key), ensure_validator(validator), (), depth, max_depth)
    return None if failure is None else failure.message


def accepts(value: object, validator: object) -> bool:
    """Boolean view used by combinators.

    Inside an evaluation a nested declaration continues at the depth where the
    combinator was reached, so ``max_depth`` also bounds nesting through
    combinators. Exceeding it there makes the combinator reject the value.
    """

    validator = ensure_validator(validator)
    shape = classify(validator)
    if shape is ValidatorShape.KIND:
        return validate_simple_type(validator, value)  # type: ignore[arg-type]
    if shape is ValidatorShape.FIELD:
        return validator(value)  # type: ignore[operator]
    budget = _depth_budget.get()
    if budget is None:
        return conforms_to_type(value, validator) is None
    depth, max_depth = budget
    return _check_declaration(value, validator, (), depth, max_depth) is None  # type: ignore[arg-type]


@contextmanager
def _depth_budget_scope(depth: int, max_depth: int) -> Iterator[None]:
    token = _depth_budget.set((depth, max_depth))
    try:
        yield
    finally:
        _depth_budget.reset(token)


def _call_field_validator(validator: FieldValidator, value: object, depth: int, max_depth: int) -> bool:
    with _depth_budget_scope(depth, max_depth):
        return validator(value)


def _check_max_depth(max_depth: int) -> None:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise SchemaDefinitionError(f"max_depth must be an integer, got {max_depth!r}")
    if not 1 <= max_depth <= MAX_DEPTH_CEILING:
        raise SchemaDefinitionError(f"max_depth must be between 1 and {MAX_DEPTH_CEILING}")


def _evaluate(value: object, validator: Any, path: Path, depth: int, max_depth: int) -> _Failure | None:
    shape = classify(validator)
    if shape is ValidatorShape.KIND:
        if validate_simple_type(validator, value):
            return None
        return _Failure(
            message=f'Object is expected to be of type "{validator}", observed value: {render_value(value)}',
            trace=(TraceEntry(path, str(validator), value),),
        )
    if shape is ValidatorShape.FIELD:
        if _call_field_validator(validator, value, depth, max_depth):
            return None
        return _Failure(
            message=(
                f'Object does not conform to the expected "{validator.type_string}", '
                f"observed value: {render_value(value)}"
            ),
            trace=(TraceEntry(path, validator.type_string, value),),
        )
    return _check_declaration(value, validator, path, depth, max_depth)


def _check_declaration(
    value: object,
    declaration: Mapping[str, Any],
    path: Path,
    depth: int,
    max_depth: int,
) -> _Failure | None:
    if depth >= max_depth:
        return _Failure(
            message=f"Maximum nesting depth of {max_depth} exceeded",
            trace=(TraceEntry(path, "object", value),),
        )
    if not isinstance(value, Mapping):
        return _Failure(
            message=f'Object is expected to be of type "{Kind.OBJECT}", observed value: {render_value(value)}',
            trace=(TraceEntry(path, describe(declaration), value),),
        )

    node = declaration if isinstance(declaration, SchemaNode) else None
    if node is not None:
        for constraint in node.constraints:
            with _depth_budget_scope(depth, max_depth):
                message = constraint(value, node)
            if message is not None:
                return _Failure(
                    message="Structural issue:\n\t" + message,
                    trace=(TraceEntry(path, f"structure:{constraint.rule}", value),),
                )

    if node is None or node.strict:
        admitted = node.admitted_keys(value) if node is not None else frozenset()
        extra = [str(key) for key in value if key not in declaration and key not in admitted]
        if extra:
            return _Failure(
                message=f"Extra key{plural_suffix(len(extra))} in object: {join_values(extra)}",
                trace=(TraceEntry(path, describe(declaration), value),),
            )

    missing = [key for key, field in declaration.items() if key not in value and not is_optional(field)]
    if missing:
        return _Failure(
            message=f"Missing key{plural_suffix(len(missing))} in object: {join_values(missing)}",
            trace=(TraceEntry(path, describe(declaration), value),),
        )

    for key, field in declaration.items():
        item = value[key] if key in value else MISSING
        if item is MISSING and is_optional(field):
            continue
        failure = _check_field(item, key, ensure_validator(field, where=key), path, depth, max_depth)
        if failure is not None:
            return failure
    return None


def _check_field(
    value: object,
    key: str,
    validator: Any,
    path: Path,
    depth: int,
    max_depth: int,
) -> _Failure | None:
    field_path = (*path, key)
    shape = classify(validator)
    if shape is ValidatorShape.DECLARATION:
        nested = _check_declaration(value, validator, field_path, depth + 1, max_depth)
        if nested is None:
            return None
        return nested.nested_under(key, TraceEntry(field_path, describe(validator), value))
    if shape is ValidatorShape.FIELD:
        if _call_field_validator(validator, value, depth + 1, max_depth):
            return None
        return _Failure(
            message=(
                f'Field {key} does not conform to the expected "{validator.type_string}", '
                f"observed value: {render_value(value)}"
            ),
            trace=(TraceEntry(field_path, validator.type_string, value),),
        )
    if validate_simple_type(validator, value):
        return None
    return _Failure(
        message=(
            f'Field {key} is expected to exist and be of type "{validator}" '
            f"but had value: {render_value(value)}"
        ),
        trace=(TraceEntry(field_path, str(validator), value),),
    )


__all__ = [
    "ConformanceResult",
    "TraceEntry",
    "accepts",
    "assert_conforms",
    "check_conformance",
    "conforms_to_type",
    "execute_validator_for_value",
]
