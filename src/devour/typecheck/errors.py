"""Exceptions raised by the type checker.

Ordinary invalid input is never an exception: the evaluator reports it as an
error string. These types cover malformed declarations and callers that opt in
to raising.
"""

from __future__ import annotations


class SchemaDefinitionError(ValueError):
    """Raised at declaration time when a validator or declaration is malformed."""


class ConformanceError(ValueError):
    """Raised by ``assert_conforms`` when a value does not conform."""

    def __init__(self, message: str, *, label: str | None = None) -> None:
        self.detail = message
        self.label = label
        rendered = message if label is None else f"{label}: {message}"
        super().__init__(rendered)


__all__ = ["ConformanceError", "SchemaDefinitionError"]
