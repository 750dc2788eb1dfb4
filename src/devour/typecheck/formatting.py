"""Rendering helpers for the human-readable error contract."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping

from devour.typecheck.kinds import MISSING

_MAX_RENDERED_LENGTH = 200


def join_values(values: Iterable[object], separator: str = ", ") -> str:
    """Join values with ``separator``. Never mutates its input."""

    return separator.join(str(value) for value in values)


def plural_suffix(count: int) -> str:
    return "s" if count > 1 else ""


def render_value(value: object) -> str:
    """Render an observed value the way error messages quote it."""

    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (Mapping, list, tuple)):
        return _truncate(
            json.dumps(_jsonable(value), separators=(",", ":"), ensure_ascii=False, sort_keys=False)
        )
    return _truncate(repr(value))


def _jsonable(value: object) -> object:
    if value is MISSING:
        return None
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return render_value(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


def _truncate(text: str) -> str:
    if len(text) <= _MAX_RENDERED_LENGTH:
        return text
    return text[: _MAX_RENDERED_LENGTH - 3] + "..."


__all__ = ["join_values", "plural_suffix", "render_value"]
