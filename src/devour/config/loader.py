"""
devour — runtime config loader.

File: src/devour/config/loader.py
Last updated: 2026-10-19

Purpose
- Produce the effective ``devour.toml`` config for one CLI invocation.

What should be included in this file
- Precedence logic: CLI > env (DEVOUR_) > file > defaults.
- Environment names derived from the default config: every scalar leaf
  ``section.key`` maps to ``DEVOUR_SECTION_KEY`` and is coerced to the
  type of its default.
- ``log_dir`` resolved against the directory holding the config file.

Functional requirements
- A file that is named explicitly must exist; the implicit ``./devour.toml``
  may be absent.
- The merged result is checked twice: once after the file (so file typos are
  reported against the file) and once after all overrides.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from devour.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
    redact_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "devour.toml"
ENV_PREFIX: Final[str] = "DEVOUR_"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config: CLI > env > file > defaults.

    ``cli_overrides`` uses dotted keys (``"observability.log_level"``);
    ``None`` values mean "flag not given" and are skipped.
    """

    path = _resolve_config_path(config_path)
    file_layer = _read_toml(path, required=config_path is not None)
    config = assert_valid_config(merge_config(default_config(), file_layer))

    env_layer = _env_layer(os.environ if environ is None else environ)
    cli_layer = _cli_layer(cli_overrides or {})
    config = assert_valid_config(merge_config(merge_config(config, env_layer), cli_layer))

    return normalize_paths(config, base_dir=path.parent)


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve relative path settings against ``base_dir``."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        value = normalized.get(section, {}).get(key)
        if isinstance(value, str):
            normalized[section][key] = _absolute_posix(value, base_dir)
    return normalized


def dump_effective_config(config: Mapping[str, object], *, indent: int | None = None) -> str:
    """Deterministic JSON of the redacted config."""

    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        redact_config(config), sort_keys=True, separators=separators, indent=indent, ensure_ascii=False
    )


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _scalar_leaves(
    payload: Mapping[str, object], prefix: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], object]]:
    for key in sorted(payload):
        value = payload[key]
        if isinstance(value, Mapping):
            yield from _scalar_leaves(value, (*prefix, key))
        else:
            yield (*prefix, key), value


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for path, default in _scalar_leaves(default_config()):
        env_name = ENV_PREFIX + "_".join(part.upper() for part in path)
        raw = environ.get(env_name)
        if raw is not None:
            _assign(layer, path, _coerce(raw.strip(), default, f"{env_name} -> {'.'.join(path)}"))
    return layer


def _coerce(raw: str, default: object, label: str) -> object:
    # bool before int: bool is an int subclass
    if isinstance(default, bool):
        lowered = raw.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ConfigLoadError(f"{label} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigLoadError(f"{label} must be an integer") from exc
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError as exc:
            raise ConfigLoadError(f"{label} must be a number") from exc
    return raw


def _cli_layer(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for dotted in sorted(cli_overrides):
        value = cli_overrides[dotted]
        if value is None:
            continue
        path = tuple(part for part in dotted.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        _assign(layer, path, value)
    return layer


def _assign(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    for part in path[:-1]:
        target = target.setdefault(part, {})
    target[path[-1]] = value


def _absolute_posix(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "load_config",
    "normalize_paths",
]
