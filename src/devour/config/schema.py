"""
devour — configuration schema and validation.

File: src/devour/config/schema.py
Last updated: 2026-10-19

Purpose
- Define authoritative configuration defaults and strict validation rules.

What should be included in this file
- Schema versioning and migration guidance.
- The config shape, declared with devour's own type checker.
- Range and enum rules the shape alone cannot express.
- Deterministic deep-merge and redaction helpers.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Unknown keys are rejected; the config declaration is closed.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict, cast

from devour.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SSL_MODE,
    MAX_DEPTH_CEILING,
    SSL_MODES,
)
from devour.typecheck import Kind, SchemaNode, any_of_constants, check_conformance

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
INPUT_FORMATS: Final[tuple[str, ...]] = ("auto", "json", "yaml")

_REDACTED: Final[str] = "<redacted>"
_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = ("password", "secret", "token", "api_key")

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (("observability", "log_dir"),)


class MetaConfig(TypedDict):
    schema_version: int


class ValidationConfig(TypedDict):
    max_depth: int


class IngestConfig(TypedDict):
    default_ssl_mode: Literal["require", "disable"]
    input_format: Literal["auto", "json", "yaml"]


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_file: bool
    log_to_console: bool
    redact_secrets: bool


class DevourConfig(TypedDict):
    meta: MetaConfig
    validation: ValidationConfig
    ingest: IngestConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[DevourConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "validation": {
        "max_depth": DEFAULT_MAX_DEPTH,
    },
    "ingest": {
        "default_ssl_mode": DEFAULT_SSL_MODE,
        "input_format": "auto",
    },
    "observability": {
        "log_level": "WARNING",
        "log_dir": "logs/",
        "log_to_file": False,
        "log_to_console": True,
        "redact_secrets": True,
    },
}

CONFIG_TYPEDECL: Final = SchemaNode(
    {
        "meta": SchemaNode({"schema_version": Kind.INTEGER}),
        "validation": SchemaNode({"max_depth": Kind.INTEGER}),
        "ingest": SchemaNode(
            {
                "default_ssl_mode": any_of_constants(SSL_MODES),
                "input_format": any_of_constants(INPUT_FORMATS),
            }
        ),
        "observability": SchemaNode(
            {
                "log_level": any_of_constants(LOG_LEVELS),
                "log_dir": Kind.STRING,
                "log_to_file": Kind.BOOLEAN,
                "log_to_console": Kind.BOOLEAN,
                "redact_secrets": Kind.BOOLEAN,
            }
        ),
    }
)


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues] or ["unknown validation failure"]
        super().__init__("invalid config:\n" + "\n".join(lines))


def default_config() -> DevourConfig:
    """Fresh copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade devour.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the devour runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""

    merged: dict[str, Any] = _copy(base)
    for key in sorted(overlay):
        value = overlay[key]
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = _copy(value)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with dotted paths.

    The shape is checked first and stops at the first structural problem;
    range rules only run on a well-shaped config.
    """

    shape = check_conformance(config, CONFIG_TYPEDECL)
    if shape.error is not None:
        path = ".".join(shape.failing_path) or "<root>"
        return ConfigValidationResult(
            config=None,
            issues=(ConfigValidationIssue(path=path, message=shape.error),),
        )

    config = cast("Mapping[str, Any]", config)
    issues: list[ConfigValidationIssue] = []

    schema_version = config["meta"]["schema_version"]
    if schema_version != ConfigSchemaVersion:
        issues.append(ConfigValidationIssue("meta.schema_version", migration_guidance(schema_version)))

    max_depth = config["validation"]["max_depth"]
    if not 1 <= max_depth <= MAX_DEPTH_CEILING:
        issues.append(
            ConfigValidationIssue("validation.max_depth", f"must be between 1 and {MAX_DEPTH_CEILING}")
        )

    log_dir = config["observability"]["log_dir"]
    if not log_dir.strip():
        issues.append(ConfigValidationIssue("observability.log_dir", "must not be empty"))
    elif "\x00" in log_dir:
        issues.append(ConfigValidationIssue("observability.log_dir", "must not contain NUL bytes"))

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=_copy(config), issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def redact_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Copy of ``config`` with secret-looking keys masked, for logs and CLI output."""

    if not isinstance(config, Mapping):
        return {}
    return _redacted(config)


def _copy(value: object) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy(value[key]) for key in sorted(value)}
    return copy.deepcopy(value)


def _redacted(value: object) -> Any:
    if isinstance(value, Mapping):
        return {
            key: _REDACTED if _is_sensitive_key(str(key)) else _redacted(item)
            for key, item in sorted(value.items())
        }
    if isinstance(value, (list, tuple)):
        return [_redacted(item) for item in value]
    return value


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(term in lowered for term in _SENSITIVE_KEY_TERMS)


__all__ = [
    "CONFIG_TYPEDECL",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DevourConfig",
    "INPUT_FORMATS",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "redact_config",
    "validate_config",
]
