"""Command-line interface router for devour."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml

from devour.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
    redact_config,
)
from devour.ingest import verify_ingest_file
from devour.ingest.schemas import (
    AUTO_INGEST_SUB_SCRIPT_TYPEDECL,
    DBDSN_TYPEDECL,
    INGEST_FILE_COLLECTION_ASSET_TYPEDECL,
    INGEST_FILE_SETTINGS_TYPEDECL,
    INGEST_FILE_SINGLE_ASSET_TYPEDECL,
    INGEST_FILE_SUB_FILE_TYPEDECL,
    TRANSFORM_DTO_TYPEDECL,
)
from devour.mime import find_conforming_mime_type, mime_type_from_path
from devour.observability import correlation_scope, setup_logging, shutdown_logging
from devour.typecheck import (
    SchemaDefinitionError,
    SchemaNode,
    check_conformance,
    describe,
    render_value,
)
from devour.ui.render import CLIRenderer, create_renderer

YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})

DECLARATIONS: Final[Mapping[str, SchemaNode]] = {
    "dsn": DBDSN_TYPEDECL,
    "transform": TRANSFORM_DTO_TYPEDECL,
    "settings": INGEST_FILE_SETTINGS_TYPEDECL,
    "sub-file": INGEST_FILE_SUB_FILE_TYPEDECL,
    "single-asset": INGEST_FILE_SINGLE_ASSET_TYPEDECL,
    "collection-asset": INGEST_FILE_COLLECTION_ASSET_TYPEDECL,
    "sub-script": AUTO_INGEST_SUB_SCRIPT_TYPEDECL,
}


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="devour",
        description=(
            "devour: verify ingest files and other untyped documents.\n\n"
            "Common workflows:\n"
            "  devour verify ingest.json              Verify a whole ingest file\n"
            "  devour check dsn.yaml --as dsn         Check a document against one declaration\n"
            "  devour mime png                        Resolve a MIME type\n"
            "  devour config                          Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to devour TOML config (default: ./devour.toml if present).",
    )
    common.add_argument(
        "--log-dir",
        default=None,
        help="Write JSON-lines logs under this directory.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and log at INFO level.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # verify --------------------------------------------------------------
    verify_parser = subparsers.add_parser(
        "verify",
        parents=[common],
        help="Verify and normalize an ingest file",
        description=(
            "Check the settings and assets of an ingest file (JSON or YAML).\n\n"
            "Examples:\n"
            "  devour verify ingest.json\n"
            "  devour verify ingest.yaml --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    verify_parser.add_argument("document", help="Path to the ingest file")
    verify_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    verify_parser.set_defaults(handler=_cmd_verify)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Check a document against a built-in declaration",
        description=(
            "Run the conformance check of one built-in declaration and show where it failed.\n\n"
            "Examples:\n"
            "  devour check dsn.json --as dsn\n"
            "  devour check asset.yaml --as single-asset --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("document", help="Path to the JSON or YAML document")
    check_parser.add_argument(
        "--as",
        dest="declaration",
        choices=sorted(DECLARATIONS),
        required=True,
        help="Declaration to check against",
    )
    check_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Override validation.max_depth for this check.",
    )
    check_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    check_parser.set_defaults(handler=_cmd_check)

    # mime ----------------------------------------------------------------
    mime_parser = subparsers.add_parser(
        "mime",
        parents=[common],
        help="Resolve an image type name or file name to its MIME type",
    )
    mime_parser.add_argument("name", help='Type name such as "png", or a file name with --path')
    mime_parser.add_argument(
        "--path",
        action="store_true",
        default=False,
        help="Treat NAME as a file name and resolve by extension.",
    )
    mime_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    mime_parser.set_defaults(handler=_cmd_mime)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
    )
    config_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_verify(args: argparse.Namespace) -> int:
    config = _bootstrap(args)
    document_path = _resolve_document(args)
    raw = _load_document(document_path, config["ingest"]["input_format"])

    with correlation_scope(command="verify", document=document_path.name):
        verified = verify_ingest_file(raw, default_ssl_mode=config["ingest"]["default_ssl_mode"])

    normalized = verified.result or {}
    payload: dict[str, object] = {
        "command": "verify",
        "document": str(document_path),
        "ok": verified.is_ok,
        "error": verified.error,
        "asset_count": len(normalized.get("assets", ())),
        "normalized": redact_config(normalized) if verified.is_ok else None,
    }
    exit_code = 0 if verified.is_ok else 1

    if _flag(args, "json"):
        _emit_json(payload)
        return exit_code

    renderer = _get_renderer(args)
    renderer.kv("Document", document_path)
    if verified.error is not None:
        renderer.fail("ingest file rejected")
        renderer.detail(verified.error)
        return exit_code

    renderer.ok(f"ingest file verified ({payload['asset_count']} assets)")
    if renderer.verbose:
        renderer.section("Normalized document:")
        renderer.text(json.dumps(payload["normalized"], indent=2, sort_keys=True, ensure_ascii=False))
    return exit_code


def _cmd_check(args: argparse.Namespace) -> int:
    config = _bootstrap(args)
    document_path = _resolve_document(args)
    raw = _load_document(document_path, config["ingest"]["input_format"])

    name = _require_str(getattr(args, "declaration", None), "declaration")
    declaration = DECLARATIONS[name]
    max_depth = getattr(args, "max_depth", None)
    if max_depth is None:
        max_depth = config["validation"]["max_depth"]

    try:
        result = check_conformance(raw, declaration, max_depth=max_depth)
    except SchemaDefinitionError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    payload: dict[str, object] = {
        "command": "check",
        "document": str(document_path),
        "declaration": name,
        "expected": describe(declaration),
        "ok": result.ok,
        "error": result.error,
        "failing_path": list(result.failing_path),
        "trace": [
            {
                "path": list(entry.path),
                "expected_type": entry.expected_type,
                "observed_value": render_value(entry.observed_value),
            }
            for entry in result.trace
        ],
    }
    exit_code = 0 if result.ok else 1

    if _flag(args, "json"):
        _emit_json(payload)
        return exit_code

    renderer = _get_renderer(args)
    renderer.kv("Document", document_path)
    renderer.kv("Declaration", name)
    if result.error is None:
        renderer.ok(f"conforms to {name}")
        return exit_code

    renderer.fail(f"does not conform to {name}")
    renderer.detail(result.error)
    if renderer.verbose and result.trace:
        renderer.section("Trace:")
        renderer.items(
            [
                f"{entry.dotted_path or '<root>'}: expected {entry.expected_type}"
                for entry in result.trace
            ]
        )
    return exit_code


def _cmd_mime(args: argparse.Namespace) -> int:
    _bootstrap(args)
    name = _require_str(getattr(args, "name", None), "name")
    resolved = mime_type_from_path(name) if _flag(args, "path") else find_conforming_mime_type(name)

    payload: dict[str, object] = {
        "command": "mime",
        "input": name,
        "mime_type": resolved.result,
        "error": resolved.error,
    }
    exit_code = 0 if resolved.is_ok else 1

    if _flag(args, "json"):
        _emit_json(payload)
        return exit_code

    renderer = _get_renderer(args)
    if resolved.error is not None:
        renderer.fail(resolved.error)
    else:
        renderer.kv(name, resolved.result)
    return exit_code


def _cmd_config(args: argparse.Namespace) -> int:
    config = _bootstrap(args)
    redacted = redact_config(config)

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": redacted})
        return 0

    renderer = _get_renderer(args)
    renderer.text(dump_effective_config(redacted, indent=2))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    """Retrieve or create a CLI renderer from the parsed namespace."""

    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose)


def _bootstrap(args: argparse.Namespace) -> dict[str, Any]:
    """Load effective config and start logging for one command invocation."""

    config = _load_effective_config(args)
    log_dir = _optional_str(getattr(args, "log_dir", None))
    setup_logging(
        config["observability"],
        run_id=uuid.uuid4().hex[:12],
        log_dir=log_dir,
    )
    return config


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    overrides: dict[str, object] = {}
    if _flag(args, "verbose"):
        overrides["observability.log_level"] = "INFO"

    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _resolve_document(args: argparse.Namespace) -> Path:
    raw = _require_str(getattr(args, "document", None), "document")
    resolved = Path(raw).expanduser().resolve()
    if not resolved.is_file():
        raise CLIError(f"document not found: {resolved}", exit_code=2)
    return resolved


def _load_document(path: Path, input_format: str) -> object:
    """Parse ``path`` as JSON or YAML; ``auto`` decides by file suffix."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"unable to read document {path}: {exc}", exit_code=2) from exc

    use_yaml = input_format == "yaml" or (input_format == "auto" and path.suffix.lower() in YAML_SUFFIXES)
    if use_yaml:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CLIError(f"invalid YAML in {path}: {exc}", exit_code=2) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CLIError(f"invalid JSON in {path}: {exc}", exit_code=2) from exc


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string", exit_code=2)
    normalized = value.strip()
    if not normalized:
        raise CLIError(f"invalid {name}: value cannot be empty", exit_code=2)
    return normalized


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=2)
    normalized = value.strip()
    return normalized or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "DECLARATIONS", "build_parser", "run_cli"]
