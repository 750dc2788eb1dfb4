"""
devour — ingest file verification

File: src/devour/ingest/verifier.py
Last updated: 2026-10-19

Purpose
- Check a parsed ingest file (settings + assets) against the ingest
  declarations and return a normalized copy ready for processing.

What should be included in this file
- DSN and transform normalization from either compact notation or objects.
- Per-asset checks for single and collection assets.
- Default filling that the type checker itself never does: ``sslMode`` and
  single-asset ``alias``.

Functional requirements
- Never mutate the caller's document; every normalizer returns new data.
- Report the first problem found as a human-readable string.
- An asset without ``type`` is inferred from which payload key it carries.

Non-functional requirements
- Decisions are logged through ``structlog`` as machine-parseable events.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, cast

import structlog

from devour.constants import DEFAULT_SSL_MODE
from devour.ingest.notation import read_compact_dsn_notation, read_compact_transform_notation
from devour.ingest.schemas import (
    DBDSN_TYPEDECL,
    INGEST_FILE_COLLECTION_ASSET_TYPEDECL,
    INGEST_FILE_COLLECTION_ENTRY_TYPEDECL,
    INGEST_FILE_COLLECTION_FIELD_TYPEDECL,
    INGEST_FILE_SETTINGS_TYPEDECL,
    INGEST_FILE_SINGLE_ASSET_FIELD_TYPEDECL,
    INGEST_FILE_SINGLE_ASSET_TYPEDECL,
    TRANSFORM_DTO_TYPEDECL,
    IngestFileAssetType,
    infer_asset_type,
)
from devour.ingest.subfiles import check_id_ranges_and_paths_of_sub_files
from devour.results import ResErr
from devour.typecheck import conforms_to_type

_logger = structlog.get_logger(__name__)

DSN_NOTATION_HINT = '"host port, username password, dbName, sslMode"'


def assure_uniform_dsn(dsn: object, *, default_ssl_mode: str = DEFAULT_SSL_MODE) -> ResErr[dict[str, Any]]:
    """Normalize a DSN given as compact notation or as an object."""

    if isinstance(dsn, str):
        parsed = read_compact_dsn_notation(dsn)
        if parsed.error is not None:
            return ResErr.fail(parsed.error)
        candidate: dict[str, Any] = dict(parsed.result or {})
    elif isinstance(dsn, Mapping):
        candidate = dict(dsn)
    else:
        return ResErr.fail(f"DSN field is not compact CLI notation ({DSN_NOTATION_HINT}) or an object.")

    if candidate.get("sslMode", None) is None:
        candidate.pop("sslMode", None)
    type_error = conforms_to_type(candidate, DBDSN_TYPEDECL)
    if type_error is not None:
        return ResErr.fail("DSN object does not conform to expected type:\n\t" + type_error)
    if "sslMode" not in candidate:
        candidate["sslMode"] = default_ssl_mode
        _logger.debug("ingest_dsn_ssl_mode_defaulted", ssl_mode=default_ssl_mode)
    return ResErr.ok(candidate)


def assure_uniform_transform(transform: object) -> ResErr[dict[str, Any]]:
    """Normalize a transform given as compact notation or as an object."""

    if isinstance(transform, str):
        return read_compact_transform_notation(transform)
    if isinstance(transform, Mapping):
        type_error = conforms_to_type(transform, TRANSFORM_DTO_TYPEDECL)
        if type_error is not None:
            return ResErr.fail("Transform field does not conform to type: " + type_error)
        return ResErr.ok(dict(transform))
    return ResErr.fail("Transform field is not compact CLI notation (string) or an object.")


def validate_single_asset_entry(asset: Mapping[str, Any], entry_num: int) -> ResErr[dict[str, Any]]:
    type_error = conforms_to_type(asset, INGEST_FILE_SINGLE_ASSET_TYPEDECL)
    if type_error is not None:
        return ResErr.fail(f"Type error in single asset nr {entry_num}: {type_error}")

    single = asset["single"]
    field_error = conforms_to_type(single, INGEST_FILE_SINGLE_ASSET_FIELD_TYPEDECL)
    if field_error is not None:
        return ResErr.fail(f"Type error in single field of single asset nr {entry_num}: {field_error}")

    normalized = copy.deepcopy(dict(asset))
    normalized["type"] = IngestFileAssetType.SINGLE.value
    normalized_single = normalized["single"]
    if not normalized_single.get("alias"):
        alias = normalized_single["source"].rstrip("/").split("/")[-1]
        normalized_single["alias"] = alias
        _logger.warning(
            "ingest_alias_defaulted",
            entry_num=entry_num,
            alias=alias,
            detail=f"No alias provided for single asset nr: {entry_num}, using source name as alias: {alias}",
        )
    return ResErr.ok(normalized)


def validate_collection_asset_entry(asset: Mapping[str, Any], entry_num: int) -> ResErr[dict[str, Any]]:
    type_error = conforms_to_type(asset, INGEST_FILE_COLLECTION_ASSET_TYPEDECL)
    if type_error is not None:
        return ResErr.fail(f"Type error in collection asset nr {entry_num}: {type_error}")

    collection = asset["collection"]
    field_error = conforms_to_type(collection, INGEST_FILE_COLLECTION_FIELD_TYPEDECL)
    if field_error is not None:
        return ResErr.fail(
            f"Type error in collection field on collection asset nr {entry_num}: {field_error}"
        )

    normalized = copy.deepcopy(dict(asset))
    normalized["type"] = IngestFileAssetType.COLLECTION.value
    entries = normalized["collection"]["entries"]
    for index, entry in enumerate(entries):
        entry_error = conforms_to_type(entry, INGEST_FILE_COLLECTION_ENTRY_TYPEDECL)
        if entry_error is not None:
            return ResErr.fail(
                f"Type error in source nr: {index} in collection asset nr: {entry_num}: {entry_error}"
            )
        transform = assure_uniform_transform(entry["transform"])
        if transform.error is not None:
            return ResErr.fail(
                f"Invalid transform in source nr: {index} in collection asset nr: {entry_num}: "
                f"{transform.error}"
            )
        entry["transform"] = transform.result
    return ResErr.ok(normalized)


def verify_ingest_file_settings(
    raw_file: object,
    *,
    default_ssl_mode: str = DEFAULT_SSL_MODE,
) -> ResErr[dict[str, Any]]:
    """Check and normalize the ``settings`` section."""

    settings = raw_file.get("settings") if isinstance(raw_file, Mapping) else None
    if not isinstance(settings, Mapping):
        return ResErr.fail("No settings field and corresponding object found in ingest file.")
    if not settings.get("dsn"):
        return ResErr.fail("No dsn field found in ingest file under settings.")

    dsn = assure_uniform_dsn(settings["dsn"], default_ssl_mode=default_ssl_mode)
    if dsn.error is not None:
        return ResErr.fail(dsn.error)

    normalized = copy.deepcopy(dict(settings))
    normalized["dsn"] = dsn.result
    settings_error = conforms_to_type(normalized, INGEST_FILE_SETTINGS_TYPEDECL)
    if settings_error is not None:
        return ResErr.fail("Settings field does not conform to type: " + settings_error)

    sub_files = normalized.get("subFiles")
    if sub_files:
        sub_file_error = check_id_ranges_and_paths_of_sub_files(sub_files)
        if sub_file_error is not None:
            return ResErr.fail(sub_file_error)
    return ResErr.ok(normalized)


def verify_ingest_file_assets(raw_file: object) -> ResErr[list[dict[str, Any]]]:
    """Check and normalize every entry of the ``assets`` array."""

    assets = raw_file.get("assets") if isinstance(raw_file, Mapping) else None
    if assets is None:
        return ResErr.fail("No assets field and corresponding object found in ingest file.")
    if not isinstance(assets, list) or not assets:
        return ResErr.fail("Assets field in ingest file is not an array or is an empty array.")

    normalized: list[dict[str, Any]] = []
    single_count = 1
    collection_count = 1
    for index, asset in enumerate(assets):
        if not isinstance(asset, Mapping):
            return ResErr.fail(f"Asset nr:{index} is not an object.")
        if not asset.get("useCase"):
            return ResErr.fail(f"No useCase field found in asset nr:{index}")

        asset_type = infer_asset_type(asset)
        if asset_type is IngestFileAssetType.SINGLE:
            checked = validate_single_asset_entry(asset, single_count)
            single_count += 1
        elif asset_type is IngestFileAssetType.COLLECTION:
            checked = validate_collection_asset_entry(asset, collection_count)
            collection_count += 1
        else:
            return ResErr.fail(f"Unknown asset type in asset nr:{index}")

        if checked.error is not None:
            return ResErr.fail(checked.error)
        normalized.append(cast("dict[str, Any]", checked.result))
    return ResErr.ok(normalized)


def verify_ingest_file(
    raw_file: object,
    *,
    default_ssl_mode: str = DEFAULT_SSL_MODE,
) -> ResErr[dict[str, Any]]:
    """Verify a whole ingest document and return its normalized copy."""

    settings = verify_ingest_file_settings(raw_file, default_ssl_mode=default_ssl_mode)
    if settings.error is not None:
        _logger.info("ingest_file_rejected", section="settings", reason=settings.error)
        return ResErr.fail(settings.error)

    assets = verify_ingest_file_assets(raw_file)
    if assets.error is not None:
        _logger.info("ingest_file_rejected", section="assets", reason=assets.error)
        return ResErr.fail(assets.error)

    normalized = copy.deepcopy(dict(cast("Mapping[str, Any]", raw_file)))
    normalized["settings"] = settings.result
    normalized["assets"] = assets.result
    _logger.info("ingest_file_verified", asset_count=len(assets.result or []))
    return ResErr.ok(normalized)


__all__ = [
    "DSN_NOTATION_HINT",
    "assure_uniform_dsn",
    "assure_uniform_transform",
    "validate_collection_asset_entry",
    "validate_single_asset_entry",
    "verify_ingest_file",
    "verify_ingest_file_assets",
    "verify_ingest_file_settings",
]
