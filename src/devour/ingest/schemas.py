"""
devour — ingest file declarations

File: src/devour/ingest/schemas.py
Last updated: 2026-10-19

Purpose
- Declare the expected shape of ingest files, database DSNs and transforms
  using the type checker's combinators.

Functional requirements
- Keys use the camelCase names found in ingest files on disk.
- Asset declarations only check the top-level envelope; the ``single`` and
  ``collection`` payloads have their own declarations.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Final

from devour.constants import SSL_MODES
from devour.typecheck import (
    Kind,
    SchemaNode,
    Structure,
    any_of_constants,
    optional_type,
    type_union_or,
    typed_array,
    typed_tuple,
)


class AssetUseCase(StrEnum):
    ICON = "icon"
    ENVIRONMENT = "environment"
    PLAYER = "player"


class IngestFileAssetType(StrEnum):
    SINGLE = "single"
    COLLECTION = "collection"
    UNKNOWN = "unknown"


def asset_type_from_string(text: object) -> IngestFileAssetType:
    """Case-insensitive lookup; anything unrecognized is ``UNKNOWN``."""

    if not isinstance(text, str):
        return IngestFileAssetType.UNKNOWN
    lowered = text.strip().lower()
    if lowered == IngestFileAssetType.SINGLE:
        return IngestFileAssetType.SINGLE
    if lowered == IngestFileAssetType.COLLECTION:
        return IngestFileAssetType.COLLECTION
    return IngestFileAssetType.UNKNOWN


def infer_asset_type(asset: Mapping[str, Any]) -> IngestFileAssetType:
    """Use ``type`` when given, else whichever of ``single``/``collection`` is present."""

    if asset.get("type") is not None:
        return asset_type_from_string(asset["type"])
    has_single = "single" in asset
    has_collection = "collection" in asset
    if has_single and not has_collection:
        return IngestFileAssetType.SINGLE
    if has_collection and not has_single:
        return IngestFileAssetType.COLLECTION
    return IngestFileAssetType.UNKNOWN


USE_CASES: Final[tuple[str, ...]] = tuple(use_case.value for use_case in AssetUseCase)

DBDSN_TYPEDECL: Final = SchemaNode(
    {
        "host": Kind.STRING,
        "port": Kind.INTEGER,
        "user": Kind.STRING,
        "password": Kind.STRING,
        "dbName": Kind.STRING,
        "sslMode": optional_type(any_of_constants(SSL_MODES)),
    }
)

TRANSFORM_DTO_TYPEDECL: Final = SchemaNode(
    {
        "xOffset": Kind.FLOAT,
        "yOffset": Kind.FLOAT,
        "zIndex": Kind.INTEGER,
        "xScale": Kind.FLOAT,
        "yScale": Kind.FLOAT,
    }
)

INGEST_FILE_SINGLE_ASSET_TYPEDECL: Final = SchemaNode(
    {
        "type": optional_type(any_of_constants([IngestFileAssetType.SINGLE.value])),
        "useCase": any_of_constants(USE_CASES),
        "single": Kind.OBJECT,
    }
)

INGEST_FILE_SINGLE_ASSET_FIELD_TYPEDECL: Final = SchemaNode(
    {
        "source": Kind.STRING,
        "id": Kind.INTEGER,
        "alias": optional_type(Kind.STRING),
        "width": optional_type(Kind.INTEGER),
        "height": optional_type(Kind.INTEGER),
    }
)

INGEST_FILE_COLLECTION_ASSET_TYPEDECL: Final = SchemaNode(
    {
        "type": optional_type(any_of_constants([IngestFileAssetType.COLLECTION.value])),
        "useCase": any_of_constants(USE_CASES),
        "collection": Kind.OBJECT,
    }
)

INGEST_FILE_COLLECTION_FIELD_TYPEDECL: Final = SchemaNode(
    {
        "entries": Kind.ARRAY,
        "name": Kind.STRING,
        "id": Kind.INTEGER,
    }
)

INGEST_FILE_COLLECTION_ENTRY_TYPEDECL: Final = SchemaNode(
    {
        "transform": type_union_or(Kind.STRING, Kind.OBJECT),
        "graphicalAssetId": Kind.INTEGER,
    }
)

ID_RANGE: Final = typed_tuple([Kind.INTEGER, Kind.INTEGER])

INGEST_FILE_SUB_FILE_TYPEDECL: Final = Structure(
    [
        Structure.at_least_one_of(
            {
                "assetIDRanges": typed_array(ID_RANGE),
                "collectionIDRanges": typed_array(ID_RANGE),
            }
        ),
    ]
)({"path": Kind.STRING})

INGEST_FILE_SETTINGS_TYPEDECL: Final = SchemaNode(
    {
        "version": Kind.STRING,
        "maxLOD": Kind.INTEGER,
        "LODThreshold": Kind.INTEGER,
        "allowedFailures": Kind.INTEGER,
        "dsn": DBDSN_TYPEDECL,
        "subFiles": optional_type(typed_array(INGEST_FILE_SUB_FILE_TYPEDECL)),
    }
)

AUTO_INGEST_SUB_SCRIPT_TYPEDECL: Final = SchemaNode(
    {
        "assets": Kind.ARRAY,
    }
)


__all__ = [
    "AUTO_INGEST_SUB_SCRIPT_TYPEDECL",
    "DBDSN_TYPEDECL",
    "ID_RANGE",
    "INGEST_FILE_COLLECTION_ASSET_TYPEDECL",
    "INGEST_FILE_COLLECTION_ENTRY_TYPEDECL",
    "INGEST_FILE_COLLECTION_FIELD_TYPEDECL",
    "INGEST_FILE_SETTINGS_TYPEDECL",
    "INGEST_FILE_SINGLE_ASSET_FIELD_TYPEDECL",
    "INGEST_FILE_SINGLE_ASSET_TYPEDECL",
    "INGEST_FILE_SUB_FILE_TYPEDECL",
    "TRANSFORM_DTO_TYPEDECL",
    "AssetUseCase",
    "IngestFileAssetType",
    "USE_CASES",
    "asset_type_from_string",
    "infer_asset_type",
]
