"""Ingest-file verification built on the devour type checker."""

from devour.ingest.notation import read_compact_dsn_notation, read_compact_transform_notation
from devour.ingest.schemas import AssetUseCase, IngestFileAssetType, asset_type_from_string
from devour.ingest.subfiles import check_id_ranges_and_paths_of_sub_files, verify_sub_file_id_assignments
from devour.ingest.verifier import (
    assure_uniform_dsn,
    assure_uniform_transform,
    validate_collection_asset_entry,
    validate_single_asset_entry,
    verify_ingest_file,
    verify_ingest_file_assets,
    verify_ingest_file_settings,
)

__all__ = [
    "AssetUseCase",
    "IngestFileAssetType",
    "asset_type_from_string",
    "assure_uniform_dsn",
    "assure_uniform_transform",
    "check_id_ranges_and_paths_of_sub_files",
    "read_compact_dsn_notation",
    "read_compact_transform_notation",
    "validate_collection_asset_entry",
    "validate_single_asset_entry",
    "verify_ingest_file",
    "verify_ingest_file_assets",
    "verify_ingest_file_settings",
    "verify_sub_file_id_assignments",
]
