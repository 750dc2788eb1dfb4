"""Sub-file bookkeeping: path uniqueness and ID range assignment.

Each sub-file of an ingest file owns one or more inclusive ``[low, high]``
ranges of asset and/or collection IDs. Ranges may overlap within a single
sub-file but never across sub-files of the same kind.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from devour.ingest.schemas import (
    AUTO_INGEST_SUB_SCRIPT_TYPEDECL,
    INGEST_FILE_SUB_FILE_TYPEDECL,
    IngestFileAssetType,
    infer_asset_type,
)
from devour.typecheck import conforms_to_type

ASSET_ID_RANGES: Final[str] = "assetIDRanges"
COLLECTION_ID_RANGES: Final[str] = "collectionIDRanges"
RANGE_KINDS: Final[tuple[str, ...]] = (ASSET_ID_RANGES, COLLECTION_ID_RANGES)

IdRange = tuple[int, int]


def _ranges_of(sub_file: Mapping[str, Any], kind: str) -> list[IdRange]:
    return [(int(low), int(high)) for low, high in sub_file.get(kind) or ()]


def _format_range(id_range: IdRange) -> str:
    return f"[{id_range[0]}, {id_range[1]}]"


def _overlaps(left: IdRange, right: IdRange) -> bool:
    return left[0] <= right[1] and right[0] <= left[1]


def _within(value: int, ranges: Sequence[IdRange]) -> bool:
    return any(low <= value <= high for low, high in ranges)


def check_id_ranges_and_paths_of_sub_files(sub_files: Sequence[Mapping[str, Any]]) -> str | None:
    """Return the first problem across ``sub_files``, or ``None``."""

    for index, sub_file in enumerate(sub_files):
        for kind in RANGE_KINDS:
            for id_range in _ranges_of(sub_file, kind):
                if id_range[0] > id_range[1]:
                    return (
                        f"Invalid ID range {_format_range(id_range)} in {kind} of sub-file {index} "
                        f"({sub_file.get('path')}): lower bound exceeds upper bound"
                    )

    seen_paths: dict[str, int] = {}
    for index, sub_file in enumerate(sub_files):
        path = str(sub_file.get("path"))
        if path in seen_paths:
            return f"Duplicate path in sub-files {seen_paths[path]} and {index}: {path}"
        seen_paths[path] = index

    for kind in RANGE_KINDS:
        for index, sub_file in enumerate(sub_files):
            own = _ranges_of(sub_file, kind)
            for other_index in range(index + 1, len(sub_files)):
                other = sub_files[other_index]
                for left in own:
                    for right in _ranges_of(other, kind):
                        if _overlaps(left, right):
                            return (
                                f"ID range overlap between sub-file {index} ({sub_file.get('path')}) "
                                f"and {other_index} ({other.get('path')}) in {kind}: "
                                f"{_format_range(left)} and {_format_range(right)}"
                            )
    return None


def verify_sub_file_id_assignments(sub_file: Mapping[str, Any], sub_script: Mapping[str, Any]) -> str | None:
    """Check that every asset in ``sub_script`` uses an ID assigned to ``sub_file``.

    Collection IDs are checked against ``collectionIDRanges`` when the
    sub-file declares them, otherwise against ``assetIDRanges``.
    """

    sub_file_error = conforms_to_type(sub_file, INGEST_FILE_SUB_FILE_TYPEDECL)
    if sub_file_error is not None:
        return f"Sub-file declaration does not conform to type: {sub_file_error}"

    script_error = conforms_to_type(sub_script, AUTO_INGEST_SUB_SCRIPT_TYPEDECL)
    if script_error is not None:
        return f"Sub-file {sub_file.get('path')} does not conform to type: {script_error}"

    path = sub_file.get("path")
    asset_ranges = _ranges_of(sub_file, ASSET_ID_RANGES)
    collection_kind = COLLECTION_ID_RANGES if sub_file.get(COLLECTION_ID_RANGES) else ASSET_ID_RANGES
    collection_ranges = _ranges_of(sub_file, collection_kind)

    for index, asset in enumerate(sub_script["assets"]):
        if not isinstance(asset, Mapping):
            return f"Asset nr:{index} in sub-file {path} is not an object."
        asset_type = infer_asset_type(asset)
        if asset_type is IngestFileAssetType.SINGLE:
            ranges, label = asset_ranges, ASSET_ID_RANGES
        elif asset_type is IngestFileAssetType.COLLECTION:
            ranges, label = collection_ranges, collection_kind
        else:
            return "Unknown asset type in sub-file. Unable to verify ID assignment."

        payload = asset.get(asset_type.value)
        if not isinstance(payload, Mapping):
            return f"Field {asset_type.value} of asset nr:{index} in sub-file {path} is not an object."
        asset_id = payload.get("id")

        if isinstance(asset_id, bool) or not isinstance(asset_id, int) or not _within(asset_id, ranges):
            assigned = ", ".join(_format_range(id_range) for id_range in ranges) or "none"
            return (
                f"ID {asset_id} of {asset_type.value} asset nr:{index} in sub-file {path} "
                f"is not within assigned id ranges ({label}): {assigned}"
            )
    return None


__all__ = [
    "ASSET_ID_RANGES",
    "COLLECTION_ID_RANGES",
    "check_id_ranges_and_paths_of_sub_files",
    "verify_sub_file_id_assignments",
]
