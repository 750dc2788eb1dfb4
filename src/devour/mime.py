"""
devour — image MIME type resolution

File: src/devour/mime.py
Last updated: 2026-10-19

Purpose
- Map the many spellings an image format goes by (MIME strings, bare file
  extensions) to one canonical MIME type.

Functional requirements
- The first element of every IMAGE_TYPES entry is the canonical MIME type;
  the rest are aliases.
- find_conforming_mime_type never raises and is case-sensitive; callers that
  want case-insensitive matching lowercase first.
"""

from __future__ import annotations

from pathlib import PurePath
from types import MappingProxyType
from typing import Final

from devour.results import ResErr

IMAGE_TYPES: Final = MappingProxyType(
    {
        "jpeg": ("image/jpeg", "image/jpg", "jpeg", "jpg"),
        "png": ("image/png", "png"),
        "webp": ("image/webp", "webp"),
        "gif": ("image/gif", "gif"),
        "tiff": ("image/tiff", "image/tif", "tiff", "tif"),
        "avif": ("image/avif", "avif"),
        "bmp": ("image/bmp", "bmp"),
        "svg": ("image/svg+xml", "svg+xml", "svg"),
    }
)

SUPPORTED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(aliases[0] for aliases in IMAGE_TYPES.values())


def find_conforming_mime_type(observed: str | None) -> ResErr[str]:
    """Resolve ``observed`` to its canonical MIME type."""

    if isinstance(observed, str) and observed:
        for aliases in IMAGE_TYPES.values():
            if observed in aliases:
                return ResErr.ok(aliases[0])
    rendered = "undefined" if observed is None else observed
    return ResErr.fail(f"No corresponding MIME type found for type: {rendered}")


def is_supported_image_type(mime_type: str | None) -> bool:
    if not isinstance(mime_type, str):
        return False
    return mime_type.strip().lower() in SUPPORTED_IMAGE_TYPES


def mime_type_from_path(path: str | PurePath) -> ResErr[str]:
    """Resolve the canonical MIME type from a file name or URL path extension."""

    text = str(path).split("?", 1)[0].split("#", 1)[0]
    suffix = PurePath(text).suffix.lstrip(".").lower()
    if not suffix:
        return ResErr.fail(f"No file extension found in: {path}")
    return find_conforming_mime_type(suffix)


__all__ = [
    "IMAGE_TYPES",
    "SUPPORTED_IMAGE_TYPES",
    "find_conforming_mime_type",
    "is_supported_image_type",
    "mime_type_from_path",
]
