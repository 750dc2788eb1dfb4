"""
devour — unit tests for MIME type resolution

File: tests/unit/test_mime.py
Last updated: 2026-10-19

Purpose
- Validate alias lookup, error reporting, and extension-based resolution.
"""

from __future__ import annotations

import pytest

from devour.mime import (
    IMAGE_TYPES,
    SUPPORTED_IMAGE_TYPES,
    find_conforming_mime_type,
    is_supported_image_type,
    mime_type_from_path,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("observed", "canonical"),
    [
        ("jpg", "image/jpeg"),
        ("jpeg", "image/jpeg"),
        ("image/jpg", "image/jpeg"),
        ("image/jpeg", "image/jpeg"),
        ("png", "image/png"),
        ("tif", "image/tiff"),
        ("svg", "image/svg+xml"),
    ],
)
def test_aliases_resolve_to_canonical_type(observed: str, canonical: str) -> None:
    resolved = find_conforming_mime_type(observed)

    assert resolved.is_ok
    assert resolved.result == canonical
    assert resolved.error is None


@pytest.mark.unit
def test_unknown_type_is_reported() -> None:
    resolved = find_conforming_mime_type("image/bogus")

    assert resolved.result is None
    assert resolved.error == "No corresponding MIME type found for type: image/bogus"


@pytest.mark.unit
@pytest.mark.parametrize(("observed", "rendered"), [(None, "undefined"), ("", "")])
def test_empty_input_never_matches(observed: str | None, rendered: str) -> None:
    resolved = find_conforming_mime_type(observed)

    assert resolved.error == f"No corresponding MIME type found for type: {rendered}"


@pytest.mark.unit
def test_lookup_is_case_sensitive() -> None:
    assert find_conforming_mime_type("PNG").error is not None
    assert find_conforming_mime_type("PNG".lower()).result == "image/png"


@pytest.mark.unit
def test_table_entries_lead_with_their_canonical_type() -> None:
    for aliases in IMAGE_TYPES.values():
        assert aliases
        assert aliases[0].startswith("image/")
        assert find_conforming_mime_type(aliases[0]).result == aliases[0]
    assert "image/webp" in SUPPORTED_IMAGE_TYPES


@pytest.mark.unit
def test_supported_image_type_normalizes_case() -> None:
    assert is_supported_image_type("IMAGE/PNG")
    assert not is_supported_image_type("png")
    assert not is_supported_image_type(None)


@pytest.mark.unit
def test_mime_type_from_path_uses_the_extension() -> None:
    assert mime_type_from_path("assets/icons/sword.JPG").result == "image/jpeg"
    assert mime_type_from_path("https://cdn.example.com/a/b.webp?v=3").result == "image/webp"
    assert mime_type_from_path("README").error == "No file extension found in: README"
    assert mime_type_from_path("notes.txt").error == "No corresponding MIME type found for type: txt"
