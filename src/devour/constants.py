"""Stable constants shared across the type checker, ingest verifier, and CLI."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Recursion guard for nested declarations.
DEFAULT_MAX_DEPTH: Final[int] = 64
MAX_DEPTH_CEILING: Final[int] = 1024

# Default runtime paths (relative to the config file location unless absolute).
LOGS_DIR: Final[PurePosixPath] = PurePosixPath("logs")

# Database connection defaults used when an ingest file omits them.
SSL_MODES: Final[tuple[str, ...]] = ("require", "disable")
DEFAULT_SSL_MODE: Final[str] = "disable"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_SSL_MODE",
    "LOGS_DIR",
    "MAX_DEPTH_CEILING",
    "SSL_MODES",
]
