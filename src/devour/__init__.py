"""
devour — package root

File: src/devour/__init__.py
Last updated: 2026-10-19

Purpose
- Package root for the runtime type checker and the ingest-file verifier built on it.

What should be included in this file
- Package docstring and version export.
- Import boundary rules: avoid importing submodules at import time.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
