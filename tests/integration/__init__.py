"""
devour — integration test package

File: tests/integration/__init__.py
Last updated: 2026-10-19

Purpose
- Test package marker for subprocess-level CLI checks.

Functional requirements
- Must not import devour at import time; each test drives `python -m devour`.
"""
