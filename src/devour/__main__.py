"""Module entrypoint for ``python -m devour``."""

from __future__ import annotations

from devour.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
