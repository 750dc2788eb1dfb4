"""Executable CLI entrypoint for ``devour``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Deterministic process exit-code contract."""

    SUCCESS = 0
    VERIFICATION_REJECTED = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m devour`` and the ``devour`` script.

    Config, document and usage problems get their exit code from the command
    router (argparse usage errors leave as ``SystemExit(2)``). Anything else
    escaping a command is printed with its traceback.
    """

    from devour.ui.cli import run_cli

    try:
        return run_cli(argv)
    except Exception:  # noqa: BLE001 - CLI boundary normalization.
        traceback.print_exc(file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


__all__ = ["ExitCode", "cli_entrypoint"]
