"""
devour — unit tests for the process entrypoint

File: tests/unit/test_main.py
Last updated: 2026-10-19

Purpose
- Validate exit codes for handled results, usage errors, and unexpected failures.
"""

from __future__ import annotations

import pytest

from devour.main import ExitCode, cli_entrypoint


@pytest.mark.unit
def test_router_exit_code_is_returned_unchanged(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("devour.ui.cli.run_cli", lambda argv: int(ExitCode.VERIFICATION_REJECTED))

    assert cli_entrypoint(["verify", "ingest.json"]) == 1


@pytest.mark.unit
def test_usage_errors_leave_through_argparse(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_entrypoint(["no-such-command"])

    assert excinfo.value.code == ExitCode.CONFIG_ERROR
    assert "usage: devour" in capsys.readouterr().err


@pytest.mark.unit
def test_unexpected_failure_prints_traceback_and_exits_internal(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def _explode(argv: object) -> int:
        raise RuntimeError("renderer crashed")

    monkeypatch.setattr("devour.ui.cli.run_cli", _explode)

    assert cli_entrypoint([]) == ExitCode.INTERNAL_ERROR
    stderr = capsys.readouterr().err
    assert "Traceback" in stderr
    assert "RuntimeError: renderer crashed" in stderr
