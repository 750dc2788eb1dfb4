"""
devour — CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py
Last updated: 2026-10-19

Purpose
- Enforce CLI behavior for `python -m devour` verify/check/mime/config.
- Verify exit codes, JSON payloads, and that secrets never reach stdout.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest
import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

INGEST_DOCUMENT: dict[str, Any] = {
    "settings": {
        "version": "1.0",
        "maxLOD": 3,
        "LODThreshold": 128,
        "allowedFailures": 1,
        "dsn": {"host": "db", "port": 5432, "user": "svc", "password": "s3cr3t-pw", "dbName": "assets"},
    },
    "assets": [
        {"useCase": "icon", "single": {"source": "icons/shield.png", "id": 7, "alias": "shield"}},
    ],
}


def _run_cli(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    for key in list(env):
        if key.startswith("DEVOUR_"):
            del env[key]
    return subprocess.run(
        [sys.executable, "-m", "devour", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.mark.integration
def test_verify_accepts_valid_ingest_file_and_redacts_password(tmp_path: Path) -> None:
    document = _write_json(tmp_path / "ingest.json", INGEST_DOCUMENT)

    completed = _run_cli(tmp_path, "verify", str(document), "--json")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["ok"] is True
    assert payload["asset_count"] == 1
    assert payload["normalized"]["settings"]["dsn"]["sslMode"] == "disable"
    assert "s3cr3t-pw" not in completed.stdout


@pytest.mark.integration
def test_verify_reads_yaml_and_reports_rejection(tmp_path: Path) -> None:
    broken = json.loads(json.dumps(INGEST_DOCUMENT))
    del broken["settings"]["dsn"]["dbName"]
    document = tmp_path / "ingest.yaml"
    document.write_text(yaml.safe_dump(broken), encoding="utf-8")

    completed = _run_cli(tmp_path, "verify", str(document), "--no-color")

    assert completed.returncode == 1
    assert "FAIL" in completed.stdout
    assert "Missing key in object: dbName" in completed.stdout


@pytest.mark.integration
def test_check_emits_trace_for_nested_failure(tmp_path: Path) -> None:
    settings = json.loads(json.dumps(INGEST_DOCUMENT["settings"]))
    settings["dsn"]["port"] = "5432"
    document = _write_json(tmp_path / "settings.json", settings)

    completed = _run_cli(tmp_path, "check", str(document), "--as", "settings", "--json")

    assert completed.returncode == 1
    payload = json.loads(completed.stdout)
    assert payload["failing_path"] == ["dsn", "port"]
    assert payload["error"] == (
        "Field dsn failed nested type check:\n"
        '\tField port is expected to exist and be of type "integer" but had value: 5432'
    )
    assert [entry["path"] for entry in payload["trace"]] == [["dsn"], ["dsn", "port"]]


@pytest.mark.integration
def test_check_rejects_out_of_range_depth(tmp_path: Path) -> None:
    document = _write_json(tmp_path / "dsn.json", INGEST_DOCUMENT["settings"]["dsn"])

    completed = _run_cli(tmp_path, "check", str(document), "--as", "dsn", "--max-depth", "0")

    assert completed.returncode == 2
    assert "max_depth" in completed.stderr


@pytest.mark.integration
def test_mime_resolution(tmp_path: Path) -> None:
    found = _run_cli(tmp_path, "mime", "jpg", "--json")
    missing = _run_cli(tmp_path, "mime", "image/bogus")
    by_path = _run_cli(tmp_path, "mime", "textures/wall.tif", "--path", "--json")

    assert found.returncode == 0
    assert json.loads(found.stdout)["mime_type"] == "image/jpeg"
    assert missing.returncode == 1
    assert "No corresponding MIME type found for type: image/bogus" in missing.stdout
    assert json.loads(by_path.stdout)["mime_type"] == "image/tiff"


@pytest.mark.integration
def test_config_reports_effective_values(tmp_path: Path) -> None:
    (tmp_path / "devour.toml").write_text('[ingest]\ndefault_ssl_mode = "require"\n', encoding="utf-8")

    completed = _run_cli(tmp_path, "config", "--json")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["config"]["ingest"]["default_ssl_mode"] == "require"


@pytest.mark.integration
def test_invalid_config_and_missing_document_exit_with_config_error(tmp_path: Path) -> None:
    bad_config = tmp_path / "bad.toml"
    bad_config.write_text("[validation]\nmax_depth = 0\n", encoding="utf-8")

    invalid = _run_cli(tmp_path, "config", "--config", str(bad_config))
    missing = _run_cli(tmp_path, "verify", str(tmp_path / "absent.json"))

    assert invalid.returncode == 2
    assert "validation.max_depth" in invalid.stderr
    assert missing.returncode == 2
    assert "document not found" in missing.stderr


@pytest.mark.integration
def test_log_dir_flag_writes_json_lines(tmp_path: Path) -> None:
    single = {"useCase": "icon", "single": {"source": "icons/axe.png", "id": 2}}
    document = _write_json(tmp_path / "ingest.json", {**INGEST_DOCUMENT, "assets": [single]})
    log_dir = tmp_path / "logs"

    completed = _run_cli(tmp_path, "verify", str(document), "--log-dir", str(log_dir))

    assert completed.returncode == 0, completed.stderr
    log_files = list(log_dir.glob("*/devour.jsonl"))
    assert len(log_files) == 1
    events = [json.loads(line) for line in log_files[0].read_text(encoding="utf-8").splitlines()]
    assert any(event["message"] == "ingest_alias_defaulted" for event in events)
    assert all(event.get("command") == "verify" for event in events)
