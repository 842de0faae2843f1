"""
Pytest tests for the derive_report command-line tool.
"""

from __future__ import annotations

import io
import json
from unittest.mock import patch

import pytest

from backend_neuprint.tools import derive_report


@pytest.fixture(autouse=True)
def keep_logging_config(monkeypatch):
    """main() reconfigures structlog; keep the test session's configuration."""
    for name in ("NEUPRINT_T2_MODE", "NEUPRINT_CONSERVATIVE_LOCK", "NEUPRINT_COHORT_FRI_LIST"):
        monkeypatch.delenv(name, raising=False)
    with patch.object(derive_report, "configure_structlog"):
        yield


@pytest.fixture
def payload_file(tmp_path, payload):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_writes_report(tmp_path, payload_file):
    out = tmp_path / "report.json"
    assert derive_report.main([str(payload_file), "-o", str(out)]) == 0
    report = json.loads(out.read_text(encoding="utf-8"))
    assert list(report) == ["rsl", "cff", "rc", "rfs"]
    assert report["rsl"]["fri"]["score"] == 4.12


def test_diagnostics_flag(tmp_path, payload_file):
    out = tmp_path / "report.json"
    assert derive_report.main([str(payload_file), "--diagnostics", "-o", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert set(data) == {"report", "diagnostics", "derivation_id"}
    assert data["diagnostics"]["filled"] is False


def test_options_file_overrides(tmp_path, payload_file):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"rcLogisticModel": {"beta0": 5.0}}), encoding="utf-8")
    out = tmp_path / "report.json"
    assert derive_report.main([str(payload_file), "--options", str(options), "--diagnostics", "-o", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["diagnostics"]["distribution"]["path"] == "logistic"


def test_stdin_to_stdout(monkeypatch, capsys, payload):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(payload)))
    assert derive_report.main(["-", "--indent", "0"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["cff"]["final_type"]["type_code"] == "T4"


def test_unreadable_input_exits_2(tmp_path):
    assert derive_report.main([str(tmp_path / "missing.json")]) == 2
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert derive_report.main([str(broken)]) == 2


def test_bad_options_exit_1(tmp_path, payload_file):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"t2_mode": "Loose"}), encoding="utf-8")
    assert derive_report.main([str(payload_file), "--options", str(options)]) == 1
    options.write_text(json.dumps(["t2_mode"]), encoding="utf-8")
    assert derive_report.main([str(payload_file), "--options", str(options)]) == 1


def test_bad_environment_exits_1(monkeypatch, payload_file):
    monkeypatch.setenv("NEUPRINT_T2_MODE", "Loose")
    assert derive_report.main([str(payload_file)]) == 1
