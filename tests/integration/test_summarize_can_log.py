"""
Integration tests for the CAN log summary script.
"""
from __future__ import annotations

import json

import numpy as np
import pytest

from scripts import summarize_can_log


@pytest.mark.integration
def test_summary_written_to_file(savvycan_log, tmp_path):
    out = tmp_path / "out" / "summary.json"

    rc = summarize_can_log.main([str(savvycan_log), "--out", str(out), "--log-level", "WARNING"])

    assert rc == 0
    summary = json.loads(out.read_text(encoding="utf-8"))
    assert summary["messages"] == 5
    assert summary["ts_offset_ns"] == 1_000_000_000
    assert summary["duration_s"] == pytest.approx(0.8)
    assert summary["gaps"] == [
        {"start_ns": 20_000_000, "end_ns": 800_000_000, "duration_s": pytest.approx(0.78)},
    ]
    assert summary["timeline_entries"] == 5 + 8
    assert summary["operator_alerts"] == 0

    bus0 = summary["buses"]["0"]
    assert bus0["messages"] == 3
    assert bus0["unique_ids"] == 1
    assert bus0["interval_ms"]["count"] == 2
    assert bus0["interval_ms"]["max"] == pytest.approx(780.0)
    assert summary["buses"]["1"]["messages"] == 2
    assert summary["buses"]["1"]["unique_ids"] == 2


@pytest.mark.integration
def test_summary_to_stdout(plain_log, capsys):
    rc = summarize_can_log.main([str(plain_log), "--log-level", "WARNING"])

    assert rc == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["messages"] == 5
    assert len(summary["gaps"]) == 1


@pytest.mark.integration
def test_summary_with_offset_and_alerts(savvycan_log, fixtures_dir, tmp_path):
    out = tmp_path / "summary.json"

    rc = summarize_can_log.main([
        str(savvycan_log),
        "--ts-offset-ns", "1008000000",
        "--alerts", str(fixtures_dir / "operator_alerts.json"),
        "--out", str(out),
        "--log-level", "WARNING",
    ])

    assert rc == 0
    summary = json.loads(out.read_text(encoding="utf-8"))
    assert summary["messages"] == 3
    assert summary["ts_offset_ns"] == 1_008_000_000
    assert summary["operator_alerts"] == 2


@pytest.mark.integration
def test_malformed_log_fails(write_can_csv, capsys):
    path = write_can_csv(["1000,1,false,Rx,0,0", "1100,XYZ,false,Rx,0,0"])

    rc = summarize_can_log.main([str(path), "--log-level", "WARNING"])

    assert rc == 1
    err = capsys.readouterr().err
    assert "row 2" in err
    assert "can id" in err


@pytest.mark.integration
def test_missing_log_fails(tmp_path, capsys):
    rc = summarize_can_log.main([str(tmp_path / "nope.csv"), "--log-level", "WARNING"])

    assert rc == 1
    assert "Failed to read CSV file" in capsys.readouterr().err


@pytest.mark.integration
def test_invalid_log_level_from_env_fails(savvycan_log, monkeypatch, capsys):
    monkeypatch.setenv("ROUTE_LOG_LEVEL", "LOUD")

    rc = summarize_can_log.main([str(savvycan_log)])

    assert rc == 1
    assert "Failed to summarize" in capsys.readouterr().err


@pytest.mark.integration
def test_invalid_log_level_option_rejected(savvycan_log):
    with pytest.raises(SystemExit) as excinfo:
        summarize_can_log.main([str(savvycan_log), "--log-level", "LOUD"])

    assert excinfo.value.code == 2


@pytest.mark.integration
def test_log_level_option_is_case_insensitive(savvycan_log, capsys):
    rc = summarize_can_log.main([str(savvycan_log), "--log-level", "warning"])

    assert rc == 0
    assert json.loads(capsys.readouterr().out)["messages"] == 5


@pytest.mark.unit
def test_basic_stats_empty():
    stats = summarize_can_log.basic_stats(np.asarray([], dtype=float))

    assert stats["count"] == 0
    assert np.isnan(stats["mean"])


@pytest.mark.unit
def test_sanitize_replaces_non_finite():
    payload = {"a": float("nan"), "b": np.int64(3), "c": (np.float32(1.5), float("inf"))}

    assert summarize_can_log._sanitize(payload) == {"a": None, "b": 3, "c": [1.5, None]}
