"""
Tests for the out-of-process settlement sweep runner
"""

import json
import pytest
from datetime import datetime, timezone

from scripts import run_settlement_sweep as runner
from elitestock.services.settlement_service import SweepResult


def test_parse_as_of():
    assert runner.parse_as_of("2026-10-01T00:00:00") == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert runner.parse_as_of("2026-10-01") == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert runner.parse_as_of("2026-10-01T02:00:00+02:00").utcoffset().total_seconds() == 7200

    now = runner.parse_as_of(None)
    assert now.tzinfo is not None

    with pytest.raises(ValueError):
        runner.parse_as_of("first of october")


@pytest.fixture
def captured_sweep(monkeypatch, session_factory):
    calls = []

    def fake_sweep(**kwargs):
        calls.append(kwargs)
        return SweepResult(
            processed_count=2,
            started_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
            finished_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        )

    monkeypatch.setattr(runner, "run_settlement_sweep", fake_sweep)
    monkeypatch.setattr(runner, "SessionLocal", session_factory)
    return calls


def test_main_prints_summary(captured_sweep, capsys):
    exit_code = runner.main(["--as-of", "2026-10-01T00:00:00", "--max-items", "25"])

    assert exit_code == 0
    assert captured_sweep[0]["max_items"] == 25
    assert captured_sweep[0]["now"] == datetime(2026, 10, 1, tzinfo=timezone.utc)

    output = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert output["job"] == runner.JOB_NAME
    assert output["summary"]["processed_count"] == 2
    assert output["exit_code"] == 0


def test_main_exit_code_on_sweep_errors(monkeypatch, session_factory, capsys):
    monkeypatch.setattr(runner, "run_settlement_sweep", lambda **kwargs: SweepResult(errors=["boom"]))
    monkeypatch.setattr(runner, "SessionLocal", session_factory)

    assert runner.main([]) == 1
    output = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert output["summary"]["errors_count"] == 1


def test_main_rejects_bad_as_of(captured_sweep, capsys):
    assert runner.main(["--as-of", "yesterday"]) == 1
    assert captured_sweep == []
    assert "Invalid --as-of" in capsys.readouterr().err
