"""
Tests for the Typer CLI.
"""

import json

import pytest
from typer.testing import CliRunner

from restguard.cli.app import EXIT_REJECTED, app


runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Config plus a schedule with 0.5h rest and a 09-17 shift for w-1."""
    schedule = {
        "workers": {
            "w-1": [
                {"id": "rest-1", "category": "rest", "start": "2024-11-25T07:00:00", "end": "2024-11-25T07:30:00"},
                {"id": "work-1", "category": "work", "start": "2024-11-25T09:00:00", "end": "2024-11-25T17:00:00"},
            ],
            "w-2": [],
        }
    }
    (tmp_path / "schedule.json").write_text(json.dumps(schedule), encoding="utf-8")

    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: Europe/Berlin\n"
        "schedule_file: schedule.json\n",
        encoding="utf-8",
    )
    return path


def _json(result):
    return json.loads(result.stdout)


def test_check_rest_over_budget(config_file):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T18:00", "--end", "2024-11-25T20:00",
         "--config", str(config_file), "--json"],
    )

    assert result.exit_code == EXIT_REJECTED
    payload = _json(result)
    assert payload["accepted"] is False
    assert payload["persisted"] is False
    assert payload["status"] == 422
    assert payload["violations"][0]["code"] == "daily_budget_exceeded"
    assert payload["violations"][0]["total_hours"] == 2.5


def test_check_work_overlapping_rest(config_file):
    result = runner.invoke(
        app,
        ["check-work", "w-1", "--start", "2024-11-25T07:15", "--end", "2024-11-25T08:00",
         "--config", str(config_file), "--json"],
    )

    assert result.exit_code == EXIT_REJECTED
    violation = _json(result)["violations"][0]
    assert violation["code"] == "overlap"
    assert violation["conflicting_interval"]["id"] == "rest-1"


def test_check_rest_accepted_without_commit(config_file):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T08:00", "--end", "2024-11-25T08:30",
         "--config", str(config_file)],
    )

    assert result.exit_code == 0
    assert "Accepted" in result.stdout
    stored = json.loads((config_file.parent / "schedule.json").read_text(encoding="utf-8"))
    assert len(stored["workers"]["w-1"]) == 2


def test_commit_writes_schedule(config_file):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T08:00", "--end", "2024-11-25T08:30",
         "--commit", "--config", str(config_file), "--json"],
    )

    assert result.exit_code == 0
    payload = _json(result)
    assert payload["persisted"] is True
    stored = json.loads((config_file.parent / "schedule.json").read_text(encoding="utf-8"))
    ids = [record["id"] for record in stored["workers"]["w-1"]]
    assert payload["id"] in ids
    assert len(ids) == 3


def test_update_existing_record(config_file):
    """--exclude re-validates the named record without counting it twice."""
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T06:00", "--end", "2024-11-25T08:00",
         "--exclude", "rest-1", "--config", str(config_file), "--json"],
    )

    assert result.exit_code == 0
    assert _json(result)["accepted"] is True


def test_invalid_interval(config_file):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T20:00", "--end", "2024-11-25T18:00",
         "--config", str(config_file), "--json"],
    )

    assert result.exit_code == EXIT_REJECTED
    assert [v["code"] for v in _json(result)["violations"]] == ["invalid_interval"]


def test_unparseable_instant(config_file):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "tomorrow-ish", "--end", "2024-11-25T18:00",
         "--config", str(config_file)],
    )

    assert result.exit_code == 1
    assert "Could not parse --start" in result.stdout


def test_missing_config(tmp_path):
    result = runner.invoke(
        app,
        ["check-rest", "w-1", "--start", "2024-11-25T18:00", "--end", "2024-11-25T19:00",
         "--config", str(tmp_path / "config.yaml")],
    )

    assert result.exit_code == 1
    assert "Config file not found" in result.stdout


def test_day_total(config_file):
    result = runner.invoke(
        app,
        ["day-total", "w-1", "--date", "2024-11-25", "--config", str(config_file)],
    )

    assert result.exit_code == 0
    assert "0.50h" in result.stdout


def test_list_workers(config_file):
    result = runner.invoke(app, ["list-workers", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "w-1" in result.stdout
    assert "w-2" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "restguard" in result.stdout
