import json

import pytest
from typer.testing import CliRunner

from alberta_covid_cases.case_aggregation.engine import CaseAggregationEngine
from alberta_covid_cases.cli import app

runner = CliRunner()

# Keep loguru quiet so stdout holds only command output
QUIET = ["--log-level", "ERROR"]


@pytest.fixture(autouse=True)
def configured_env(monkeypatch, sample_csv):
    monkeypatch.setenv("ALBERTA_COVID_CSV", str(sample_csv))
    monkeypatch.delenv("ALBERTA_COVID_MALFORMED_ROWS", raising=False)
    monkeypatch.delenv("ALBERTA_COVID_LOG_FILE", raising=False)


def test_zones_command(sample_csv, sample_zones):
    result = runner.invoke(app, QUIET + ["zones", "--csv", str(sample_csv)])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == sample_zones


def test_active_total(sample_csv):
    result = runner.invoke(app, QUIET + ["active", "--csv", str(sample_csv)])
    assert result.exit_code == 0
    assert result.stdout.strip() == "5"


def test_active_by_zone(sample_csv):
    result = runner.invoke(app, QUIET + ["active", "--zone", "Calgary Zone", "--csv", str(sample_csv)])
    assert result.exit_code == 0
    assert result.stdout.strip() == "2"


def test_active_unknown_zone(sample_csv):
    result = runner.invoke(app, QUIET + ["active", "-z", "Nonexistent Zone", "--csv", str(sample_csv)])
    assert result.exit_code == 0
    assert result.stdout.strip() == "0"


def test_summary_uses_configured_singleton(sample_csv):
    result = runner.invoke(app, QUIET + ["summary"])
    assert result.exit_code == 0
    assert "Total cases: 10" in result.stdout
    assert "Active cases: 5" in result.stdout
    assert "Calgary Zone" in result.stdout
    assert CaseAggregationEngine._instance is not None
    assert CaseAggregationEngine._instance.source_path == sample_csv


def test_summary_reports_skipped_rows(malformed_csv):
    result = runner.invoke(app, QUIET + ["summary", "--csv", str(malformed_csv)])
    assert result.exit_code == 0
    assert "Total cases: 2" in result.stdout
    assert "Skipped rows: 4" in result.stdout


def test_abort_policy_exits_nonzero(malformed_csv):
    result = runner.invoke(app, QUIET + ["--policy", "abort", "summary", "--csv", str(malformed_csv)])
    assert result.exit_code == 1


def test_missing_csv_exits_nonzero(tmp_path):
    result = runner.invoke(app, QUIET + ["zones", "--csv", str(tmp_path / "missing.csv")])
    assert result.exit_code == 1


def test_report_command(sample_csv, tmp_path):
    out_dir = tmp_path / "out"
    result = runner.invoke(app, QUIET + ["report", "--output-dir", str(out_dir), "--csv", str(sample_csv)])
    assert result.exit_code == 0
    assert (out_dir / "zone_summary.csv").exists()
    payload = json.loads(result.stdout)
    assert payload["total_cases"] == 10
    assert payload["active_cases"] == 5
    assert len(payload["zones"]) == 6


def test_invalid_policy_env_exits_nonzero(monkeypatch):
    monkeypatch.setenv("ALBERTA_COVID_MALFORMED_ROWS", "ignore")
    result = runner.invoke(app, ["zones"])
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)


def test_invalid_log_level_exits_nonzero(sample_csv):
    result = runner.invoke(app, ["--log-level", "LOUD", "zones", "--csv", str(sample_csv)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
