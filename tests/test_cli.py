"""Tests for the command-line interface."""

from datetime import date

import pytest
from click.testing import CliRunner

from crm_insights.cli import cli, default_start_date
from crm_insights.insights import NOT_CONFIGURED_MESSAGE
from crm_insights.sources import SAMPLE_DATA_PATH

from conftest import FakeLLM


@pytest.fixture
def runner(monkeypatch):
    for name in ("LLM_API_KEY", "CRM_FEED_URL", "CRM_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


def test_analyze_without_api_key_reports_not_configured(runner):
    with runner.isolated_filesystem():
        result = runner.invoke(
            cli,
            [
                "analyze", "What are the most common problems?",
                "--tier", "1",
                "--start", "2024-07-01",
                "--end", "2024-07-31",
                "--data-file", str(SAMPLE_DATA_PATH),
            ],
        )

    assert result.exit_code == 0, result.output
    assert NOT_CONFIGURED_MESSAGE in result.output
    assert "1 account(s), 3 activity record(s)" in result.output
    assert "No sentiment data available." in result.output


def test_analyze_with_no_matches_reports_empty_scope(runner):
    with runner.isolated_filesystem():
        result = runner.invoke(
            cli,
            [
                "analyze", "Anything?",
                "--team", "Nobody",
                "--start", "2024-07-01",
                "--end", "2024-07-31",
            ],
        )

    assert result.exit_code == 0, result.output
    assert "sample data" in result.output
    assert "expand your search criteria" in result.output


def test_filters_lists_sample_choices(runner):
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["filters"])

    assert result.exit_code == 0, result.output
    assert "6 account(s)" in result.output
    assert "Teams:    All, Giants, Jets, Eagles" in result.output
    assert "Tiers:    All, 1, 2, 3, 4, 5" in result.output


def test_ping_without_feed_shows_config(runner):
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["ping"])

    assert result.exit_code == 0, result.output
    assert "❌ MISSING" in result.output
    assert "NOT SET" in result.output


def test_default_start_date_is_three_months_back():
    start = default_start_date()
    today = date.today()

    assert start < today
    assert (today - start).days <= 92


def test_analyze_failure_prints_error_report_and_exits_nonzero(runner, monkeypatch):
    monkeypatch.setattr(
        "crm_insights.analyzer.LLMClient",
        lambda settings: FakeLLM(stream_error=ConnectionError("connection reset")),
    )

    with runner.isolated_filesystem():
        result = runner.invoke(
            cli,
            [
                "analyze", "Why do we lose deals?",
                "--tier", "1",
                "--start", "2024-07-01",
                "--end", "2024-07-31",
                "--data-file", str(SAMPLE_DATA_PATH),
            ],
        )

    assert result.exit_code == 1, result.output
    assert "Analysis Error" in result.output
    assert "connection reset" in result.output
    assert "status: failed" in result.output
