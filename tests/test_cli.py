"""Tests for the Typer CLI."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from volcanic_risk import __version__
from volcanic_risk.aggregator import REGIONS, FusedResult
from volcanic_risk.backfill import BackfillSummary
from volcanic_risk.cli import app
from volcanic_risk.fusion import compute_fusion_stats
from volcanic_risk.models import FusionStats
from volcanic_risk.store import EventStore

runner = CliRunner()


@pytest.fixture
def fused_result(make_event) -> FusedResult:
    events = [make_event(magnitude=4.1, event_id="usgs_one")]
    duplicate = make_event(magnitude=4.0, source="emsc", event_id="emsc_one")
    return FusedResult(events=events, stats=compute_fusion_stats([*events, duplicate], events))


@pytest.fixture
def empty_result() -> FusedResult:
    return FusedResult(events=[], stats=FusionStats())


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestFetchCommand:
    def test_json(self, fused_result, tmp_path):
        output = tmp_path / "quakes.json"
        with patch("volcanic_risk.cli.get_fused_events", return_value=fused_result) as mock:
            result = runner.invoke(app, ["fetch", "--hours", "12", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Duplicates removed: 1" in result.output
        assert json.loads(output.read_text())["count"] == 1
        assert mock.call_args.args[0].hours == 12
        assert mock.call_args.kwargs["store"] is None

    def test_geojson(self, fused_result, tmp_path):
        output = tmp_path / "quakes.geojson"
        with patch("volcanic_risk.cli.get_fused_events", return_value=fused_result):
            result = runner.invoke(app, ["fetch", "-f", "geojson", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text())["type"] == "FeatureCollection"

    def test_provider_subset(self, fused_result, tmp_path):
        with patch("volcanic_risk.cli.get_fused_events", return_value=fused_result) as mock:
            result = runner.invoke(
                app, ["fetch", "-p", "usgs", "-p", "jma", "-o", str(tmp_path / "q.json")]
            )
        assert result.exit_code == 0, result.output
        assert mock.call_args.args[0].providers == ["usgs", "jma"]

    def test_unknown_provider(self, tmp_path):
        with patch("volcanic_risk.cli.get_fused_events") as mock:
            result = runner.invoke(app, ["fetch", "-p", "nasa", "-o", str(tmp_path / "q.json")])
        assert result.exit_code == 1
        assert "Unknown provider" in result.output
        mock.assert_not_called()

    def test_markdown_rejected(self, tmp_path):
        result = runner.invoke(app, ["fetch", "-f", "markdown", "-o", str(tmp_path / "q.md")])
        assert result.exit_code == 1

    def test_fetch_failure(self, tmp_path):
        with patch("volcanic_risk.cli.get_fused_events", side_effect=RuntimeError("boom")):
            result = runner.invoke(app, ["fetch", "-o", str(tmp_path / "q.json")])
        assert result.exit_code == 1
        assert "Fetch failed" in result.output


class TestAssessCommand:
    def test_all_volcanoes_json(self, empty_result, tmp_path):
        output = tmp_path / "risk.json"
        with patch(
            "volcanic_risk.cli.fetch_assessment_events", return_value=empty_result
        ) as mock:
            result = runner.invoke(app, ["assess", "--days", "30", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Earthquakes analyzed: 0" in result.output
        data = json.loads(output.read_text())
        assert len(data) == 30
        assert mock.call_args.args[0].assessment_days == 30

    def test_single_volcano_markdown(self, empty_result, tmp_path):
        output = tmp_path / "mayon.md"
        with patch("volcanic_risk.cli.fetch_assessment_events", return_value=empty_result):
            result = runner.invoke(
                app, ["assess", "--volcano", "mayon", "-f", "markdown", "-o", str(output)]
            )

        assert result.exit_code == 0, result.output
        content = output.read_text()
        assert "| Mayon | active | ELEVATED |" in content
        assert "| Taal" not in content

    def test_legacy_model(self, empty_result, tmp_path):
        output = tmp_path / "risk.json"
        with patch("volcanic_risk.cli.fetch_assessment_events", return_value=empty_result):
            result = runner.invoke(
                app, ["assess", "--volcano", "taal", "--model", "legacy", "-o", str(output)]
            )
        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text())[0]["model"] == "legacy"

    def test_unknown_volcano(self, tmp_path):
        result = runner.invoke(app, ["assess", "--volcano", "atlantis"])
        assert result.exit_code == 1
        assert "Unknown volcano" in result.output

    def test_geojson_rejected(self):
        result = runner.invoke(app, ["assess", "-f", "geojson"])
        assert result.exit_code == 1

    def test_offline_requires_store(self):
        result = runner.invoke(app, ["assess", "--offline"])
        assert result.exit_code == 1
        assert "--offline requires --store" in result.output

    def test_offline_reads_store(self, make_event, tmp_path):
        store_path = tmp_path / "events.db"
        recent = datetime.now(tz=timezone.utc) - timedelta(days=1)
        event = replace(make_event(magnitude=3.5), time_ms=int(recent.timestamp() * 1000))
        EventStore(store_path).insert_events([event])

        output = tmp_path / "risk.json"
        with patch("volcanic_risk.cli.fetch_assessment_events") as mock:
            result = runner.invoke(
                app,
                ["assess", "--volcano", "taal", "--offline", "--store", str(store_path),
                 "-o", str(output)],
            )

        assert result.exit_code == 0, result.output
        mock.assert_not_called()
        assert "Earthquakes analyzed: 1" in result.output
        assert json.loads(output.read_text())[0]["statistics"]["local_count"] == 1

    def test_fetch_failure(self, tmp_path):
        with patch(
            "volcanic_risk.cli.fetch_assessment_events", side_effect=RuntimeError("down")
        ):
            result = runner.invoke(app, ["assess", "-o", str(tmp_path / "risk.json")])
        assert result.exit_code == 1
        assert "Fetch failed" in result.output


class TestBackfillCommand:
    def test_year_range_into_store(self, tmp_path):
        store_path = tmp_path / "history.db"
        summary = BackfillSummary(years=2, fetched=10, stored=9)
        with patch("volcanic_risk.cli.backfill_usgs", return_value=summary) as mock:
            result = runner.invoke(
                app,
                ["backfill", "--store", str(store_path), "--start-year", "2020",
                 "--end-year", "2021", "-m", "4.0", "--delay", "0"],
            )

        assert result.exit_code == 0, result.output
        assert "10 fetched, 9 stored" in result.output
        assert store_path.exists()
        store, first, last = mock.call_args.args
        assert isinstance(store, EventStore)
        assert (first, last) == (2020, 2021)
        assert mock.call_args.kwargs["min_magnitude"] == 4.0
        assert mock.call_args.kwargs["bbox"] == REGIONS["philippines"]

    def test_failed_years_reported(self, tmp_path):
        summary = BackfillSummary(years=1, failed_years=[2020])
        with patch("volcanic_risk.cli.backfill_usgs", return_value=summary):
            result = runner.invoke(
                app,
                ["backfill", "--store", str(tmp_path / "h.db"), "--start-year", "2020",
                 "--end-year", "2020"],
            )
        assert result.exit_code == 0, result.output
        assert "Failed years: 2020" in result.output

    def test_reversed_years_rejected(self, tmp_path):
        with patch("volcanic_risk.cli.backfill_usgs") as mock:
            result = runner.invoke(
                app,
                ["backfill", "--store", str(tmp_path / "h.db"), "--start-year", "2022",
                 "--end-year", "2021"],
            )
        assert result.exit_code == 1
        mock.assert_not_called()
