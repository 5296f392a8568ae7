"""Shared fixtures for volcanic_risk tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from volcanic_risk.catalog import find_volcano
from volcanic_risk.models import PhilippineVolcano, UnifiedSeismicEvent

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# 2026-01-30T12:00:00Z, the reference instant for every fixture file
NOW = datetime(2026, 1, 30, 12, 0, tzinfo=timezone.utc)

EventFactory = Callable[..., UnifiedSeismicEvent]


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_usgs_response() -> dict:
    return json.loads((FIXTURES_DIR / "usgs_sample.json").read_text())


@pytest.fixture
def sample_emsc_response() -> dict:
    return json.loads((FIXTURES_DIR / "emsc_sample.json").read_text())


@pytest.fixture
def sample_jma_response() -> list:
    return json.loads((FIXTURES_DIR / "jma_sample.json").read_text(encoding="utf-8"))


@pytest.fixture
def sample_geonet_response() -> dict:
    return json.loads((FIXTURES_DIR / "geonet_sample.json").read_text())


@pytest.fixture
def sample_phivolcs_html() -> str:
    return (FIXTURES_DIR / "phivolcs_sample.html").read_text(encoding="utf-8")


@pytest.fixture
def make_event() -> EventFactory:
    """Build UnifiedSeismicEvents relative to NOW.

    ``days_ago``/``hours_ago`` position the event in time; everything else
    defaults to an M3.0 USGS event at Taal.
    """
    counter = iter(range(1_000_000))

    def _make(
        *,
        days_ago: float = 1.0,
        hours_ago: float = 0.0,
        magnitude: float = 3.0,
        latitude: float = 14.002,
        longitude: float = 120.993,
        depth_km: float = 10.0,
        source: str = "usgs",
        event_id: str | None = None,
    ) -> UnifiedSeismicEvent:
        when = NOW - timedelta(days=days_ago, hours=hours_ago)
        return UnifiedSeismicEvent(
            id=event_id or f"{source}_test{next(counter)}",
            source=source,  # type: ignore[arg-type]
            magnitude=magnitude,
            magnitude_type="ml",
            place="Test",
            time_ms=int(when.timestamp() * 1000),
            latitude=latitude,
            longitude=longitude,
            depth_km=depth_km,
        )

    return _make


@pytest.fixture
def taal() -> PhilippineVolcano:
    return find_volcano("273030")  # type: ignore[return-value]


@pytest.fixture
def mayon() -> PhilippineVolcano:
    return find_volcano("mayon")  # type: ignore[return-value]


@pytest.fixture
def remote_dormant_volcano() -> PhilippineVolcano:
    """A dormant volcano far from any fixture seismicity."""
    return PhilippineVolcano(
        id="999001",
        name="Testdormant",
        latitude=-60.0,
        longitude=-30.0,
        elevation_m=900,
        volcano_type="Stratovolcano",
        status="dormant",
        province="Nowhere",
        last_eruption=None,
        hydrothermal_level=0,
        station_count=0,
    )
