"""Data models for earthquake fusion and volcanic risk assessment."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from volcanic_risk.config import Source

VolcanoStatus = Literal["active", "potentially_active", "dormant"]
RiskCategory = Literal[
    "BACKGROUND", "LOW", "MODERATE", "ELEVATED", "HIGH", "VERY_HIGH", "CRITICAL"
]
ConfidenceLevel = Literal["VERY_LOW", "LOW", "MEDIUM", "HIGH"]
MigrationDirection = Literal["shallowing", "deepening", "stable"]
AccelerationType = Literal["none", "linear", "exponential", "power_law"]
BValueAnomaly = Literal["low", "normal", "high"]

_NO_KNOWN_YEAR = {"", "holocene", "unknown"}

# Countries with dense instrumental networks on their active volcanoes
WELL_MONITORED_COUNTRIES = frozenset({"Japan", "USA", "Italy", "Iceland", "New Zealand"})


@dataclass(frozen=True)
class UnifiedSeismicEvent:
    """A single earthquake after normalization from any provider."""

    id: str
    source: Source
    magnitude: float
    magnitude_type: str
    place: str
    time_ms: int
    latitude: float
    longitude: float
    depth_km: float
    url: str | None = None
    felt: int | None = None
    tsunami: bool = False

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.time_ms / 1000, tz=timezone.utc)


def _eruption_year(last_eruption: str | None) -> int | None:
    if last_eruption is None or last_eruption.strip().lower() in _NO_KNOWN_YEAR:
        return None
    try:
        return int(last_eruption)
    except ValueError:
        return None


@dataclass(frozen=True)
class PhilippineVolcano:
    """A PHIVOLCS-monitored volcano with station and hydrothermal survey data."""

    id: str
    name: str
    latitude: float
    longitude: float
    elevation_m: int
    volcano_type: str
    status: VolcanoStatus
    province: str
    last_eruption: str | None
    hydrothermal_level: int
    station_count: int
    kind: Literal["philippine"] = "philippine"

    def monitoring_stations(self) -> int:
        return self.station_count

    def hydrothermal_activity(self) -> int:
        return self.hydrothermal_level

    def last_eruption_year(self) -> int | None:
        return _eruption_year(self.last_eruption)


@dataclass(frozen=True)
class GlobalVolcano:
    """A volcano from a global catalogue without local monitoring details.

    Station counts and hydrothermal levels are estimated from status,
    volcano type and country.
    """

    id: str
    name: str
    latitude: float
    longitude: float
    elevation_m: int
    volcano_type: str
    status: VolcanoStatus
    country: str
    last_eruption: str | None
    kind: Literal["global"] = "global"

    def monitoring_stations(self) -> int:
        if self.status != "active":
            return 1
        return 10 if self.country in WELL_MONITORED_COUNTRIES else 3

    def hydrothermal_activity(self) -> int:
        if self.status != "active":
            return 1
        return 3 if "caldera" in self.volcano_type.lower() else 2

    def last_eruption_year(self) -> int | None:
        return _eruption_year(self.last_eruption)


Volcano = PhilippineVolcano | GlobalVolcano


@dataclass(frozen=True)
class BValueAnalysis:
    """Gutenberg-Richter b-value estimate."""

    b_value: float | None
    a_value: float | None
    standard_error: float | None
    sample_size: int
    completeness_magnitude: float
    anomaly: BValueAnomaly
    sufficient_data: bool
    interpretation: str


@dataclass(frozen=True)
class DepthMigration:
    """Trend of hypocentre depth over time."""

    detected: bool
    direction: MigrationDirection
    rate_km_per_day: float
    r_squared: float
    confidence: float
    event_count: int
    window_days: int
    sufficient_data: bool
    interpretation: str


@dataclass(frozen=True)
class AccelerationAnalysis:
    """Trend of daily event counts, with an optional failure-time forecast."""

    detected: bool
    acceleration_type: AccelerationType
    rate_slope: float
    r_squared: float
    confidence: float
    event_count: int
    window_days: int
    sufficient_data: bool
    interpretation: str
    days_to_failure: float | None = None
    projected_failure: str | None = None


@dataclass(frozen=True)
class SeismicCluster:
    """Events grouped by bearing sector and temporal proximity around a volcano."""

    id: str
    sector: str
    event_ids: tuple[str, ...]
    event_count: int
    centroid_lat: float
    centroid_lon: float
    max_magnitude: float
    total_energy_j: float
    equivalent_magnitude: float
    avg_depth_km: float | None
    min_depth_km: float | None
    max_depth_km: float | None
    avg_distance_km: float
    azimuth_deg: float
    start_ms: int
    end_ms: int
    duration_hours: float
    peak_rate_per_hour: float
    is_swarm: bool
    is_migrating: bool
    migration_direction: MigrationDirection


@dataclass(frozen=True)
class TriggerEvent:
    """One earthquake qualifying under a triggering rule."""

    event_id: str
    rule: str
    magnitude: float
    distance_km: float
    years_elapsed: float
    contribution: float
    coulomb_stress_bars: float


@dataclass
class RiskStatistics:
    """Seismicity statistics supporting a risk assessment."""

    earthquakes_analyzed: int = 0
    regional_count: int = 0
    local_count: int = 0
    near_field_count: int = 0
    m3_plus: int = 0
    m4_plus: int = 0
    m5_plus: int = 0
    shallow_count: int = 0
    event_rate_7day: float = 0.0
    event_rate_30day: float = 0.0
    energy_release_30day_j: float = 0.0
    cumulative_triggering_load: float = 0.0


@dataclass(frozen=True)
class Guidance:
    """Static advisory text for a risk category plus generated indicators."""

    headline: str
    action: str
    context: str
    preparedness_steps: tuple[str, ...]
    monitoring_sources: tuple[str, ...]
    disclaimers: tuple[str, ...]
    key_indicators: tuple[str, ...] = ()


@dataclass
class RiskAssessment:
    """Risk assessment for one volcano at one evaluation instant."""

    volcano_id: str
    volcano_name: str
    latitude: float
    longitude: float
    status: VolcanoStatus
    model: str
    assessed_at: str
    baseline_rate: float
    factors: dict[str, float]
    combined_multiplier: float
    probability_30day: float
    probability_1year: float
    category: RiskCategory
    confidence: ConfidenceLevel
    statistics: RiskStatistics
    guidance: Guidance
    scientific_notes: list[str] = field(default_factory=list)
    triggers: list[TriggerEvent] = field(default_factory=list)
    clusters: list[SeismicCluster] = field(default_factory=list)
    b_value: BValueAnalysis | None = None
    depth_migration: DepthMigration | None = None
    acceleration: AccelerationAnalysis | None = None


@dataclass
class FusionStats:
    """Observability counters for one fetch-and-fuse cycle."""

    by_source: dict[str, int] = field(default_factory=dict)
    combined: int = 0
    after_dedup: int = 0
    duplicates_removed: int = 0
    fetch_time_ms: int = 0
    magnitude_buckets: dict[str, int] = field(default_factory=dict)
    largest_event: UnifiedSeismicEvent | None = None


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude rectangle (no antimeridian wrap)."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lon <= longitude <= self.max_lon
        )


@dataclass(frozen=True)
class FetchQuery:
    """Time/magnitude/region filter passed to every provider fetcher."""

    start: datetime
    end: datetime
    min_magnitude: float = 1.0
    limit: int = 1000
    bbox: BoundingBox | None = None

    def matches(self, event: UnifiedSeismicEvent) -> bool:
        """Client-side check for providers that cannot filter server-side."""
        if not self.start.timestamp() * 1000 <= event.time_ms <= self.end.timestamp() * 1000:
            return False
        if event.magnitude < self.min_magnitude:
            return False
        return self.bbox is None or self.bbox.contains(event.latitude, event.longitude)
