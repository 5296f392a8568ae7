"""Configuration model for earthquake fusion and volcanic risk assessment."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

Source = Literal["usgs", "emsc", "jma", "geonet", "phivolcs"]
Region = Literal["philippines", "japan", "indonesia", "newzealand", "usa", "europe"]
RiskModelName = Literal["multifactor", "legacy"]
OutputFormat = Literal["json", "geojson", "markdown"]

ALL_SOURCES: tuple[Source, ...] = ("usgs", "emsc", "jma", "geonet", "phivolcs")


class VolcanicRiskConfig(BaseSettings):
    """All configurable parameters for fetching, fusion and risk scoring.

    Values can be set via constructor arguments, environment variables
    prefixed with VOLCANIC_RISK_, or defaults.
    """

    model_config = {"env_prefix": "VOLCANIC_RISK_"}

    hours: int = Field(
        default=24, ge=1, le=168, description="Hours of earthquake history to fetch."
    )
    min_magnitude: float = Field(
        default=1.0, ge=0.0, le=10.0, description="Minimum earthquake magnitude."
    )
    limit: int = Field(
        default=1000, ge=1, le=5000, description="Maximum number of fused events returned."
    )
    region: Region | None = Field(
        default=None, description="Optional regional bounding-box filter."
    )
    providers: list[Source] = Field(
        default_factory=lambda: list(ALL_SOURCES),
        description="Seismic networks to query.",
    )
    request_timeout: int = Field(
        default=15, ge=1, le=120, description="Per-provider HTTP timeout in seconds."
    )
    max_workers: int = Field(
        default=5, ge=1, le=16, description="Concurrent provider fetches."
    )
    cache_ttl_seconds: int = Field(
        default=60, ge=0, le=3600, description="Lifetime of cached fused results."
    )
    fusion_time_window_s: float = Field(
        default=180.0, gt=0.0, description="Max origin-time difference for duplicates."
    )
    fusion_distance_km: float = Field(
        default=100.0, gt=0.0, description="Max epicentre separation for duplicates."
    )
    fusion_magnitude_delta: float = Field(
        default=0.5, gt=0.0, description="Max magnitude difference for duplicates."
    )
    assessment_days: int = Field(
        default=90, ge=1, le=1825, description="Days of seismicity used for risk scoring."
    )
    assessment_min_magnitude: float = Field(
        default=2.0, ge=0.0, le=10.0, description="Minimum magnitude fetched for risk scoring."
    )
    risk_model: RiskModelName = Field(
        default="multifactor",
        description="Risk model: 'multifactor' (canonical) or 'legacy'.",
    )
    output_file: Path = Field(
        default=Path("volcanic_risk_output.json"), description="Output file path."
    )
    output_format: OutputFormat = Field(
        default="json", description="Output format: json, geojson, or markdown."
    )
    store_path: Path | None = Field(
        default=None,
        description="SQLite event store. Fused events are persisted when set.",
    )
