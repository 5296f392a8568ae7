"""FastAPI service for fused earthquakes and volcanic risk assessments."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from volcanic_risk import __version__
from volcanic_risk.aggregator import FusedResult, fetch_assessment_events, get_fused_events
from volcanic_risk.cache import TTLCache
from volcanic_risk.catalog import VolcanoNotFoundError, all_volcanoes, find_volcano
from volcanic_risk.config import Region, RiskModelName, VolcanicRiskConfig
from volcanic_risk.exporters.geojson_export import GEOJSON_MEDIA_TYPE, build_feature_collection
from volcanic_risk.exporters.json_export import build_envelope
from volcanic_risk.scoring import assess_all_volcanoes, assess_volcano_risk, get_risk_model

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Store startup state and the shared fused-result cache."""
    config = VolcanicRiskConfig()
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.last_run = None
    application.state.run_count = 0
    application.state.cache = TTLCache[FusedResult](config.cache_ttl_seconds)
    yield


app = FastAPI(
    title="Volcanic Risk API",
    description="Multi-provider earthquake fusion and volcanic eruption risk scoring.",
    version=__version__,
    lifespan=lifespan,
)


def _record_run() -> None:
    app.state.last_run = datetime.now(tz=timezone.utc)
    app.state.run_count += 1


def _assessment_events(config: VolcanicRiskConfig, now: datetime, nocache: bool) -> FusedResult:
    cache = None if nocache else app.state.cache
    try:
        return fetch_assessment_events(config, cache=cache, now=now)
    except Exception as exc:
        logger.exception("Assessment fetch failed")
        raise HTTPException(status_code=502, detail=f"Upstream fetch error: {exc}") from None


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, and run count."""
    now = datetime.now(tz=timezone.utc)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "last_run": app.state.last_run.isoformat() if app.state.last_run else None,
        "run_count": app.state.run_count,
        "cached_results": len(app.state.cache),
    }


@app.get("/earthquakes")
def get_earthquakes(
    hours: Annotated[
        int, Query(ge=1, le=168, description="Hours of history."),
    ] = 24,
    minmag: Annotated[
        float, Query(ge=0.0, le=10.0, description="Minimum earthquake magnitude."),
    ] = 1.0,
    limit: Annotated[
        int, Query(ge=1, le=5000, description="Maximum fused events."),
    ] = 1000,
    region: Annotated[
        Region | None, Query(description="Regional bounding-box filter."),
    ] = None,
    format: Annotated[
        Literal["json", "geojson"], Query(description="Response format."),
    ] = "json",
    nocache: Annotated[
        bool, Query(description="Bypass the fused-result cache."),
    ] = False,
) -> Response:
    """Fused earthquakes from every provider.

    Provider failures only shrink the result; 502 is returned when fusion
    itself fails.
    """
    config = VolcanicRiskConfig(hours=hours, min_magnitude=minmag, limit=limit, region=region)
    cache = None if nocache else app.state.cache

    try:
        result = get_fused_events(config, cache=cache)
    except Exception as exc:
        logger.exception("Fused retrieval failed")
        return JSONResponse(
            status_code=502,
            content={"detail": f"Upstream fetch error: {exc}"},
        )

    _record_run()
    if format == "geojson":
        return JSONResponse(content=build_feature_collection(result), media_type=GEOJSON_MEDIA_TYPE)
    return JSONResponse(content=build_envelope(result))


@app.get("/volcanoes/risk")
def get_all_risk(
    model: Annotated[
        RiskModelName, Query(description="Risk model."),
    ] = "multifactor",
    days: Annotated[
        int, Query(ge=1, le=1825, description="Days of seismicity to use."),
    ] = 90,
    nocache: Annotated[
        bool, Query(description="Bypass the fused-result cache."),
    ] = False,
) -> dict[str, Any]:
    """Assessments for every bundled volcano, highest 1-year probability first."""
    config = VolcanicRiskConfig(assessment_days=days, risk_model=model)
    now = datetime.now(tz=timezone.utc)
    result = _assessment_events(config, now, nocache)
    assessments = assess_all_volcanoes(
        all_volcanoes(), result.events, now, get_risk_model(model)
    )
    _record_run()
    return {
        "success": True,
        "generated": now.isoformat(),
        "model": model,
        "earthquakes_analyzed": len(result.events),
        "count": len(assessments),
        "assessments": [asdict(a) for a in assessments],
    }


@app.get("/volcanoes/{volcano_id}/risk")
def get_volcano_risk(
    volcano_id: str,
    model: Annotated[
        RiskModelName, Query(description="Risk model."),
    ] = "multifactor",
    days: Annotated[
        int, Query(ge=1, le=1825, description="Days of seismicity to use."),
    ] = 90,
    nocache: Annotated[
        bool, Query(description="Bypass the fused-result cache."),
    ] = False,
) -> dict[str, Any]:
    """Assessment for one volcano by GVP id or slug."""
    try:
        volcano = find_volcano(volcano_id)
    except VolcanoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0]) from None

    config = VolcanicRiskConfig(assessment_days=days, risk_model=model)
    now = datetime.now(tz=timezone.utc)
    result = _assessment_events(config, now, nocache)
    assessment = assess_volcano_risk(volcano, result.events, now, get_risk_model(model))
    _record_run()
    return asdict(assessment)
