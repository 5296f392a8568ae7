"""Fan-out fetch from every provider, then normalize and fuse.

Steps:
1. Build a FetchQuery from the config (time window, magnitude, region)
2. Fetch every enabled provider concurrently, each bounded by a timeout
3. Normalize raw records and apply the query client-side
4. Fuse duplicates across providers
5. Truncate to the configured limit and compute statistics
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from requests import Session

from volcanic_risk.cache import TTLCache
from volcanic_risk.config import Source, VolcanicRiskConfig
from volcanic_risk.fetchers import FETCHERS
from volcanic_risk.fusion import (
    REGIONAL_THRESHOLDS,
    FusionThresholds,
    compute_fusion_stats,
    deduplicate,
)
from volcanic_risk.http import create_session
from volcanic_risk.models import BoundingBox, FetchQuery, FusionStats, UnifiedSeismicEvent
from volcanic_risk.normalizer import normalize_records
from volcanic_risk.store import EventStore

logger = logging.getLogger(__name__)

REGIONS: dict[str, BoundingBox] = {
    "philippines": BoundingBox(4.5, 21.5, 116.0, 127.0),
    "japan": BoundingBox(24.0, 46.0, 122.0, 154.0),
    "indonesia": BoundingBox(-11.0, 6.0, 95.0, 141.0),
    "newzealand": BoundingBox(-48.0, -34.0, 165.0, 179.0),
    "usa": BoundingBox(24.0, 50.0, -125.0, -66.0),
    "europe": BoundingBox(35.0, 72.0, -25.0, 45.0),
}

# Extra wall-clock allowance on top of the HTTP timeout for retries and parsing
_COLLECT_GRACE_SECONDS = 5.0


@dataclass
class FusedResult:
    """Fused events for one fetch cycle together with their statistics."""

    events: list[UnifiedSeismicEvent]
    stats: FusionStats


def build_query(
    config: VolcanicRiskConfig,
    now: datetime | None = None,
    *,
    hours: float | None = None,
    min_magnitude: float | None = None,
) -> FetchQuery:
    """FetchQuery covering the last *hours* (default ``config.hours``) before *now*."""
    end = now or datetime.now(tz=timezone.utc)
    span = hours if hours is not None else config.hours
    return FetchQuery(
        start=end - timedelta(hours=span),
        end=end,
        min_magnitude=config.min_magnitude if min_magnitude is None else min_magnitude,
        limit=config.limit,
        bbox=REGIONS[config.region] if config.region else None,
    )


def thresholds_for(config: VolcanicRiskConfig) -> FusionThresholds:
    if config.region == "philippines":
        return REGIONAL_THRESHOLDS
    return FusionThresholds(
        time_window_s=config.fusion_time_window_s,
        distance_km=config.fusion_distance_km,
        magnitude_delta=config.fusion_magnitude_delta,
    )


def fetch_provider(
    source: Source,
    query: FetchQuery,
    timeout: float,
    session: Session,
) -> list[UnifiedSeismicEvent]:
    """Fetch, normalize and filter one provider. Raises on upstream failure."""
    records = FETCHERS[source](query, timeout, session)
    events = normalize_records(source, records)
    return [e for e in events if query.matches(e)]


def fetch_all_providers(
    query: FetchQuery,
    providers: list[Source],
    timeout: float = 15,
    session: Session | None = None,
    max_workers: int = 5,
) -> dict[Source, list[UnifiedSeismicEvent]]:
    """Fetch every provider concurrently.

    A provider that raises or does not finish within the timeout
    contributes an empty list. Unfinished fetches are abandoned and
    their late results are never merged.
    """
    if session is None:
        session = create_session()

    results: dict[Source, list[UnifiedSeismicEvent]] = {src: [] for src in providers}
    if not providers:
        return results

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fetch")
    try:
        futures: dict[Future[list[UnifiedSeismicEvent]], Source] = {
            executor.submit(fetch_provider, src, query, timeout, session): src
            for src in providers
        }
        done, not_done = wait(futures, timeout=timeout + _COLLECT_GRACE_SECONDS)

        for future in not_done:
            logger.warning("%s: no response within %.0fs, skipping", futures[future], timeout)
            future.cancel()

        for future in done:
            source = futures[future]
            try:
                results[source] = future.result()
            except Exception:
                logger.warning("Failed to fetch earthquakes from %s", source, exc_info=True)
                continue
            logger.info("%s: %d events", source, len(results[source]))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return results


def fuse_query(
    query: FetchQuery,
    config: VolcanicRiskConfig,
    session: Session | None = None,
    store: EventStore | None = None,
) -> FusedResult:
    """Run one full fetch-and-fuse cycle for *query*."""
    started = time.perf_counter()
    logger.info(
        "Fetching M%.1f+ earthquakes from %d providers (%s to %s)...",
        query.min_magnitude,
        len(config.providers),
        query.start.isoformat(timespec="minutes"),
        query.end.isoformat(timespec="minutes"),
    )
    by_source = fetch_all_providers(
        query,
        list(config.providers),
        timeout=config.request_timeout,
        session=session,
        max_workers=config.max_workers,
    )
    combined = [e for events in by_source.values() for e in events]
    fused = deduplicate(combined, thresholds_for(config))[: query.limit]
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info("Fused %d -> %d events in %d ms", len(combined), len(fused), elapsed_ms)

    if store is not None and fused:
        stored = store.insert_events(fused)
        logger.debug("Persisted %d events to %s", stored, store.path)

    return FusedResult(events=fused, stats=compute_fusion_stats(combined, fused, elapsed_ms))


def get_fused_events(
    config: VolcanicRiskConfig,
    *,
    session: Session | None = None,
    cache: TTLCache[FusedResult] | None = None,
    store: EventStore | None = None,
    now: datetime | None = None,
) -> FusedResult:
    """Fused events for the config's hours/magnitude/limit/region.

    When a cache is given, identical requests within its TTL share one
    fetch cycle.
    """
    query = build_query(config, now)
    if cache is None:
        return fuse_query(query, config, session, store)

    key = (
        "events",
        config.hours,
        config.min_magnitude,
        config.limit,
        config.region,
        tuple(config.providers),
    )
    return cache.get_or_compute(key, lambda: fuse_query(query, config, session, store))


def _assessment_config(config: VolcanicRiskConfig) -> VolcanicRiskConfig:
    return config.model_copy(update={"region": None, "limit": 5000})


def assessment_query(config: VolcanicRiskConfig, now: datetime | None = None) -> FetchQuery:
    """Query spanning ``config.assessment_days`` at the assessment magnitude floor."""
    return build_query(
        _assessment_config(config),
        now,
        hours=config.assessment_days * 24,
        min_magnitude=config.assessment_min_magnitude,
    )


def fetch_assessment_events(
    config: VolcanicRiskConfig,
    *,
    session: Session | None = None,
    cache: TTLCache[FusedResult] | None = None,
    store: EventStore | None = None,
    now: datetime | None = None,
) -> FusedResult:
    """Fused events spanning ``config.assessment_days`` for risk scoring.

    The region filter is not applied: distant great earthquakes matter
    for triggering. The provider limit is raised to its maximum.
    """
    scoring_config = _assessment_config(config)
    query = assessment_query(config, now)
    if cache is None:
        return fuse_query(query, scoring_config, session, store)

    key = (
        "assessment",
        config.assessment_days,
        config.assessment_min_magnitude,
        tuple(config.providers),
    )
    return cache.get_or_compute(
        key, lambda: fuse_query(query, scoring_config, session, store)
    )


def load_events_from_store(
    store: EventStore,
    query: FetchQuery,
) -> list[UnifiedSeismicEvent]:
    """Previously fused events matching *query*, without touching any provider."""
    events = store.query(
        start_ms=int(query.start.timestamp() * 1000),
        end_ms=int(query.end.timestamp() * 1000),
        min_magnitude=query.min_magnitude,
        bbox=query.bbox,
        limit=query.limit,
    )
    logger.info("Loaded %d events from %s", len(events), store.path)
    return events
