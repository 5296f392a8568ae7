"""Merge unified events from several providers into one deduplicated catalogue."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from volcanic_risk.geo import haversine
from volcanic_risk.models import FusionStats, UnifiedSeismicEvent

logger = logging.getLogger(__name__)

# Regional agencies outrank global aggregators for events in their own network
SOURCE_PRIORITY: dict[str, int] = {
    "phivolcs": 5,
    "jma": 4,
    "geonet": 4,
    "emsc": 2,
    "usgs": 1,
}

MAGNITUDE_BUCKETS: tuple[int, ...] = (1, 2, 3, 4, 5, 6)


@dataclass(frozen=True)
class FusionThresholds:
    """Limits under which two reports describe the same physical earthquake."""

    time_window_s: float = 180.0
    distance_km: float = 100.0
    magnitude_delta: float = 0.5


GLOBAL_THRESHOLDS = FusionThresholds()
# Dense local networks locate events tightly, so matching can be stricter
REGIONAL_THRESHOLDS = FusionThresholds(time_window_s=120.0, distance_km=50.0, magnitude_delta=0.3)


def source_priority(source: str) -> int:
    return SOURCE_PRIORITY.get(source, 0)


def is_same_event(
    a: UnifiedSeismicEvent,
    b: UnifiedSeismicEvent,
    thresholds: FusionThresholds = GLOBAL_THRESHOLDS,
) -> bool:
    """True when *a* and *b* fall within every fusion threshold."""
    if abs(a.time_ms - b.time_ms) >= thresholds.time_window_s * 1000:
        return False
    if abs(a.magnitude - b.magnitude) >= thresholds.magnitude_delta:
        return False
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude) < thresholds.distance_km


def deduplicate(
    events: Iterable[UnifiedSeismicEvent],
    thresholds: FusionThresholds = GLOBAL_THRESHOLDS,
) -> list[UnifiedSeismicEvent]:
    """Collapse duplicate reports, keeping the highest-priority source.

    Events are visited newest first. Each one either joins the output,
    replaces the first matching entry when its source strictly outranks
    that entry's source, or is discarded. Equal priority keeps the entry
    seen first. A replacement can bridge entries that were distinct before,
    so those are merged into it until no two entries match. The result is
    sorted by time descending.
    """
    ordered = sorted(events, key=lambda e: e.time_ms, reverse=True)
    fused: list[UnifiedSeismicEvent] = []
    for event in ordered:
        for i, existing in enumerate(fused):
            if is_same_event(event, existing, thresholds):
                if source_priority(event.source) > source_priority(existing.source):
                    fused[i] = event
                    _merge_matches(fused, i, thresholds)
                break
        else:
            fused.append(event)
    fused.sort(key=lambda e: e.time_ms, reverse=True)
    return fused


def _merge_matches(
    fused: list[UnifiedSeismicEvent],
    index: int,
    thresholds: FusionThresholds,
) -> None:
    """Fold every entry matching ``fused[index]`` into a single survivor, in place."""
    i = index
    j = 0
    while j < len(fused):
        if j == i or not is_same_event(fused[i], fused[j], thresholds):
            j += 1
            continue
        keep, other = source_priority(fused[i].source), source_priority(fused[j].source)
        if other > keep or (other == keep and j < i):
            del fused[i]
            i = j if j < i else j - 1
            j = 0
        else:
            del fused[j]
            if j < i:
                i -= 1


def magnitude_buckets(events: Iterable[UnifiedSeismicEvent]) -> dict[str, int]:
    """Cumulative counts of events at or above each whole magnitude."""
    mags = [e.magnitude for e in events]
    return {f"m{m}_plus": sum(1 for mag in mags if mag >= m) for m in MAGNITUDE_BUCKETS}


def compute_fusion_stats(
    raw_events: list[UnifiedSeismicEvent],
    fused_events: list[UnifiedSeismicEvent],
    fetch_time_ms: int = 0,
) -> FusionStats:
    """Per-source counts before fusion plus summary statistics after it."""
    counts = Counter(e.source for e in raw_events)
    return FusionStats(
        by_source={src: counts.get(src, 0) for src in SOURCE_PRIORITY},
        combined=len(raw_events),
        after_dedup=len(fused_events),
        duplicates_removed=len(raw_events) - len(fused_events),
        fetch_time_ms=fetch_time_ms,
        magnitude_buckets=magnitude_buckets(fused_events),
        largest_event=max(fused_events, key=lambda e: e.magnitude, default=None),
    )
