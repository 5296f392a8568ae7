"""Historical backfill of USGS events into the SQLite store.

Live fetches cover at most a few months, while triggering analysis looks
back years. The backfill pages the USGS FDSN service one calendar year at
a time and upserts the normalized events, so ``assess --offline`` can
score against the full record. A year that fills a whole page is fetched
again month by month.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import requests
from requests import Session

from volcanic_risk.fetchers.fdsn import fetch_usgs
from volcanic_risk.http import create_session
from volcanic_risk.models import BoundingBox, FetchQuery
from volcanic_risk.normalizer import normalize_records
from volcanic_risk.store import EventStore

logger = logging.getLogger(__name__)

# Hard cap on features per FDSN request at USGS
USGS_PAGE_LIMIT = 20000


@dataclass
class BackfillSummary:
    """Outcome of one backfill run."""

    years: int = 0
    fetched: int = 0
    stored: int = 0
    failed_years: list[int] = field(default_factory=list)


def generate_year_ranges(
    start_year: int,
    end_year: int,
    now: datetime | None = None,
) -> list[tuple[int, datetime, datetime]]:
    """``(year, start, end)`` for each year in the inclusive range.

    The current year ends at *now* and years after it are skipped.
    """
    now = now or datetime.now(tz=timezone.utc)
    ranges: list[tuple[int, datetime, datetime]] = []
    for year in range(start_year, end_year + 1):
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        if start >= now:
            break
        end = min(datetime(year + 1, 1, 1, tzinfo=timezone.utc), now)
        ranges.append((year, start, end))
    return ranges


def _month_windows(start: datetime, end: datetime) -> list[tuple[datetime, datetime]]:
    windows: list[tuple[datetime, datetime]] = []
    first = datetime(start.year, start.month, 1, tzinfo=timezone.utc)
    while first < end:
        year, month = first.year, first.month
        following = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=timezone.utc)
        windows.append((max(first, start), min(following, end)))
        first = following
    return windows


def _earthquakes_only(features: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # USGS also catalogues quarry blasts and explosions
    return [
        f for f in features
        if (f.get("properties") or {}).get("type", "earthquake") == "earthquake"
    ]


def backfill_window(
    store: EventStore,
    start: datetime,
    end: datetime,
    *,
    min_magnitude: float = 2.5,
    bbox: BoundingBox | None = None,
    session: Session | None = None,
    timeout: float = 60,
    page_limit: int = USGS_PAGE_LIMIT,
) -> tuple[int, int]:
    """Fetch one window into *store*, returning ``(fetched, stored)``.

    A full page means USGS truncated the window, so it is split by month.
    """
    query = FetchQuery(start, end, min_magnitude=min_magnitude, limit=page_limit, bbox=bbox)
    features = fetch_usgs(query, timeout=timeout, session=session)
    if len(features) < page_limit:
        events = normalize_records("usgs", _earthquakes_only(features))
        return len(features), store.insert_events(events)

    logger.info("%s: page limit reached, splitting by month", start.date())
    fetched = stored = 0
    for month_start, month_end in _month_windows(start, end):
        month_query = FetchQuery(
            month_start, month_end, min_magnitude=min_magnitude, limit=page_limit, bbox=bbox
        )
        month_features = fetch_usgs(month_query, timeout=timeout, session=session)
        if len(month_features) >= page_limit:
            logger.warning(
                "%s: %d events returned, month may be truncated",
                month_start.strftime("%Y-%m"),
                len(month_features),
            )
        fetched += len(month_features)
        stored += store.insert_events(
            normalize_records("usgs", _earthquakes_only(month_features))
        )
    return fetched, stored


def backfill_usgs(
    store: EventStore,
    start_year: int,
    end_year: int,
    *,
    min_magnitude: float = 2.5,
    bbox: BoundingBox | None = None,
    session: Session | None = None,
    delay: float = 0.0,
    now: datetime | None = None,
    page_limit: int = USGS_PAGE_LIMIT,
    on_year: Callable[[int], None] | None = None,
) -> BackfillSummary:
    """Load USGS history for every year in ``[start_year, end_year]``.

    A year that fails is logged and recorded in the summary; later years
    still run.
    """
    if session is None:
        session = create_session()
    summary = BackfillSummary()
    for year, start, end in generate_year_ranges(start_year, end_year, now):
        summary.years += 1
        try:
            fetched, stored = backfill_window(
                store,
                start,
                end,
                min_magnitude=min_magnitude,
                bbox=bbox,
                session=session,
                page_limit=page_limit,
            )
        except (requests.RequestException, ValueError):
            logger.exception("Failed to backfill %d", year)
            summary.failed_years.append(year)
        else:
            summary.fetched += fetched
            summary.stored += stored
            logger.info("%d: %d fetched, %d stored", year, fetched, stored)

        if on_year is not None:
            on_year(year)
        if delay:
            time.sleep(delay)
    return summary
