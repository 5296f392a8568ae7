"""SQLite-backed store of fused earthquake events."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from volcanic_risk.models import BoundingBox, UnifiedSeismicEvent

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id TEXT PRIMARY KEY,
    source TEXT NOT NULL,
    magnitude REAL NOT NULL,
    magnitude_type TEXT NOT NULL,
    place TEXT NOT NULL,
    time_ms INTEGER NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    depth_km REAL NOT NULL,
    url TEXT,
    felt INTEGER,
    tsunami INTEGER NOT NULL DEFAULT 0,
    stored_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_events_time ON events(time_ms);
CREATE INDEX IF NOT EXISTS idx_events_magnitude ON events(magnitude);
"""

_COLUMNS = (
    "id", "source", "magnitude", "magnitude_type", "place", "time_ms",
    "latitude", "longitude", "depth_km", "url", "felt", "tsunami",
)


class EventStore:
    """Queryable earthquake store keyed by unified event id.

    Re-inserting an event with the same id replaces the stored row.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def insert_events(self, events: Iterable[UnifiedSeismicEvent]) -> int:
        """Upsert events and return how many rows were written."""
        stored_at = datetime.now(tz=timezone.utc).isoformat()
        rows = [
            (
                e.id, e.source, e.magnitude, e.magnitude_type, e.place, e.time_ms,
                e.latitude, e.longitude, e.depth_km, e.url, e.felt, int(e.tsunami),
                stored_at,
            )
            for e in events
        ]
        placeholders = ", ".join("?" * (len(_COLUMNS) + 1))
        with self._connect() as conn:
            conn.executemany(
                f"INSERT OR REPLACE INTO events ({', '.join(_COLUMNS)}, stored_at) "
                f"VALUES ({placeholders})",
                rows,
            )
        return len(rows)

    def query(
        self,
        start_ms: int,
        end_ms: int,
        min_magnitude: float | None = None,
        bbox: BoundingBox | None = None,
        limit: int | None = None,
    ) -> list[UnifiedSeismicEvent]:
        """Events in ``[start_ms, end_ms]``, newest first."""
        clauses = ["time_ms >= ?", "time_ms <= ?"]
        params: list[float | int] = [start_ms, end_ms]
        if min_magnitude is not None:
            clauses.append("magnitude >= ?")
            params.append(min_magnitude)
        if bbox is not None:
            clauses.append("latitude BETWEEN ? AND ? AND longitude BETWEEN ? AND ?")
            params.extend([bbox.min_lat, bbox.max_lat, bbox.min_lon, bbox.max_lon])
        sql = (
            f"SELECT {', '.join(_COLUMNS)} FROM events "
            f"WHERE {' AND '.join(clauses)} ORDER BY time_ms DESC"
        )
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_event(row) for row in rows]

    def count(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]


def _row_to_event(row: sqlite3.Row) -> UnifiedSeismicEvent:
    return UnifiedSeismicEvent(
        id=row["id"],
        source=row["source"],
        magnitude=row["magnitude"],
        magnitude_type=row["magnitude_type"],
        place=row["place"],
        time_ms=row["time_ms"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        depth_km=row["depth_km"],
        url=row["url"],
        felt=row["felt"],
        tsunami=bool(row["tsunami"]),
    )
