"""Tests for the SQLite event store."""

from __future__ import annotations

from dataclasses import replace

import pytest

from volcanic_risk.models import BoundingBox
from volcanic_risk.store import EventStore


@pytest.fixture
def store(tmp_path) -> EventStore:
    return EventStore(tmp_path / "nested" / "events.db")


class TestEventStore:
    def test_creates_parent_directory(self, tmp_path):
        EventStore(tmp_path / "a" / "b" / "events.db")
        assert (tmp_path / "a" / "b" / "events.db").exists()

    def test_round_trip_preserves_fields(self, store, make_event):
        event = replace(make_event(magnitude=4.4), url="https://example.org/e", felt=3, tsunami=True)
        assert store.insert_events([event]) == 1
        (loaded,) = store.query(0, event.time_ms)
        assert loaded == event

    def test_upsert_by_id(self, store, make_event):
        event = make_event(event_id="phivolcs_1")
        store.insert_events([event])
        store.insert_events([replace(event, magnitude=5.0)])
        assert store.count() == 1
        assert store.query(0, event.time_ms)[0].magnitude == 5.0

    def test_time_window_and_order(self, store, make_event):
        events = [make_event(days_ago=d) for d in (1, 3, 5)]
        store.insert_events(events)
        start = events[1].time_ms
        end = events[0].time_ms
        loaded = store.query(start, end)
        assert [e.id for e in loaded] == [events[0].id, events[1].id]

    def test_magnitude_bbox_and_limit(self, store, make_event):
        store.insert_events([
            make_event(magnitude=2.0, latitude=14.0, longitude=121.0),
            make_event(magnitude=4.0, latitude=14.0, longitude=121.0),
            make_event(magnitude=4.5, latitude=35.0, longitude=140.0),
            make_event(magnitude=5.0, latitude=13.0, longitude=123.0, days_ago=0.5),
        ])
        bbox = BoundingBox(4.5, 21.5, 116.0, 127.0)
        loaded = store.query(0, 2**62, min_magnitude=3.0, bbox=bbox)
        assert [e.magnitude for e in loaded] == [5.0, 4.0]
        assert len(store.query(0, 2**62, limit=2)) == 2

    def test_empty_insert(self, store):
        assert store.insert_events([]) == 0
        assert store.count() == 0
