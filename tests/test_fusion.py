"""Tests for cross-provider deduplication and fusion statistics."""

from __future__ import annotations

import pytest

from volcanic_risk.fusion import (
    GLOBAL_THRESHOLDS,
    REGIONAL_THRESHOLDS,
    compute_fusion_stats,
    deduplicate,
    is_same_event,
    magnitude_buckets,
    source_priority,
)


class TestIsSameEvent:
    def test_close_in_time_space_and_magnitude(self, make_event):
        a = make_event(hours_ago=1, magnitude=4.2, latitude=14.0, longitude=121.0)
        b = make_event(hours_ago=1, magnitude=4.3, latitude=14.001, longitude=121.002)
        assert is_same_event(a, b)

    def test_far_apart_not_same(self, make_event):
        a = make_event(hours_ago=1, latitude=14.0, longitude=121.0)
        b = make_event(hours_ago=1, latitude=18.5, longitude=121.0)
        assert not is_same_event(a, b)

    def test_time_threshold_is_exclusive(self, make_event):
        a = make_event(days_ago=0, hours_ago=1)
        b = make_event(days_ago=0, hours_ago=1 - 180 / 3600)
        assert not is_same_event(a, b, GLOBAL_THRESHOLDS)

    def test_magnitude_delta(self, make_event):
        a = make_event(hours_ago=1, magnitude=4.0)
        b = make_event(hours_ago=1, magnitude=4.6)
        assert not is_same_event(a, b)

    def test_regional_thresholds_are_stricter(self, make_event):
        a = make_event(hours_ago=1, magnitude=4.0, latitude=14.0)
        b = make_event(hours_ago=1, magnitude=4.4, latitude=14.0)
        assert is_same_event(a, b, GLOBAL_THRESHOLDS)
        assert not is_same_event(a, b, REGIONAL_THRESHOLDS)


class TestDeduplicate:
    def test_regional_agency_wins(self, make_event):
        usgs = make_event(
            days_ago=0, hours_ago=1, magnitude=4.2, latitude=14.0, longitude=121.0,
            source="usgs",
        )
        phivolcs = make_event(
            days_ago=0, hours_ago=1 - 90 / 3600, magnitude=4.3, latitude=14.001,
            longitude=121.002, source="phivolcs",
        )
        fused = deduplicate([usgs, phivolcs])
        assert len(fused) == 1
        assert fused[0].source == "phivolcs"
        assert fused[0].magnitude == 4.3

    def test_input_order_does_not_change_winner(self, make_event):
        usgs = make_event(hours_ago=1, magnitude=4.2, source="usgs")
        phivolcs = make_event(hours_ago=1, magnitude=4.3, source="phivolcs")
        assert deduplicate([phivolcs, usgs])[0].source == "phivolcs"
        assert deduplicate([usgs, phivolcs])[0].source == "phivolcs"

    def test_distinct_events_kept(self, make_event):
        a = make_event(hours_ago=1, latitude=14.0, longitude=121.0)
        b = make_event(hours_ago=1, latitude=18.5, longitude=121.0)
        assert len(deduplicate([a, b])) == 2

    def test_equal_priority_keeps_first_seen(self, make_event):
        # Newer event is visited first
        jma = make_event(days_ago=0, hours_ago=1, magnitude=4.0, source="jma")
        geonet = make_event(days_ago=0, hours_ago=1.01, magnitude=4.0, source="geonet")
        fused = deduplicate([geonet, jma])
        assert [e.source for e in fused] == ["jma"]

    def test_sorted_newest_first(self, make_event):
        events = [make_event(days_ago=d, latitude=10 + d) for d in (3, 1, 2)]
        fused = deduplicate(events)
        assert [e.time_ms for e in fused] == sorted((e.time_ms for e in events), reverse=True)

    def test_idempotent(self, make_event):
        events = [
            make_event(hours_ago=1, magnitude=4.2, source="usgs"),
            make_event(hours_ago=1, magnitude=4.3, source="emsc"),
            make_event(hours_ago=5, magnitude=3.0, latitude=9.0, source="usgs"),
            make_event(days_ago=3, magnitude=5.1, latitude=6.0, longitude=125.0, source="jma"),
        ]
        once = deduplicate(events)
        assert deduplicate(once) == once

    def test_replacement_absorbs_bridged_entries(self, make_event):
        # Two usgs reports 150 km apart, both within 75 km of a later phivolcs one
        east = make_event(days_ago=0, hours_ago=1, magnitude=4.0, latitude=14.0,
                          longitude=121.0, source="usgs")
        west = make_event(days_ago=0, hours_ago=1 + 10 / 3600, magnitude=4.0, latitude=14.0,
                          longitude=122.39, source="usgs")
        local = make_event(days_ago=0, hours_ago=1 + 20 / 3600, magnitude=4.0, latitude=14.0,
                           longitude=121.695, source="phivolcs")
        assert not is_same_event(east, west)

        once = deduplicate([east, west, local])
        assert once == [local]
        assert deduplicate(once) == once

    def test_empty(self):
        assert deduplicate([]) == []


class TestSourcePriority:
    def test_ordering(self):
        assert source_priority("phivolcs") > source_priority("jma")
        assert source_priority("jma") == source_priority("geonet")
        assert source_priority("geonet") > source_priority("emsc") > source_priority("usgs")

    def test_unknown_source_lowest(self):
        assert source_priority("unknown") == 0


class TestFusionStats:
    def test_counts(self, make_event):
        usgs = make_event(hours_ago=1, magnitude=4.2, source="usgs")
        phivolcs = make_event(hours_ago=1, magnitude=4.3, source="phivolcs")
        other = make_event(days_ago=2, magnitude=6.1, latitude=-6.0, source="emsc")
        raw = [usgs, phivolcs, other]
        stats = compute_fusion_stats(raw, deduplicate(raw), fetch_time_ms=420)
        assert stats.by_source["usgs"] == 1
        assert stats.by_source["geonet"] == 0
        assert stats.combined == 3
        assert stats.after_dedup == 2
        assert stats.duplicates_removed == 1
        assert stats.fetch_time_ms == 420
        assert stats.largest_event == other

    def test_magnitude_buckets_are_cumulative(self, make_event):
        events = [make_event(magnitude=m) for m in (1.5, 2.0, 3.7, 6.2)]
        assert magnitude_buckets(events) == {
            "m1_plus": 4,
            "m2_plus": 3,
            "m3_plus": 2,
            "m4_plus": 1,
            "m5_plus": 1,
            "m6_plus": 1,
        }

    def test_empty_has_no_largest(self):
        stats = compute_fusion_stats([], [])
        assert stats.largest_event is None
        assert stats.after_dedup == 0


@pytest.mark.parametrize("thresholds", [GLOBAL_THRESHOLDS, REGIONAL_THRESHOLDS])
def test_no_two_fused_events_match(make_event, thresholds):
    events = [
        make_event(hours_ago=h, magnitude=3.0 + (h % 3) * 0.2, latitude=14.0 + h * 0.01,
                   source=src)
        for h, src in zip(range(12), ["usgs", "emsc", "phivolcs"] * 4)
    ]
    fused = deduplicate(events, thresholds)
    for i, a in enumerate(fused):
        for b in fused[i + 1:]:
            assert not is_same_event(a, b, thresholds)
