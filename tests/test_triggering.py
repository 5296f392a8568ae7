"""Tests for earthquake-triggered eruption rate rules."""

from __future__ import annotations

import pytest

from volcanic_risk.triggering import (
    JENKINS,
    MANGA_BRODSKY,
    NISHIMURA,
    evaluate_triggering,
)

# 100 km north of Mayon (13.257, 123.685)
NEAR_LAT, NEAR_LON = 14.1563, 123.685


class TestTriggeringRule:
    def test_full_increase_at_time_zero(self):
        assert NISHIMURA.contribution(8.0, 100.0, 0.0) == pytest.approx(0.5)

    def test_linear_decay(self):
        assert NISHIMURA.contribution(8.0, 100.0, 2.5) == pytest.approx(0.25)
        assert JENKINS.contribution(7.2, 500.0, 1.0) == pytest.approx(0.25 * 0.75)

    def test_expired(self):
        assert NISHIMURA.contribution(8.0, 100.0, 5.1) == 0.0

    def test_magnitude_and_distance_gates(self):
        assert NISHIMURA.contribution(7.4, 100.0, 0.1) == 0.0
        assert NISHIMURA.contribution(7.6, 201.0, 0.1) == 0.0
        assert MANGA_BRODSKY.contribution(8.1, 4999.0, 0.5) == pytest.approx(0.075)

    def test_future_event_ignored(self):
        assert JENKINS.contribution(7.5, 10.0, -0.1) == 0.0


class TestEvaluateTriggering:
    def test_no_large_events(self, make_event, mayon, now):
        result = evaluate_triggering(
            [make_event(magnitude=5.0)], mayon.latitude, mayon.longitude, now
        )
        assert result.factor == 1.0
        assert result.triggers == []
        assert result.cumulative_load == 0.0

    def test_m8_at_100km_six_months_ago(self, make_event, mayon, now):
        event = make_event(days_ago=182.625, magnitude=8.0, latitude=NEAR_LAT, longitude=NEAR_LON)
        result = evaluate_triggering([event], mayon.latitude, mayon.longitude, now)
        # Nishimura: 0.5 * (1 - 0.5/5) = 0.45; Jenkins: 0.25 * (1 - 0.5/4); M&B: 0.15 * 0.5
        assert result.rule_factors["nishimura"] == pytest.approx(1.45, abs=1e-3)
        assert result.rule_factors["jenkins"] == pytest.approx(1.21875, abs=1e-3)
        assert result.rule_factors["manga_brodsky"] == pytest.approx(1.075, abs=1e-3)
        assert result.factor == pytest.approx(1.45, abs=1e-3)
        assert result.triggered("nishimura")
        assert [t.rule for t in result.triggers] == ["nishimura", "jenkins", "manga_brodsky"]
        assert result.triggers[0].coulomb_stress_bars > 0
        assert result.cumulative_load == pytest.approx(0.45 + 0.21875 + 0.075, abs=1e-3)

    def test_max_not_sum_within_rule(self, make_event, mayon, now):
        events = [
            make_event(days_ago=365.25, magnitude=7.8, latitude=NEAR_LAT, longitude=NEAR_LON),
            make_event(days_ago=730.5, magnitude=7.9, latitude=NEAR_LAT, longitude=NEAR_LON),
        ]
        result = evaluate_triggering(events, mayon.latitude, mayon.longitude, now)
        # 0.5 * (1 - 1/5) = 0.4 beats 0.5 * (1 - 2/5) = 0.3
        assert result.rule_factors["nishimura"] == pytest.approx(1.4, abs=1e-3)
        assert result.cumulative_load > 0.7

    def test_far_event_only_far_field_rule(self, make_event, mayon, now):
        # Roughly 3000 km away
        event = make_event(days_ago=30, magnitude=8.5, latitude=38.3, longitude=142.4)
        result = evaluate_triggering([event], mayon.latitude, mayon.longitude, now)
        assert not result.triggered("nishimura")
        assert not result.triggered("jenkins")
        assert result.triggered("manga_brodsky")
        assert 1.0 < result.factor < 1.15
