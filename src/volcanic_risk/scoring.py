"""Volcanic eruption risk models.

Two versioned models share one interface, ``RiskModel.assess(volcano,
events, now)``:

- ``multifactor`` (default): baseline rate scaled by triggering, depth
  migration, b-value, acceleration, clustering, hydrothermal and
  near-field activity factors.
- ``legacy``: the earlier triggering-plus-M5-anomaly model, kept for
  side-by-side comparison.

Both bound the result to at most 65% per year and 20% per 30 days.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from volcanic_risk.analytics import (
    DEPTH_CRITICAL_RATE,
    DEPTH_SIGNIFICANT_RATE,
    analyze_acceleration,
    analyze_b_value,
    analyze_depth_migration,
    identify_clusters,
)
from volcanic_risk.config import RiskModelName
from volcanic_risk.geo import angular_difference, haversine, seismic_energy
from volcanic_risk.guidance import build_guidance
from volcanic_risk.models import (
    AccelerationAnalysis,
    BValueAnalysis,
    ConfidenceLevel,
    DepthMigration,
    RiskAssessment,
    RiskCategory,
    RiskStatistics,
    SeismicCluster,
    UnifiedSeismicEvent,
    Volcano,
)
from volcanic_risk.triggering import (
    JENKINS,
    NISHIMURA,
    TriggeringResult,
    evaluate_triggering,
    years_since,
)

logger = logging.getLogger(__name__)

MS_PER_DAY = 86_400_000

MAX_PROBABILITY_1YEAR = 0.65
MAX_PROBABILITY_30DAY = 0.20
MAX_COMBINED_MULTIPLIER = 10.0

# Eruptions per year, averaged from Global Volcanism Program Holocene records
BASE_ERUPTION_RATES: dict[str, float] = {
    "active": 0.10,
    "potentially_active": 0.02,
    "dormant": 0.005,
}

# Fournier (1989); White & McCausland (2016). Index is the 0-3 activity level.
HYDROTHERMAL_MULTIPLIERS: tuple[float, ...] = (1.0, 1.2, 1.5, 2.0)

RISK_THRESHOLDS: tuple[tuple[RiskCategory, float], ...] = (
    ("CRITICAL", 0.50),
    ("VERY_HIGH", 0.35),
    ("HIGH", 0.20),
    ("ELEVATED", 0.10),
    ("MODERATE", 0.05),
    ("LOW", 0.02),
)

REGIONAL_RANGE_KM = 1000.0
LOCAL_RANGE_KM = 50.0
NEAR_FIELD_RANGE_KM = 15.0
B_VALUE_LOCAL_MIN_EVENTS = 30

RECENT_ACTIVITY_DAYS = 30
RECENT_ACTIVITY_MAX_DEPTH_KM = 10.0
RECENT_ACTIVITY_STEPS: tuple[tuple[int, float], ...] = ((20, 1.5), (10, 1.3), (5, 1.1))

ACCELERATION_BASES: dict[str, float] = {"power_law": 2.0, "exponential": 1.8, "linear": 1.3}

BRACKETING_MIN_SEPARATION_DEG = 135.0
MAX_CLUSTER_MULTIPLIER = 3.0


class RiskModel(Protocol):
    """A versioned strategy turning seismicity into a risk assessment."""

    name: str

    def assess(
        self, volcano: Volcano, events: list[UnifiedSeismicEvent], now: datetime
    ) -> RiskAssessment: ...


def _as_utc(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def _distance(volcano: Volcano, event: UnifiedSeismicEvent) -> float:
    return haversine(volcano.latitude, volcano.longitude, event.latitude, event.longitude)


def _days_ago(event: UnifiedSeismicEvent, now: datetime) -> float:
    return (now.timestamp() * 1000 - event.time_ms) / MS_PER_DAY


def categorize(probability_1year: float) -> RiskCategory:
    """Map an annual probability to the seven-tier category scale."""
    for category, threshold in RISK_THRESHOLDS:
        if probability_1year >= threshold:
            return category
    return "BACKGROUND"


def bounded_probabilities(baseline: float, multiplier: float) -> tuple[float, float]:
    """Return (1-year, 30-day) probabilities with their ceilings applied."""
    p1y = min(max(baseline * multiplier, 0.0), MAX_PROBABILITY_1YEAR)
    p30 = min(p1y / 12, MAX_PROBABILITY_30DAY)
    return p1y, p30


def hydrothermal_multiplier(level: int) -> float:
    if 0 <= level < len(HYDROTHERMAL_MULTIPLIERS):
        return HYDROTHERMAL_MULTIPLIERS[level]
    return 1.0


def depth_migration_multiplier(analysis: DepthMigration) -> float:
    """Shallowing trends raise risk, scaled by fit quality."""
    if not analysis.detected or analysis.direction != "shallowing":
        return 1.0
    if analysis.rate_km_per_day >= DEPTH_CRITICAL_RATE:
        base = 2.5
    elif analysis.rate_km_per_day >= DEPTH_SIGNIFICANT_RATE:
        base = 1.5
    else:
        return 1.0
    return 1.0 + (base - 1.0) * analysis.confidence


def b_value_multiplier(analysis: BValueAnalysis) -> float:
    if not analysis.sufficient_data:
        return 1.0
    if analysis.anomaly == "low":
        return 1.3
    if analysis.anomaly == "high":
        return 1.2
    return 1.0


def acceleration_multiplier(analysis: AccelerationAnalysis) -> float:
    if not analysis.detected:
        return 1.0
    base = ACCELERATION_BASES.get(analysis.acceleration_type, 1.0)
    return 1.0 + (base - 1.0) * analysis.confidence


def bracketing_pairs(clusters: list[SeismicCluster]) -> int:
    """Number of cluster pairs on roughly opposite sides of the volcano."""
    pairs = 0
    for i, a in enumerate(clusters):
        for b in clusters[i + 1:]:
            if angular_difference(a.azimuth_deg, b.azimuth_deg) >= BRACKETING_MIN_SEPARATION_DEG:
                pairs += 1
    return pairs


def cluster_multiplier(clusters: list[SeismicCluster]) -> float:
    if not clusters:
        return 1.0
    multiplier = 1.5 ** bracketing_pairs(clusters)
    if any(c.is_migrating and c.migration_direction == "shallowing" for c in clusters):
        multiplier *= 1.3
    if any(c.is_swarm for c in clusters):
        multiplier *= 1.2
    return min(multiplier, MAX_CLUSTER_MULTIPLIER)


def recent_activity_multiplier(count: int) -> float:
    """Factor for shallow near-field events in the last 30 days."""
    for minimum, factor in RECENT_ACTIVITY_STEPS:
        if count >= minimum:
            return factor
    return 1.0


def assess_confidence(station_count: int, local_event_count: int) -> ConfidenceLevel:
    """Data-sufficiency confidence; no local seismicity is always VERY_LOW."""
    if local_event_count == 0:
        return "VERY_LOW"
    if station_count >= 10 and local_event_count >= 50:
        return "HIGH"
    if station_count >= 5 and local_event_count >= 20:
        return "MEDIUM"
    if station_count >= 2 or local_event_count >= 10:
        return "LOW"
    return "VERY_LOW"


def _trigger_notes(triggering: TriggeringResult) -> list[str]:
    notes: list[str] = []
    seen: set[str] = set()
    for trigger in triggering.triggers:
        if trigger.rule in seen:
            continue
        seen.add(trigger.rule)
        notes.append(
            f"{trigger.rule} triggering: M{trigger.magnitude:.1f} at "
            f"{trigger.distance_km:.0f} km, {trigger.years_elapsed:.2f} yr ago "
            f"(+{trigger.contribution:.3f})"
        )
    return notes


class MultiFactorRiskModel:
    """Baseline eruption rate scaled by seven independently computed factors."""

    name = "multifactor"

    def assess(
        self, volcano: Volcano, events: list[UnifiedSeismicEvent], now: datetime
    ) -> RiskAssessment:
        now = _as_utc(now)
        now_ms = now.timestamp() * 1000
        usable = [e for e in events if e.time_ms <= now_ms]

        distances = {e.id: _distance(volcano, e) for e in usable}
        regional = [e for e in usable if distances[e.id] <= REGIONAL_RANGE_KM]
        local = [e for e in regional if distances[e.id] <= LOCAL_RANGE_KM]
        near_field = [e for e in local if distances[e.id] <= NEAR_FIELD_RANGE_KM]

        triggering = evaluate_triggering(usable, volcano.latitude, volcano.longitude, now)
        depth = analyze_depth_migration(local, now)
        b_input = local if len(local) >= B_VALUE_LOCAL_MIN_EVENTS else regional
        b_value = analyze_b_value(b_input)
        acceleration = analyze_acceleration(local, now)
        clusters = identify_clusters(local, volcano.latitude, volcano.longitude)

        recent_shallow = [
            e for e in near_field
            if e.depth_km <= RECENT_ACTIVITY_MAX_DEPTH_KM
            and _days_ago(e, now) <= RECENT_ACTIVITY_DAYS
        ]
        local_30 = [e for e in local if _days_ago(e, now) <= 30]
        local_7 = [e for e in local_30 if _days_ago(e, now) <= 7]

        stats = RiskStatistics(
            earthquakes_analyzed=len(usable),
            regional_count=len(regional),
            local_count=len(local),
            near_field_count=len(near_field),
            m3_plus=sum(1 for e in regional if e.magnitude >= 3),
            m4_plus=sum(1 for e in regional if e.magnitude >= 4),
            m5_plus=sum(1 for e in regional if e.magnitude >= 5),
            shallow_count=sum(1 for e in local if e.depth_km <= 5),
            event_rate_7day=round(len(local_7) / 7, 3),
            event_rate_30day=round(len(local_30) / 30, 3),
            energy_release_30day_j=sum(seismic_energy(e.magnitude) for e in local_30),
            cumulative_triggering_load=round(triggering.cumulative_load, 4),
        )

        factors = {
            "triggering": round(triggering.factor, 3),
            "depth_migration": round(depth_migration_multiplier(depth), 3),
            "b_value": b_value_multiplier(b_value),
            "acceleration": round(acceleration_multiplier(acceleration), 3),
            "clustering": round(cluster_multiplier(clusters), 3),
            "hydrothermal": hydrothermal_multiplier(volcano.hydrothermal_activity()),
            "recent_activity": recent_activity_multiplier(len(recent_shallow)),
        }
        raw = 1.0
        for value in factors.values():
            raw *= value
        combined = min(raw, MAX_COMBINED_MULTIPLIER)

        baseline = BASE_ERUPTION_RATES.get(volcano.status, 0.02)
        p1y, p30 = bounded_probabilities(baseline, combined)
        category = categorize(p1y)

        notes = _trigger_notes(triggering)
        indicators: list[str] = []
        if triggering.triggered(NISHIMURA.name) or triggering.triggered(JENKINS.name):
            indicators.append("Recent large earthquake within triggering distance")
        if depth.detected:
            notes.append(
                f"Depth migration: {depth.rate_km_per_day:.2f} km/day {depth.direction} "
                f"(R²={depth.r_squared:.2f})"
            )
            if depth.direction == "shallowing":
                indicators.append("Shallowing earthquake hypocentres detected")
        if b_value.sufficient_data and b_value.anomaly != "normal":
            notes.append(f"b-value: {b_value.b_value} ({b_value.anomaly}, n={b_value.sample_size})")
            if b_value.anomaly == "low":
                indicators.append("Low b-value indicates elevated stress")
        if acceleration.detected:
            notes.append(
                f"Acceleration: {acceleration.acceleration_type} (R²={acceleration.r_squared})"
            )
            indicators.append("Accelerating seismicity pattern")
        pairs = bracketing_pairs(clusters)
        if pairs:
            notes.append(f"Bracketing: {pairs} opposing cluster pair(s)")
        if any(c.is_swarm for c in clusters):
            notes.append(f"Swarm activity in {sum(c.is_swarm for c in clusters)} cluster(s)")
            indicators.append("Seismic swarm activity")
        if recent_shallow and factors["recent_activity"] > 1.0:
            notes.append(
                f"Near-field activity: {len(recent_shallow)} shallow events within "
                f"{NEAR_FIELD_RANGE_KM:.0f} km in {RECENT_ACTIVITY_DAYS} days"
            )

        logger.debug(
            "%s: baseline=%.3f multiplier=%.2f p1y=%.3f %s",
            volcano.name, baseline, combined, p1y, category,
        )

        return RiskAssessment(
            volcano_id=volcano.id,
            volcano_name=volcano.name,
            latitude=volcano.latitude,
            longitude=volcano.longitude,
            status=volcano.status,
            model=self.name,
            assessed_at=now.isoformat(),
            baseline_rate=baseline,
            factors=factors,
            combined_multiplier=round(combined, 3),
            probability_30day=round(p30, 4),
            probability_1year=round(p1y, 4),
            category=category,
            confidence=assess_confidence(volcano.monitoring_stations(), len(local)),
            statistics=stats,
            guidance=build_guidance(category, volcano, indicators),
            scientific_notes=notes,
            triggers=triggering.triggers,
            clusters=clusters,
            b_value=b_value,
            depth_migration=depth,
            acceleration=acceleration,
        )


LEGACY_RANGE_KM = 750.0
LEGACY_BASE_RATES: dict[str, float] = {
    "active": 0.10,
    "potentially_active": 0.05,
    "dormant": 0.01,
}
LEGACY_STATE_FACTORS: dict[str, float] = {
    "dormant": 0.5,
    "potentially_active": 1.0,
    "active": 1.5,
}
LEGACY_THRESHOLDS: tuple[tuple[RiskCategory, float], ...] = (
    ("VERY_HIGH", 0.35),
    ("HIGH", 0.20),
    ("ELEVATED", 0.10),
    ("MODERATE", 0.05),
)
LEGACY_NORMAL_M5_RATE_PER_DAY = 0.1
LEGACY_MAX_M5_ANOMALY = 10.0
LEGACY_ANOMALY_WEIGHT = 0.3


class LegacyRiskModel:
    """Triggering plus M5+ rate anomaly, bracketing and volcano state.

    Nishimura contributions are summed across events here, unlike the
    multifactor model which takes the maximum.
    """

    name = "legacy"

    def assess(
        self, volcano: Volcano, events: list[UnifiedSeismicEvent], now: datetime
    ) -> RiskAssessment:
        now = _as_utc(now)
        now_ms = now.timestamp() * 1000
        relevant = [
            e for e in events
            if e.time_ms <= now_ms and _distance(volcano, e) <= LEGACY_RANGE_KM
        ]

        nishimura_sum = 0.0
        latest_jenkins: UnifiedSeismicEvent | None = None
        for e in relevant:
            distance = _distance(volcano, e)
            nishimura_sum += NISHIMURA.contribution(e.magnitude, distance, years_since(e, now))
            if e.magnitude >= JENKINS.min_magnitude and distance <= JENKINS.max_distance_km:
                if latest_jenkins is None or e.time_ms > latest_jenkins.time_ms:
                    latest_jenkins = e
        nishimura_factor = 1.0 + nishimura_sum
        jenkins_factor = 1.0
        if latest_jenkins is not None:
            jenkins_factor += JENKINS.contribution(
                latest_jenkins.magnitude,
                _distance(volcano, latest_jenkins),
                years_since(latest_jenkins, now),
            )

        m5_last_7d = sum(
            1 for e in relevant if e.magnitude >= 5.0 and _days_ago(e, now) <= 7
        )
        anomaly = min(
            (m5_last_7d / 7) / LEGACY_NORMAL_M5_RATE_PER_DAY, LEGACY_MAX_M5_ANOMALY
        )

        clusters = identify_clusters(
            relevant,
            volcano.latitude,
            volcano.longitude,
            radius_km=LEGACY_RANGE_KM,
            max_gap_hours=None,
        )
        bracketing = 1.5 if bracketing_pairs(clusters) else 1.0

        factors = {
            "nishimura_cumulative": round(nishimura_factor, 3),
            "jenkins": round(jenkins_factor, 3),
            "seismicity_anomaly": round(anomaly, 2),
            "bracketing": bracketing,
            "hydrothermal": hydrothermal_multiplier(volcano.hydrothermal_activity()),
            "state": LEGACY_STATE_FACTORS.get(volcano.status, 1.0),
        }
        combined = (
            max(nishimura_factor, jenkins_factor)
            * (1.0 + (anomaly - 1.0) * LEGACY_ANOMALY_WEIGHT)
            * bracketing
            * factors["hydrothermal"]
            * factors["state"]
        )

        baseline = LEGACY_BASE_RATES.get(volcano.status, 0.05)
        p1y, p30 = bounded_probabilities(baseline, combined)
        category: RiskCategory = "LOW"
        for name, threshold in LEGACY_THRESHOLDS:
            if p1y >= threshold:
                category = name
                break

        stations = volcano.monitoring_stations()
        confidence: ConfidenceLevel
        if stations >= 10 and len(relevant) >= 50:
            confidence = "HIGH"
        elif stations >= 5 and len(relevant) >= 20:
            confidence = "MEDIUM"
        elif stations >= 2:
            confidence = "LOW"
        else:
            confidence = "VERY_LOW"

        notes: list[str] = []
        if nishimura_sum > 0:
            notes.append(f"Cumulative Nishimura (2017) increase: +{nishimura_sum:.3f}")
        if jenkins_factor > 1.0:
            notes.append(f"Jenkins et al. (2024) factor: {jenkins_factor:.3f}")
        if m5_last_7d:
            notes.append(f"M5+ events in last 7 days: {m5_last_7d} (anomaly {anomaly:.1f}x)")
        if bracketing > 1.0:
            notes.append("Clusters on opposing sides of the volcano")

        return RiskAssessment(
            volcano_id=volcano.id,
            volcano_name=volcano.name,
            latitude=volcano.latitude,
            longitude=volcano.longitude,
            status=volcano.status,
            model=self.name,
            assessed_at=now.isoformat(),
            baseline_rate=baseline,
            factors=factors,
            combined_multiplier=round(combined, 3),
            probability_30day=round(p30, 4),
            probability_1year=round(p1y, 4),
            category=category,
            confidence=confidence,
            statistics=RiskStatistics(
                earthquakes_analyzed=len(relevant),
                regional_count=len(relevant),
                m5_plus=sum(1 for e in relevant if e.magnitude >= 5),
                cumulative_triggering_load=round(nishimura_sum, 4),
            ),
            guidance=build_guidance(category, volcano),
            scientific_notes=notes,
            clusters=clusters,
        )


RISK_MODELS: dict[str, RiskModel] = {
    "multifactor": MultiFactorRiskModel(),
    "legacy": LegacyRiskModel(),
}


def get_risk_model(name: RiskModelName | str) -> RiskModel:
    try:
        return RISK_MODELS[name]
    except KeyError:
        raise ValueError(
            f"Unknown risk model {name!r}; expected one of {sorted(RISK_MODELS)}"
        ) from None


def assess_volcano_risk(
    volcano: Volcano,
    events: list[UnifiedSeismicEvent],
    now: datetime,
    model: RiskModel | None = None,
) -> RiskAssessment:
    """Assess one volcano. Pure in (volcano, events, now)."""
    return (model or RISK_MODELS["multifactor"]).assess(volcano, events, now)


def assess_all_volcanoes(
    volcanoes: list[Volcano],
    events: list[UnifiedSeismicEvent],
    now: datetime,
    model: RiskModel | None = None,
) -> list[RiskAssessment]:
    """Assess every volcano, highest 1-year probability first."""
    assessments = [assess_volcano_risk(v, events, now, model) for v in volcanoes]
    assessments.sort(key=lambda a: a.probability_1year, reverse=True)
    return assessments
