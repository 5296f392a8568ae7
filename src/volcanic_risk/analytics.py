"""Seismic analytics around a reference point.

All functions take an already range-filtered event list and an explicit
assessment instant, and return a result object. Too-small samples give
an explicit insufficient-data result rather than an extrapolated value.

References:
    Aki, K. (1965). Maximum likelihood estimate of b in the formula
    log N = a - bM and its confidence limits. Bull. Earthq. Res. Inst. 43.
    Roman, D. C. & Cashman, K. V. (2006). The origin of volcano-tectonic
    earthquake swarms. Geology 34(6).
    Kilburn, C. R. J. (2003). Multiscale fracturing as a key to forecasting
    volcanic eruptions. J. Volcanol. Geotherm. Res. 125.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta

import numpy as np

from volcanic_risk.geo import bearing, compass_sector, equivalent_magnitude, haversine, seismic_energy
from volcanic_risk.models import (
    AccelerationAnalysis,
    BValueAnalysis,
    DepthMigration,
    MigrationDirection,
    SeismicCluster,
    UnifiedSeismicEvent,
)

MS_PER_DAY = 86_400_000
MS_PER_HOUR = 3_600_000

# b-value
COMPLETENESS_MAGNITUDE = 2.0
B_VALUE_MIN_SAMPLES = 20
B_VALUE_LOW = 0.7
B_VALUE_HIGH = 1.3

# Depth migration
DEPTH_WINDOW_DAYS = 14
DEPTH_MIN_EVENTS = 10
DEPTH_MAX_KM = 100.0
DEPTH_NOISE_RATE = 0.1
DEPTH_SIGNIFICANT_RATE = 0.5
DEPTH_CRITICAL_RATE = 2.0
DEPTH_MIN_R2 = 0.3

# Acceleration
ACCELERATION_WINDOW_DAYS = 30
ACCELERATION_MIN_EVENTS = 10
ACCELERATION_MIN_DAYS = 5
ACCELERATION_MIN_SLOPE = 0.5
ACCELERATION_EXPONENTIAL_SLOPE = 1.0
ACCELERATION_MIN_R2 = 0.5
FORECAST_HORIZON_DAYS = 365

# Clustering
CLUSTER_RADIUS_KM = 30.0
CLUSTER_MAX_GAP_HOURS = 72.0
CLUSTER_MIN_SIZE = 3
SWARM_MIN_EVENTS = 10
SWARM_MAX_MAG_STD = 0.5
CLUSTER_MIGRATION_MIN_DEPTHS = 5

_INSUFFICIENT = "Insufficient data for reliable {} estimate"


@dataclass(frozen=True)
class Regression:
    slope: float
    intercept: float
    r_squared: float


def linear_regression(x: list[float] | np.ndarray, y: list[float] | np.ndarray) -> Regression:
    """Ordinary least squares fit of y on x.

    Degenerate inputs (fewer than two points, or constant x) give a flat
    zero fit. R² is 0 when y has no variance.
    """
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    n = xs.size
    if n < 2:
        return Regression(0.0, 0.0, 0.0)

    if np.ptp(xs) == 0:
        return Regression(0.0, float(np.mean(ys)), 0.0)

    slope, intercept = np.polyfit(xs, ys, 1)

    ss_total = np.sum((ys - ys.mean()) ** 2)
    ss_residual = np.sum((ys - (slope * xs + intercept)) ** 2)
    r2 = 1.0 - ss_residual / ss_total if ss_total > 0 else 0.0
    return Regression(float(slope), float(intercept), float(r2))


def _within_window(
    events: list[UnifiedSeismicEvent], now: datetime, window_days: float
) -> list[UnifiedSeismicEvent]:
    now_ms = now.timestamp() * 1000
    window_ms = window_days * MS_PER_DAY
    return sorted(
        (e for e in events if 0 <= now_ms - e.time_ms < window_ms),
        key=lambda e: e.time_ms,
    )


def analyze_b_value(
    events: list[UnifiedSeismicEvent],
    completeness_magnitude: float = COMPLETENESS_MAGNITUDE,
) -> BValueAnalysis:
    """Gutenberg-Richter b-value by Aki's maximum-likelihood estimator.

    ``b = log10(e) / (mean(M) - (Mc - 0.05))`` over magnitudes at or above
    the completeness magnitude Mc. The 0.05 term corrects for magnitudes
    binned at 0.1 units.
    """
    mags = np.array(
        [e.magnitude for e in events if e.magnitude >= completeness_magnitude],
        dtype=np.float64,
    )
    n = int(mags.size)
    if n < B_VALUE_MIN_SAMPLES:
        return BValueAnalysis(
            b_value=None,
            a_value=None,
            standard_error=None,
            sample_size=n,
            completeness_magnitude=completeness_magnitude,
            anomaly="normal",
            sufficient_data=False,
            interpretation=_INSUFFICIENT.format("b-value"),
        )

    b = math.log10(math.e) / (float(mags.mean()) - (completeness_magnitude - 0.05))
    standard_error = b / math.sqrt(n)  # Shi & Bolt (1982) approximation
    a = math.log10(n) + b * completeness_magnitude

    if b < B_VALUE_LOW:
        anomaly = "low"
        interpretation = (
            f"Low b-value ({b:.2f}) suggests high stress accumulation "
            "and potential for larger events"
        )
    elif b > B_VALUE_HIGH:
        anomaly = "high"
        interpretation = (
            f"High b-value ({b:.2f}) suggests fluid involvement or swarm-type activity"
        )
    else:
        anomaly = "normal"
        interpretation = f"Normal b-value ({b:.2f}) indicates typical tectonic seismicity"

    return BValueAnalysis(
        b_value=round(b, 2),
        a_value=round(a, 2),
        standard_error=round(standard_error, 3),
        sample_size=n,
        completeness_magnitude=completeness_magnitude,
        anomaly=anomaly,
        sufficient_data=True,
        interpretation=interpretation,
    )


def _direction(slope: float) -> MigrationDirection:
    # Depth is positive downward, so a falling depth is an ascending source
    if slope < -DEPTH_NOISE_RATE:
        return "shallowing"
    if slope > DEPTH_NOISE_RATE:
        return "deepening"
    return "stable"


def analyze_depth_migration(
    events: list[UnifiedSeismicEvent],
    now: datetime,
    window_days: int = DEPTH_WINDOW_DAYS,
) -> DepthMigration:
    """Least-squares trend of hypocentre depth against elapsed days."""
    recent = [
        e for e in _within_window(events, now, window_days)
        if 0 < e.depth_km < DEPTH_MAX_KM
    ]
    if len(recent) < DEPTH_MIN_EVENTS:
        return DepthMigration(
            detected=False,
            direction="stable",
            rate_km_per_day=0.0,
            r_squared=0.0,
            confidence=0.0,
            event_count=len(recent),
            window_days=window_days,
            sufficient_data=False,
            interpretation="Insufficient data for depth migration analysis",
        )

    t0 = recent[0].time_ms
    days = [(e.time_ms - t0) / MS_PER_DAY for e in recent]
    depths = [e.depth_km for e in recent]
    fit = linear_regression(days, depths)

    direction = _direction(fit.slope)
    rate = abs(fit.slope)
    detected = rate >= DEPTH_SIGNIFICANT_RATE and fit.r_squared >= DEPTH_MIN_R2

    if direction == "shallowing" and detected and rate >= DEPTH_CRITICAL_RATE:
        interpretation = (
            f"CRITICAL: Rapid shallowing ({rate:.2f} km/day) may indicate ascending magma"
        )
    elif direction == "shallowing" and detected:
        interpretation = (
            f"Shallowing trend ({rate:.2f} km/day) warrants continued monitoring"
        )
    elif direction == "deepening" and detected:
        interpretation = "Deepening trend may indicate stress relaxation or fluid drainage"
    else:
        interpretation = "No significant depth migration detected"

    return DepthMigration(
        detected=detected,
        direction=direction,
        rate_km_per_day=round(rate, 3),
        r_squared=round(fit.r_squared, 3),
        confidence=min(max(fit.r_squared, 0.0), 1.0),
        event_count=len(recent),
        window_days=window_days,
        sufficient_data=True,
        interpretation=interpretation,
    )


def _no_acceleration(event_count: int, window_days: int) -> AccelerationAnalysis:
    return AccelerationAnalysis(
        detected=False,
        acceleration_type="none",
        rate_slope=0.0,
        r_squared=0.0,
        confidence=0.0,
        event_count=event_count,
        window_days=window_days,
        sufficient_data=False,
        interpretation="Insufficient data for acceleration analysis",
    )


def analyze_acceleration(
    events: list[UnifiedSeismicEvent],
    now: datetime,
    window_days: int = ACCELERATION_WINDOW_DAYS,
) -> AccelerationAnalysis:
    """Detect accelerating event rates with the Failure Forecast Method.

    Daily counts are regressed on day index. When counts rise steadily
    the inverse rate (1/count) is also fitted; a falling inverse rate
    indicates power-law acceleration, and its zero crossing is reported
    as a projected failure time if it lies within the next year.
    """
    recent = _within_window(events, now, window_days)
    if len(recent) < ACCELERATION_MIN_EVENTS:
        return _no_acceleration(len(recent), window_days)

    t0 = recent[0].time_ms
    daily: dict[int, int] = defaultdict(int)
    for e in recent:
        daily[(e.time_ms - t0) // MS_PER_DAY] += 1
    if len(daily) < ACCELERATION_MIN_DAYS:
        return _no_acceleration(len(recent), window_days)

    days = sorted(daily)
    counts = [daily[d] for d in days]
    trend = linear_regression(days, counts)
    inverse = linear_regression(days, [1.0 / c for c in counts])

    acceleration_type = "none"
    days_to_failure: float | None = None
    projected: str | None = None
    if trend.slope > ACCELERATION_MIN_SLOPE and trend.r_squared > ACCELERATION_MIN_R2:
        if inverse.slope < 0 and inverse.r_squared > ACCELERATION_MIN_R2:
            acceleration_type = "power_law"
            crossing_day = -inverse.intercept / inverse.slope
            crossing_ms = t0 + crossing_day * MS_PER_DAY
            ahead_days = (crossing_ms - now.timestamp() * 1000) / MS_PER_DAY
            if 0 < ahead_days <= FORECAST_HORIZON_DAYS:
                days_to_failure = round(ahead_days, 1)
                projected = (now + timedelta(days=ahead_days)).isoformat()
        elif trend.slope > ACCELERATION_EXPONENTIAL_SLOPE:
            acceleration_type = "exponential"
        else:
            acceleration_type = "linear"

    detected = acceleration_type != "none"
    if acceleration_type == "power_law":
        interpretation = "Power-law acceleration in event rate (inverse-rate decline)"
        if days_to_failure is not None:
            interpretation += f"; inverse rate projects to zero in {days_to_failure:.0f} days"
    elif detected:
        interpretation = f"{acceleration_type.capitalize()} increase in daily event rate"
    else:
        interpretation = "No accelerating seismicity detected"

    return AccelerationAnalysis(
        detected=detected,
        acceleration_type=acceleration_type,
        rate_slope=round(trend.slope, 2),
        r_squared=round(trend.r_squared, 2),
        confidence=min(max(trend.r_squared, 0.0), 1.0),
        event_count=len(recent),
        window_days=window_days,
        sufficient_data=True,
        interpretation=interpretation,
        days_to_failure=days_to_failure,
        projected_failure=projected,
    )


def _build_cluster(
    sector: str,
    members: list[UnifiedSeismicEvent],
    ref_lat: float,
    ref_lon: float,
) -> SeismicCluster:
    n = len(members)
    mags = np.array([e.magnitude for e in members], dtype=np.float64)
    depth_members = [e for e in members if e.depth_km > 0]
    depths = [e.depth_km for e in depth_members]
    centroid_lat = sum(e.latitude for e in members) / n
    centroid_lon = sum(e.longitude for e in members) / n
    total_energy = sum(seismic_energy(e.magnitude) for e in members)
    distances = [haversine(ref_lat, ref_lon, e.latitude, e.longitude) for e in members]
    duration = (members[-1].time_ms - members[0].time_ms) / MS_PER_HOUR

    direction: MigrationDirection = "stable"
    migrating = False
    if len(depths) >= CLUSTER_MIGRATION_MIN_DEPTHS:
        t0 = depth_members[0].time_ms
        fit = linear_regression([(e.time_ms - t0) / MS_PER_DAY for e in depth_members], depths)
        direction = _direction(fit.slope)
        migrating = abs(fit.slope) > DEPTH_NOISE_RATE and fit.r_squared > DEPTH_MIN_R2

    return SeismicCluster(
        id=f"cluster-{sector}-{members[0].time_ms}",
        sector=sector,
        event_ids=tuple(e.id for e in members),
        event_count=n,
        centroid_lat=round(centroid_lat, 4),
        centroid_lon=round(centroid_lon, 4),
        max_magnitude=float(mags.max()),
        total_energy_j=total_energy,
        equivalent_magnitude=round(equivalent_magnitude(total_energy), 2),
        avg_depth_km=round(sum(depths) / len(depths), 1) if depths else None,
        min_depth_km=min(depths) if depths else None,
        max_depth_km=max(depths) if depths else None,
        avg_distance_km=round(sum(distances) / n, 1),
        azimuth_deg=round(bearing(ref_lat, ref_lon, centroid_lat, centroid_lon), 1),
        start_ms=members[0].time_ms,
        end_ms=members[-1].time_ms,
        duration_hours=round(duration, 2),
        peak_rate_per_hour=round(n / (duration + 0.1), 3) if duration > 0 else float(n),
        # Population standard deviation of magnitudes
        is_swarm=float(mags.std()) < SWARM_MAX_MAG_STD and n >= SWARM_MIN_EVENTS,
        is_migrating=migrating,
        migration_direction=direction,
    )


def identify_clusters(
    events: list[UnifiedSeismicEvent],
    ref_lat: float,
    ref_lon: float,
    radius_km: float = CLUSTER_RADIUS_KM,
    max_gap_hours: float | None = CLUSTER_MAX_GAP_HOURS,
    min_size: int = CLUSTER_MIN_SIZE,
) -> list[SeismicCluster]:
    """Group events by 45° bearing sector, then split each sector on time gaps.

    Only events within *radius_km* of the reference point are considered.
    ``max_gap_hours=None`` keeps each sector as a single group. Groups
    smaller than *min_size* are discarded. Clusters are returned by total
    energy, largest first.
    """
    by_sector: dict[str, list[UnifiedSeismicEvent]] = defaultdict(list)
    for e in sorted(events, key=lambda e: e.time_ms):
        if haversine(ref_lat, ref_lon, e.latitude, e.longitude) > radius_km:
            continue
        by_sector[compass_sector(bearing(ref_lat, ref_lon, e.latitude, e.longitude))].append(e)

    clusters: list[SeismicCluster] = []
    for sector, members in by_sector.items():
        group: list[UnifiedSeismicEvent] = []
        for e in members:
            if (
                group
                and max_gap_hours is not None
                and (e.time_ms - group[-1].time_ms) / MS_PER_HOUR > max_gap_hours
            ):
                if len(group) >= min_size:
                    clusters.append(_build_cluster(sector, group, ref_lat, ref_lon))
                group = []
            group.append(e)
        if len(group) >= min_size:
            clusters.append(_build_cluster(sector, group, ref_lat, ref_lon))

    clusters.sort(key=lambda c: c.total_energy_j, reverse=True)
    return clusters
