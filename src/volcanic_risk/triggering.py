"""Earthquake-triggered volcanic unrest rules.

Each rule says that an earthquake of at least some magnitude within some
distance raises the eruption rate of a volcano by ``increase`` for
``duration_years``, decaying linearly to zero.

References:
    Nishimura, T. (2017). Triggering of volcanic eruptions by large
    earthquakes. Geophys. Res. Lett. 44.
    Jenkins, S. F. et al. (2024). Regional statistical triggering of
    eruptions by large earthquakes.
    Manga, M. & Brodsky, E. (2006). Seismic triggering of eruptions in
    the far field. Annu. Rev. Earth Planet. Sci. 34.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from volcanic_risk.geo import estimate_coulomb_stress, haversine
from volcanic_risk.models import TriggerEvent, UnifiedSeismicEvent

DAYS_PER_YEAR = 365.25
MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class TriggeringRule:
    """One published distance/magnitude/time-decay triggering relation."""

    name: str
    citation: str
    min_magnitude: float
    max_distance_km: float
    duration_years: float
    increase: float

    def contribution(self, magnitude: float, distance_km: float, years_elapsed: float) -> float:
        """Linearly decayed rate increase, or 0.0 when the rule does not apply."""
        if magnitude < self.min_magnitude or distance_km > self.max_distance_km:
            return 0.0
        if years_elapsed < 0 or years_elapsed > self.duration_years:
            return 0.0
        return self.increase * (1.0 - years_elapsed / self.duration_years)


NISHIMURA = TriggeringRule(
    name="nishimura",
    citation="Nishimura (2017)",
    min_magnitude=7.5,
    max_distance_km=200.0,
    duration_years=5.0,
    increase=0.50,
)
JENKINS = TriggeringRule(
    name="jenkins",
    citation="Jenkins et al. (2024)",
    min_magnitude=7.0,
    max_distance_km=750.0,
    duration_years=4.0,
    increase=0.25,
)
MANGA_BRODSKY = TriggeringRule(
    name="manga_brodsky",
    citation="Manga & Brodsky (2006)",
    min_magnitude=8.0,
    max_distance_km=5000.0,
    duration_years=1.0,
    increase=0.15,
)

DEFAULT_RULES: tuple[TriggeringRule, ...] = (NISHIMURA, JENKINS, MANGA_BRODSKY)


@dataclass
class TriggeringResult:
    """Triggering factors for one volcano.

    ``factor`` is the primary multiplier: per rule, 1 plus the largest
    decayed contribution; across rules, the largest of those. The
    ``cumulative_load`` sums every decayed contribution over all rules
    and events and is reported only, never used as a multiplier.
    """

    factor: float = 1.0
    rule_factors: dict[str, float] = field(default_factory=dict)
    triggers: list[TriggerEvent] = field(default_factory=list)
    cumulative_load: float = 0.0
    static_stress_bars: float = 0.0

    def triggered(self, rule_name: str) -> bool:
        return self.rule_factors.get(rule_name, 1.0) > 1.0


def years_since(event: UnifiedSeismicEvent, now: datetime) -> float:
    return (now.timestamp() * 1000 - event.time_ms) / MS_PER_DAY / DAYS_PER_YEAR


def evaluate_triggering(
    events: list[UnifiedSeismicEvent],
    ref_lat: float,
    ref_lon: float,
    now: datetime,
    rules: tuple[TriggeringRule, ...] = DEFAULT_RULES,
) -> TriggeringResult:
    """Evaluate every rule against every event, relative to *now*."""
    result = TriggeringResult(rule_factors={rule.name: 1.0 for rule in rules})
    stressed: set[str] = set()

    for event in events:
        # Cheap magnitude gate before the distance computation
        if all(event.magnitude < rule.min_magnitude for rule in rules):
            continue
        distance = haversine(ref_lat, ref_lon, event.latitude, event.longitude)
        elapsed = years_since(event, now)

        for rule in rules:
            contribution = rule.contribution(event.magnitude, distance, elapsed)
            if contribution <= 0:
                continue
            stress = estimate_coulomb_stress(event.magnitude, distance)
            result.rule_factors[rule.name] = max(
                result.rule_factors[rule.name], 1.0 + contribution
            )
            result.cumulative_load += contribution
            if event.id not in stressed:
                result.static_stress_bars += stress
                stressed.add(event.id)
            result.triggers.append(
                TriggerEvent(
                    event_id=event.id,
                    rule=rule.name,
                    magnitude=event.magnitude,
                    distance_km=round(distance, 1),
                    years_elapsed=round(elapsed, 3),
                    contribution=round(contribution, 4),
                    coulomb_stress_bars=stress,
                )
            )

    result.factor = max(result.rule_factors.values(), default=1.0)
    result.triggers.sort(key=lambda t: t.contribution, reverse=True)
    return result
