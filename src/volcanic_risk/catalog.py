"""Lookup over the bundled volcano reference data."""

from __future__ import annotations

import re

from volcanic_risk.data.volcanoes import GLOBAL_VOLCANOES, PHILIPPINE_VOLCANOES
from volcanic_risk.geo import haversine
from volcanic_risk.models import Volcano


class VolcanoNotFoundError(LookupError):
    """No bundled volcano matches the requested id or slug."""


def volcano_slug(volcano: Volcano) -> str:
    """URL-friendly name, e.g. ``"Hibok-Hibok"`` -> ``"hibok-hibok"``."""
    return re.sub(r"[^a-z0-9-]", "", re.sub(r"\s+", "-", volcano.name.lower()))


def all_volcanoes(kind: str | None = None) -> list[Volcano]:
    """Every bundled volcano, optionally only ``"philippine"`` or ``"global"``."""
    volcanoes: list[Volcano] = [*PHILIPPINE_VOLCANOES, *GLOBAL_VOLCANOES]
    if kind is None:
        return volcanoes
    return [v for v in volcanoes if v.kind == kind]


def find_volcano(volcano_id: str) -> Volcano:
    """Find a volcano by GVP id or slug."""
    key = volcano_id.strip().lower()
    for volcano in all_volcanoes():
        if volcano.id == key or volcano_slug(volcano) == key:
            return volcano
    raise VolcanoNotFoundError(f"Unknown volcano: {volcano_id!r}")


def volcanoes_near(latitude: float, longitude: float, radius_km: float) -> list[Volcano]:
    """Volcanoes within *radius_km* of a point, nearest first."""
    distances = [
        (haversine(latitude, longitude, v.latitude, v.longitude), v) for v in all_volcanoes()
    ]
    return [v for d, v in sorted(distances, key=lambda pair: pair[0]) if d <= radius_km]
