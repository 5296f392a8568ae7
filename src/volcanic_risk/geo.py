"""Geodesy and seismic energy utilities."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0

COMPASS_SECTORS: tuple[str, ...] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points on Earth."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push a marginally above 1 for antipodal points
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(a, 1.0)))


def bearing(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Initial compass bearing in degrees [0, 360), clockwise from north."""
    phi1, phi2 = math.radians(from_lat), math.radians(to_lat)
    dlon = math.radians(to_lon - from_lon)
    y = math.sin(dlon) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon)
    return math.degrees(math.atan2(y, x)) % 360.0


def compass_sector(azimuth_deg: float) -> str:
    """Map an azimuth to one of 8 compass sectors centred on N, NE, E, ..."""
    return COMPASS_SECTORS[int(math.floor((azimuth_deg + 22.5) / 45)) % 8]


def angular_difference(a_deg: float, b_deg: float) -> float:
    """Smallest absolute difference between two bearings, in [0, 180]."""
    diff = abs(a_deg - b_deg) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def seismic_energy(magnitude: float) -> float:
    """Radiated energy in joules (Gutenberg-Richter: log10 E = 1.5 M + 4.8)."""
    return math.pow(10, 1.5 * magnitude + 4.8)


def equivalent_magnitude(total_energy_j: float) -> float:
    """Magnitude of a single event releasing *total_energy_j*."""
    if total_energy_j <= 0:
        raise ValueError("Energy must be positive")
    return (math.log10(total_energy_j) - 4.8) / 1.5


def estimate_coulomb_stress(magnitude: float, distance_km: float) -> float:
    """Order-of-magnitude static Coulomb stress change in bars.

    Empirical scaling ``10^(1.5 M - 9.1) / r^3`` MPa, with *r* in km and
    clamped to at least 1 km.
    """
    r = max(distance_km, 1.0)
    stress_mpa = math.pow(10, 1.5 * magnitude - 9.1) / r**3
    return stress_mpa * 10.0
