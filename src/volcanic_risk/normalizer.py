"""Convert provider-native earthquake records into UnifiedSeismicEvent.

Every normalizer takes one already-retrieved record and returns a unified
event, or None when the record lacks coordinates, magnitude or origin time.
Depth falls back to DEFAULT_DEPTH_KM when a provider omits it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from volcanic_risk.config import Source
from volcanic_risk.models import UnifiedSeismicEvent

logger = logging.getLogger(__name__)

DEFAULT_DEPTH_KM = 10.0

PHILIPPINE_TIME = timezone(timedelta(hours=8))

_JMA_COORDS = re.compile(r"^([+-]\d+(?:\.\d+)?)([+-]\d+(?:\.\d+)?)([+-]\d+)?/?$")

_PARSE_ERRORS = (KeyError, TypeError, ValueError, IndexError)


def _to_ms(value: Any) -> int:
    """Epoch milliseconds from an int/float epoch-ms or an ISO 8601 string."""
    if isinstance(value, (int, float)):
        return int(value)
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _depth_or_default(coords: list[Any]) -> float:
    if len(coords) < 3 or coords[2] is None:
        return DEFAULT_DEPTH_KM
    # EMSC reports depth as a negative elevation
    depth = abs(float(coords[2]))
    return depth if depth else DEFAULT_DEPTH_KM


def _lon_lat(coords: list[Any]) -> tuple[float, float]:
    if coords[0] is None or coords[1] is None:
        raise ValueError("missing coordinates")
    return float(coords[0]), float(coords[1])


def normalize_usgs(feature: dict[str, Any]) -> UnifiedSeismicEvent | None:
    """USGS FDSN GeoJSON feature."""
    try:
        props = feature["properties"]
        if props.get("mag") is None or props.get("time") is None:
            return None
        coords = feature["geometry"]["coordinates"]
        lon, lat = _lon_lat(coords)
        native_id = feature["id"]
        return UnifiedSeismicEvent(
            id=f"usgs_{native_id}",
            source="usgs",
            magnitude=float(props["mag"]),
            magnitude_type=props.get("magType") or "ml",
            place=props.get("place") or "Unknown",
            time_ms=_to_ms(props["time"]),
            latitude=lat,
            longitude=lon,
            depth_km=float(coords[2]) if len(coords) > 2 and coords[2] is not None
            else DEFAULT_DEPTH_KM,
            url=props.get("url")
            or f"https://earthquake.usgs.gov/earthquakes/eventpage/{native_id}",
            felt=int(props["felt"]) if props.get("felt") is not None else None,
            tsunami=props.get("tsunami") == 1,
        )
    except _PARSE_ERRORS:
        logger.debug("Dropping malformed USGS record %r", feature.get("id"))
        return None


def normalize_emsc(feature: dict[str, Any]) -> UnifiedSeismicEvent | None:
    """EMSC SeismicPortal FDSN JSON feature."""
    try:
        props = feature["properties"]
        if props.get("mag") is None or props.get("time") is None:
            return None
        native_id = props.get("source_id") or props.get("unid") or feature["id"]
        lon, lat = _lon_lat(feature["geometry"]["coordinates"])
        unid = props.get("unid")
        return UnifiedSeismicEvent(
            id=f"emsc_{native_id}",
            source="emsc",
            magnitude=float(props["mag"]),
            magnitude_type=props.get("magtype") or "ml",
            place=props.get("flynn_region") or props.get("place") or "Unknown",
            time_ms=_to_ms(props["time"]),
            latitude=lat,
            longitude=lon,
            depth_km=_depth_or_default(feature["geometry"]["coordinates"]),
            url=f"https://www.emsc-csem.org/Earthquake/earthquake.php?id={unid}"
            if unid else None,
        )
    except _PARSE_ERRORS:
        logger.debug("Dropping malformed EMSC record %r", feature.get("id"))
        return None


def parse_jma_coordinates(cod: str) -> tuple[float, float, float] | None:
    """Parse JMA ``cod`` strings such as ``"+35.8+140.3-40000/"``.

    Returns (latitude, longitude, depth_km) or None when unparsable.
    Depth is given in metres, negative downward, and may be omitted.
    """
    match = _JMA_COORDS.match((cod or "").strip())
    if match is None:
        return None
    depth = match.group(3)
    return (
        float(match.group(1)),
        float(match.group(2)),
        abs(int(depth)) / 1000 if depth is not None else DEFAULT_DEPTH_KM,
    )


def normalize_jma(item: dict[str, Any]) -> UnifiedSeismicEvent | None:
    """Japan Meteorological Agency list.json entry."""
    try:
        coords = parse_jma_coordinates(item.get("cod", ""))
        if coords is None or not item.get("mag") or not item.get("at"):
            return None
        lat, lon, depth = coords
        json_name = item.get("json")
        return UnifiedSeismicEvent(
            id=f"jma_{item['eid']}",
            source="jma",
            magnitude=float(item["mag"]),
            magnitude_type="mj",
            place=item.get("en_anm") or item.get("anm") or "Japan",
            time_ms=_to_ms(item["at"]),
            latitude=lat,
            longitude=lon,
            depth_km=depth,
            url=f"https://www.jma.go.jp/bosai/quake/data/{json_name}" if json_name else None,
        )
    except _PARSE_ERRORS:
        logger.debug("Dropping malformed JMA record %r", item.get("eid"))
        return None


def normalize_geonet(feature: dict[str, Any]) -> UnifiedSeismicEvent | None:
    """GeoNet (New Zealand) quake feature."""
    try:
        props = feature["properties"]
        if props.get("magnitude") is None or props.get("time") is None:
            return None
        public_id = props["publicID"]
        lon, lat = _lon_lat(feature["geometry"]["coordinates"])
        return UnifiedSeismicEvent(
            id=f"geonet_{public_id}",
            source="geonet",
            magnitude=float(props["magnitude"]),
            magnitude_type=props.get("magnitudeType") or "ml",
            place=props.get("locality") or "New Zealand",
            time_ms=_to_ms(props["time"]),
            latitude=lat,
            longitude=lon,
            depth_km=float(props["depth"]) if props.get("depth")
            else _depth_or_default(feature["geometry"]["coordinates"]),
            url=f"https://www.geonet.org.nz/earthquake/{public_id}",
        )
    except _PARSE_ERRORS:
        logger.debug("Dropping malformed GeoNet record")
        return None


def parse_phivolcs_time(text: str) -> int | None:
    """Epoch ms from a PHIVOLCS timestamp like ``30 January 2026 - 04:47 PM`` (UTC+8)."""
    cleaned = " ".join(text.split())
    for fmt in ("%d %B %Y - %I:%M %p", "%d %b %Y - %I:%M %p", "%d %B %Y - %H:%M"):
        try:
            local = datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
        return int(local.replace(tzinfo=PHILIPPINE_TIME).timestamp() * 1000)
    return None


def normalize_phivolcs(cells: list[str]) -> UnifiedSeismicEvent | None:
    """One six-cell row scraped from the PHIVOLCS bulletin table.

    Cells are: local time, latitude, longitude, depth, magnitude, location.
    """
    if len(cells) != 6:
        return None
    time_text, lat_text, lon_text, depth_text, mag_text, location = (c.strip() for c in cells)
    time_ms = parse_phivolcs_time(time_text)
    if time_ms is None:
        return None
    try:
        lat = float(lat_text)
        lon = float(lon_text)
        magnitude = float(mag_text)
    except ValueError:
        return None
    try:
        depth = float(depth_text) or DEFAULT_DEPTH_KM
    except ValueError:
        depth = DEFAULT_DEPTH_KM

    # Reject rows outside the Philippine monitoring area or with garbage magnitudes
    if not (0.5 <= magnitude <= 10.0 and 4.0 <= lat <= 22.0 and 116.0 <= lon <= 128.0):
        return None

    return UnifiedSeismicEvent(
        id=f"phivolcs_{time_ms}_{magnitude:.1f}_{lat:.2f}_{lon:.2f}",
        source="phivolcs",
        magnitude=magnitude,
        magnitude_type="Ms",
        place=location or "Philippines",
        time_ms=time_ms,
        latitude=lat,
        longitude=lon,
        depth_km=depth,
        url="https://earthquake.phivolcs.dost.gov.ph/",
    )


NORMALIZERS: dict[Source, Callable[[Any], UnifiedSeismicEvent | None]] = {
    "usgs": normalize_usgs,
    "emsc": normalize_emsc,
    "jma": normalize_jma,
    "geonet": normalize_geonet,
    "phivolcs": normalize_phivolcs,
}


def normalize_records(source: Source, records: Iterable[Any]) -> list[UnifiedSeismicEvent]:
    """Normalize a provider batch, dropping records that fail to convert."""
    normalize = NORMALIZERS[source]
    events: list[UnifiedSeismicEvent] = []
    dropped = 0
    for record in records:
        event = normalize(record)
        if event is None:
            dropped += 1
            continue
        events.append(event)
    if dropped:
        logger.debug("%s: dropped %d malformed records", source, dropped)
    return events
