"""GeoJSON exporter for fused earthquakes."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from volcanic_risk.aggregator import FusedResult
from volcanic_risk.models import UnifiedSeismicEvent

GEOJSON_MEDIA_TYPE = "application/geo+json"


def _make_earthquake_feature(event: UnifiedSeismicEvent) -> dict[str, Any]:
    """Create a GeoJSON Feature for a fused earthquake."""
    return {
        "type": "Feature",
        "id": event.id,
        "geometry": {
            "type": "Point",
            "coordinates": [event.longitude, event.latitude, event.depth_km],
        },
        "properties": {
            "mag": event.magnitude,
            "magType": event.magnitude_type,
            "place": event.place,
            "time": event.time_ms,
            "url": event.url,
            "felt": event.felt,
            "tsunami": event.tsunami,
            "source": event.source,
        },
    }


def build_feature_collection(
    result: FusedResult, generated: datetime | None = None
) -> dict[str, Any]:
    """FeatureCollection of fused events with a metadata block.

    GeoJSON coordinates are [longitude, latitude, depth_km].
    """
    generated = generated or datetime.now(tz=timezone.utc)
    return {
        "type": "FeatureCollection",
        "metadata": {
            "generated": generated.isoformat(),
            "count": len(result.events),
            **asdict(result.stats),
        },
        "features": [_make_earthquake_feature(e) for e in result.events],
    }


def export_geojson(result: FusedResult, output_path: Path) -> Path:
    """Export fused earthquakes as a GeoJSON FeatureCollection."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(build_feature_collection(result), f, indent=2, ensure_ascii=False)
    return output_path
