"""GeoNet (New Zealand) quake feed fetcher."""

from __future__ import annotations

from typing import Any

from requests import Session

from volcanic_risk.http import create_session
from volcanic_risk.models import FetchQuery

GEONET_URL = "https://api.geonet.org.nz/quake"


def fetch_geonet(
    query: FetchQuery,
    timeout: float = 15,
    session: Session | None = None,
) -> list[dict[str, Any]]:
    """Fetch all recent GeoNet quakes regardless of intensity (MMI=-1)."""
    if session is None:
        session = create_session()
    resp = session.get(
        GEONET_URL,
        params={"MMI": -1},
        headers={"Accept": "application/vnd.geo+json;version=2"},
        timeout=timeout,
    )
    resp.raise_for_status()
    return resp.json().get("features", [])[: query.limit]
