"""FDSN event web-service fetchers (USGS and EMSC)."""

from __future__ import annotations

import logging
from typing import Any

from requests import Session

from volcanic_risk.http import create_session
from volcanic_risk.models import FetchQuery

logger = logging.getLogger(__name__)

USGS_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
EMSC_URL = "https://www.seismicportal.eu/fdsnws/event/1/query"


def fdsn_params(query: FetchQuery, response_format: str) -> dict[str, str | float | int]:
    """Build standard FDSN event query parameters."""
    params: dict[str, str | float | int] = {
        "format": response_format,
        "starttime": query.start.strftime("%Y-%m-%dT%H:%M:%S"),
        "endtime": query.end.strftime("%Y-%m-%dT%H:%M:%S"),
        "minmagnitude": query.min_magnitude,
        "limit": query.limit,
        "orderby": "time",
    }
    if query.bbox is not None:
        params.update(
            minlatitude=query.bbox.min_lat,
            maxlatitude=query.bbox.max_lat,
            minlongitude=query.bbox.min_lon,
            maxlongitude=query.bbox.max_lon,
        )
    return params


def _fetch_features(
    url: str,
    params: dict[str, str | float | int],
    timeout: float,
    session: Session | None,
) -> list[dict[str, Any]]:
    if session is None:
        session = create_session()
    resp = session.get(url, params=params, timeout=timeout)
    # FDSN services answer 204 No Content for an empty result set
    if resp.status_code == 204:
        return []
    resp.raise_for_status()
    return resp.json().get("features", [])


def fetch_usgs(
    query: FetchQuery,
    timeout: float = 15,
    session: Session | None = None,
) -> list[dict[str, Any]]:
    """Fetch GeoJSON features from the USGS FDSN Event Web Service.

    Raises on network or HTTP errors; callers decide how to degrade.
    """
    return _fetch_features(USGS_URL, fdsn_params(query, "geojson"), timeout, session)


def fetch_emsc(
    query: FetchQuery,
    timeout: float = 15,
    session: Session | None = None,
) -> list[dict[str, Any]]:
    """Fetch GeoJSON-style features from the EMSC SeismicPortal FDSN service."""
    return _fetch_features(EMSC_URL, fdsn_params(query, "json"), timeout, session)
