"""Provider fetchers: each returns raw provider-native records for a FetchQuery."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from requests import Session

from volcanic_risk.config import Source
from volcanic_risk.fetchers.fdsn import fetch_emsc, fetch_usgs
from volcanic_risk.fetchers.geonet import fetch_geonet
from volcanic_risk.fetchers.jma import fetch_jma
from volcanic_risk.fetchers.phivolcs import fetch_phivolcs
from volcanic_risk.models import FetchQuery

Fetcher = Callable[[FetchQuery, float, Session | None], list[Any]]

FETCHERS: dict[Source, Fetcher] = {
    "usgs": fetch_usgs,
    "emsc": fetch_emsc,
    "jma": fetch_jma,
    "geonet": fetch_geonet,
    "phivolcs": fetch_phivolcs,
}

__all__ = [
    "FETCHERS",
    "Fetcher",
    "fetch_emsc",
    "fetch_geonet",
    "fetch_jma",
    "fetch_phivolcs",
    "fetch_usgs",
]
