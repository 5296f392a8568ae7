"""Japan Meteorological Agency earthquake list fetcher."""

from __future__ import annotations

from typing import Any

from requests import Session

from volcanic_risk.http import create_session
from volcanic_risk.models import FetchQuery

JMA_LIST_URL = "https://www.jma.go.jp/bosai/quake/data/list.json"


def fetch_jma(
    query: FetchQuery,
    timeout: float = 15,
    session: Session | None = None,
) -> list[dict[str, Any]]:
    """Fetch the JMA recent-earthquake list.

    The feed takes no filter parameters, so the time window, magnitude
    and region are applied after normalization. Only the first
    ``query.limit`` entries (newest first) are returned.
    """
    if session is None:
        session = create_session()
    resp = session.get(JMA_LIST_URL, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, list):
        raise ValueError("Unexpected JMA payload: expected a list")
    return data[: query.limit]
