"""HTTP session shared by every provider fetcher."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from volcanic_risk import __version__

USER_AGENT = f"volcanic-risk/{__version__}"

# Some agency sites reject the default python-requests agent
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

RETRY_STATUSES: tuple[int, ...] = (429, 500, 502, 503, 504)


def create_session(
    retries: int = 2,
    backoff_factor: float = 0.5,
    pool_size: int = 10,
) -> Session:
    """Session that retries idempotent GETs on throttling and 5xx responses.

    Every provider is fetched from its own worker thread through this one
    session, so the pool holds a connection per provider with room to spare.
    """
    retry = Retry(
        total=retries,
        connect=retries,
        read=0,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET"}),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)

    session = Session()
    session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json, text/html"})
    for prefix in ("https://", "http://"):
        session.mount(prefix, adapter)
    return session
