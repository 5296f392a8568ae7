"""PHIVOLCS earthquake bulletin scraper."""

from __future__ import annotations

from html.parser import HTMLParser

from requests import Session

from volcanic_risk.http import BROWSER_USER_AGENT, create_session
from volcanic_risk.models import FetchQuery

PHIVOLCS_URL = "https://earthquake.phivolcs.dost.gov.ph/"


class _TableRowParser(HTMLParser):
    """Collect the text of every <td> cell, grouped by <tr>."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.rows: list[list[str]] = []
        self._row: list[str] | None = None
        self._cell: list[str] | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "tr":
            self._row = []
        elif tag == "td" and self._row is not None:
            self._cell = []

    def handle_endtag(self, tag: str) -> None:
        if tag == "td" and self._row is not None and self._cell is not None:
            self._row.append(" ".join("".join(self._cell).split()))
            self._cell = None
        elif tag == "tr" and self._row is not None:
            self.rows.append(self._row)
            self._row = None

    def handle_data(self, data: str) -> None:
        if self._cell is not None:
            self._cell.append(data)


def parse_bulletin_html(html: str) -> list[list[str]]:
    """Extract six-cell earthquake rows from the bulletin page.

    Header and layout rows are skipped: a data row has exactly six
    cells and a first cell holding a date with a year.
    """
    parser = _TableRowParser()
    parser.feed(html)
    parser.close()
    return [
        row
        for row in parser.rows
        if len(row) == 6 and "-" in row[0] and any(ch.isdigit() for ch in row[0])
    ]


def fetch_phivolcs(
    query: FetchQuery,
    timeout: float = 15,
    session: Session | None = None,
) -> list[list[str]]:
    """Scrape the latest PHIVOLCS bulletin table."""
    if session is None:
        session = create_session()
    resp = session.get(
        PHIVOLCS_URL,
        headers={"User-Agent": BROWSER_USER_AGENT},
        timeout=timeout,
    )
    resp.raise_for_status()
    return parse_bulletin_html(resp.text)[: query.limit]
