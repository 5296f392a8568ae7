"""Tests for provider fetchers and their error paths."""

from __future__ import annotations

from datetime import timedelta

import pytest
import requests
import responses
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import HTTPError
from responses import matchers

from volcanic_risk.fetchers import FETCHERS
from volcanic_risk.fetchers.fdsn import EMSC_URL, USGS_URL, fdsn_params, fetch_emsc, fetch_usgs
from volcanic_risk.fetchers.geonet import GEONET_URL, fetch_geonet
from volcanic_risk.fetchers.jma import JMA_LIST_URL, fetch_jma
from volcanic_risk.fetchers.phivolcs import PHIVOLCS_URL, fetch_phivolcs
from volcanic_risk.http import BROWSER_USER_AGENT, USER_AGENT, create_session
from volcanic_risk.models import BoundingBox, FetchQuery


@pytest.fixture
def query(now) -> FetchQuery:
    return FetchQuery(start=now - timedelta(hours=24), end=now, min_magnitude=2.5, limit=100)


@pytest.fixture
def session() -> requests.Session:
    """Plain session without retries so error paths return immediately."""
    return requests.Session()


class TestFdsnParams:
    def test_standard_params(self, query):
        params = fdsn_params(query, "geojson")
        assert params["format"] == "geojson"
        assert params["starttime"] == "2026-01-29T12:00:00"
        assert params["endtime"] == "2026-01-30T12:00:00"
        assert params["minmagnitude"] == 2.5
        assert params["limit"] == 100
        assert params["orderby"] == "time"
        assert "minlatitude" not in params

    def test_bounding_box(self, now):
        q = FetchQuery(
            start=now - timedelta(hours=1), end=now, bbox=BoundingBox(4.5, 21.5, 116.0, 127.0)
        )
        params = fdsn_params(q, "json")
        assert params["minlatitude"] == 4.5
        assert params["maxlongitude"] == 127.0


class TestFetchUsgs:
    @responses.activate
    def test_returns_features(self, query, session, sample_usgs_response):
        responses.add(
            responses.GET,
            USGS_URL,
            json=sample_usgs_response,
            status=200,
            match=[matchers.query_param_matcher(
                {"format": "geojson", "minmagnitude": "2.5"}, strict_match=False
            )],
        )
        features = fetch_usgs(query, session=session)
        assert len(features) == 3

    @responses.activate
    def test_http_500_raises(self, query, session):
        responses.add(responses.GET, USGS_URL, status=500)
        with pytest.raises(HTTPError):
            fetch_usgs(query, session=session)

    @responses.activate
    def test_no_content_returns_empty(self, query, session):
        responses.add(responses.GET, USGS_URL, status=204)
        assert fetch_usgs(query, session=session) == []

    @responses.activate
    def test_connection_error_raises(self, query, session):
        responses.add(responses.GET, USGS_URL, body=RequestsConnectionError("refused"))
        with pytest.raises(RequestsConnectionError):
            fetch_usgs(query, session=session)


class TestFetchEmsc:
    @responses.activate
    def test_uses_json_format(self, query, session, sample_emsc_response):
        responses.add(
            responses.GET,
            EMSC_URL,
            json=sample_emsc_response,
            status=200,
            match=[matchers.query_param_matcher({"format": "json"}, strict_match=False)],
        )
        assert len(fetch_emsc(query, session=session)) == 2

    @responses.activate
    def test_missing_features_key_returns_empty(self, query, session):
        responses.add(responses.GET, EMSC_URL, json={"type": "FeatureCollection"}, status=200)
        assert fetch_emsc(query, session=session) == []


class TestFetchJma:
    @responses.activate
    def test_returns_list(self, query, session, sample_jma_response):
        responses.add(responses.GET, JMA_LIST_URL, json=sample_jma_response, status=200)
        assert len(fetch_jma(query, session=session)) == 2

    @responses.activate
    def test_truncated_to_limit(self, now, session, sample_jma_response):
        responses.add(responses.GET, JMA_LIST_URL, json=sample_jma_response, status=200)
        q = FetchQuery(start=now - timedelta(hours=1), end=now, limit=1)
        assert len(fetch_jma(q, session=session)) == 1

    @responses.activate
    def test_non_list_payload_raises(self, query, session):
        responses.add(responses.GET, JMA_LIST_URL, json={"error": "maintenance"}, status=200)
        with pytest.raises(ValueError):
            fetch_jma(query, session=session)


class TestFetchGeonet:
    @responses.activate
    def test_requests_all_intensities(self, query, session, sample_geonet_response):
        responses.add(
            responses.GET,
            GEONET_URL,
            json=sample_geonet_response,
            status=200,
            match=[
                matchers.query_param_matcher({"MMI": "-1"}),
                matchers.header_matcher({"Accept": "application/vnd.geo+json;version=2"}),
            ],
        )
        assert len(fetch_geonet(query, session=session)) == 1

    @responses.activate
    def test_http_503_raises(self, query, session):
        responses.add(responses.GET, GEONET_URL, status=503)
        with pytest.raises(HTTPError):
            fetch_geonet(query, session=session)


class TestFetchPhivolcs:
    @responses.activate
    def test_scrapes_rows_with_browser_agent(self, query, session, sample_phivolcs_html):
        responses.add(
            responses.GET,
            PHIVOLCS_URL,
            body=sample_phivolcs_html,
            status=200,
            content_type="text/html",
            match=[matchers.header_matcher({"User-Agent": BROWSER_USER_AGENT})],
        )
        rows = fetch_phivolcs(query, session=session)
        assert len(rows) == 3
        assert rows[0][0] == "30 January 2026 - 07:00 PM"
        assert rows[0][4] == "4.4"

    @responses.activate
    def test_page_without_table_returns_empty(self, query, session):
        responses.add(responses.GET, PHIVOLCS_URL, body="<html><p>Down</p></html>", status=200)
        assert fetch_phivolcs(query, session=session) == []


class TestRegistry:
    def test_every_source_has_a_fetcher(self):
        assert set(FETCHERS) == {"usgs", "emsc", "jma", "geonet", "phivolcs"}


class TestCreateSession:
    def test_identifies_client(self):
        session = create_session()
        assert session.headers["User-Agent"] == USER_AGENT
        assert USER_AGENT.startswith("volcanic-risk/")

    def test_retry_policy_mounted(self):
        adapter = create_session(retries=4).get_adapter("https://earthquake.usgs.gov/")
        assert adapter.max_retries.total == 4
        assert 503 in adapter.max_retries.status_forcelist
        assert "GET" in adapter.max_retries.allowed_methods
