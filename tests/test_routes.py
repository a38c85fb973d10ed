"""Tests of the HTTP endpoints through the FastAPI application."""

from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient
from lxml import etree

from conftest import LIVELINK_URL
from server.api_server import app
from server.core.DescriptorService import LOCATION_NS, OS_NS
from server.core.SearchService import SearchService
from shared.credentials.CredentialStore import CredentialStore

SEARCH_PARAMS = {
    "query": "report",
    "livelinkUrl": LIVELINK_URL,
    "targetAppID": "livelink",
    "loginPattern": "{user:lc}",
    "count": "2",
}


@pytest.fixture
def client(admin_credentials, livelink):
    with TestClient(app) as test_client:
        helper_config = app.state.helper_config
        app.state.search_service = SearchService(
            helper_config, CredentialStore(helper_config), transport=livelink.transport
        )
        yield test_client


class TestSearchEndpoint:
    @pytest.mark.parametrize("path", ["/ExecuteQuery.aspx", "/search"])
    def test_rss(self, client, livelink, path):
        response = client.get(path, params=SEARCH_PARAMS, headers={"X-Remote-User": "CORP\\JDoe"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert len(etree.fromstring(response.content).findall("channel/item")) == 2
        assert "userLogin=jdoe" in str(livelink.search_requests[0].url)

    def test_html(self, client):
        response = client.get(
            "/ExecuteQuery.aspx", params={**SEARCH_PARAMS, "format": "html"}, headers={"X-Remote-User": "jdoe"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert b"report.pdf" in response.content

    def test_first_of_repeated_parameters_wins(self, client, livelink):
        others = urlencode({key: value for key, value in SEARCH_PARAMS.items() if key != "query"})

        response = client.get(
            f"/ExecuteQuery.aspx?query=first&query=second&{others}",
            headers={"X-Remote-User": "jdoe"},
        )

        assert response.status_code == 200
        assert "where1=first" in str(livelink.search_requests[0].url)

    def test_missing_remote_user(self, client):
        response = client.get("/ExecuteQuery.aspx", params=SEARCH_PARAMS)

        assert response.status_code == 500
        assert response.headers["x-status-description"] == "The authenticated user was not provided."

    def test_custom_remote_user_header(self, client, livelink, monkeypatch):
        monkeypatch.setenv("REMOTE_USER_HEADER", "X-Forwarded-User")

        response = client.get("/ExecuteQuery.aspx", params=SEARCH_PARAMS, headers={"X-Forwarded-User": "jdoe"})

        assert response.status_code == 200


class TestDescriptorEndpoint:
    @pytest.mark.parametrize("path", ["/GetOSDX.aspx", "/osdx"])
    def test_descriptor(self, client, path):
        params = {"livelinkUrl": LIVELINK_URL, "targetAppID": "livelink", "loginPattern": "{user}"}

        response = client.get(path, params=params)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        root = etree.fromstring(response.content)
        assert root.tag == f"{{{OS_NS}}}OpenSearchDescription"
        assert root.findtext(f"{{{OS_NS}}}ShortName") == "Search Enterprise at livelink.example.com"
        assert root.findtext(f"{{{LOCATION_NS}}}InternalName") == "search_livelink.example.com"
        templates = {url.get("type"): url.get("template") for url in root.findall(f"{{{OS_NS}}}Url")}
        results = templates["application/rss+xml"]
        assert results.startswith("http://testserver/ExecuteQuery.aspx?query={searchTerms}&livelinkUrl=")
        assert "targetAppID=livelink" in results
        assert "loginPattern=%7Buser%7D" in results
        assert "startIndex={startIndex}" in results
        assert templates["text/html"] == results + "&format=html"
        assert templates["application/opensearchdescription+xml"].startswith("http://testserver/GetOSDX.aspx?")

    def test_sso_descriptor_has_no_impersonation(self, client):
        response = client.get("/GetOSDX.aspx", params={"livelinkUrl": LIVELINK_URL, "useSSO": "true"})

        assert response.status_code == 200
        assert b"useSSO=true" in response.content
        assert b"targetAppID" not in response.content

    def test_missing_parameters(self, client):
        response = client.get("/GetOSDX.aspx", params={"livelinkUrl": LIVELINK_URL})

        assert response.status_code == 500
        assert response.headers["x-status-description"] == "Target application ID was empty."
