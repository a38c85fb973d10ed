"""Shared fixtures: configuration, Livelink responses and a fake Livelink server."""

import logging

import httpx
import pytest

from shared.helper.HelperConfig import HelperConfig

LIVELINK_URL = "http://livelink.example.com/livelink/llisapi.dll"

SEARCH_RESULTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<Output>
  <SearchResultsInformation>
    <CurrentStartAt>1</CurrentStartAt>
    <NumberResultsThisPage>2</NumberResultsThisPage>
    <EstTotalResults>42</EstTotalResults>
  </SearchResultsInformation>
  <SearchResults>
    <SearchResult>
      <OTName ViewURL="/livelink/llisapi.dll/open/1234" DownloadURL="/livelink/llisapi.dll/fetch/1234/report.pdf">report.pdf</OTName>
      <OTMIMEType IconURL="/img/webdoc/pdf.gif">application/pdf</OTMIMEType>
      <OTSummary>The quarterly <HH>report</HH> of sales.</OTSummary>
      <OTObjectSize Suffix="KB">12</OTObjectSize>
      <OTCreatedBy>1000</OTCreatedBy>
      <OTObjectDate>2012-05-30</OTObjectDate>
      <OTLocation URL="/livelink/llisapi.dll/open/2000" Name="Reports"/>
    </SearchResult>
    <SearchResult>
      <OTName ViewURL="/livelink/llisapi.dll/open/2000">Reports</OTName>
      <OTMIMEType IconURL="/img/webfolder.gif"></OTMIMEType>
      <OTSummary>Folder with reports.</OTSummary>
      <OTCreatedBy>1000</OTCreatedBy>
      <OTObjectDate>2011-01-02</OTObjectDate>
    </SearchResult>
  </SearchResults>
</Output>
"""

NO_RESULTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<Output>
  <SearchResultsInformation>
    <CurrentStartAt>0</CurrentStartAt>
    <NumberResultsThisPage>0</NumberResultsThisPage>
    <EstTotalResults>0</EstTotalResults>
  </SearchResultsInformation>
  <SearchResults>
    <SearchResult>
      <OTSummary>Sorry, no results were found</OTSummary>
    </SearchResult>
  </SearchResults>
</Output>
"""

LOGIN_FAILED = b"""<?xml version="1.0" encoding="UTF-8"?>
<Output><Error>Login failed</Error></Output>
"""

LOGIN_PAGE = b"""<html><head><title>Livelink - Log-in</title></head>
<body><form method="post"><input name="Username"></form></body></html>
"""


class FakeLivelink:
    """Answers the login POST with a session cookie and the search GET with a fixed body."""

    def __init__(self, search_body: bytes = SEARCH_RESULTS, login_status: int = 200, set_cookie: bool = True):
        self.search_body = search_body
        self.login_status = login_status
        self.set_cookie = set_cookie
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            headers = {"Set-Cookie": "LLCookie=session42; Path=/"} if self.set_cookie else {}
            return httpx.Response(self.login_status, headers=headers, text="<html>welcome</html>")
        return httpx.Response(200, content=self.search_body, headers={"Content-Type": "text/xml"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def search_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == "GET"]


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("livelink_connector.tests"))


@pytest.fixture
def livelink() -> FakeLivelink:
    return FakeLivelink()


@pytest.fixture
def admin_credentials(monkeypatch):
    """Credentials of the target application "livelink" in the environment."""
    monkeypatch.setenv("CREDENTIALS_LIVELINK_USERNAME", "Admin")
    monkeypatch.setenv("CREDENTIALS_LIVELINK_PASSWORD", "p@ss word")


@pytest.fixture
def created_clients(monkeypatch) -> list[dict]:
    """Keyword arguments of every httpx.AsyncClient created while the test runs."""
    created: list[dict] = []

    class RecordingAsyncClient(httpx.AsyncClient):
        def __init__(self, **kwargs):
            created.append(kwargs)
            super().__init__(**kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", RecordingAsyncClient)
    return created
