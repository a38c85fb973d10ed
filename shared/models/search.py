"""Pydantic models for search requests and their results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OutputFormat(str, Enum):
    """Representation of the search results sent back to the client."""

    XML = "xml"
    HTML = "html"


class ConnectorSettings(BaseModel):
    """Parameters describing how to reach and query one Livelink server.

    They are shared by the search requests and the OpenSearch descriptor
    which advertises them in its URL templates.
    """

    model_config = ConfigDict(frozen=True)

    livelink_url: str
    use_sso: bool = False
    target_app_id: str | None = None
    login_pattern: str | None = None
    ignore_ssl_warnings: bool = False
    extra_params: str | None = None
    max_summary_length: int = 185
    report_error_as_hit: bool = False


class SearchRequest(ConnectorSettings):
    """Federated search request read from the inbound URL parameters.

    Built once per request by the parameter parser and never changed.
    """

    query: str
    start_index: int = 0
    count: int = 0
    input_encoding: str | None = None
    output_encoding: str | None = None
    language: str | None = None
    output_format: OutputFormat = OutputFormat.XML


class SearchHit(BaseModel):
    """A single Livelink object found by the search.

    URLs are kept as sent by Livelink (server-relative); the transformers
    prefix them with the scheme and host of the Livelink server.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    view_url: str = ""
    download_url: str | None = None
    mime_type: str | None = None
    icon_url: str | None = None
    summary: str = ""
    created_by: str | None = None
    created_date: str | None = None
    size_text: str | None = None
    size_suffix: str | None = None
    size_bytes: int | None = None
    location_url: str | None = None
    location_name: str | None = None


class ResultPage(BaseModel):
    """One page of search hits together with the paging information.

    Attributes:
        hits (list[SearchHit]): Hits in the order returned by Livelink.
        total_results (int | None): Estimated count of all hits.
        start_index (int | None): 1-based index of the first hit on this page.
        items_per_page (int | None): Count of hits returned on this page.
        has_paging (bool): Livelink sent the search results information at all.
    """

    model_config = ConfigDict(frozen=True)

    hits: list[SearchHit] = []
    total_results: int | None = None
    start_index: int | None = None
    items_per_page: int | None = None
    has_paging: bool = False
