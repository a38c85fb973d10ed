"""Inbound request value and the parsing of the connector URL parameters."""

from collections.abc import Mapping
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

from shared.models.errors import ValidationError
from shared.models.search import ConnectorSettings, OutputFormat, SearchRequest

SUPPORTED_ENCODINGS = ("ASCII", "UTF-8")


class InboundRequest(BaseModel):
    """The part of the HTTP request the search service works with.

    Attributes:
        url (str): The complete URL of the request.
        params (dict[str, str]): URL query parameters; the first value of each name.
        headers (dict[str, str]): Request headers with lower-case names.
        remote_user (str | None): The authenticated portal user, if known.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    params: dict[str, str] = {}
    headers: dict[str, str] = {}
    remote_user: str | None = None

    @property
    def page_url_path(self) -> str:
        """Scheme, host, port and path of the request URL without the last path segment."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}{parts.path.rpartition('/')[0]}"


class QueryParams:
    """Case-insensitive typed access to URL query parameters."""

    def __init__(self, params: Mapping[str, str]) -> None:
        self._params = {name.lower(): value for name, value in params.items()}

    def get_string(self, name: str) -> str | None:
        value = self._params.get(name.lower())
        return value if value else None

    def get_bool(self, name: str) -> bool:
        return (self.get_string(name) or "").strip().lower() == "true"

    def get_int(self, name: str, default: int = 0, minimum: int | None = None) -> int:
        value = self.get_string(name)
        if value is None:
            return default
        try:
            number = int(value.strip())
        except ValueError:
            raise ValidationError(f"The parameter {name} was not an integer: {value!r}.")
        if minimum is not None and number < minimum:
            raise ValidationError(f"The parameter {name} must not be less than {minimum}.")
        return number


def parse_output_format(params: QueryParams) -> OutputFormat:
    """Read the response format first, so that later failures can be reported in it."""
    value = params.get_string("format")
    if value is None:
        return OutputFormat.XML
    try:
        return OutputFormat(value.strip().lower())
    except ValueError:
        raise ValidationError(f"Unexpected output format: {value}.")


def _parse_encoding(params: QueryParams, name: str, label: str) -> str | None:
    value = params.get_string(name)
    if value is not None and value.strip().upper() not in SUPPORTED_ENCODINGS:
        raise ValidationError(f"The {label} encoding was neither ASCII nor UTF-8.")
    return value


def _parse_livelink_url(params: QueryParams) -> str:
    url = params.get_string("livelinkUrl")
    if url is None:
        raise ValidationError("Livelink CGI URL was empty.")
    parts = urlsplit(url.strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ValidationError(f"Livelink CGI URL was not an absolute HTTP URL: {url}.")
    return url.strip()


def parse_connector_settings(params: QueryParams, default_max_summary_length: int = 185) -> dict:
    """Read and check the parameters common to searching and the descriptor.

    Returns:
        dict: Keyword arguments of ConnectorSettings.

    Raises:
        ValidationError: If a mandatory parameter is missing or a value is invalid.
    """
    livelink_url = _parse_livelink_url(params)
    use_sso = params.get_bool("useSSO")
    target_app_id = None
    login_pattern = None
    # If SSO is enabled the user impersonation parameters are ignored.
    if not use_sso:
        target_app_id = params.get_string("targetAppID")
        if target_app_id is None:
            raise ValidationError("Target application ID was empty.")
        login_pattern = params.get_string("loginPattern")
        if login_pattern is None:
            raise ValidationError("User login pattern was empty.")
    return {
        "livelink_url": livelink_url,
        "use_sso": use_sso,
        "target_app_id": target_app_id,
        "login_pattern": login_pattern,
        "ignore_ssl_warnings": params.get_bool("ignoreSSLWarnings"),
        "extra_params": params.get_string("extraParams"),
        "max_summary_length": params.get_int("maxSummaryLength", default=default_max_summary_length),
        "report_error_as_hit": params.get_bool("reportErrorAsHit"),
    }


def parse_descriptor_request(params: Mapping[str, str], default_max_summary_length: int = 185) -> ConnectorSettings:
    return ConnectorSettings(**parse_connector_settings(QueryParams(params), default_max_summary_length))


def parse_search_request(params: Mapping[str, str], default_max_summary_length: int = 185) -> SearchRequest:
    """Build the search request from the URL parameters of ExecuteQuery.

    Raises:
        ValidationError: If a mandatory parameter is missing or a value is invalid.
    """
    query_params = QueryParams(params)
    output_format = parse_output_format(query_params)
    query = query_params.get_string("query")
    if query is None or not query.strip():
        raise ValidationError("Search query was empty.")
    settings = parse_connector_settings(query_params, default_max_summary_length)
    return SearchRequest(
        **settings,
        query=query,
        start_index=query_params.get_int("startIndex", minimum=0),
        count=query_params.get_int("count", minimum=0),
        input_encoding=_parse_encoding(query_params, "inputEncoding", "input"),
        output_encoding=_parse_encoding(query_params, "outputEncoding", "output"),
        # accepted for OpenSearch compatibility, not used for searching
        language=query_params.get_string("language"),
        output_format=output_format,
    )
