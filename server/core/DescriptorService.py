"""Descriptor service: the OpenSearch description advertising the connector as a search provider.

The URL templates carry the connector parameters, so that an OpenSearch
client (Windows Explorer, SharePoint federated locations) calls the search
endpoint with exactly the configuration the descriptor was generated for.
"""

from urllib.parse import quote_plus, urlsplit

from lxml import etree
from lxml.builder import ElementMaker

from server.models.requests import InboundRequest, parse_descriptor_request
from server.models.responses import OutboundResponse
from shared.helper.HelperConfig import HelperConfig
from shared.models.search import ConnectorSettings

OS_NS = "http://a9.com/-/spec/opensearch/1.1/"
LOCATION_NS = "http://schemas.microsoft.com/Search/2007/location"
OSE_NS = "http://schemas.microsoft.com/opensearchext/2009/"
PROPERTY_SCHEMA = "http://schemas.microsoft.com/windows/2008/propertynamespace"
CONTENT_VIEW_MODE = (
    "prop:~System.ItemNameDisplay;System.LayoutPattern.PlaceHolder;~System.ItemPathDisplay;"
    "~System.Search.AutoSummary;System.LayoutPattern.PlaceHolder;System.LayoutPattern.PlaceHolder;"
    "System.LayoutPattern.PlaceHolder"
)

E = ElementMaker(namespace=OS_NS, nsmap={None: OS_NS})
OSE = ElementMaker(namespace=OSE_NS, nsmap={"ms-ose": OSE_NS})
LOCATION = ElementMaker(namespace=LOCATION_NS, nsmap={None: LOCATION_NS})


def _connector_params(settings: ConnectorSettings) -> list[str]:
    """URL parameters reproducing the connector settings, except the Livelink URL."""
    params = [f"extraParams={quote_plus(settings.extra_params or '')}"]
    if settings.max_summary_length > 0:
        params.append(f"maxSummaryLength={settings.max_summary_length}")
    if settings.report_error_as_hit:
        params.append("reportErrorAsHit=true")
    if settings.ignore_ssl_warnings:
        params.append("ignoreSSLWarnings=true")
    if settings.use_sso:
        params.append("useSSO=true")
    else:
        params.append(f"targetAppID={quote_plus(settings.target_app_id or '')}")
        params.append(f"loginPattern={quote_plus(settings.login_pattern or '')}")
    return params


def get_descriptor_url(page_url_path: str, settings: ConnectorSettings) -> str:
    """Returns the URL of the OpenSearch descriptor for the connector settings."""
    params = [f"livelinkUrl={quote_plus(settings.livelink_url)}", *_connector_params(settings)]
    return f"{page_url_path}/GetOSDX.aspx?" + "&".join(params)


def get_search_template(page_url_path: str, settings: ConnectorSettings) -> str:
    """Returns the OpenSearch URL template of the search endpoint."""
    params = [
        "query={searchTerms}",
        f"livelinkUrl={quote_plus(settings.livelink_url)}",
        "count={count}",
        "startIndex={startIndex}",
        *_connector_params(settings),
        "inputEncoding={inputEncoding}",
        "outputEncoding={outputEncoding}",
        "language={language}",
    ]
    return f"{page_url_path}/ExecuteQuery.aspx?" + "&".join(params)


def render_descriptor(page_url_path: str, settings: ConnectorSettings) -> bytes:
    parts = urlsplit(settings.livelink_url)
    host = parts.hostname or ""
    url_base = f"{parts.scheme}://{parts.netloc}"
    template = get_search_template(page_url_path, settings)

    root = E.OpenSearchDescription(
        E.ShortName(f"Search Enterprise at {host}"),
        E.LongName(f"Search Livelink Enterprise Workspace at {host}"),
        LOCATION.InternalName(f"search_{host}"),
        E.Description(f"Searches content in the Enterprise Workspace of the Livelink server at {host}."),
        E.Image(f"{url_base}/img/style/images/app_content_server32_b8.png",
                height="32", width="32", type="image/png"),
        E.Url(type="application/rss+xml", rel="results", template=template),
        E.Url(type="text/html", template=template + "&format=html"),
        E.Url(type="application/opensearchdescription+xml", rel="self",
              template=get_descriptor_url(page_url_path, settings)),
        E.Tags("Livelink OpenSearch"),
        E.Query(role="example", searchTerms="livelink"),
        E.AdultContent("false"),
        E.SyndicationRight("Open"),
        E.InputEncoding("UTF-8"),
        E.OutputEncoding("UTF-8"),
        E.Language("*"),
        OSE.ResultsProcessing(
            OSE.PropertyDefaultValues(
                OSE.Property(CONTENT_VIEW_MODE, schema=PROPERTY_SCHEMA,
                             name="System.PropList.ContentViewModeForSearch"),
            ),
            format="application/rss+xml",
        ),
    )
    return etree.tostring(root, encoding="utf-8", xml_declaration=True, pretty_print=True)


class DescriptorService:
    """Generates the OpenSearch descriptor (OSDX) from the connector parameters."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._default_max_summary_length = int(
            helper_config.get_number_val("DEFAULT_MAX_SUMMARY_LENGTH", default=185)
        )

    async def describe(self, inbound: InboundRequest) -> OutboundResponse:
        """Return the descriptor as text/xml or HTTP 500 with the error message.

        Args:
            inbound (InboundRequest): The request to GetOSDX with the connector parameters.

        Returns:
            OutboundResponse: The descriptor document or the error status.
        """
        try:
            settings = parse_descriptor_request(inbound.params, self._default_max_summary_length)
            body = render_descriptor(inbound.page_url_path, settings)
        except Exception as e:
            self.logging.error("Generating the descriptor failed: %s", e)
            return error_status(e)
        return OutboundResponse(status_code=200, media_type="text/xml", body=body)


def error_status(exception: BaseException) -> OutboundResponse:
    """HTTP 500 carrying the message as the body and in the X-Status-Description header."""
    message = str(exception)
    # header values must be Latin-1; the body keeps the full message
    header = " ".join(message.split()).encode("latin-1", "replace").decode("latin-1")
    return OutboundResponse(
        status_code=500,
        media_type="text/plain",
        body=message.encode("utf-8"),
        headers={"X-Status-Description": header},
    )
