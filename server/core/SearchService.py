"""Search service: performs Livelink XML Search queries for OpenSearch clients.

Sequence: read parameters -> build the Livelink query -> authenticate ->
execute -> parse -> transform. Every failure is caught once, here, and
reported in the representation the client asked for:

  * ``format=html``: an HTML error page; the user sees it in the browser.
  * ``reportErrorAsHit=true``: RSS with the error as the single search hit,
    for OpenSearch clients that do not show HTTP errors.
  * otherwise: HTTP 500 with the message as the status description.

Without SSO the search runs as a Livelink system administrator whose
credentials come from the credential store, impersonated to the Livelink
user mapped from the authenticated portal user, so that the results are
trimmed to that user's permissions.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from server.core.DescriptorService import error_status, get_descriptor_url
from server.transformers.ErrorTransformer import render_html_error, render_xml_error
from server.transformers.HTMLTransformer import HTMLTransformer
from server.transformers.TransformerInterface import TransformerInterface
from server.transformers.XMLTransformer import XMLTransformer
from server.models.requests import InboundRequest, QueryParams, parse_output_format, parse_search_request
from server.models.responses import OutboundResponse
from shared.clients.livelink.LivelinkClient import LivelinkClient
from shared.clients.livelink.QueryBuilder import QueryBuilder, to_browser_usage
from shared.clients.livelink.ResultParser import ResultParser
from shared.credentials.CredentialStore import CredentialStore
from shared.helper.HelperConfig import HelperConfig
from shared.helper.LoginMapper import LoginMapper
from shared.models.errors import ValidationError
from shared.models.search import OutputFormat, SearchRequest


class SearchService:
    """Orchestrates query building, the Livelink requests and the result transformation."""

    def __init__(
        self,
        helper_config: HelperConfig,
        credential_store: CredentialStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._credential_store = credential_store
        # tests replace the network by a mock transport
        self._transport = transport
        self._parser = ResultParser()
        self._default_max_summary_length = int(
            helper_config.get_number_val("DEFAULT_MAX_SUMMARY_LENGTH", default=185)
        )

    ##########################################
    ################ CORE ####################
    ##########################################

    async def execute(self, inbound: InboundRequest) -> OutboundResponse:
        """Execute the search described by the request URL parameters.

        Args:
            inbound (InboundRequest): The request to ExecuteQuery.

        Returns:
            OutboundResponse: The complete response; the body is never partial.
        """
        output_format = OutputFormat.XML
        report_error_as_hit = False
        search_url: str | None = None
        try:
            # The response format is deduced at the very start to be able to
            # report errors occurring in the parameters already. The flag is read
            # before the format is checked, so an invalid format is reported as a hit too.
            params = QueryParams(inbound.params)
            report_error_as_hit = params.get_bool("reportErrorAsHit")
            output_format = parse_output_format(params)
            request = parse_search_request(inbound.params, self._default_max_summary_length)

            query = self._get_query(request, inbound)
            search_url = f"{request.livelink_url}?{to_browser_usage(query)}"
            self.logging.info(
                "Searching %s for %r (start=%d, count=%d, sso=%s)",
                urlsplit(request.livelink_url).hostname, request.query[:80],
                request.start_index, request.count, request.use_sso,
            )
            transformer = self._create_transformer(request, search_url, inbound)
            content = await self._get_results(request, query, inbound)
            page = self._parser.parse(content)
            body = transformer.transform(page)
            self.logging.info("Search returned %d hit(s).", len(page.hits))
            return OutboundResponse(status_code=200, media_type=transformer.media_type, body=body)
        except Exception as e:
            self.logging.error("Search failed: %s", e)
            return self._format_error(e, output_format, report_error_as_hit, search_url, inbound)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _get_query(self, request: SearchRequest, inbound: InboundRequest) -> str:
        """Computes the URL query for the Livelink XML Search API."""
        builder = QueryBuilder(extra_params=request.extra_params)
        # If SSO is not enabled the search will be impersonated for the current user.
        if not request.use_sso:
            if not inbound.remote_user:
                raise ValidationError("The authenticated user was not provided.")
            mapper = LoginMapper(request.login_pattern)
            login_name = mapper.get_login_name(inbound.remote_user).strip()
            # An empty userLogin would not trim the results to any user.
            if not login_name:
                raise ValidationError(f"The user {inbound.remote_user} was mapped to an empty Livelink login.")
            builder.impersonated_user = login_name
        return builder.build_query(request.query, request.start_index, request.count)

    async def _get_results(self, request: SearchRequest, query: str, inbound: InboundRequest) -> bytes:
        """Performs the Livelink requests and returns the response content."""
        sso_headers = {}
        if request.use_sso and "authorization" in inbound.headers:
            sso_headers["Authorization"] = inbound.headers["authorization"]
        client = LivelinkClient(
            helper_config=self._helper_config,
            livelink_url=request.livelink_url,
            use_sso=request.use_sso,
            sso_headers=sso_headers,
            ignore_ssl_warnings=request.ignore_ssl_warnings,
            transport=self._transport,
        )
        async with client:
            # Without SSO another request authenticates the search before. A search
            # impersonated for another user can be performed only by an administrator.
            if not request.use_sso:
                with self._credential_store.get_credentials(request.target_app_id) as credentials:
                    await client.authenticate(credentials)
            return await client.execute_query(query)

    def _create_transformer(
        self, request: SearchRequest, search_url: str, inbound: InboundRequest
    ) -> TransformerInterface:
        if request.output_format is OutputFormat.HTML:
            previous_url = None
            if request.start_index > 0 and request.count > 0:
                previous_url = get_other_page_url(inbound.url, max(0, request.start_index - request.count))
            next_url = None
            if request.count > 0:
                next_url = get_other_page_url(inbound.url, request.start_index + request.count)
            return HTMLTransformer(
                request.query, search_url, previous_url, next_url,
                max_summary_length=request.max_summary_length,
            )
        return XMLTransformer(
            request.query, search_url,
            get_descriptor_url(inbound.page_url_path, request),
            max_summary_length=request.max_summary_length,
        )

    def _format_error(
        self,
        exception: Exception,
        output_format: OutputFormat,
        report_error_as_hit: bool,
        search_url: str | None,
        inbound: InboundRequest,
    ) -> OutboundResponse:
        # HTTP success is returned only when the error will be shown to the user anyway.
        if output_format is OutputFormat.HTML:
            return OutboundResponse(status_code=200, media_type="text/html", body=render_html_error(exception))
        if report_error_as_hit:
            return OutboundResponse(
                status_code=200, media_type="text/xml",
                body=render_xml_error(exception, search_url or inbound.url),
            )
        return error_status(exception)


def get_other_page_url(url: str, start_index: int) -> str:
    """Returns the URL with the startIndex parameter set to another value."""
    parts = urlsplit(url)
    params = [
        (name, value) for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name.lower() != "startindex"
    ]
    params.append(("startIndex", str(start_index)))
    return urlunsplit(parts._replace(query=urlencode(params)))
