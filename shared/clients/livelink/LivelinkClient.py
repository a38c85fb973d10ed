"""HTTP client of the Livelink server.

Typical usage without SSO, authenticating explicitly with the credentials of
a system administrator::

    async with LivelinkClient(helper_config, "http://myserver/livelink/llisapi.dll") as client:
        with store.get_credentials(target_app_id) as credentials:
            await client.authenticate(credentials)
        content = await client.execute_query(query)

The cookie jar of one client instance is the session of one search request;
it is not shared with other requests.
"""

from datetime import datetime
from urllib.parse import urlparse

import httpx
from pytz import timezone

from shared.clients.ClientInterface import ClientInterface
from shared.credentials.Credentials import ScopedCredentials
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.errors import AuthenticationError, InvalidStateError, TransportError

USER_AGENT = "Livelink Search Connector for SharePoint"

# RFC 3986 unreserved characters stay as they are in form-encoded values
_UNRESERVED = frozenset(b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~")


def form_encode_into(buffer: bytearray, value: bytes | bytearray) -> None:
    """Append ``value`` to ``buffer`` encoded as an application/x-www-form-urlencoded value.

    The encoding happens in place so that secrets never become immutable strings.
    """
    for byte in value:
        if byte in _UNRESERVED:
            buffer.append(byte)
        elif byte == 0x20:
            buffer.append(0x2B)
        else:
            buffer.extend(b"%%%02X" % byte)


class LivelinkClient(ClientInterface):
    def __init__(
        self,
        helper_config: HelperConfig,
        livelink_url: str,
        use_sso: bool = False,
        sso_headers: dict | None = None,
        ignore_ssl_warnings: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(helper_config=helper_config, verify_tls=not ignore_ssl_warnings, transport=transport)
        if not livelink_url:
            raise ValueError("Livelink CGI URL must not be empty.")
        self._base_url = livelink_url
        self.use_sso = use_sso
        self._sso_headers = dict(sso_headers or {}) if use_sso else {}
        self._authenticated = False
        self._tz_name = helper_config.get_string_val("TIMEZONE", default="Europe/Berlin")
        if ignore_ssl_warnings:
            self.logging.warning("TLS certificate validation is disabled for %s.", self._base_url)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "livelink"

    def _get_user_agent(self) -> str:
        return USER_AGENT

    @property
    def is_ready(self) -> bool:
        """True if queries can be sent: either SSO is on or the login succeeded."""
        return self.use_sso or self._authenticated

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="TIMEOUT", val_type="number", default=30.0),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return self._sso_headers

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def _get_client_time(self) -> str:
        return datetime.now(timezone(self._tz_name)).strftime("D/%Y/%m/%d:%H:%M:%S")

    def _build_login_body(self, credentials: ScopedCredentials) -> bytearray:
        body = bytearray(b"func=ll.login&CurrentClientTime=")
        form_encode_into(body, self._get_client_time().encode("utf-8"))
        # The NextURL parameter is mandatory.
        body.extend(b"&NextURL=")
        form_encode_into(body, (urlparse(self._base_url).path or "/").encode("utf-8"))
        body.extend(b"&UserName=")
        form_encode_into(body, credentials.name)
        body.extend(b"&Password=")
        form_encode_into(body, credentials.password)
        return body

    async def authenticate(self, credentials: ScopedCredentials) -> None:
        """Log in by the ll.login function and keep the session cookie for later requests.

        Function ll.login accepts only POST requests of the login form. Not needed
        with SSO. The credentials are wiped when this method returns or fails.

        Args:
            credentials (ScopedCredentials): User allowed to impersonate other users.

        Raises:
            AuthenticationError: If the response status is not 200 or no cookie was received.
            TransportError: If the server cannot be reached.
        """
        if credentials is None:
            raise ValueError("Credentials must not be None.")
        url = self.get_url()
        body = bytearray()
        try:
            body = self._build_login_body(credentials)
            try:
                response = await self.do_request(
                    method="POST",
                    content=bytes(body),
                    additional_headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.RequestError as e:
                raise TransportError(url, None, str(e)) from e
        finally:
            for i in range(len(body)):
                body[i] = 0
            credentials.wipe()

        # The actual output of the login request is ignored. Just the cookies are wanted.
        if response.status_code != 200:
            raise AuthenticationError(
                f"Login request to {url} failed: {response.reason_phrase} ({response.status_code})."
            )
        if self.get_cookie_count() == 0:
            raise AuthenticationError("Authentication cookie was not received.")
        self._authenticated = True
        self.logging.debug("Authenticated against %s.", url)

    async def execute_query(self, query: str) -> bytes:
        """Perform a GET request with the URL query and return the whole response body.

        Args:
            query (str): Livelink URL query, usually made by the query builder.

        Returns:
            bytes: The response content; XML search results if all went well.

        Raises:
            InvalidStateError: If neither SSO is enabled nor authenticate() succeeded.
            TransportError: If the status is not 200 or the server cannot be reached.
        """
        if query is None:
            raise ValueError("Query must not be None.")
        if not self.is_ready:
            raise InvalidStateError("The HTTP client has not been authenticated yet.")
        url = self.get_url(query)
        try:
            response = await self.do_request(method="GET", query=query)
        except httpx.RequestError as e:
            raise TransportError(url, None, str(e)) from e
        if response.status_code != 200:
            raise TransportError(str(response.url), response.status_code, response.reason_phrase)
        return response.content
