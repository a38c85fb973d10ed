"""Exception hierarchy of the Livelink search connector.

Every stage raises one of these; the search service is the single place
that catches them and turns them into a response.
"""


class ConnectorError(Exception):
    """Base class of all errors raised while serving a search request."""

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(ConnectorError):
    """An inbound parameter was missing or invalid. Raised before any network call."""

    pass


class CredentialError(ConnectorError):
    """Credentials for a target application could not be resolved."""

    pass


class InvalidStateError(ConnectorError):
    """The Livelink client was used before it was able to send requests."""

    pass


class AuthenticationError(ConnectorError):
    """The login request did not yield a session cookie."""

    pass


class TransportError(ConnectorError):
    """Livelink answered with an HTTP status other than 200 or could not be reached.

    ``status_code`` is None when no response was received at all.
    """

    def __init__(self, url: str, status_code: int | None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            super().__init__(f"HTTP request to {url} failed: {reason}")
        else:
            super().__init__(f"HTTP request to {url} failed: {reason} ({status_code}).")


class BackendError(ConnectorError):
    """Livelink reported an error inside a successful XML response."""

    pass


class ParseError(ConnectorError):
    """The Livelink response was not the expected XML document.

    Usually an HTML login page returned because the request was not
    authenticated.
    """

    pass
