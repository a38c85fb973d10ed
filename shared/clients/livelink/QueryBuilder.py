"""Builds URL queries for the Livelink XML Search API.

The query can be appended directly to the Livelink CGI URL; Livelink answers
it with XML search results::

    builder = QueryBuilder(impersonated_user="jdoe", extra_params="lookfor1=allwords")
    query = builder.build_query("XML Search", start_index=10, count=10)
    # func=search&outputformat=xml&where1=XML+Search&userLogin=jdoe&startat=11&gofor=10&lookfor1=allwords
"""

from urllib.parse import quote_plus

PARAM_FUNCTION = "func"
PARAM_OUTPUT_FORMAT = "outputformat"
PARAM_QUERY = "where1"
PARAM_USER_LOGIN = "userLogin"
PARAM_START_AT = "startat"
PARAM_PAGE_SIZE = "gofor"


def build_query(
    query_text: str,
    impersonated_user: str | None = None,
    start_index: int = 0,
    count: int = 0,
    extra_params: str | None = None,
) -> str:
    """Return the URL query performing a search by the Livelink XML Search API.

    Args:
        query_text (str): Search terms in the syntax recognized by Livelink.
        impersonated_user (str | None): Livelink login name to trim the results for.
            The request must then be authenticated as a user allowed to impersonate.
        start_index (int): 0-based index of the first hit; Livelink counts from 1.
        count (int): Maximum count of hits; 0 leaves the decision to Livelink.
        extra_params (str | None): Query string fragment appended as-is, without a leading ampersand.

    Returns:
        str: The URL query without the leading question mark.
    """
    if query_text is None:
        raise ValueError("Query text must not be None.")
    parts = [
        f"{PARAM_FUNCTION}=search",
        f"{PARAM_OUTPUT_FORMAT}=xml",
        f"{PARAM_QUERY}={quote_plus(query_text)}",
    ]
    if impersonated_user is not None:
        parts.append(f"{PARAM_USER_LOGIN}={quote_plus(impersonated_user)}")
    if start_index > 0:
        parts.append(f"{PARAM_START_AT}={start_index + 1}")
    if count > 0:
        parts.append(f"{PARAM_PAGE_SIZE}={count}")
    if extra_params:
        parts.append(extra_params)
    return "&".join(parts)


def _split(query: str) -> tuple[str, list[str]]:
    """Split a URL or a URL query to the part before the parameters and the parameters."""
    base, separator, params = query.partition("?")
    if not separator:
        base, params = "", query
    else:
        base += separator
    return base, [param for param in params.split("&") if param]


def _name_of(param: str) -> str:
    return param.partition("=")[0].lower()


def to_browser_usage(query: str) -> str:
    """Make a Livelink search URL usable interactively in the browser.

    Removes the user impersonation, which only a privileged account may use,
    and the forced XML output, so that the browser shows the default HTML
    results after the usual interactive login.

    Args:
        query (str): URL query or complete URL of a Livelink search request.

    Returns:
        str: The same query or URL without ``userLogin`` and ``outputformat=xml``.
    """
    if query is None:
        raise ValueError("Query must not be None.")
    base, params = _split(query)
    kept = [
        param for param in params
        if _name_of(param) != PARAM_USER_LOGIN.lower()
        and param.lower() != f"{PARAM_OUTPUT_FORMAT}=xml"
    ]
    return base + "&".join(kept)


def extract_page_size(query: str) -> int | None:
    """Return the requested maximum count of hits from a Livelink search query.

    Args:
        query (str): URL query or complete URL of a Livelink search request.

    Returns:
        int | None: The value of ``gofor`` or None if missing or not a number.
    """
    _, params = _split(query or "")
    for param in params:
        if _name_of(param) == PARAM_PAGE_SIZE:
            value = param.partition("=")[2].strip()
            return int(value) if value.isdigit() else None
    return None


class QueryBuilder:
    """Keeps the per-request settings of the search query.

    No impersonated user is needed for the SSO scenario.
    """

    def __init__(self, impersonated_user: str | None = None, extra_params: str | None = None):
        self.impersonated_user = impersonated_user
        self.extra_params = extra_params

    def build_query(self, query_text: str, start_index: int = 0, count: int = 0) -> str:
        return build_query(
            query_text,
            impersonated_user=self.impersonated_user,
            start_index=start_index,
            count=count,
            extra_params=self.extra_params,
        )
