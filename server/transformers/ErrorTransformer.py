"""Renders a failed search in-band, for clients that do not show HTTP errors."""

import traceback
from urllib.parse import urlsplit

from lxml.html.builder import E as H

from server.transformers import HTMLTransformer, XMLTransformer
from server.transformers.TransformerInterface import clean_xml_chars
from server.transformers.XMLTransformer import E, OS


def describe(exception: BaseException) -> str:
    """Return the exception type, message and stack trace as text."""
    return "".join(traceback.format_exception(type(exception), exception, exception.__traceback__)).strip()


def render_xml_error(exception: BaseException, link: str) -> bytes:
    """Return RSS with a single item carrying the error message.

    Args:
        exception (BaseException): The failure.
        link (str): Livelink search URL if it was computed already, otherwise the request URL.
    """
    host = urlsplit(link).hostname or ""
    root = XMLTransformer.build_channel(
        f"Livelink Enterprise at {host}",
        E.link(clean_xml_chars(link)),
        E.description(
            "Search results of the query executed against the Enterprise Workspace "
            f"of the Livelink server at {host}."
        ),
        OS.totalResults("1"),
        OS.startIndex("1"),
        OS.itemsPerPage("1"),
        E.item(
            E.title(clean_xml_chars(str(exception))),
            E.description(clean_xml_chars(describe(exception))),
        ),
    )
    return XMLTransformer.serialize(root)


def render_html_error(exception: BaseException) -> bytes:
    """Return an HTML page with the error message and the complete stack trace."""
    details = H.small()
    for number, line in enumerate(clean_xml_chars(describe(exception)).splitlines()):
        if number:
            details.append(H.br())
            details[-1].tail = line
        else:
            details.text = line
    root = H.html(
        # A short constant in the browser caption.
        H.head(H.title("Error")),
        H.body(
            H.h3("The Search Failed"),
            H.p(clean_xml_chars(str(exception))),
            H.p(details),
        ),
    )
    return HTMLTransformer.serialize(root)
