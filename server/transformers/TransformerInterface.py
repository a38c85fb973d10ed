import re
from abc import ABC, abstractmethod
from urllib.parse import urlsplit

from shared.models.search import ResultPage

ELLIPSIS = " ..."

# Characters not allowed in XML 1.0 documents
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f￾￿]")


def clean_xml_chars(text: str | None) -> str:
    """Remove characters that cannot be written to an XML or HTML document."""
    return _INVALID_XML_CHARS.sub("", text or "")


class TransformerInterface(ABC):
    """Renders a page of Livelink search results to the response body.

    Args:
        query (str): The search terms as entered by the user.
        search_url (str): Livelink URL reproducing the search in the browser.
        max_summary_length (int): Summaries longer than this are cut; 0 or less disables it.
    """

    def __init__(self, query: str, search_url: str, max_summary_length: int = 0) -> None:
        if query is None:
            raise ValueError("Query must not be None.")
        if not search_url:
            raise ValueError("Search URL must not be empty.")
        self.query = clean_xml_chars(query)
        self.search_url = search_url
        self.max_summary_length = max_summary_length
        parts = urlsplit(search_url)
        self.host = parts.hostname or ""
        # Livelink sends server-relative URLs; they need the scheme and the server
        self.url_base = f"{parts.scheme}://{parts.netloc}"

    @property
    @abstractmethod
    def media_type(self) -> str:
        pass

    @abstractmethod
    def transform(self, page: ResultPage) -> bytes:
        """Return the complete UTF-8 encoded response body for the results."""
        pass

    def absolute_url(self, path: str | None) -> str:
        return self.url_base + (path or "")

    def truncate_summary(self, summary: str) -> str:
        if self.max_summary_length > 0 and len(summary) > self.max_summary_length:
            return summary[:self.max_summary_length] + ELLIPSIS
        return summary
