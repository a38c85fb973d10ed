"""Parses the XML output of the Livelink XML Search API.

The document looks like this (elements not used by the connector omitted)::

    <Output>
      <SearchResultsInformation>
        <CurrentStartAt>1</CurrentStartAt>
        <NumberResultsThisPage>10</NumberResultsThisPage>
        <EstTotalResults>42</EstTotalResults>
      </SearchResultsInformation>
      <SearchResults>
        <SearchResult>
          <OTName ViewURL="/livelink/llisapi.dll/open/1234" DownloadURL="...">report.pdf</OTName>
          <OTMIMEType IconURL="/img/webdoc/pdf.gif">application/pdf</OTMIMEType>
          <OTSummary>... <HH>term</HH> ...</OTSummary>
          <OTObjectSize Suffix="KB">12</OTObjectSize>
          <OTCreatedBy>1000</OTCreatedBy>
          <OTObjectDate>2012-05-30</OTObjectDate>
          <OTLocation URL="/livelink/llisapi.dll/open/2000" Name="Reports"/>
        </SearchResult>
      </SearchResults>
    </Output>

Errors are reported inside the document as ``/Output/Error``, not by the HTTP status.
"""

from lxml import etree

from shared.models.errors import BackendError, ParseError
from shared.models.search import ResultPage, SearchHit

HIGHLIGHT_START = "<HH>"
HIGHLIGHT_END = "</HH>"

_SIZE_FACTORS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 * 1024,
    "GB": 1024 * 1024 * 1024,
}


def convert_size(value: str, suffix: str | None) -> int:
    """Convert a size displayed with a binary unit suffix to bytes.

    Args:
        value (str): The number, e.g. "12".
        suffix (str | None): B, KB, MB or GB in any case; blank means bytes.

    Returns:
        int: The size in bytes.

    Raises:
        ValueError: If the value is not a number.
    """
    factor = _SIZE_FACTORS.get((suffix or "").strip().upper(), 1)
    number = value.strip().replace(",", "")
    if "." in number:
        return int(float(number) * factor)
    return int(number) * factor


def safe_value(node: etree._Element | None) -> str:
    """Return the trimmed string value of the node or an empty string if there is no node."""
    if node is None:
        return ""
    return "".join(node.itertext()).strip()


def _optional_value(node: etree._Element | None) -> str | None:
    return safe_value(node) if node is not None else None


def _optional_int(node: etree._Element | None, name: str) -> int | None:
    value = safe_value(node)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ParseError(f"Invalid value of {name}: {value!r}.")


def _summary_value(node: etree._Element | None) -> str:
    """String value of OTSummary keeping the highlighted terms marked by <HH></HH>."""
    if node is None:
        return ""
    parts = [node.text or ""]
    for child in node:
        text = "".join(child.itertext())
        if isinstance(child.tag, str) and child.tag.upper() == "HH":
            text = f"{HIGHLIGHT_START}{text}{HIGHLIGHT_END}"
        parts.append(text)
        parts.append(child.tail or "")
    return "".join(parts).strip()


class ResultParser:
    """Turns the Livelink XML response into a ResultPage."""

    def __init__(self) -> None:
        # Livelink output needs no DTDs or external entities; never fetch anything
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)

    def parse(self, content: bytes) -> ResultPage:
        """Parse the response content of a Livelink XML search request.

        Args:
            content (bytes): The complete response body.

        Returns:
            ResultPage: The hits and the paging information.

        Raises:
            ParseError: If the content is not the XML document of the search results;
                usually a HTML login page if the request was not authenticated.
            BackendError: If Livelink reported an error in the document.
        """
        root = self._load(content)
        error = root.find("Error")
        if error is not None:
            raise BackendError(safe_value(error))

        info = root.find("SearchResultsInformation")
        hits = []
        for record in root.iterfind("SearchResults/SearchResult"):
            # Although no hits are returned there is one SearchResult element coming
            # containing the text "Sorry, no results were found".
            if record.find("OTName") is None:
                break
            hits.append(self._parse_hit(record))

        return ResultPage(
            hits=hits,
            total_results=_optional_int(info.find("EstTotalResults"), "EstTotalResults") if info is not None else None,
            start_index=_optional_int(info.find("CurrentStartAt"), "CurrentStartAt") if info is not None else None,
            items_per_page=_optional_int(info.find("NumberResultsThisPage"), "NumberResultsThisPage") if info is not None else None,
            has_paging=info is not None,
        )

    def _load(self, content: bytes) -> etree._Element:
        if not content or not content.strip():
            raise ParseError("Could not parse the Livelink response: the response was empty.")
        try:
            root = etree.fromstring(content, parser=self._parser)
        except etree.XMLSyntaxError as e:
            raise ParseError(f"Could not parse the Livelink response: {e}") from e
        if root.tag != "Output":
            raise ParseError(
                f"Could not parse the Livelink response: unexpected root element <{root.tag}>."
            )
        return root

    def _parse_hit(self, record: etree._Element) -> SearchHit:
        name = record.find("OTName")
        # OTName element can have language-dependent sub-elements; take just the body.
        texts = name.xpath("text()")
        title = texts[0].strip() if texts else ""

        mime = record.find("OTMIMEType")
        size = record.find("OTObjectSize")
        size_bytes = None
        if size is not None and safe_value(size):
            try:
                size_bytes = convert_size(safe_value(size), size.get("Suffix"))
            except ValueError:
                raise ParseError(f"Invalid object size of {title!r}: {safe_value(size)!r}.")
        location = record.find("OTLocation")

        return SearchHit(
            title=title,
            view_url=name.get("ViewURL", ""),
            download_url=name.get("DownloadURL"),
            mime_type=_optional_value(mime),
            icon_url=mime.get("IconURL", "") if mime is not None else None,
            summary=_summary_value(record.find("OTSummary")),
            created_by=_optional_value(record.find("OTCreatedBy")),
            created_date=_optional_value(record.find("OTObjectDate")),
            size_text=_optional_value(size),
            size_suffix=size.get("Suffix") if size is not None else None,
            size_bytes=size_bytes,
            location_url=location.get("URL", "") if location is not None else None,
            location_name=location.get("Name", "") if location is not None else None,
        )
