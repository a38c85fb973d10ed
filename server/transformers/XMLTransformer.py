"""Transforms Livelink search results to RSS 2.0 specialized for OpenSearch 1.1.

OpenSearch elements enable paging of the search results. Yahoo Media
elements enable media content like icon thumbnails. SharePoint Search
elements enable file type recognition.
"""

from functools import partial

from lxml import etree
from lxml.builder import ElementMaker

from server.transformers.TransformerInterface import TransformerInterface, clean_xml_chars
from shared.clients.livelink.LivelinkClient import USER_AGENT
from shared.clients.livelink.ResultParser import HIGHLIGHT_END, HIGHLIGHT_START
from shared.models.search import ResultPage, SearchHit

OS_NS = "http://a9.com/-/spec/opensearch/1.1/"
MEDIA_NS = "http://search.yahoo.com/mrss/"
SS_NS = "http://schemas.microsoft.com/SharePoint/Search/RSS"
NSMAP = {"os": OS_NS, "m": MEDIA_NS, "ss": SS_NS}

E = ElementMaker(nsmap=NSMAP)
OS = ElementMaker(namespace=OS_NS, nsmap=NSMAP)
M = ElementMaker(namespace=MEDIA_NS, nsmap=NSMAP)
SS = ElementMaker(namespace=SS_NS, nsmap=NSMAP)

DESCRIPTOR_LINK = partial(E.link, rel="search", type="application/opensearchdescription+xml")


def _text(value) -> str:
    return "" if value is None else clean_xml_chars(str(value))


def serialize(root: etree._Element) -> bytes:
    # declare the extension namespaces once, on the rss element
    etree.cleanup_namespaces(root, top_nsmap=NSMAP, keep_ns_prefixes=list(NSMAP))
    return etree.tostring(root, encoding="utf-8", xml_declaration=True)


def build_channel(title: str, *children) -> etree._Element:
    """Return the rss root element with one channel."""
    return E.rss(E.channel(E.title(_text(title)), *children), version="2.0")


class XMLTransformer(TransformerInterface):
    def __init__(self, query: str, search_url: str, descriptor_url: str, max_summary_length: int = 0) -> None:
        super().__init__(query, search_url, max_summary_length)
        if descriptor_url is None:
            raise ValueError("Descriptor URL must not be None.")
        self.descriptor_url = descriptor_url

    @property
    def media_type(self) -> str:
        return "text/xml"

    def transform(self, page: ResultPage) -> bytes:
        # The title includes minimum information - the Livelink server host and query terms.
        title = f"Livelink Enterprise at {self.host}: {self.query}"
        description = (
            "Search results of the query executed against the Enterprise Workspace "
            f"of the Livelink server by the URL {self.search_url}."
        )
        children = [
            DESCRIPTOR_LINK(href=_text(self.descriptor_url), title=f"Livelink Enterprise at {self.host}"),
            # The link should reproduce these query results if used interactively in the browser.
            E.link(_text(self.search_url)),
            E.description(_text(description)),
            # The connector name is the user agent of the Livelink requests and the generator here.
            E.generator(USER_AGENT),
            E.image(
                E.title(f"Search results: {self.query}"),
                E.url(self.absolute_url("/img/icon-search.gif")),
                E.link(_text(self.search_url)),
            ),
        ]
        if page.has_paging:
            children.extend(self._paging_elements(page))
        children.extend(self._item(hit) for hit in page.hits)
        return serialize(build_channel(title, *children))

    def _paging_elements(self, page: ResultPage) -> list[etree._Element]:
        query = OS.Query(role="request", title="Livelink Search", searchTerms=self.query)
        if page.start_index is not None:
            page_index = page.start_index
            if page.items_per_page:
                page_index = page_index // page.items_per_page + 1
            query.set("startPage", str(page_index))
        elements = []
        # Livelink may leave out any of the paging values; OpenSearch expects integers.
        if page.total_results is not None:
            elements.append(OS.totalResults(str(page.total_results)))
        if page.start_index is not None:
            elements.append(OS.startIndex(str(page.start_index)))
        if page.items_per_page is not None:
            elements.append(OS.itemsPerPage(str(page.items_per_page)))
        elements.append(query)
        return elements

    def _description(self, hit: SearchHit) -> str:
        summary = self.truncate_summary(hit.summary)
        return clean_xml_chars(summary.replace(HIGHLIGHT_START, "<b>").replace(HIGHLIGHT_END, "</b>"))

    def _item(self, hit: SearchHit) -> etree._Element:
        item = E.item(
            E.title(_text(hit.title)),
            # The overview page of the object with basic properties and a download link.
            E.link(self.absolute_url(hit.view_url)),
            E.description(self._description(hit)),
        )
        # Livelink returns just the creation date from the default search template.
        if hit.created_date is not None:
            item.append(E.pubDate(_text(hit.created_date)))
        # Livelink returns only the numeric identifier of the creator here.
        if hit.created_by is not None:
            item.append(E.author(_text(hit.created_by)))
        # The MIME type element comes for all object types; its text is empty for non-documents.
        if hit.mime_type is not None:
            item.append(M.thumbnail(url=self.absolute_url(hit.icon_url)))
        # Both SharePoint and Livelink do not allow documents with zero length.
        length = hit.size_bytes or 0
        if length > 0:
            item.append(SS.size(str(length)))
            dot = hit.title.rfind(".")
            if dot >= 0:
                item.append(SS.dotfileextension(_text(hit.title[dot:].upper())))
        # Direct download link to open the document without visiting the overview page.
        if hit.mime_type and hit.mime_type.strip():
            enclosure = E.enclosure(url=self.absolute_url(hit.download_url), type=_text(hit.mime_type))
            if length > 0:
                enclosure.set("length", str(length))
            item.append(enclosure)
        return item
