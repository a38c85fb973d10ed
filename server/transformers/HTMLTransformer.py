"""Transforms Livelink search results to an HTML page.

The page can be displayed in the browser, which is useful for testing or for
OpenSearch clients that display HTML.
"""

import re

from lxml import html
from lxml.html.builder import E

from server.transformers.TransformerInterface import TransformerInterface, clean_xml_chars
from shared.clients.livelink.QueryBuilder import extract_page_size
from shared.clients.livelink.ResultParser import HIGHLIGHT_END, HIGHLIGHT_START
from shared.models.search import ResultPage, SearchHit

STYLE = """
body { font-family: Arial, sans-serif }
.summary, .data { margin-top: 0.3em }
.data { color: green }
.summary, .note, .data { font-size: 85% }
td { padding-right: 0.2em }
dl { margin-top: 1em }
dt { margin-top: 1em; margin-bottom: 0.3em }
dd { margin-left: 0 }
"""

_HIGHLIGHT = re.compile(f"({re.escape(HIGHLIGHT_START)}|{re.escape(HIGHLIGHT_END)})")


def serialize(root) -> bytes:
    return html.tostring(root, doctype="<!DOCTYPE html>", encoding="utf-8", include_meta_content_type=True)


def append_highlighted(parent, text: str) -> None:
    """Append text to the element, rendering the <HH></HH> marked terms in bold."""
    bold = None
    for part in _HIGHLIGHT.split(clean_xml_chars(text)):
        if part == HIGHLIGHT_START:
            bold = E.b()
            parent.append(bold)
        elif part == HIGHLIGHT_END:
            bold = None
        elif bold is not None:
            bold.text = (bold.text or "") + part
        elif len(parent):
            parent[-1].tail = (parent[-1].tail or "") + part
        else:
            parent.text = (parent.text or "") + part


class HTMLTransformer(TransformerInterface):
    """
    Args:
        previous_url (str | None): URL of the previous page of results or None if there is none.
        next_url (str | None): URL of the next page of results or None if there is none.
    """

    def __init__(
        self,
        query: str,
        search_url: str,
        previous_url: str | None = None,
        next_url: str | None = None,
        max_summary_length: int = 0,
    ) -> None:
        super().__init__(query, search_url, max_summary_length)
        self.previous_url = previous_url
        self.next_url = next_url

    @property
    def media_type(self) -> str:
        return "text/html"

    def transform(self, page: ResultPage) -> bytes:
        body = E.body(
            E.table(E.tr(
                E.td(E.img(src=self.absolute_url("/img/icon_search.gif"), alt=f"Search results: {self.query}")),
                E.td(E.h2(f"Results of the search for {self.query}")),
            )),
            E.div(
                {"class": "note"},
                "Search results of the query executed against the Enterprise Workspace "
                "of the Livelink server by the URL ",
                E.a(self.search_url, href=self.search_url),
                ".",
            ),
        )
        if page.hits:
            body.append(E.dl(*[part for hit in page.hits for part in self._hit(hit)]))
            paging = self._paging(page) if page.has_paging else None
            if paging is not None:
                body.append(paging)
        else:
            body.append(E.p("No items were found."))
        root = E.html(
            E.head(E.title(f"Search Results at {self.host}"), E.style(STYLE)),
            body,
        )
        return serialize(root)

    def _hit(self, hit: SearchHit) -> tuple:
        cells = []
        # There is no icon without the MIME type element.
        if hit.mime_type is not None:
            cells.append(E.td(E.img(src=self.absolute_url(hit.icon_url), alt=clean_xml_chars(hit.mime_type))))
        cells.append(E.td(E.a(clean_xml_chars(hit.title), href=self.absolute_url(hit.view_url))))

        summary = E.div({"class": "summary"})
        append_highlighted(summary, self.truncate_summary(hit.summary))

        parts = []
        # Only documents have their size.
        if hit.size_text is not None:
            parts.append(f"Size: {hit.size_text} {hit.size_suffix or 'B'}.")
        if hit.created_by is not None and hit.created_date is not None:
            parts.append(f"Created by {hit.created_by} at {hit.created_date}.")
        elif hit.created_by is not None:
            parts.append(f"Created by {hit.created_by}.")
        elif hit.created_date is not None:
            parts.append(f"Created at {hit.created_date}.")

        dd = E.dd(summary)
        if parts or hit.location_url is not None:
            data = E.div({"class": "data"})
            data.text = clean_xml_chars(" ".join(parts))
            if hit.location_url is not None:
                data.text += " Location: " if parts else "Location: "
                link = E.a(clean_xml_chars(hit.location_name), href=self.absolute_url(hit.location_url))
                link.tail = "."
                data.append(link)
            dd.append(data)

        return E.dt(E.table(E.tr(*cells))), dd

    def _paging(self, page: ResultPage) -> html.HtmlElement | None:
        row = E.tr()
        if self.previous_url is not None:
            row.append(E.td(E.a(
                E.img(src=self.absolute_url("/img/page_previous16.gif"), alt="Previous Page"),
                href=self.previous_url,
            )))
        start = page.start_index
        count = page.items_per_page
        total = page.total_results
        if start is not None and count is not None and total is not None:
            row.append(E.td(f"Items {start} - {start + count - 1} of {total}"))
        # The last page is assumed when fewer hits came than requested.
        if self.next_url is not None:
            requested = extract_page_size(self.search_url)
            if requested is not None and count is not None and requested == count:
                row.append(E.td(E.a(
                    E.img(src=self.absolute_url("/img/page_next16.gif"), alt="Next Page"),
                    href=self.next_url,
                )))
        if not len(row):
            return None
        return E.center(E.table(row))
