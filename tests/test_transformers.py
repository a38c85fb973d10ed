"""Tests of the RSS, HTML and error renderings."""

import pytest
from lxml import etree, html

from conftest import LIVELINK_URL, NO_RESULTS, SEARCH_RESULTS
from server.transformers.ErrorTransformer import render_html_error, render_xml_error
from server.transformers.HTMLTransformer import HTMLTransformer
from server.transformers.TransformerInterface import ELLIPSIS
from server.transformers.XMLTransformer import MEDIA_NS, OS_NS, SS_NS, XMLTransformer
from shared.clients.livelink.ResultParser import ResultParser
from shared.models.errors import BackendError
from shared.models.search import ResultPage, SearchHit

SEARCH_URL = f"{LIVELINK_URL}?func=search&where1=report&gofor=2"
DESCRIPTOR_URL = "http://connector/GetOSDX.aspx?livelinkUrl=x"


@pytest.fixture
def page() -> ResultPage:
    return ResultParser().parse(SEARCH_RESULTS)


@pytest.fixture
def empty_page() -> ResultPage:
    return ResultParser().parse(NO_RESULTS)


class TestTruncateSummary:
    """Summaries are cut to the maximum length and marked by an ellipsis."""

    def test_long_summary_is_cut(self):
        transformer = XMLTransformer("q", SEARCH_URL, DESCRIPTOR_URL, max_summary_length=185)

        result = transformer.truncate_summary("a" * 200)

        assert result == "a" * 185 + ELLIPSIS

    def test_short_summary_unchanged(self):
        transformer = XMLTransformer("q", SEARCH_URL, DESCRIPTOR_URL, max_summary_length=185)

        assert transformer.truncate_summary("a" * 100) == "a" * 100

    def test_zero_disables_cutting(self):
        transformer = HTMLTransformer("q", SEARCH_URL, max_summary_length=0)

        assert transformer.truncate_summary("a" * 1000) == "a" * 1000


class TestXMLTransformer:
    """RSS 2.0 with OpenSearch extensions."""

    @staticmethod
    def render(page: ResultPage, **kwargs) -> etree._Element:
        transformer = XMLTransformer("report", SEARCH_URL, DESCRIPTOR_URL, **kwargs)
        return etree.fromstring(transformer.transform(page))

    def test_channel(self, page):
        channel = self.render(page).find("channel")

        assert channel.findtext("title") == "Livelink Enterprise at livelink.example.com: report"
        assert channel.findtext("generator") == "Livelink Search Connector for SharePoint"
        assert channel.find("image/url").text == "http://livelink.example.com/img/icon-search.gif"
        search_link = channel.find("link[@rel='search']")
        assert search_link.get("href") == DESCRIPTOR_URL
        assert search_link.get("type") == "application/opensearchdescription+xml"

    def test_paging_elements(self, page):
        channel = self.render(page).find("channel")

        assert channel.findtext(f"{{{OS_NS}}}totalResults") == "42"
        assert channel.findtext(f"{{{OS_NS}}}startIndex") == "1"
        assert channel.findtext(f"{{{OS_NS}}}itemsPerPage") == "2"
        query = channel.find(f"{{{OS_NS}}}Query")
        assert query.get("role") == "request"
        assert query.get("searchTerms") == "report"
        assert query.get("startPage") == "1"

    def test_document_item(self, page):
        item = self.render(page).find("channel/item")

        assert item.findtext("title") == "report.pdf"
        assert item.findtext("link") == "http://livelink.example.com/livelink/llisapi.dll/open/1234"
        assert item.findtext("description") == "The quarterly <b>report</b> of sales."
        assert item.findtext("pubDate") == "2012-05-30"
        assert item.findtext("author") == "1000"
        assert item.find(f"{{{MEDIA_NS}}}thumbnail").get("url") == "http://livelink.example.com/img/webdoc/pdf.gif"
        assert item.findtext(f"{{{SS_NS}}}size") == "12288"
        assert item.findtext(f"{{{SS_NS}}}dotfileextension") == ".PDF"
        enclosure = item.find("enclosure")
        assert enclosure.get("url") == "http://livelink.example.com/livelink/llisapi.dll/fetch/1234/report.pdf"
        assert enclosure.get("type") == "application/pdf"
        assert enclosure.get("length") == "12288"

    def test_container_item_has_no_size_or_enclosure(self, page):
        item = self.render(page).findall("channel/item")[1]

        assert item.find(f"{{{MEDIA_NS}}}thumbnail") is not None
        assert item.find(f"{{{SS_NS}}}size") is None
        assert item.find("enclosure") is None

    def test_absent_paging_values_are_omitted(self):
        content = (
            b"<Output><SearchResultsInformation><CurrentStartAt>1</CurrentStartAt></SearchResultsInformation>"
            b"<SearchResults><SearchResult><OTName ViewURL='/a'>a</OTName></SearchResult></SearchResults></Output>"
        )

        channel = self.render(ResultParser().parse(content)).find("channel")

        assert channel.find(f"{{{OS_NS}}}totalResults") is None
        assert channel.find(f"{{{OS_NS}}}itemsPerPage") is None
        assert channel.findtext(f"{{{OS_NS}}}startIndex") == "1"
        assert channel.find(f"{{{OS_NS}}}Query").get("startPage") == "1"

    def test_absent_fields_are_omitted(self):
        page = ResultPage(hits=[SearchHit(title="bare", view_url="/open/1")])

        item = self.render(page).find("channel/item")

        assert item.find("pubDate") is None
        assert item.find("author") is None
        assert item.find(f"{{{MEDIA_NS}}}thumbnail") is None

    def test_escaped_description(self, page):
        body = XMLTransformer("report", SEARCH_URL, DESCRIPTOR_URL).transform(page)

        assert b"&lt;b&gt;report&lt;/b&gt;" in body

    def test_summary_is_cut(self):
        page = ResultPage(hits=[SearchHit(title="t", summary="x" * 200)])

        item = self.render(page, max_summary_length=185).find("channel/item")

        assert item.findtext("description") == "x" * 185 + ELLIPSIS

    def test_empty_results(self, empty_page):
        channel = self.render(empty_page).find("channel")

        assert channel.findall("item") == []
        assert channel.findtext(f"{{{OS_NS}}}totalResults") == "0"

    def test_namespaces_declared_on_root(self, page):
        body = XMLTransformer("report", SEARCH_URL, DESCRIPTOR_URL).transform(page)

        assert body.startswith(b"<?xml version='1.0' encoding='utf-8'?>")
        assert etree.fromstring(body).nsmap == {"os": OS_NS, "m": MEDIA_NS, "ss": SS_NS}


class TestHTMLTransformer:
    """Styled HTML page."""

    @staticmethod
    def render(page: ResultPage, search_url: str = SEARCH_URL, **kwargs) -> html.HtmlElement:
        transformer = HTMLTransformer("report", search_url, **kwargs)
        return html.fromstring(transformer.transform(page))

    def test_header(self, page):
        document = self.render(page)

        assert document.findtext("head/title") == "Search Results at livelink.example.com"
        assert document.xpath("//h2/text()") == ["Results of the search for report"]
        assert document.xpath("//div[@class='note']/a/@href") == [SEARCH_URL]

    def test_hits(self, page):
        document = self.render(page)

        assert document.xpath("//dl//td/a/text()") == ["report.pdf", "Reports"]
        assert document.xpath("//div[@class='summary']/b/text()") == ["report"]
        data = document.xpath("//div[@class='data']")[0]
        assert data.text_content() == "Size: 12 KB. Created by 1000 at 2012-05-30. Location: Reports."
        assert data.xpath("a/@href") == ["http://livelink.example.com/livelink/llisapi.dll/open/2000"]

    def test_paging_with_next_page(self, page):
        document = self.render(page, previous_url="http://c/prev", next_url="http://c/next")

        assert document.xpath("//center//a/@href") == ["http://c/prev", "http://c/next"]
        assert "Items 1 - 2 of 42" in document.xpath("string(//center)")

    def test_no_next_page_when_fewer_hits_came(self, page):
        search_url = f"{LIVELINK_URL}?func=search&where1=report&gofor=10"

        document = self.render(page, search_url=search_url, next_url="http://c/next")

        assert document.xpath("//center//a/@href") == []

    def test_bare_hit_has_no_empty_data_line(self):
        page = ResultPage(hits=[SearchHit(title="bare", view_url="/open/1")], start_index=1, has_paging=True)

        document = self.render(page, previous_url="http://c/prev")

        assert document.xpath("//div[@class='data']") == []
        assert "Items" not in document.xpath("string(//center)")
        assert document.xpath("//center//a/@href") == ["http://c/prev"]

    def test_partial_data_line(self):
        page = ResultPage(hits=[SearchHit(title="t", created_by="1000")])

        data = self.render(page).xpath("//div[@class='data']")[0]

        assert data.text_content() == "Created by 1000."

    def test_location_only_data_line(self):
        hit = SearchHit(title="t", location_url="/open/2000", location_name="Reports")

        data = self.render(ResultPage(hits=[hit])).xpath("//div[@class='data']")[0]

        assert data.text_content() == "Location: Reports."

    def test_no_paging_row_without_values_or_links(self):
        page = ResultPage(hits=[SearchHit(title="t")], has_paging=True)

        assert self.render(page).xpath("//center") == []

    def test_no_items(self, empty_page):
        document = self.render(empty_page)

        assert document.xpath("//p/text()") == ["No items were found."]
        assert document.xpath("//dl") == []
        assert document.xpath("//center") == []

    def test_doctype(self, page):
        body = HTMLTransformer("report", SEARCH_URL).transform(page)

        assert body.startswith(b"<!DOCTYPE html>")


class TestErrorTransformer:
    """Errors rendered in-band."""

    @staticmethod
    def raised() -> BackendError:
        try:
            raise BackendError("Login failed")
        except BackendError as e:
            return e

    def test_xml_error_as_single_hit(self):
        channel = etree.fromstring(render_xml_error(self.raised(), SEARCH_URL)).find("channel")

        assert channel.findtext(f"{{{OS_NS}}}totalResults") == "1"
        items = channel.findall("item")
        assert len(items) == 1
        assert items[0].findtext("title") == "Login failed"
        assert "BackendError" in items[0].findtext("description")

    def test_html_error_page(self):
        document = html.fromstring(render_html_error(self.raised()))

        assert document.findtext("head/title") == "Error"
        assert document.xpath("//h3/text()") == ["The Search Failed"]
        assert document.xpath("//p/text()")[0] == "Login failed"
        assert "Traceback" in document.xpath("string(//small)")
