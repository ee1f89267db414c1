from __future__ import annotations

import allure
import httpx
import pytest

from site_builder.docs import DocDownloadError, GoogleDocClient, flatten_html, parse_document
from site_builder.docs.gdoc import export_url
from site_builder.docs.parser import strip_google_redirect

pytestmark = [
    allure.epic("Documents"),
    allure.feature("Google Doc ArchieML"),
]

EXPORTED_DOC = """
<html>
  <head><style>.c1{font-weight:700}</style></head>
  <body>
    <p><span class="c1">title: </span><span>Spring Issue</span></p>
    <h2><span>intro: Hello</span></h2>
    <ul><li><span>first</span></li><li><span>second</span></li></ul>
    <p>link: <a href="https://www.google.com/url?q=https://ex.com/a&amp;sa=D">Ex</a></p>
    <table><tr><td>dropped</td></tr></table>
  </body>
</html>
"""


def test_strip_google_redirect() -> None:
    assert (
        strip_google_redirect("https://www.google.com/url?q=https://example.com/a&sa=D")
        == "https://example.com/a"
    )
    assert strip_google_redirect("https://example.com/plain") == "https://example.com/plain"


def test_flatten_html_keeps_lines_lists_and_links() -> None:
    text = flatten_html(EXPORTED_DOC)

    assert "title: Spring Issue\n" in text
    assert "intro: Hello\n" in text
    assert "* first\n* second\n" in text
    assert 'link: <a href="https://ex.com/a">Ex</a>\n' in text
    assert "dropped" not in text
    assert "font-weight" not in text


def test_flatten_html_straightens_smart_quotes_inside_tags() -> None:
    html = (
        "<html><body><p><span>note: &lt;a href=“https://example.com”&gt;here&lt;/a&gt; "
        "“quoted”</span></p></body></html>"
    )

    text = flatten_html(html)

    assert '<a href="https://example.com">here</a>' in text
    assert "“quoted”" in text


def test_flatten_html_without_body_is_empty() -> None:
    assert flatten_html("") == ""


def test_parse_document_returns_archieml_structure() -> None:
    parsed = parse_document(EXPORTED_DOC)

    assert parsed["title"] == "Spring Issue"
    assert parsed["intro"] == "Hello"
    assert parsed["link"] == '<a href="https://ex.com/a">Ex</a>'


def test_client_downloads_export_html() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, text="<html><body><p>key: value</p></body></html>")

    with GoogleDocClient(transport=httpx.MockTransport(handler)) as client:
        html = client.download("abc123")

    assert requested == [export_url("abc123")]
    assert requested[0] == "https://docs.google.com/document/d/abc123/export?format=html"
    assert parse_document(html) == {"key": "value"}


def test_client_raises_on_http_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))

    with GoogleDocClient(transport=transport) as client:
        with pytest.raises(DocDownloadError, match="HTTP 404"):
            client.download("missing")


def test_client_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with GoogleDocClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DocDownloadError, match="Failed to download document"):
            client.download("abc")


def test_client_wraps_timeouts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with GoogleDocClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DocDownloadError, match="Timeout"):
            client.download("abc")
