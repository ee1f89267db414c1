"""Google Doc HTML flattening into ArchieML text and structured data."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import parse_qs, urlparse

import archieml
from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

_TAG_RE = re.compile(r"<[^<>]*>")
_BLOCK_TAGS = frozenset({"p", "h1", "h2", "h3", "h4", "h5", "h6"})
_INLINE_TAGS = frozenset({"span", "ul", "ol"})


def strip_google_redirect(href: str) -> str:
    """Unwrap ``https://www.google.com/url?q=<target>`` tracking links."""

    targets = parse_qs(urlparse(href).query).get("q")
    if targets and targets[0]:
        return targets[0]
    return href


def _render_children(tag: Tag) -> str:
    return "".join(_render(child) for child in tag.children)


def _render(node: PageElement) -> str:
    if isinstance(node, NavigableString):
        if isinstance(node, PreformattedString):
            return ""
        return str(node)
    if not isinstance(node, Tag):
        return ""

    name = node.name
    if name in _INLINE_TAGS:
        return _render_children(node)
    if name in _BLOCK_TAGS:
        return _render_children(node) + "\n"
    if name == "li":
        return "* " + _render_children(node) + "\n"
    if name == "a":
        href = node.get("href")
        if not isinstance(href, str):
            return ""
        return f'<a href="{strip_google_redirect(href)}">{_render_children(node)}</a>'
    return ""


def _straighten_quotes(match: re.Match[str]) -> str:
    return (
        match.group(0)
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )


def flatten_html(html: str) -> str:
    """Flatten exported Google Doc HTML into ArchieML source text.

    Paragraphs and headings become lines, list items become ``* `` lines and
    links keep an ``<a href>`` wrapper with Google's redirect removed. Other
    elements are dropped. Smart quotes inside tags are straightened so link
    markup survives the word processor.
    """

    soup = BeautifulSoup(html, "lxml")
    body = soup.body
    if body is None:
        return ""
    return _TAG_RE.sub(_straighten_quotes, _render_children(body))


def parse_document(html: str) -> dict[str, Any]:
    """Parse Google Doc HTML into the ArchieML document structure."""

    return archieml.loads(flatten_html(html))
