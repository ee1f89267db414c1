"""Google Doc download and ArchieML parsing."""

from site_builder.docs.gdoc import DocDownloadError, GoogleDocClient, export_url
from site_builder.docs.parser import flatten_html, parse_document, strip_google_redirect

__all__ = [
    "DocDownloadError",
    "GoogleDocClient",
    "export_url",
    "flatten_html",
    "parse_document",
    "strip_google_redirect",
]
