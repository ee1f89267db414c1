"""Google Doc HTML export download with retries and timeout."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
EXPORT_URL_TEMPLATE = "https://docs.google.com/document/d/{doc_id}/export?format=html"


class DocDownloadError(RuntimeError):
    """The document could not be downloaded."""


def export_url(doc_id: str) -> str:
    return EXPORT_URL_TEMPLATE.format(doc_id=doc_id)


class GoogleDocClient:
    """Downloads published Google Docs as HTML."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            transport=transport or httpx.HTTPTransport(retries=max_retries),
            follow_redirects=True,
        )

    def download(self, doc_id: str) -> str:
        """Return the document HTML or raise ``DocDownloadError``."""

        url = export_url(doc_id)
        try:
            response = self._client.get(url)
        except httpx.TimeoutException as error:
            logger.warning("Timeout fetching %s", url)
            raise DocDownloadError(f"Timeout downloading document {doc_id}") from error
        except httpx.HTTPError as error:
            logger.warning("HTTP error fetching %s: %s", url, error)
            raise DocDownloadError(f"Failed to download document {doc_id}: {error}") from error

        if not response.is_success:
            raise DocDownloadError(
                f"Failed to download document {doc_id}: HTTP {response.status_code}",
            )
        logger.info("Downloaded %s (%d bytes)", url, len(response.content))
        return response.text

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GoogleDocClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
