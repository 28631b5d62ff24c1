"""Fetch pages and images over a shared HTTP client."""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from webbook.exceptions import FetchError
from webbook.http_utils import create_client, fetch_with_retries

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Page and image fetcher backed by one pooled ``httpx.AsyncClient``.

    Use as an async context manager so the connection pool is closed once
    the book is built and rendered::

        async with HttpFetcher() as fetcher:
            chapter = await ChapterBuilder(policies, fetcher.fetch_page).build(url)
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HttpFetcher:
        if self._client is None:
            self._client = create_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_page(self, url: str) -> str:
        """Fetch a page's markup.

        Raises:
            FetchError: If the page cannot be retrieved.
        """
        logger.debug("Fetching page %s", url)
        result = await fetch_with_retries(url, client=self._client)
        # Type narrowing: return_bytes=False means result is str
        if isinstance(result, bytes):
            return result.decode("utf-8", errors="replace")
        return result

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch a binary resource such as an image.

        Raises:
            FetchError: If the resource cannot be retrieved.
        """
        if not url.startswith(("http://", "https://")):
            raise FetchError(f"Unsupported image address: {url}")
        logger.debug("Fetching resource %s", url)
        result = await fetch_with_retries(url, client=self._client, return_bytes=True)
        if isinstance(result, str):
            return result.encode("utf-8")
        return result
