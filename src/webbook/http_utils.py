"""HTTP utilities for fetching content with retry logic and connection pooling."""

from __future__ import annotations

import asyncio
import logging
from typing import Final

import httpx

from webbook.config import (
    WEBBOOK_FETCH_BACKOFF_S,
    WEBBOOK_FETCH_MAX_RETRIES,
    WEBBOOK_FETCH_TIMEOUT_S,
    WEBBOOK_USER_AGENT,
)
from webbook.exceptions import FetchError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

MAX_REDIRECTS: Final[int] = 5


def create_client() -> httpx.AsyncClient:
    """Create the shared client used for every page and image of a run."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(WEBBOOK_FETCH_TIMEOUT_S),
        headers={"User-Agent": WEBBOOK_USER_AGENT},
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
    )


async def fetch_with_retries(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    return_bytes: bool = False,
) -> str | bytes:
    """Fetch content from a URL with retry logic for transient failures.

    Args:
        url: The URL to fetch.
        client: Optional httpx.AsyncClient for connection pooling. If not
            provided, a new client is created for this request.
        return_bytes: If True, return raw bytes instead of decoded text.

    Returns:
        The fetched content as a string (default) or bytes (if return_bytes=True).

    Raises:
        FetchError: If the fetch fails after all retries or returns 404.
    """
    last_exc: Exception | None = None

    async def do_fetch(http_client: httpx.AsyncClient) -> str | bytes:
        nonlocal last_exc

        for attempt in range(WEBBOOK_FETCH_MAX_RETRIES + 1):
            try:
                response = await http_client.get(url)

                if response.status_code == 404:
                    raise FetchError(f"Resource not found at {url}")

                if response.status_code in RETRY_STATUS_CODES:
                    last_exc = FetchError(f"HTTP {response.status_code} from {url}")
                else:
                    response.raise_for_status()
                    return response.content if return_bytes else response.text
            except httpx.InvalidURL as exc:
                raise FetchError(f"Invalid URL {url}: {exc}") from exc
            except (httpx.RequestError, httpx.HTTPStatusError) as exc:
                last_exc = exc

            if attempt < WEBBOOK_FETCH_MAX_RETRIES:
                backoff = WEBBOOK_FETCH_BACKOFF_S * (2**attempt)
                logger.debug("Retrying %s in %.1fs: %s", url, backoff, last_exc)
                await asyncio.sleep(backoff)

        raise FetchError(f"Failed to fetch {url}: {last_exc}")

    if client is not None:
        return await do_fetch(client)

    async with create_client() as new_client:
        return await do_fetch(new_client)
