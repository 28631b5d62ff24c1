"""Tests for the pooled HTTP fetcher."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from webbook.exceptions import FetchError
from webbook.fetch import HttpFetcher


class TestHttpFetcher:
    """Tests for HttpFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_page_uses_shared_client(self) -> None:
        """Pages are fetched through the client given to the fetcher."""
        client = AsyncMock()
        with patch(
            "webbook.fetch.fetch_with_retries", AsyncMock(return_value="<html></html>")
        ) as mock_fetch:
            async with HttpFetcher(client) as fetcher:
                result = await fetcher.fetch_page("https://example.com")

        assert result == "<html></html>"
        mock_fetch.assert_awaited_once_with("https://example.com", client=client)
        client.aclose.assert_not_called()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self) -> None:
        """A client created by the fetcher is closed on exit."""
        client = AsyncMock()
        with patch("webbook.fetch.create_client", return_value=client):
            async with HttpFetcher():
                pass

        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_bytes_returns_raw_content(self) -> None:
        """Binary resources are requested as bytes."""
        with patch(
            "webbook.fetch.fetch_with_retries", AsyncMock(return_value=b"GIF89a")
        ) as mock_fetch:
            async with HttpFetcher(AsyncMock()) as fetcher:
                result = await fetcher.fetch_bytes("https://example.com/a.gif")

        assert result == b"GIF89a"
        assert mock_fetch.call_args.kwargs["return_bytes"] is True

    @pytest.mark.asyncio
    async def test_fetch_bytes_rejects_relative_address(self) -> None:
        """Addresses that are not absolute HTTP URLs cannot be fetched."""
        async with HttpFetcher(AsyncMock()) as fetcher:
            with pytest.raises(FetchError, match="Unsupported image address"):
                await fetcher.fetch_bytes("images/a.gif")
