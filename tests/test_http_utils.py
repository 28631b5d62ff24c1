"""Tests for HTTP utilities module."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from webbook.exceptions import FetchError
from webbook.http_utils import RETRY_STATUS_CODES, fetch_with_retries


def _client_returning(*responses: object) -> AsyncMock:
    mock_client = AsyncMock()
    if len(responses) == 1:
        mock_client.get = AsyncMock(return_value=responses[0])
    else:
        mock_client.get = AsyncMock(side_effect=list(responses))
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


def _response(status_code: int, text: str = "", content: bytes = b"") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = content
    response.raise_for_status = MagicMock()
    return response


class TestRetryStatusCodes:
    """Tests for RETRY_STATUS_CODES constant."""

    def test_contains_expected_codes(self) -> None:
        """Should contain all expected retryable status codes."""
        assert RETRY_STATUS_CODES == frozenset({429, 500, 502, 503, 504})


class TestFetchWithRetries:
    """Tests for fetch_with_retries function."""

    @pytest.mark.asyncio
    async def test_returns_text_by_default(self) -> None:
        """Returns text content when return_bytes=False (default)."""
        with patch("webbook.http_utils.httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client_returning(
                _response(200, text="<html>test content</html>")
            )

            result = await fetch_with_retries("https://example.com")

        assert result == "<html>test content</html>"

    @pytest.mark.asyncio
    async def test_returns_bytes_when_requested(self) -> None:
        """Returns bytes content when return_bytes=True."""
        with patch("webbook.http_utils.httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client_returning(
                _response(200, content=b"\x89PNG")
            )

            result = await fetch_with_retries("https://example.com/a.png", return_bytes=True)

        assert result == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_raises_on_404_without_retrying(self) -> None:
        """A missing resource fails immediately."""
        mock_client = _client_returning(_response(404))

        with pytest.raises(FetchError, match="Resource not found"):
            await fetch_with_retries("https://example.com/missing", client=mock_client)

        assert mock_client.get.call_count == 1

    @pytest.mark.asyncio
    async def test_retries_on_503(self) -> None:
        """Retries on 503 status code."""
        with (
            patch("webbook.http_utils.WEBBOOK_FETCH_MAX_RETRIES", 2),
            patch("webbook.http_utils.WEBBOOK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = _client_returning(_response(503), _response(200, text="success"))

            result = await fetch_with_retries("https://example.com", client=mock_client)

        assert result == "success"
        assert mock_client.get.call_count == 2

    @pytest.mark.asyncio
    async def test_raises_after_max_retries(self) -> None:
        """Raises FetchError after exhausting retries."""
        with (
            patch("webbook.http_utils.WEBBOOK_FETCH_MAX_RETRIES", 2),
            patch("webbook.http_utils.WEBBOOK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = _client_returning(_response(503))

            with pytest.raises(FetchError, match="Failed to fetch"):
                await fetch_with_retries("https://example.com", client=mock_client)

        # Initial attempt + 2 retries = 3 total
        assert mock_client.get.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_on_request_error(self) -> None:
        """Retries on network request errors."""
        with (
            patch("webbook.http_utils.WEBBOOK_FETCH_MAX_RETRIES", 2),
            patch("webbook.http_utils.WEBBOOK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = _client_returning(
                httpx.RequestError("Connection failed"), _response(200, text="success")
            )

            result = await fetch_with_retries("https://example.com", client=mock_client)

        assert result == "success"

    @pytest.mark.asyncio
    async def test_client_has_correct_settings(self) -> None:
        """Creates client with correct timeout and redirect settings."""
        with patch("webbook.http_utils.httpx.AsyncClient") as mock_client_class:
            mock_client_class.return_value = _client_returning(_response(200, text="ok"))

            await fetch_with_retries("https://example.com")

            call_kwargs = mock_client_class.call_args[1]
            assert call_kwargs["follow_redirects"] is True
            assert call_kwargs["max_redirects"] == 5
            assert "timeout" in call_kwargs
            assert "User-Agent" in call_kwargs["headers"]

    @pytest.mark.asyncio
    async def test_invalid_url_raises_fetch_error_without_retrying(self) -> None:
        """An address httpx cannot parse fails at once as a FetchError."""
        mock_client = _client_returning()
        mock_client.get = AsyncMock(side_effect=httpx.InvalidURL("Invalid IDNA hostname"))

        with patch("webbook.http_utils.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(FetchError, match="Invalid URL"):
                await fetch_with_retries("http://exa�mple.com/", client=mock_client)

        assert mock_client.get.await_count == 1
        mock_sleep.assert_not_awaited()
