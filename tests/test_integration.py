"""Integration tests for webbook with real network calls.

These tests make actual HTTP requests and are marked with
@pytest.mark.integration so they can be skipped in CI environments.

Run integration tests only:
    pytest -m integration
"""

from __future__ import annotations

import asyncio

import pytest

from webbook import build_book, build_policies, render_markdown


@pytest.mark.integration
@pytest.mark.asyncio
async def test_single_page_book(network_timeout: float) -> None:
    """A single page becomes a one-chapter book."""
    chapter = await asyncio.wait_for(
        build_book(["https://example.com/"], build_policies()),
        timeout=network_timeout,
    )

    assert chapter.title == "Example Domain"
    assert "Example Domain" in render_markdown(chapter)
