"""Test setup for webbook."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from webbook.exceptions import FetchError  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (make real network calls)",
    )


class FakeSite:
    """In-memory website serving pages by URL.

    Records every fetch, the number of fetches in flight and the highest
    concurrency seen, so scheduling can be asserted.
    """

    def __init__(self, pages: dict[str, str], latency: float = 0.0) -> None:
        self.pages = pages
        self.latency = latency
        self.fetched: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.latencies: dict[str, float] = {}
        self.started_at: dict[str, float] = {}
        self.finished_at: dict[str, float] = {}

    async def fetch(self, url: str) -> str:
        loop = asyncio.get_running_loop()
        self.fetched.append(url)
        self.started_at[url] = loop.time()
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latencies.get(url, self.latency))
            if url not in self.pages:
                raise FetchError(f"Resource not found at {url}")
            return self.pages[url]
        finally:
            self.in_flight -= 1
            self.finished_at[url] = loop.time()


def page(title: str, body: str = "", *, links: list[str] | None = None, css: str = "toc") -> str:
    """Build a small HTML page with an optional list of chapter links."""
    anchors = "".join(
        f'<li><a class="{css}" href="{href}">Link {index}</a></li>'
        for index, href in enumerate(links or [])
    )
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><ul>{anchors}</ul><p>{body}</p></body></html>"
    )


@pytest.fixture
def network_timeout() -> float:
    """Default timeout for network operations in seconds."""
    return 60.0
