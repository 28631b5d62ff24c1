"""Tests for file helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from webbook.file_utils import (
    directory_for_url,
    ensure_suffix,
    mkdir_async,
    safe_filename,
    write_text_async,
)


class TestSafeFilename:
    """Tests for safe_filename."""

    def test_replaces_spaces_and_separators(self) -> None:
        """Spaces become underscores and slashes are dropped."""
        assert safe_filename("A Declaration / Part 1", ".md") == "A_Declaration__Part_1.md"

    def test_falls_back_to_book(self) -> None:
        """An empty title still gives a usable name."""
        assert safe_filename("", ".epub") == "book.epub"


class TestDirectoryForUrl:
    """Tests for directory_for_url."""

    def test_uses_hostname(self) -> None:
        """The directory is the host name without port or scheme."""
        assert directory_for_url("https://www.eff.org:443/page?x=1") == "www.eff.org"

    def test_empty_for_synthetic_root(self) -> None:
        """Chapters without URL have no directory."""
        assert directory_for_url("") == ""


class TestEnsureSuffix:
    """Tests for ensure_suffix."""

    def test_appends_missing_suffix(self) -> None:
        """The suffix is appended, not substituted."""
        assert ensure_suffix("out/book.v1", ".mobi") == Path("out/book.v1.mobi")

    def test_keeps_existing_suffix(self) -> None:
        """Paths already ending with the suffix are unchanged."""
        assert ensure_suffix("book.mobi", ".mobi") == Path("book.mobi")


class TestAsyncWrites:
    """Tests for async file helpers."""

    @pytest.mark.asyncio
    async def test_mkdir_and_write(self, tmp_path: Path) -> None:
        """Creates nested directories and writes text."""
        directory = tmp_path / "a" / "b"
        await mkdir_async(directory, parents=True, exist_ok=True)
        await write_text_async(directory / "f.md", "content")

        assert (directory / "f.md").read_text(encoding="utf-8") == "content"
