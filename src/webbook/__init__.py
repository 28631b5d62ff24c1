"""webbook: scrape linked web pages into a book."""

from webbook.builder import ChapterBuilder, build_book
from webbook.epub import EpubPackage, EpubRenderer
from webbook.exceptions import (
    ConversionError,
    FetchError,
    PolicyError,
    RenderError,
    WebbookError,
)
from webbook.extract import ChapterLink, ExtractedPage, extract_page
from webbook.fetch import HttpFetcher
from webbook.mobi import write_mobi
from webbook.output_formatter import (
    render_html,
    render_html_document,
    render_json,
    render_markdown,
    split_markdown,
)
from webbook.policy import build_policies, normalize_policies, select_links
from webbook.schemas import Chapter, LevelPolicy

__all__ = [
    "Chapter",
    "ChapterBuilder",
    "ChapterLink",
    "ConversionError",
    "EpubPackage",
    "EpubRenderer",
    "ExtractedPage",
    "FetchError",
    "HttpFetcher",
    "LevelPolicy",
    "PolicyError",
    "RenderError",
    "WebbookError",
    "build_book",
    "build_policies",
    "extract_page",
    "normalize_policies",
    "render_html",
    "render_html_document",
    "render_json",
    "render_markdown",
    "select_links",
    "split_markdown",
    "write_mobi",
]
