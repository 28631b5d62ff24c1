"""Extract title, content and chapter links from a page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag
from soupsieve import SelectorSyntaxError

from webbook.html_utils import (
    find_document_root,
    inner_html,
    normalize_text,
    strip_noise,
)

logger = logging.getLogger(__name__)

_SKIPPED_SCHEMES = ("javascript:", "mailto:", "tel:", "data:")


@dataclass(frozen=True)
class ChapterLink:
    """A candidate child chapter found by a level selector."""

    url: str
    text: str


@dataclass
class ExtractedPage:
    """Content extracted from one page."""

    title: str | None = None
    author: str | None = None
    content: str = ""
    links: list[ChapterLink] = field(default_factory=list)


def extract_page(html: str, selector: str = "", *, base_url: str = "") -> ExtractedPage:
    """Extract the primary content and the child links of a page.

    Malformed markup is parsed best-effort. Markup the parser rejects, or an
    empty document, yields an empty page rather than an error.

    Args:
        html: Raw page markup.
        selector: CSS selector matching the links to follow. Empty means the
            page has no children.
        base_url: Address of the page, used to resolve relative links.

    Returns:
        The extracted page.
    """
    if not html or not html.strip():
        return ExtractedPage()

    try:
        soup = BeautifulSoup(html, "lxml")
    except ParserRejectedMarkup as exc:
        logger.warning("Cannot parse markup from %s: %s", base_url or "<input>", exc)
        return ExtractedPage()

    title = _extract_title(soup)
    author = _extract_author(soup)
    # Links are collected before noise stripping so navigation inside forms
    # or templates can still serve as a table of contents.
    links = extract_links(soup, selector, base_url=base_url)

    root = find_document_root(soup)
    strip_noise(root)
    content = inner_html(root)

    return ExtractedPage(title=title, author=author, content=content, links=links)


def extract_links(
    soup: BeautifulSoup, selector: str, *, base_url: str = ""
) -> list[ChapterLink]:
    """Return the links matched by ``selector`` in document order."""
    if not selector.strip():
        return []

    try:
        matches = soup.select(selector)
    except SelectorSyntaxError as exc:
        logger.warning("Ignoring invalid selector %r: %s", selector, exc)
        return []

    links: list[ChapterLink] = []
    for match in matches:
        anchor = match if match.name == "a" else match.find("a", href=True)
        if not isinstance(anchor, Tag):
            continue
        url = _resolve_href(anchor.get("href"), base_url)
        if not url:
            continue
        links.append(ChapterLink(url=url, text=normalize_text(anchor.get_text(" "))))
    return links


def _resolve_href(href: str | list[str] | None, base_url: str) -> str | None:
    if not href or not isinstance(href, str):
        return None
    href = href.strip()
    if not href or href.startswith("#") or href.lower().startswith(_SKIPPED_SCHEMES):
        return None
    try:
        url, _fragment = urldefrag(urljoin(base_url, href))
    except ValueError:
        logger.debug("Skipping malformed link %r", href)
        return None
    return url or None


def _extract_title(soup: BeautifulSoup) -> str | None:
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content", "").strip():
        return normalize_text(og_title["content"])
    if soup.title and soup.title.get_text(strip=True):
        return normalize_text(soup.title.get_text(" "))
    heading = soup.find("h1")
    if heading and heading.get_text(strip=True):
        return normalize_text(heading.get_text(" "))
    return None


def _extract_author(soup: BeautifulSoup) -> str | None:
    for attrs in ({"name": "author"}, {"property": "article:author"}):
        meta = soup.find("meta", attrs=attrs)
        if meta and meta.get("content", "").strip():
            return normalize_text(meta["content"])
    return None
