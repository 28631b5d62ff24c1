"""Shared HTML utilities for page processing."""

from __future__ import annotations

import re

try:
    from bs4 import BeautifulSoup
    from bs4.element import Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML parsing (pip install beautifulsoup4)."
    ) from exc

_WHITESPACE_RE = re.compile(r"\s+")
_NOISE_TAGS = ("script", "style", "noscript", "template", "iframe", "form")


def find_document_root(soup: BeautifulSoup) -> Tag:
    """Find the element holding the main content of a page.

    Searches for the document root in the following order:
    1. The first <article> element
    2. The first <main> element
    3. Any element with role="main"
    4. <body> element
    5. The soup itself as fallback
    """
    article = soup.find("article")
    if article:
        return article
    main = soup.find("main")
    if main:
        return main
    role_main = soup.find(attrs={"role": "main"})
    if role_main:
        return role_main
    if soup.body:
        return soup.body
    return soup


def strip_noise(root: Tag) -> None:
    """Remove elements that never carry readable content."""
    for tag in root.find_all(_NOISE_TAGS):
        tag.decompose()


def inner_html(tag: Tag) -> str:
    """Serialize the children of ``tag`` without the tag itself."""
    return "".join(str(child) for child in tag.contents).strip()


def fragment_root(soup: BeautifulSoup) -> Tag:
    """Return the element wrapping a parsed fragment.

    The lxml builder wraps fragments in ``<html><body>``; callers that
    re-serialize a fragment want the body's children only.
    """
    return soup.body if soup.body else soup


def normalize_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()
