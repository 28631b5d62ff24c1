"""Render a chapter tree as Markdown, JSON or HTML."""

from __future__ import annotations

import html
from dataclasses import dataclass

from webbook.file_utils import directory_for_url, safe_filename
from webbook.markdown import convert_fragment_to_markdown
from webbook.schemas import BookDocument, Chapter

_CHAPTER_SEPARATOR = "\n\n\n"


@dataclass(frozen=True)
class MarkdownArtifact:
    """One markdown file of a book split per top-level chapter."""

    directory: str
    filename: str
    content: str


def render_markdown(chapter: Chapter) -> str:
    """Render the chapter and its descendants in pre-order."""
    markdown = ""

    if chapter.policy.include:
        markdown += f"{chapter.title}\n"
        markdown += "=" * len(chapter.title) + "\n\n"
        markdown += convert_fragment_to_markdown(chapter.content) + _CHAPTER_SEPARATOR

    for child in chapter.children:
        markdown += render_markdown(child) + _CHAPTER_SEPARATOR

    return markdown


def split_markdown(chapter: Chapter) -> list[MarkdownArtifact]:
    """Render one markdown file per top-level chapter.

    Each file holds a top-level chapter with its whole subtree flattened into
    it, and belongs in a directory named after the chapter's host. A chapter
    without children is rendered as a single file. Titles that would share
    a file get a numeric suffix.
    """
    chapters = chapter.children or (chapter,)
    artifacts: list[MarkdownArtifact] = []
    taken: set[tuple[str, str]] = set()
    for child in chapters:
        directory = directory_for_url(child.url)
        filename = safe_filename(child.title, ".md")
        stem = filename[: -len(".md")]
        suffix = 1
        while (directory, filename) in taken:
            suffix += 1
            filename = f"{stem}_{suffix}.md"
        taken.add((directory, filename))
        artifacts.append(
            MarkdownArtifact(
                directory=directory,
                filename=filename,
                content=render_markdown(child),
            )
        )
    return artifacts


def render_json(chapter: Chapter) -> str:
    """Render the book as a JSON object holding its name and markdown."""
    document = BookDocument(name=chapter.book_title, content=render_markdown(chapter))
    return document.model_dump_json()


def render_html(chapter: Chapter) -> str:
    """Render the chapter and its descendants as an HTML fragment."""
    fragment = ""

    if chapter.policy.include:
        fragment += f"<h1>{html.escape(chapter.title)}</h1>"
        fragment += chapter.content

    for child in chapter.children:
        fragment += render_html(child)

    return fragment


def render_html_document(chapter: Chapter) -> str:
    """Render the book as a standalone HTML document."""
    return f"<html><head></head><body>{render_html(chapter)}</body></html>"


def render_toc(chapter: Chapter, indent: int = 0) -> str:
    """List chapter titles and URLs as an indented tree."""
    lines: list[str] = []
    if chapter.url or chapter.title:
        entry = f"- {chapter.title}"
        if chapter.url:
            entry += f" ({chapter.url})"
        lines.append("  " * indent + entry)
        indent += 1
    for child in chapter.children:
        lines.append(render_toc(child, indent))
    return "\n".join(line for line in lines if line)
