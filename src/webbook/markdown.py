"""Convert HTML fragments to Markdown with a custom serializer."""

from __future__ import annotations

import re

try:
    from bs4 import BeautifulSoup
    from bs4.element import Comment, NavigableString, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML parsing (pip install beautifulsoup4)."
    ) from exc

from webbook.html_utils import normalize_text

_CONTAINER_TAGS = {
    "section",
    "article",
    "main",
    "div",
    "span",
    "header",
    "footer",
    "aside",
    "body",
    "html",
    "details",
}
_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}


def convert_fragment_to_markdown(html: str) -> str:
    """Convert an HTML fragment into Markdown.

    Parameters
    ----------
    html : str
        The HTML fragment to convert.
    """
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "lxml")
    _strip_unwanted_elements(soup)
    blocks = _serialize_children(soup)
    return "\n\n".join(block for block in blocks if block).strip()


def _strip_unwanted_elements(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(["script", "style", "noscript", "link", "meta", "template"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()


def _serialize_children(container: Tag) -> list[str]:
    blocks: list[str] = []
    inline_parts: list[str] = []

    def flush_inline() -> None:
        text = _cleanup_inline_text("".join(inline_parts))
        if text:
            blocks.append(text)
        inline_parts.clear()

    for child in container.children:
        if isinstance(child, NavigableString):
            inline_parts.append(str(child))
            continue
        if not isinstance(child, Tag):
            continue
        if _is_block(child):
            flush_inline()
            blocks.extend(_serialize_block(child))
        else:
            inline_parts.append(_serialize_inline(child))
    flush_inline()
    return blocks


def _is_block(tag: Tag) -> bool:
    return tag.name in _CONTAINER_TAGS or tag.name in _HEADING_TAGS or tag.name in {
        "p",
        "ul",
        "ol",
        "figure",
        "table",
        "blockquote",
        "pre",
        "hr",
        "dl",
        "nav",
    }


def _serialize_block(tag: Tag) -> list[str]:
    if tag.name in _CONTAINER_TAGS or tag.name == "nav":
        return _serialize_children(tag)

    if tag.name in _HEADING_TAGS:
        level = int(tag.name[1])
        heading = normalize_text(_serialize_children_inline(tag))
        if not heading:
            return []
        return [f"{'#' * level} {heading}"]

    if tag.name == "p":
        paragraph = _cleanup_inline_text(_serialize_children_inline(tag))
        return [paragraph] if paragraph else []

    if tag.name in {"ul", "ol"}:
        lines = _serialize_list(tag)
        return ["\n".join(lines)] if lines else []

    if tag.name == "dl":
        return _serialize_definitions(tag)

    if tag.name == "figure":
        figure = _serialize_figure(tag)
        return [figure] if figure else []

    if tag.name == "table":
        table_md = _serialize_table(tag)
        return [table_md] if table_md else []

    if tag.name == "blockquote":
        inner = "\n\n".join(block for block in _serialize_children(tag) if block)
        if not inner:
            return []
        return ["\n".join(f"> {line}" if line else ">" for line in inner.splitlines())]

    if tag.name == "pre":
        code = tag.get_text().strip("\n")
        if not code.strip():
            return []
        return [f"```\n{code}\n```"]

    if tag.name == "hr":
        return ["---"]

    return _serialize_children(tag)


def _serialize_inline(node: Tag | NavigableString) -> str:
    if isinstance(node, NavigableString):
        return str(node)

    if node.name == "br":
        return "\n"

    if node.name in {"em", "i"}:
        text = _serialize_children_inline(node).strip()
        return f"*{text}*" if text else ""

    if node.name in {"strong", "b"}:
        text = _serialize_children_inline(node).strip()
        return f"**{text}**" if text else ""

    if node.name == "code":
        text = node.get_text()
        return f"`{text}`" if text else ""

    if node.name == "img":
        return _serialize_image(node)

    if node.name == "a":
        text = _serialize_children_inline(node).strip()
        href = node.get("href")
        if href and not href.startswith("#"):
            return f"[{text or href}]({href})"
        return text

    if node.name in _HEADING_TAGS or node.name == "p":
        return "\n" + _serialize_children_inline(node) + "\n"

    return _serialize_children_inline(node)


def _serialize_children_inline(tag: Tag) -> str:
    return "".join(_serialize_inline(child) for child in tag.children)


def _serialize_image(img: Tag) -> str:
    src = img.get("src")
    if not src:
        return ""
    alt = normalize_text(img.get("alt") or "")
    return f"![{alt}]({src})"


def _cleanup_inline_text(text: str) -> str:
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\s*\n\s*", "\n", text)
    return text.strip()


def _serialize_list(list_tag: Tag, indent: int = 0) -> list[str]:
    lines: list[str] = []
    ordered = list_tag.name == "ol"
    for number, item in enumerate(list_tag.find_all("li", recursive=False), start=1):
        item_text_parts: list[str] = []
        nested_lists: list[Tag] = []
        for child in item.children:
            if isinstance(child, Tag) and child.name in {"ul", "ol"}:
                nested_lists.append(child)
            else:
                item_text_parts.append(_serialize_inline(child))
        item_text = _cleanup_inline_text("".join(item_text_parts)).replace("\n", " ")
        marker = f"{number}. " if ordered else "- "
        prefix = "  " * indent + marker
        lines.append(prefix + item_text if item_text else prefix.rstrip())
        for nested in nested_lists:
            lines.extend(_serialize_list(nested, indent + 1))
    return lines


def _serialize_definitions(dl: Tag) -> list[str]:
    lines: list[str] = []
    for child in dl.find_all(["dt", "dd"], recursive=False):
        text = _cleanup_inline_text(_serialize_children_inline(child))
        if not text:
            continue
        lines.append(f"**{text}**" if child.name == "dt" else f": {text}")
    return ["\n".join(lines)] if lines else []


def _serialize_table(table: Tag) -> str:
    rows = []
    for row in table.find_all("tr"):
        if row.find_parent("table") is not table:
            continue
        cells = row.find_all(["th", "td"], recursive=False)
        if not cells:
            continue
        values = []
        for cell in cells:
            cell_text = (
                _cleanup_inline_text(_serialize_children_inline(cell))
                .replace("\n", "<br>")
                .replace("|", "\\|")
            )
            values.append(cell_text)
        rows.append(values)

    if not rows:
        return ""

    max_cols = max(len(row) for row in rows)
    normalized = [row + [""] * (max_cols - len(row)) for row in rows]
    header = normalized[0]
    lines = [
        "| " + " | ".join(header) + " |",
        "| " + " | ".join("---" for _ in header) + " |",
    ]
    for row in normalized[1:]:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def _serialize_figure(figure: Tag) -> str:
    caption_tag = figure.find("figcaption")
    caption = (
        normalize_text(_serialize_children_inline(caption_tag)) if caption_tag else ""
    )

    lines = []
    for img in figure.find_all("img"):
        image = _serialize_image(img)
        if image:
            lines.append(image)
    if caption:
        lines.append(f"*{caption}*")
    return "\n\n".join(lines).strip()
