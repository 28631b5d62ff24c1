"""File helpers for writing rendered books."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from urllib.parse import urlparse

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_DEFAULT_FILENAME = "book"


def safe_filename(name: str, extension: str = "") -> str:
    """Turn a chapter or book title into a filename.

    Spaces become underscores and path separators or characters rejected by
    common filesystems are dropped.

    Args:
        name: The title to convert.
        extension: Optional extension including the leading dot.

    Returns:
        The filename, ``book`` when nothing usable remains of ``name``.
    """
    filename = name.strip().replace(" ", "_")
    filename = _UNSAFE_FILENAME_RE.sub("", filename).strip(".")
    return f"{filename or _DEFAULT_FILENAME}{extension}"


def directory_for_url(url: str) -> str:
    """Return the directory name used for a URL: its host name."""
    return urlparse(url).hostname or ""


def ensure_suffix(path: str | Path, suffix: str) -> Path:
    """Append ``suffix`` to ``path`` unless it already ends with it."""
    path = Path(path)
    if path.suffix == suffix:
        return path
    return path.with_name(path.name + suffix)


async def write_text_async(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to a file asynchronously using a thread pool.

    Args:
        path: Path to the file to write.
        content: Text content to write.
        encoding: Text encoding to use.
    """
    await asyncio.to_thread(path.write_text, content, encoding=encoding)


async def mkdir_async(
    path: Path, parents: bool = False, exist_ok: bool = False
) -> None:
    """Create a directory asynchronously using a thread pool.

    Args:
        path: Path to the directory to create.
        parents: If True, create parent directories as needed.
        exist_ok: If True, don't raise an error if directory exists.
    """
    await asyncio.to_thread(path.mkdir, parents=parents, exist_ok=exist_ok)
