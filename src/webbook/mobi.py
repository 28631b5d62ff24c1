"""Convert a packaged EPUB to MOBI with kindlegen."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path

from webbook.config import WEBBOOK_KINDLEGEN
from webbook.epub import EpubRenderer
from webbook.exceptions import ConversionError
from webbook.file_utils import ensure_suffix
from webbook.schemas import Chapter

logger = logging.getLogger(__name__)


async def write_mobi(
    chapter: Chapter,
    path: str | Path,
    *,
    renderer: EpubRenderer,
    title: str | None = None,
    author: str | None = None,
    converter: str = WEBBOOK_KINDLEGEN,
) -> Path:
    """Write ``chapter`` as a MOBI file through an intermediate EPUB.

    The converter's exit status is not trusted: kindlegen exits non-zero on
    warnings even when the MOBI is produced. Removing the intermediate EPUB
    is the step whose failure is reported.

    Args:
        chapter: Root of the book.
        path: Output path, ``.mobi`` is appended when missing.
        renderer: EPUB renderer used for the intermediate package.
        title: Optional book title override.
        author: Optional book author override.
        converter: Converter executable, invoked as ``converter book.epub``.

    Returns:
        Path of the MOBI file.

    Raises:
        ConversionError: If the converter cannot be run or the intermediate
            EPUB cannot be removed.
        RenderError: If the intermediate EPUB cannot be written.
    """
    mobi_path = ensure_suffix(path, ".mobi")
    epub_path = mobi_path.with_suffix(".epub")

    await renderer.write(chapter, epub_path, title=title, author=author)

    try:
        result = await asyncio.to_thread(_run_converter, converter, epub_path)
    except FileNotFoundError as exc:
        raise ConversionError(
            f"{converter} is required to produce MOBI files but was not found"
        ) from exc
    except OSError as exc:
        raise ConversionError(f"Cannot run {converter}: {exc}") from exc
    else:
        logger.debug(
            "%s exited with status %s: %s", converter, result.returncode, result.stdout
        )
    finally:
        _remove_intermediate(epub_path)
    return mobi_path


def _run_converter(converter: str, epub_path: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [converter, epub_path.name],
        cwd=epub_path.parent,
        capture_output=True,
        text=True,
        check=False,
    )


def _remove_intermediate(epub_path: Path) -> None:
    try:
        epub_path.unlink()
    except OSError as exc:
        raise ConversionError(f"Cannot remove intermediate EPUB {epub_path}: {exc}") from exc
