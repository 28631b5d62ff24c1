"""Package a chapter tree as an EPUB with embedded images."""

from __future__ import annotations

import asyncio
import html
import logging
import mimetypes
from pathlib import Path, PurePosixPath
from typing import Awaitable, Callable, Mapping
from urllib.parse import urljoin, urlparse
from uuid import uuid4

from bs4 import BeautifulSoup
from bs4.element import Tag
from ebooklib import epub

from webbook.config import WEBBOOK_IMAGE_CONCURRENCY
from webbook.exceptions import FetchError, RenderError
from webbook.html_utils import fragment_root, inner_html
from webbook.schemas import Chapter

logger = logging.getLogger(__name__)

ImageFetcher = Callable[[str], Awaitable[bytes]]

TOC_TITLE = "Table of Contents"

_IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
)
_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".bmp"}


class EpubPackage:
    """An EPUB under construction.

    Sections and images are numbered in the order they are added; the table
    of contents lists titled sections only.
    """

    def __init__(
        self,
        title: str,
        author: str = "",
        *,
        identifier: str | None = None,
        language: str = "en",
    ) -> None:
        self.book = epub.EpubBook()
        self.book.set_identifier(identifier or str(uuid4()))
        self.book.set_title(title)
        self.book.set_language(language)
        if author:
            self.book.add_author(author)
        self._language = language
        self._sections: list[epub.EpubHtml] = []
        self._toc: list[epub.EpubHtml] = []
        self._image_count = 0

    @property
    def sections(self) -> list[epub.EpubHtml]:
        return list(self._sections)

    @property
    def toc(self) -> list[epub.EpubHtml]:
        """Titled sections, in order."""
        return list(self._toc)

    def add_section(self, content: str, title: str = "") -> str:
        """Append an XHTML section and return its id."""
        uid = f"section{len(self._sections) + 1:04d}"
        section = epub.EpubHtml(
            uid=uid,
            title=title or uid,
            file_name=f"{uid}.xhtml",
            lang=self._language,
        )
        section.content = content
        self.book.add_item(section)
        self._sections.append(section)
        if title:
            self._toc.append(section)
        return uid

    def add_image(self, source: str, data: bytes) -> str:
        """Embed image bytes and return the path sections reference it by."""
        self._image_count += 1
        uid = f"image{self._image_count:04d}"
        file_name = f"images/{uid}{_image_extension(source, data)}"
        media_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        self.book.add_item(
            epub.EpubImage(uid=uid, file_name=file_name, media_type=media_type, content=data)
        )
        return file_name

    def write(self, path: str | Path) -> Path:
        """Write the EPUB file.

        Raises:
            RenderError: If the package cannot be serialized or written.
        """
        path = Path(path)
        self.book.toc = tuple(self._toc)
        self.book.add_item(epub.EpubNcx())
        self.book.add_item(epub.EpubNav())
        self.book.spine = ["nav", *self._sections]
        try:
            written = epub.write_epub(str(path), self.book, {"raise_exceptions": True})
        except Exception as exc:
            raise RenderError(f"Cannot write EPUB to {path}: {exc}") from exc
        if written is False:
            raise RenderError(f"Cannot write EPUB to {path}")
        logger.info("Wrote EPUB: %s", path)
        return path


class EpubRenderer:
    """Render a chapter tree into an :class:`EpubPackage`.

    Images referenced by included chapters are downloaded and embedded once
    per address, ignoring query strings. The address to package path mapping
    belongs to the renderer and is only updated under its lock.

    Args:
        fetch_image: Coroutine returning the bytes at an address, raising
            FetchError.
        image_concurrency: Maximum number of images of one chapter downloaded
            at the same time.
    """

    def __init__(
        self,
        fetch_image: ImageFetcher,
        *,
        image_concurrency: int = WEBBOOK_IMAGE_CONCURRENCY,
    ) -> None:
        self._fetch_image = fetch_image
        self._image_concurrency = max(1, image_concurrency)
        self._images: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @property
    def images(self) -> Mapping[str, str]:
        """Registered image addresses and their package paths, in order."""
        return dict(self._images)

    async def render(
        self,
        chapter: Chapter,
        *,
        title: str | None = None,
        author: str | None = None,
    ) -> EpubPackage:
        """Build the package for ``chapter`` and its descendants."""
        self._images = {}
        package = EpubPackage(
            title or chapter.book_title,
            chapter.author if author is None else author,
            identifier=chapter.url or None,
        )

        if len(chapter.children) > 1:
            package.add_section(_toc_html(chapter), TOC_TITLE)

        for node in chapter.walk():
            if node.policy.include:
                await self._append_chapter(package, node)

        return package

    async def write(
        self,
        chapter: Chapter,
        path: str | Path,
        *,
        title: str | None = None,
        author: str | None = None,
    ) -> Path:
        """Render ``chapter`` and write the EPUB to ``path``."""
        package = await self.render(chapter, title=title, author=author)
        return await asyncio.to_thread(package.write, path)

    async def _append_chapter(self, package: EpubPackage, chapter: Chapter) -> None:
        soup = BeautifulSoup(chapter.content or "", "lxml")
        root = fragment_root(soup)
        images = root.find_all("img")

        await self._register_images(package, images, chapter.url)

        for img in images:
            address = _image_address(img, chapter.url)
            local_path = self._images.get(address) if address else None
            if local_path is None:
                continue
            img["src"] = local_path
            if img.has_attr("srcset"):
                del img["srcset"]

        if chapter.policy.images_only:
            content = "".join(str(img) for img in images)
            title = ""
        else:
            content = f"<h1>{html.escape(chapter.title)}</h1>{inner_html(root)}"
            title = chapter.title

        if not content:
            logger.debug("No content to package for %s", chapter.url)
            return
        package.add_section(content, title)

    async def _register_images(
        self, package: EpubPackage, images: list[Tag], base_url: str
    ) -> None:
        pending: list[str] = []
        for img in images:
            address = _image_address(img, base_url)
            if address and address not in self._images and address not in pending:
                pending.append(address)
        if not pending:
            return

        semaphore = asyncio.Semaphore(self._image_concurrency)

        async def fetch_one(address: str) -> bytes | None:
            async with semaphore:
                try:
                    return await self._fetch_image(address)
                except FetchError as exc:
                    logger.warning("Leaving image %s unresolved: %s", address, exc)
                    return None

        payloads = await asyncio.gather(*(fetch_one(address) for address in pending))
        for address, data in zip(pending, payloads):
            if data is not None:
                await self._register(package, address, data)

    async def _register(self, package: EpubPackage, address: str, data: bytes) -> str:
        async with self._lock:
            local_path = self._images.get(address)
            if local_path is None:
                local_path = package.add_image(address, data)
                self._images[address] = local_path
            return local_path


def _image_address(img: Tag, base_url: str) -> str | None:
    src = img.get("src")
    if not src or not isinstance(src, str):
        return None
    src = src.strip().split("?")[0]
    if not src or src.startswith("data:"):
        return None
    if not base_url:
        return src
    try:
        return urljoin(base_url, src)
    except ValueError:
        logger.debug("Skipping malformed image address %r", src)
        return None


def _image_extension(source: str, data: bytes) -> str:
    suffix = PurePosixPath(urlparse(source).path).suffix.lower()
    if suffix in _IMAGE_EXTENSIONS:
        return suffix
    for signature, extension in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return extension
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    if b"<svg" in data[:512]:
        return ".svg"
    return ".jpg"


def _toc_html(chapter: Chapter) -> str:
    items = "".join(f"<li>{html.escape(child.title)}</li>" for child in chapter.children)
    return f"<h1>{TOC_TITLE}</h1><ol>{items}</ol>"
