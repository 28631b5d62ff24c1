"""Command line interface: scrape pages into a book."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from webbook.builder import build_book
from webbook.epub import EpubRenderer
from webbook.exceptions import PolicyError, RenderError, WebbookError
from webbook.fetch import HttpFetcher
from webbook.file_utils import (
    ensure_suffix,
    mkdir_async,
    safe_filename,
    write_text_async,
)
from webbook.logging_config import configure_logging
from webbook.mobi import write_mobi
from webbook.output_formatter import (
    render_html_document,
    render_json,
    render_markdown,
    render_toc,
    split_markdown,
)
from webbook.policy import build_policies
from webbook.schemas import Chapter, LevelPolicy

logger = logging.getLogger(__name__)

FORMATS = ("md", "json", "html", "epub", "mobi")

# Options that only make sense when links are followed.
_LEVEL_OPTIONS = {
    "include": "include",
    "offset": "offset",
    "reverse": "reverse",
    "delay": "delay",
    "threads": "threads",
    "use_link_name": "use-link-name",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webbook", description="Scrape web pages into a book."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser(
        "get",
        help="scrape URL content",
        description="Scrape URL content, e.g. webbook get https://www.eff.org/cyberspace-independence",
    )
    get_parser.add_argument("urls", nargs="+", metavar="URL")
    get_parser.add_argument("-n", "--name", default="", help="book name (default: page title)")
    get_parser.add_argument("-a", "--author", default="", help="book author")
    get_parser.add_argument("-f", "--format", default="md", choices=FORMATS, help="file format")
    get_parser.add_argument("--output", default="", help="file name (default: book name)")
    get_parser.add_argument("--stdout", action="store_true", help="print to standard output")
    get_parser.add_argument("--images", action="store_true", help="retrieve images only")
    get_parser.add_argument("-q", "--quiet", action="store_true", help="hide progress")
    get_parser.add_argument(
        "--separate-md-file",
        action="store_true",
        help="save markdown in separate files, one per top-level chapter",
    )
    _add_selection_arguments(get_parser)

    list_parser = subparsers.add_parser("list", help="print the table of contents")
    list_parser.add_argument("urls", nargs="+", metavar="URL")
    list_parser.add_argument("-q", "--quiet", action="store_true", help="hide progress")
    _add_selection_arguments(list_parser)

    return parser


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s",
        "--selector",
        action="append",
        default=[],
        help="table of contents CSS selector, repeat or separate with commas for each level",
    )
    parser.add_argument("-d", "--depth", type=int, default=0, help="scraping depth")
    parser.add_argument("-l", "--limit", type=int, default=None, help="limit number of chapters")
    parser.add_argument("-o", "--offset", type=int, default=None, help="skip first chapters")
    parser.add_argument(
        "-r", "--reverse", action="store_true", default=None, help="reverse chapter order"
    )
    parser.add_argument(
        "--delay",
        type=int,
        default=None,
        help="time in milliseconds to wait before downloading next chapter",
    )
    parser.add_argument("-t", "--threads", type=int, default=None, help="download concurrency")
    parser.add_argument(
        "-i", "--include", action="store_true", default=None, help="include URL as first chapter"
    )
    parser.add_argument(
        "--use-link-name",
        action="store_true",
        default=None,
        help="use link name for chapter title",
    )


def split_selectors(values: Sequence[str]) -> list[str]:
    """Flatten repeated and comma separated selector options."""
    selectors: list[str] = []
    for value in values:
        selectors.extend(part.strip() for part in value.split(","))
    return selectors


def policies_from_args(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> tuple[LevelPolicy, ...]:
    """Validate level options and turn them into policies.

    Errors are reported through ``parser.error`` before anything is fetched.
    """
    selectors = split_selectors(args.selector)
    depth = args.depth
    if depth < 0:
        parser.error("depth must be positive")

    # a limit needs at least one level of links to apply to
    if args.limit is not None and depth == 0:
        depth = 1

    follows_links = depth > 0 or bool(selectors)
    for attribute, flag in _LEVEL_OPTIONS.items():
        if getattr(args, attribute) is not None and not follows_links:
            parser.error(f"cannot use {flag} option if depth/selector is not specified")

    if args.delay is not None and args.threads is not None:
        parser.error("cannot use delay and threads options at the same time")

    try:
        return build_policies(
            selectors,
            depth=depth,
            limit=-1 if args.limit is None else args.limit,
            offset=args.offset or 0,
            reverse=bool(args.reverse),
            delay=-1 if args.delay is None else args.delay,
            threads=-1 if args.threads is None else args.threads,
            include=bool(args.include),
            images_only=getattr(args, "images", False),
            use_link_name=bool(args.use_link_name),
        )
    except PolicyError as exc:
        parser.error(str(exc))


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    policies = policies_from_args(parser, args)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    if args.command == "get" and args.format == "mobi" and args.output:
        args.output = str(ensure_suffix(args.output, ".mobi"))

    try:
        if args.command == "list":
            asyncio.run(_list(args, policies))
        else:
            asyncio.run(_get(args, policies))
    except WebbookError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def _log_progress(index: int, title: str) -> None:
    logger.info("[%d] %s", index + 1, title)


async def _list(args: argparse.Namespace, policies: tuple[LevelPolicy, ...]) -> None:
    chapter = await build_book(args.urls, policies, progress=_log_progress)
    print(render_toc(chapter))


async def _get(args: argparse.Namespace, policies: tuple[LevelPolicy, ...]) -> None:
    async with HttpFetcher() as fetcher:
        chapter = await build_book(
            args.urls,
            policies,
            name=args.name or None,
            author=args.author or None,
            fetcher=fetcher,
            progress=_log_progress,
        )

        if args.format == "md":
            if args.separate_md_file:
                await _write_separate_markdown(chapter, stdout=args.stdout)
            else:
                path = _output_path(args.output, chapter, ".md")
                await _emit_text(render_markdown(chapter), path, "Markdown", args.stdout)
        elif args.format == "json":
            print(render_json(chapter))
        elif args.format == "html":
            path = _output_path(args.output, chapter, ".html")
            await _emit_text(render_html_document(chapter), path, "Html", args.stdout)
        elif args.format == "epub":
            renderer = EpubRenderer(fetcher.fetch_bytes)
            path = await renderer.write(chapter, _output_path(args.output, chapter, ".epub"))
            _emit_file(path, "Ebook", args.stdout)
        elif args.format == "mobi":
            renderer = EpubRenderer(fetcher.fetch_bytes)
            path = await write_mobi(
                chapter, _output_path(args.output, chapter, ".mobi"), renderer=renderer
            )
            _emit_file(path, "Ebook", args.stdout)


def _output_path(output: str, chapter: Chapter, extension: str) -> Path:
    if output:
        return Path(output)
    return Path(safe_filename(chapter.book_title, extension))


async def _emit_text(content: str, path: Path, label: str, stdout: bool) -> None:
    if stdout:
        print(content)
        return
    try:
        await write_text_async(path, content)
    except OSError as exc:
        raise RenderError(f"Cannot write {path}: {exc}") from exc
    print(f'{label} saved to "{path}"')


def _emit_file(path: Path, label: str, stdout: bool) -> None:
    if stdout and path.exists():
        sys.stdout.buffer.write(path.read_bytes())
        sys.stdout.buffer.flush()
        return
    print(f'{label} saved to "{path}"')


async def _write_separate_markdown(chapter: Chapter, *, stdout: bool) -> None:
    for artifact in split_markdown(chapter):
        if stdout:
            print(artifact.content)
            continue
        directory = Path(artifact.directory or ".")
        try:
            await mkdir_async(directory, parents=True, exist_ok=True)
            path = directory / artifact.filename
            await write_text_async(path, artifact.content)
        except OSError as exc:
            raise RenderError(f"Cannot write {artifact.filename}: {exc}") from exc
        print(f'Markdown saved to "{path}"')
