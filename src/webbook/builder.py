"""Recursive chapter tree acquisition."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from webbook.exceptions import FetchError
from webbook.extract import ChapterLink, extract_page
from webbook.fetch import HttpFetcher
from webbook.policy import normalize_policies, select_links
from webbook.schemas import Chapter, LevelPolicy

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str], Awaitable[str]]
ProgressCallback = Callable[[int, str], None]


class ChapterBuilder:
    """Build a chapter tree by following links level by level.

    Each level of the tree is governed by the policy at the same index.
    Children are always attached in selection order, whatever order their
    fetches complete in.

    Args:
        policies: One policy per tree level, index 0 being the seed pages.
        fetch: Coroutine returning the markup of a URL, raising FetchError.
        progress: Called with the index and title of each child chapter
            once it is built.
    """

    def __init__(
        self,
        policies: Sequence[LevelPolicy],
        fetch: PageFetcher,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.policies = normalize_policies(policies)
        self._fetch = fetch
        self._progress = progress

    async def build_book(
        self,
        urls: Sequence[str],
        *,
        name: str | None = None,
        author: str | None = None,
    ) -> Chapter:
        """Build the tree for one or more seed URLs.

        Several seeds are gathered under a synthetic root chapter with no
        URL, no title and no content of its own.
        """
        if not urls:
            raise ValueError("at least one URL is required")

        if len(urls) == 1:
            root = await self.build(urls[0], author=author)
        else:
            seeds = []
            for index, url in enumerate(urls):
                seed = await self.build(url, author=author)
                self._report(index, seed)
                seeds.append(seed)
            root = Chapter(author=author or "", children=tuple(seeds))

        update: dict[str, str] = {}
        if name:
            update["title"] = name
        if author:
            update["author"] = author
        return root.model_copy(update=update) if update else root

    async def build(
        self,
        url: str,
        depth: int = 0,
        link_name: str | None = None,
        author: str | None = None,
    ) -> Chapter:
        """Fetch ``url`` and the subtree below it.

        A page that cannot be fetched becomes an empty leaf so its siblings
        are still acquired.
        """
        policy = self.policies[depth]

        try:
            html = await self._fetch(url)
        except FetchError as exc:
            logger.warning("Skipping %s: %s", url, exc)
            return Chapter(
                url=url,
                title=link_name or url,
                author=author or "",
                policy=policy,
            )

        page = extract_page(html, policy.selector, base_url=url)

        if policy.use_link_name and link_name:
            title = link_name
        else:
            title = page.title or link_name or url

        if author is None:
            author = page.author or ""

        children: tuple[Chapter, ...] = ()
        if depth < len(self.policies) - 1:
            selected = select_links(page.links, policy)
            children = await self._build_children(selected, policy, depth + 1, author)

        return Chapter(
            url=url,
            title=title,
            author=author,
            content=page.content,
            children=children,
            policy=policy,
        )

    async def _build_children(
        self,
        links: list[ChapterLink],
        policy: LevelPolicy,
        depth: int,
        author: str,
    ) -> tuple[Chapter, ...]:
        if not links:
            return ()

        if policy.threads > 0 and policy.delay < 0:
            return await self._build_concurrently(links, policy.threads, depth, author)

        children = []
        for index, link in enumerate(links):
            if index > 0 and policy.delay >= 0:
                await asyncio.sleep(policy.delay / 1000)
            child = await self.build(link.url, depth, link.text, author)
            self._report(index, child)
            children.append(child)
        return tuple(children)

    async def _build_concurrently(
        self,
        links: list[ChapterLink],
        threads: int,
        depth: int,
        author: str,
    ) -> tuple[Chapter, ...]:
        semaphore = asyncio.Semaphore(threads)

        async def build_one(index: int, link: ChapterLink) -> Chapter:
            async with semaphore:
                child = await self.build(link.url, depth, link.text, author)
            self._report(index, child)
            return child

        # gather returns results in submission order, not completion order
        children = await asyncio.gather(
            *(build_one(index, link) for index, link in enumerate(links))
        )
        return tuple(children)

    def _report(self, index: int, chapter: Chapter) -> None:
        if self._progress is not None:
            self._progress(index, chapter.title)


async def build_book(
    urls: Sequence[str],
    policies: Sequence[LevelPolicy],
    *,
    name: str | None = None,
    author: str | None = None,
    fetcher: HttpFetcher | None = None,
    progress: ProgressCallback | None = None,
) -> Chapter:
    """Build a chapter tree over HTTP.

    Opens a pooled fetcher for the run unless one is supplied.
    """
    if fetcher is not None:
        builder = ChapterBuilder(policies, fetcher.fetch_page, progress=progress)
        return await builder.build_book(urls, name=name, author=author)

    async with HttpFetcher() as own_fetcher:
        builder = ChapterBuilder(policies, own_fetcher.fetch_page, progress=progress)
        return await builder.build_book(urls, name=name, author=author)
