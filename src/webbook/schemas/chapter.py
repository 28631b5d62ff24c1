"""Chapter tree model."""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

from webbook.schemas.policy import LevelPolicy


class Chapter(BaseModel):
    """A node of the book: one fetched page and the chapters it links to."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    title: str = ""
    author: str = ""
    content: str = ""
    children: tuple["Chapter", ...] = ()
    policy: LevelPolicy = Field(default_factory=LevelPolicy)

    @property
    def book_title(self) -> str:
        """Title for the whole book.

        A synthetic root has no title of its own and is named after its
        first chapter.
        """
        if self.title:
            return self.title
        if self.children:
            return self.children[0].title
        return ""

    def walk(self) -> Iterator[Chapter]:
        """Yield this chapter and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()
