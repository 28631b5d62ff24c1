"""Shared schemas for webbook."""

from webbook.schemas.chapter import Chapter
from webbook.schemas.document import BookDocument
from webbook.schemas.policy import LevelPolicy

__all__ = ["BookDocument", "Chapter", "LevelPolicy"]
