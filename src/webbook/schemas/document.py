"""Serialized book output model."""

from __future__ import annotations

from pydantic import BaseModel


class BookDocument(BaseModel):
    """Book rendered as markdown, wrapped for JSON output."""

    name: str
    content: str
