"""Per-depth scraping policy."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LevelPolicy(BaseModel):
    """How one level of the chapter tree is selected, fetched and rendered.

    Attributes:
        selector: CSS selector matching the links to follow from pages at this
            level. Empty means pages at this level have no children.
        include: Render the content of pages at this level.
        limit: Maximum number of children to follow, -1 for no limit.
        offset: Number of matched children to skip.
        reverse: Follow matched children in reverse order.
        delay: Milliseconds to wait before fetching each child after the
            first, -1 to disable.
        threads: Maximum number of children fetched at once, -1 to disable.
        images_only: Keep only the images of the page content when packaging.
        use_link_name: Title children with the text of the link that led to
            them instead of their page title.
    """

    model_config = ConfigDict(frozen=True)

    selector: str = ""
    include: bool = False
    limit: int = Field(-1, ge=-1)
    offset: int = Field(0, ge=0)
    reverse: bool = False
    delay: int = Field(-1, ge=-1)
    threads: int = Field(-1, ge=-1)
    images_only: bool = False
    use_link_name: bool = False

    @model_validator(mode="after")
    def _check_scheduling(self) -> LevelPolicy:
        if self.delay >= 0 and self.threads > 0:
            raise ValueError("delay and threads cannot be used at the same time")
        return self
