"""Build and apply per-depth level policies."""

from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from pydantic import ValidationError

from webbook.exceptions import PolicyError
from webbook.schemas import LevelPolicy

T = TypeVar("T")


def build_policies(
    selectors: Sequence[str] = (),
    *,
    depth: int = 0,
    limit: int = -1,
    offset: int = 0,
    reverse: bool = False,
    delay: int = -1,
    threads: int = -1,
    include: bool = False,
    images_only: bool = False,
    use_link_name: bool = False,
) -> tuple[LevelPolicy, ...]:
    """Create one policy per tree level from command line style options.

    Every selector opens one more level, so the list is always extended with
    a trailing empty selector for the pages it leads to, then padded with
    empty selectors up to ``depth + 1`` levels. The remaining options apply
    to every level.

    Raises:
        PolicyError: If the options cannot be combined.
    """
    if depth < 0:
        raise PolicyError(f"depth must be positive, got {depth}")

    levels = [selector.strip() for selector in selectors]
    levels.append("")
    while len(levels) < depth + 1:
        levels.append("")

    try:
        policies = [
            LevelPolicy(
                selector=selector,
                include=include,
                limit=limit,
                offset=offset,
                reverse=reverse,
                delay=delay,
                threads=threads,
                images_only=images_only,
                use_link_name=use_link_name,
            )
            for selector in levels
        ]
    except ValidationError as exc:
        raise PolicyError(_describe(exc)) from exc

    return normalize_policies(policies)


def normalize_policies(policies: Iterable[LevelPolicy]) -> tuple[LevelPolicy, ...]:
    """Enforce the invariants every policy list must satisfy.

    The root level never uses link names since no link leads to it, and the
    deepest level is always included so the book has content.

    Raises:
        PolicyError: If no policy is given.
    """
    result = list(policies)
    if not result:
        raise PolicyError("at least one level policy is required")

    if result[0].use_link_name:
        result[0] = result[0].model_copy(update={"use_link_name": False})
    if not result[-1].include:
        result[-1] = result[-1].model_copy(update={"include": True})
    return tuple(result)


def select_links(candidates: Sequence[T], policy: LevelPolicy) -> list[T]:
    """Apply offset, then reverse, then limit to the matched candidates."""
    selected = list(candidates[policy.offset :])
    if policy.reverse:
        selected.reverse()
    if policy.limit >= 0:
        selected = selected[: policy.limit]
    return selected


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)
