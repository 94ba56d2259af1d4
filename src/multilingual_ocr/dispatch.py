"""Concurrent per-group recognition with failure isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from .models import OCRLine

logger = logging.getLogger(__name__)

LanguageGroup = tuple[str, ...]
GroupRunner = Callable[[LanguageGroup], Awaitable[list[OCRLine]]]


@dataclass
class GroupOutcome:
    """Result of one group's recognition: lines on success, error on failure."""

    group: LanguageGroup
    lines: list[OCRLine] = field(default_factory=list)
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def _run_isolated(group: LanguageGroup, runner: GroupRunner) -> GroupOutcome:
    try:
        lines = await runner(group)
    except Exception as e:
        logger.warning(
            f"Failed to process language group [{', '.join(group)}], "
            f"continuing with other groups: {e}"
        )
        return GroupOutcome(group=group, error=e)

    logger.debug(f"OCR completed for language group [{', '.join(group)}]: {len(lines)} lines")
    return GroupOutcome(group=group, lines=lines)


async def dispatch_groups(
    groups: Sequence[LanguageGroup],
    runner: GroupRunner,
) -> list[GroupOutcome]:
    """Run every group concurrently and wait for all of them.

    A failing group never short-circuits the others. Outcomes come back in
    the same order as `groups`, whatever order the tasks finish in.
    Cancelling the caller cancels every group task.
    """
    if not groups:
        return []

    return list(await asyncio.gather(*(_run_isolated(group, runner) for group in groups)))
