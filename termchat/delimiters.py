"""Backtick delimiter counting over accumulated response text."""

from __future__ import annotations

from dataclasses import dataclass

FENCE = "```"
TICK = "`"


@dataclass(frozen=True)
class DelimiterCounts:
    fences: int = 0
    ticks: int = 0
    fence_start: int | None = None  # index just past the unmatched opening fence

    @property
    def in_fence(self) -> bool:
        return self.fences % 2 == 1

    @property
    def in_bold(self) -> bool:
        return not self.in_fence and self.ticks % 2 == 1


def _count_fences(text: str) -> tuple[int, int | None]:
    count = 0
    last_end: int | None = None
    i = 0
    limit = len(text) - len(FENCE)
    while i <= limit:
        if text.startswith(FENCE, i):
            count += 1
            i += len(FENCE)
            last_end = i
        else:
            i += 1
    return count, last_end


def _count_ticks(text: str) -> int:
    """Count backticks that have no backtick neighbour on either side."""
    count = 0
    n = len(text)
    for i, ch in enumerate(text):
        if ch != TICK:
            continue
        if i > 0 and text[i - 1] == TICK:
            continue
        if i + 1 < n and text[i + 1] == TICK:
            continue
        count += 1
    return count


def count_delimiters(text: str) -> DelimiterCounts:
    """Scan *text* for fences and single ticks.

    The whole text is rescanned on every call; no state is carried between
    fragments, so the result depends only on *text*.
    """
    fences, last_end = _count_fences(text)
    if fences % 2 == 1:
        return DelimiterCounts(fences=fences, ticks=0, fence_start=last_end)
    return DelimiterCounts(fences=fences, ticks=_count_ticks(text))
