"""Decide what to print for the newest fragment of a streamed response."""

from __future__ import annotations

from dataclasses import dataclass

from termchat.grammar import Theme
from termchat.highlighter import RESET, highlight_line
from termchat.render_mode import ModeKind, RenderMode

BOLD = "\033[1m"
CLEAR_LINE = "\r\033[2K"


@dataclass(frozen=True)
class Rendered:
    """Output for one fragment.

    ``clear_line`` asks the consumer to wipe the current terminal line and
    return to column 0 before printing ``text``.
    """

    text: str = ""
    clear_line: bool = False

    def to_ansi(self) -> str:
        if self.clear_line:
            return CLEAR_LINE + self.text
        return self.text


def _redraw_code(mode: RenderMode, text: str, fragment: str, theme: Theme) -> Rendered:
    fragment_at = len(text) - len(fragment)
    line_start = text.rfind("\n", 0, fragment_at) + 1

    fence_start = mode.fence_start if mode.fence_start is not None else 0
    head_end = text.find("\n", fence_start)
    if head_end == -1:
        head_end = len(text)

    parts: list[str] = []
    if line_start <= head_end:
        # The fragment started on the fence's opening line, which stays plain.
        parts.append(text[line_start:head_end])
        if head_end == len(text):
            return Rendered(text=parts[0], clear_line=True)
        body_start = head_end + 1
    else:
        body_start = line_start

    grammar = mode.grammar
    for line in text[body_start:].split("\n"):
        if grammar is None:
            parts.append(line)
        else:
            parts.append(highlight_line(line, grammar, theme))
    return Rendered(text="\n".join(parts), clear_line=True)


def compose(mode: RenderMode, text: str, fragment: str, theme: Theme) -> Rendered:
    """Render *fragment*, the tail of *text*, according to *mode*."""
    if not fragment:
        return Rendered()
    if mode.kind is ModeKind.BOLD:
        return Rendered(text=f"{BOLD}{fragment}{RESET}")
    if mode.kind is ModeKind.CODE_BLOCK:
        return _redraw_code(mode, text, fragment, theme)
    return Rendered(text=fragment)
