"""Render mode resolution from accumulated response text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from termchat.delimiters import count_delimiters
from termchat.grammar import Grammar, GrammarCatalog


class ModeKind(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    CODE_BLOCK = "code_block"


@dataclass(frozen=True)
class RenderMode:
    kind: ModeKind
    grammar: Grammar | None = None
    fence_start: int | None = None

    @classmethod
    def normal(cls) -> "RenderMode":
        return cls(ModeKind.NORMAL)

    @classmethod
    def bold(cls) -> "RenderMode":
        return cls(ModeKind.BOLD)

    @classmethod
    def code_block(cls, grammar: Grammar, fence_start: int) -> "RenderMode":
        return cls(ModeKind.CODE_BLOCK, grammar=grammar, fence_start=fence_start)

    def __str__(self) -> str:
        if self.kind is ModeKind.CODE_BLOCK and self.grammar is not None:
            return f"CodeBlock({self.grammar.name})"
        if self.kind is ModeKind.BOLD:
            return "Bold"
        return "Normal"


def fence_first_line(text: str, fence_start: int) -> str:
    """Return the fence's first line, newline included once it has arrived."""
    newline = text.find("\n", fence_start)
    if newline == -1:
        return text[fence_start:]
    return text[fence_start:newline + 1]


def resolve_mode(text: str, catalog: GrammarCatalog) -> RenderMode:
    """Work out the render mode for *text*, the whole response so far.

    An open fence wins over an open tick span; tick parity is only
    consulted outside fences.
    """
    counts = count_delimiters(text)
    if counts.in_fence and counts.fence_start is not None:
        grammar = catalog.match(fence_first_line(text, counts.fence_start))
        return RenderMode.code_block(grammar, counts.fence_start)
    if counts.in_bold:
        return RenderMode.bold()
    return RenderMode.normal()
