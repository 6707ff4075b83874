"""Syntax grammar catalog, fence language matching and the colour theme."""

from __future__ import annotations

from dataclasses import dataclass, field

from pygments.formatters import TerminalTrueColorFormatter
from pygments.lexer import Lexer
from pygments.lexers import (
    TextLexer,
    get_lexer_by_name,
    get_lexer_for_filename,
    guess_lexer,
)
from pygments.util import ClassNotFound

from termchat.config import HIGHLIGHT_STYLE

# Lexers must not add or strip newlines: a highlighted line has to cover
# exactly the characters it was given.
_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}

# Info strings that are themselves a first line of source, not a language name.
_FIRST_LINE_MARKERS = ("#!", "<?xml", "<?php", "<!DOCTYPE", "<!doctype")

_FALLBACK_STYLE = "monokai"


@dataclass(frozen=True)
class Grammar:
    name: str
    lexer: Lexer = field(compare=False, repr=False)


def _grammar_for(lexer: Lexer) -> Grammar:
    aliases = getattr(lexer, "aliases", None) or [lexer.name.lower()]
    return Grammar(name=aliases[0], lexer=lexer)


@dataclass(frozen=True)
class Theme:
    style: str
    formatter: TerminalTrueColorFormatter = field(compare=False, repr=False)


def default_theme(style: str | None = None) -> Theme:
    """Build the highlighting theme, falling back to monokai for unknown styles."""
    name = style or HIGHLIGHT_STYLE
    try:
        return Theme(style=name, formatter=TerminalTrueColorFormatter(style=name))
    except ClassNotFound:
        return Theme(
            style=_FALLBACK_STYLE,
            formatter=TerminalTrueColorFormatter(style=_FALLBACK_STYLE),
        )


class GrammarCatalog:
    """Read-only lookup from a fence's first line to a grammar.

    Built once at startup and shared by every render stream. Lookups are
    memoised per info word, so repeated redraws of the same fence do not
    rebuild lexers.
    """

    def __init__(self) -> None:
        self._plain = _grammar_for(TextLexer(**_LEXER_OPTIONS))
        self._memo: dict[str, Grammar] = {}

    @property
    def plain(self) -> Grammar:
        return self._plain

    def match(self, first_line: str) -> Grammar:
        """Return the grammar for a fence whose first line is *first_line*.

        *first_line* carries its trailing newline once the line is complete;
        an incomplete, empty or unrecognised line yields the plain grammar.
        """
        if not first_line.endswith("\n"):
            return self._plain
        info = first_line.strip()
        if not info:
            return self._plain
        if info.startswith(_FIRST_LINE_MARKERS):
            key = info
        else:
            key = info.split()[0]
        cached = self._memo.get(key)
        if cached is not None:
            return cached
        grammar = self._lookup(key)
        self._memo[key] = grammar
        return grammar

    def _lookup(self, key: str) -> Grammar:
        if key.startswith(_FIRST_LINE_MARKERS):
            try:
                return _grammar_for(guess_lexer(key, **_LEXER_OPTIONS))
            except ClassNotFound:
                return self._plain
        try:
            return _grammar_for(get_lexer_by_name(key.lower(), **_LEXER_OPTIONS))
        except ClassNotFound:
            pass
        try:
            return _grammar_for(get_lexer_for_filename(key, **_LEXER_OPTIONS))
        except ClassNotFound:
            return self._plain


def default_catalog() -> GrammarCatalog:
    return GrammarCatalog()
