"""Single-line syntax highlighting for terminal output."""

from __future__ import annotations

from pygments import highlight

from termchat.grammar import Grammar, Theme

RESET = "\033[0m"


def highlight_line(line: str, grammar: Grammar, theme: Theme) -> str:
    """Colourise one line of code with *grammar* and *theme*.

    The result always ends in an SGR reset so no colour bleeds into
    whatever is printed next.  If the lexer or formatter fails, the line
    is returned unstyled.
    """
    line = line.rstrip("\r\n")
    try:
        coloured = highlight(line, grammar.lexer, theme.formatter)
    except Exception:
        return line + RESET
    return coloured.rstrip("\r\n") + RESET
