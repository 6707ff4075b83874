"""Streaming-aware formatter: bold tick spans and highlighted code fences."""

from __future__ import annotations

from termchat.compositor import compose
from termchat.grammar import GrammarCatalog, Theme
from termchat.highlighter import RESET
from termchat.render_mode import ModeKind, RenderMode, resolve_mode


class StreamFormatter:
    """Turns streamed reply fragments into terminal output.

    Usage::

        fmt = StreamFormatter(catalog, theme)
        for chunk in stream:
            sys.stdout.write(fmt.feed(chunk))
            sys.stdout.flush()
        sys.stdout.write(fmt.flush())

    The formatter keeps only the accumulated reply text.  The render mode
    is recomputed from that text on every fragment, so output does not
    depend on where the transport happened to split the reply.
    """

    def __init__(
        self,
        catalog: GrammarCatalog,
        theme: Theme,
        debug: bool = False,
    ) -> None:
        self.catalog = catalog
        self.theme = theme
        self.debug = debug
        self._text: str = ""

    # ── public API ──────────────────────────────────────────────

    @property
    def text(self) -> str:
        return self._text

    @property
    def mode(self) -> RenderMode:
        return resolve_mode(self._text, self.catalog)

    def feed(self, fragment: str) -> str:
        """Append *fragment* and return the string to write to the terminal."""
        self._text += fragment
        mode = self.mode
        if self.debug:
            return f"{fragment!r} {mode}\n"
        return compose(mode, self._text, fragment, self.theme).to_ansi()

    def flush(self) -> str:
        """Close out the turn; an unclosed span or fence gets a final reset."""
        if self.debug:
            return ""
        if self.mode.kind is ModeKind.NORMAL:
            return ""
        return RESET

    def reset(self) -> None:
        self._text = ""
