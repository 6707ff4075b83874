"""Line-based input front end with optional readline history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

try:
    import readline
except ImportError:  # Windows without pyreadline
    readline = None

logger = logging.getLogger(__name__)

_DIM = "\033[90m"
_RESET = "\033[0m"


@dataclass
class InputResult:
    """Return value from :meth:`InputReader.read_input`."""
    text: str
    action: str  # "send" | "exit"


def render_prompt(left: str, right: str) -> str:
    """Build the prompt string: ``left`` then a dim ``right`` and ``> ``."""
    if right:
        return f"{left} {_DIM}{right}{_RESET}> "
    return f"{left}> "


class InputReader:
    """Read one line of input per call.

    When :mod:`readline` is available the history is loaded from and
    saved to *history_file*.
    """

    def __init__(self, history_file: Path | None = None, input_fn=input) -> None:
        self.history_file = history_file
        self._input = input_fn

    def __enter__(self) -> "InputReader":
        if readline is not None and self.history_file and self.history_file.exists():
            try:
                readline.read_history_file(str(self.history_file))
            except OSError as exc:
                logger.debug("could not read history %s: %s", self.history_file, exc)
        return self

    def __exit__(self, *exc: object) -> None:
        if readline is None or not self.history_file:
            return
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            readline.write_history_file(str(self.history_file))
        except OSError as exc:
            logger.debug("could not write history %s: %s", self.history_file, exc)

    def read_input(self, left: str, right: str = "") -> InputResult:
        """Block until the user enters a line; Ctrl+D or Ctrl+C means exit."""
        try:
            text = self._input(render_prompt(left, right))
        except (EOFError, KeyboardInterrupt):
            print()
            return InputResult(text="", action="exit")
        return InputResult(text=text.strip(), action="send")
