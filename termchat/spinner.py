"""Spinner shown on stderr while waiting for the first reply fragment."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
_INTERVAL = 0.08  # seconds between frames
_CLEAR = "\033[2K\r"


class Spinner:
    """Braille-dot spinner driven by a daemon thread.

    Usable as a context manager::

        with Spinner("Waiting for gpt-4o..."):
            first = next(stream)

    Does nothing when the stream is not a TTY, so piped output stays clean.
    """

    def __init__(self, msg: str = "Waiting...", stream: TextIO | None = None) -> None:
        self.msg = msg
        self._stream = stream or sys.stderr
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._is_tty: bool = hasattr(self._stream, "isatty") and self._stream.isatty()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        if self._thread is not None or not self._is_tty:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop spinning and wipe the spinner line.  Safe to call twice."""
        t = self._thread
        if t is None:
            return
        self._stop.set()
        t.join(timeout=1.0)
        self._thread = None
        self._stream.write(_CLEAR)
        self._stream.flush()

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    def _spin(self) -> None:
        idx = 0
        while not self._stop.is_set():
            frame = _FRAMES[idx % len(_FRAMES)]
            self._stream.write(f"{_CLEAR}  {frame} {self.msg}")
            self._stream.flush()
            idx += 1
            self._stop.wait(_INTERVAL)
