"""Tests for the render compositor."""

import re

from termchat.compositor import BOLD, CLEAR_LINE, Rendered, compose
from termchat.grammar import default_catalog, default_theme
from termchat.highlighter import RESET
from termchat.render_mode import RenderMode, resolve_mode

CATALOG = default_catalog()
THEME = default_theme("monokai")

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str) -> str:
    return _ANSI_RE.sub("", s)


def _compose(text: str, fragment: str) -> Rendered:
    return compose(resolve_mode(text, CATALOG), text, fragment, THEME)


class TestRendered:
    def test_plain_to_ansi(self):
        assert Rendered(text="abc").to_ansi() == "abc"

    def test_clear_line_to_ansi(self):
        assert Rendered(text="abc", clear_line=True).to_ansi() == CLEAR_LINE + "abc"


class TestComposeNormalAndBold:
    def test_normal_passthrough(self):
        assert _compose("hello", "llo") == Rendered(text="llo")

    def test_bold_wraps_fragment(self):
        assert _compose("see `na", "`na") == Rendered(text=f"{BOLD}`na{RESET}")

    def test_empty_fragment(self):
        assert _compose("```py\nx = 1", "") == Rendered()
        assert _compose("`open", "") == Rendered()

    def test_scenario_last_fragment_unstyled(self):
        out = _compose("Here is `code`: done", "done")
        assert out == Rendered(text="done")
        assert "\x1b[" not in out.to_ansi()

    def test_normal_mode_ignores_redraw(self):
        mode = RenderMode.normal()
        assert compose(mode, "a\nb", "b", THEME).clear_line is False


class TestComposeCodeBlock:
    def test_redraws_current_line(self):
        out = _compose("```python\nx = 1", "= 1")
        assert out.clear_line
        assert "\x1b[" in out.text
        assert strip_ansi(out.text) == "x = 1"

    def test_opening_line_stays_plain(self):
        out = _compose("Sure: ```py", "py")
        assert out == Rendered(text="Sure: ```py", clear_line=True)

    def test_newline_finishes_opening_line(self):
        out = _compose("```python\n", "\n")
        assert out.clear_line
        assert out.text.startswith("```python\n")
        assert strip_ansi(out.text) == "```python\n"

    def test_fragment_spanning_lines(self):
        text = "```rust\nfn a() {}\nlet"
        out = _compose(text, "{}\nlet")
        assert strip_ansi(out.text) == "fn a() {}\nlet"
        assert out.text.count(RESET) >= 2

    def test_fragment_with_opening_and_code(self):
        text = "Intro\n```python\nprint(1)"
        out = _compose(text, "o\n```python\nprint(1)")
        assert strip_ansi(out.text) == "Intro\n```python\nprint(1)"
        assert out.text.startswith("Intro\n```python\n")

    def test_redraw_is_idempotent(self):
        text = "```python\nimport os"
        assert _compose(text, "os") == _compose(text, "os")

    def test_plain_grammar_code(self):
        out = _compose("```\nsome text", "text")
        assert strip_ansi(out.text) == "some text"
