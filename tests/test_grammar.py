"""Tests for the grammar catalog and fence language matching."""

from termchat.grammar import Grammar, GrammarCatalog, Theme, default_catalog, default_theme


class TestLanguageMatcher:
    def setup_method(self):
        self.catalog = default_catalog()

    def test_known_language(self):
        assert self.catalog.match("rust\n").name == "rust"

    def test_alias_resolves_to_primary_name(self):
        assert self.catalog.match("py\n").name == "python"

    def test_case_insensitive(self):
        assert self.catalog.match("Python\n").name == "python"

    def test_extra_info_after_language(self):
        assert self.catalog.match("python title=demo.py\n").name == "python"

    def test_filename_hint(self):
        assert self.catalog.match("main.rs\n").name == "rust"

    def test_incomplete_line_is_plain(self):
        assert self.catalog.match("rust") == self.catalog.plain
        assert self.catalog.match("ru") == self.catalog.plain

    def test_empty_is_plain(self):
        assert self.catalog.match("") == self.catalog.plain
        assert self.catalog.match("\n") == self.catalog.plain
        assert self.catalog.match("   \n") == self.catalog.plain

    def test_unknown_is_plain(self):
        assert self.catalog.match("nosuchlang\n") == self.catalog.plain

    def test_plain_grammar_name(self):
        assert self.catalog.plain.name == "text"

    def test_shebang_never_raises(self):
        grammar = self.catalog.match("#!/usr/bin/env python\n")
        assert isinstance(grammar, Grammar)

    def test_lookup_is_idempotent(self):
        first = self.catalog.match("go\n")
        second = self.catalog.match("go\n")
        assert first is second

    def test_windows_line_ending(self):
        assert self.catalog.match("rust\r\n").name == "rust"

    def test_grammar_equality_ignores_lexer_instance(self):
        other = GrammarCatalog()
        assert other.match("rust\n") == self.catalog.match("rust\n")


class TestTheme:
    def test_default_style(self):
        theme = default_theme("monokai")
        assert isinstance(theme, Theme)
        assert theme.style == "monokai"

    def test_unknown_style_falls_back(self):
        assert default_theme("no-such-style").style == "monokai"
