"""Tests for the quoting helpers."""

from transpiler.quoting import double_quote, quote_value, remove_quotes, single_quote


class TestRemoveQuotes:
    def test_strips_matching_pair(self):
        assert remove_quotes("'abc'") == "abc"
        assert remove_quotes('"abc"') == "abc"
        assert remove_quotes("`abc`") == "abc"

    def test_mismatched_quotes_are_kept(self):
        assert remove_quotes("'abc\"") == "'abc\""

    def test_unquoted(self):
        assert remove_quotes("abc") == "abc"
        assert remove_quotes("'") == "'"


class TestSingleQuote:
    def test_requotes_double_quoted(self):
        assert single_quote('"abc"') == "'abc'"

    def test_escapes_bare_single_quote(self):
        assert single_quote('"it\'s"') == "'it\\'s'"

    def test_keeps_escaped_single_quote(self):
        assert single_quote("'it\\'s'") == "'it\\'s'"

    def test_newline(self):
        assert single_quote("`a\nb`") == "'a\\nb'"


class TestDoubleQuote:
    def test_wraps(self):
        assert double_quote("abc") == '"abc"'

    def test_escapes_bare_double_quote(self):
        assert double_quote('a"b') == '"a\\"b"'

    def test_keeps_escaped_double_quote(self):
        assert double_quote('a\\"b') == '"a\\"b"'


class TestQuoteValue:
    def test_plain(self):
        assert quote_value("abc") == "'abc'"

    def test_escapes(self):
        assert quote_value("a'b\\c\nd") == "'a\\'b\\\\c\\nd'"

    def test_control_characters(self):
        assert quote_value("\x01") == "'\\x01'"
