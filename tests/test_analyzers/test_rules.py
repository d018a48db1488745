"""Tests for the text rules."""

import pytest

from logmsglint.analyzers.base import Rule
from logmsglint.analyzers.patterns import compile_sensitive_patterns
from logmsglint.analyzers.rules import (
    check_english_only,
    check_fragment,
    check_lowercase_start,
    check_sensitive_data,
    check_special_symbols,
    strip_special_symbols_and_emoji,
)


class TestLowercaseStart:
    """Test the lowercase-start rule."""

    @pytest.mark.parametrize("text", ["starting", "  starting", "123 started", "_private", "", "   ", "éclair", "Élan"])
    def test_not_flagged(self, text):
        """Lowercase, non-letter and non-ASCII starts are accepted."""
        assert check_lowercase_start(text) is None

    def test_flags_uppercase_start(self):
        """Uppercase ASCII start is flagged and only that letter is lowered."""
        violation = check_lowercase_start("Starting HTTP server")

        assert violation.rule == Rule.LOWERCASE_START
        assert violation.fixed == "starting HTTP server"

    def test_keeps_leading_whitespace(self):
        """Leading whitespace is preserved by the fix."""
        violation = check_lowercase_start("\nHello")

        assert violation.fixed == "\nhello"


class TestEnglishOnly:
    """Test the English-only rule."""

    @pytest.mark.parametrize("text", ["server started", "café opened", "naïve façade", "1º place", "100% done", "xᵃ", "pʰ", "ˣ", "ª"])
    def test_latin_text_passes(self, text):
        """Latin letters pass, accented and modifier forms included."""
        assert check_english_only(text) is None

    @pytest.mark.parametrize("text", ["запуск сервера", "漢字", "error: ошибка", "λ called", "ᵝ value"])
    def test_flags_non_latin(self, text):
        """Any letter from another script is flagged."""
        violation = check_english_only(text)

        assert violation.rule == Rule.ENGLISH_ONLY
        assert violation.fixed == ""


class TestSpecialSymbols:
    """Test the special-symbol rule."""

    @pytest.mark.parametrize("text", ["failed!!!", "what?", "loading...", "wait…", "done 🚀", "ok ✅", "heart ❤️"])
    def test_flags_symbols(self, text):
        """Bang, question mark, ellipsis and emoji are flagged."""
        assert check_special_symbols(text).rule == Rule.NO_SPECIAL_SYMBOLS

    @pytest.mark.parametrize("text", ["user: %s", "a.b.c", "path/to/file", "done (ok)", "two.. dots"])
    def test_allows_ordinary_punctuation(self, text):
        """Ordinary punctuation is fine."""
        assert check_special_symbols(text) is None

    def test_fix_strips_and_collapses(self):
        """Symbols are removed, whitespace collapsed and trimmed."""
        assert check_special_symbols("failed!!!").fixed == "failed"
        assert strip_special_symbols_and_emoji("server  started 🚀 ... now!") == "server started now"

    def test_fix_is_idempotent(self):
        """Cleaning a cleaned string changes nothing."""
        once = strip_special_symbols_and_emoji("  wait... what?!  🚀 ")

        assert strip_special_symbols_and_emoji(once) == once
        assert check_special_symbols(once) is None


class TestSensitiveData:
    """Test the sensitive-data rule."""

    def test_flags_and_redacts(self):
        """A match is flagged with a redacted fix."""
        violation = check_sensitive_data("API_KEY=3", compile_sensitive_patterns())

        assert violation.rule == Rule.SENSITIVE_DATA
        assert violation.fixed == "[redacted]=3"

    def test_custom_pattern(self):
        """User patterns are honoured."""
        patterns = compile_sensitive_patterns([r"\bssn\b"])

        assert check_sensitive_data("ssn stored", patterns).fixed == "[redacted] stored"

    def test_no_patterns_no_violation(self):
        """Without patterns nothing is sensitive."""
        assert check_sensitive_data("password", ()) is None


class TestCheckFragment:
    """Test running every rule over one fragment."""

    def test_rule_order(self):
        """Violations come in rule order."""
        violations = check_fragment("Token leaked!", compile_sensitive_patterns())

        assert [v.rule for v in violations] == [
            Rule.LOWERCASE_START,
            Rule.NO_SPECIAL_SYMBOLS,
            Rule.SENSITIVE_DATA,
        ]

    def test_case_check_can_be_skipped(self):
        """Non-leading fragments skip the case rule."""
        violations = check_fragment("Hello", (), check_case=False)

        assert violations == []

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_fragments_clean(self, text):
        """Empty and whitespace-only fragments are clean."""
        assert check_fragment(text, compile_sensitive_patterns()) == []

    def test_non_latin_has_no_fix(self):
        """Alphabet violations never carry a fix."""
        violations = check_fragment("漢字", ())

        assert len(violations) == 1
        assert violations[0].rule == Rule.ENGLISH_ONLY
        assert violations[0].fixed == ""
