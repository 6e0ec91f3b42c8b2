"""Unit tests for Unicode property escape handling."""

import re

import pytest

from ja_search_repro.search.patterns import (
    SUPPORTS_PROPERTY_ESCAPES,
    compile_pattern,
    rewrite_property_escapes,
    supported_properties,
)


@pytest.mark.unit
class TestRewritePropertyEscapes:
    def test_pattern_without_escapes_is_unchanged(self):
        pattern = r"[\w']+"

        assert rewrite_property_escapes(pattern) is pattern

    def test_escape_inside_class_is_spliced(self):
        rewritten = rewrite_property_escapes(r"[ー\p{Hiragana}]")

        assert rewritten == r"[ー\u3041-\u3096\u309D-\u309F]"

    def test_escape_outside_class_becomes_class(self):
        assert rewrite_property_escapes(r"\p{Hiragana}+") == r"[\u3041-\u3096\u309D-\u309F]+"

    def test_negated_escape_outside_class(self):
        assert rewrite_property_escapes(r"\P{Hiragana}") == r"[^\u3041-\u3096\u309D-\u309F]"

    def test_negated_escape_inside_class_is_rejected(self):
        with pytest.raises(ValueError, match="Negated property escape"):
            rewrite_property_escapes(r"[a\P{Han}]")

    def test_unknown_property_is_rejected(self):
        with pytest.raises(ValueError, match="Unsupported property escape"):
            rewrite_property_escapes(r"\p{Cyrillic}")

    def test_other_escapes_pass_through(self):
        rewritten = rewrite_property_escapes(r"\[\d\p{Nd}")

        assert rewritten.startswith(r"\[\d[0-9")
        assert "\\p{" not in rewritten

    def test_supported_properties(self):
        assert supported_properties() == ["Han", "Hiragana", "Katakana", "Latin", "Nd"]


@pytest.mark.unit
class TestCompilePattern:
    @pytest.mark.parametrize(
        ("pattern", "text", "matches"),
        [
            (r"^\p{Han}+$", "東京", True),
            (r"^\p{Han}+$", "とうきょう", False),
            (r"^[\p{Hiragana}]+$", "とうきょう", True),
            (r"^[\p{Katakana}]+$", "タワー", False),
            (r"^[\p{Katakana}ー]+$", "タワー", True),
            (r"^[\p{Latin}\p{Nd}]+$", "Tokyo2020", True),
            (r"^[^\p{Han}]+$", "「」", True),
        ],
    )
    def test_matches(self, pattern, text, matches):
        assert bool(compile_pattern(pattern).match(text)) is matches

    def test_compiled_patterns_are_cached(self):
        assert compile_pattern(r"\p{Han}") is compile_pattern(r"\p{Han}")

    def test_flags_are_applied(self):
        assert compile_pattern(r"^\p{Latin}+$", re.IGNORECASE).flags & re.IGNORECASE

    @pytest.mark.skipif(SUPPORTS_PROPERTY_ESCAPES, reason="regex engine understands property escapes")
    def test_stdlib_re_is_left_alone(self):
        compile_pattern(r"\p{Han}")

        with pytest.raises(re.error):
            re.compile(r"\p{Han}")
