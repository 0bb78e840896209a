"""Unit tests for literal expression evaluation."""

import re

import pytest

from phpscope.reflection.evaluator import (
    EvaluationError,
    Literal,
    evaluate,
    parse_heredoc,
    parse_number,
    parse_string_literal,
    php_array,
    php_export,
    php_type,
    to_php_string,
)
from phpscope.stream.tokens import T, Token, classify_word


def _token(text: str) -> Token:
    if re.fullmatch(r"\d+", text):
        return Token(T.LNUMBER, text, 1)
    if re.fullmatch(r"\d+\.\d*", text):
        return Token(T.DNUMBER, text, 1)
    if text[:1] in ("'", '"'):
        return Token(T.CONSTANT_ENCAPSED_STRING, text, 1)
    return Token(classify_word(text), text, 1)


def _eval(*parts: str):
    return evaluate([_token(part) for part in parts])


class TestScalars:
    """Tests for scalar literals."""

    def test_numbers(self) -> None:
        assert _eval("42") == 42
        assert _eval("1.5") == 1.5
        assert parse_number("0x1F", T.LNUMBER) == 31
        assert parse_number("0b101", T.LNUMBER) == 5
        assert parse_number("017", T.LNUMBER) == 15
        assert parse_number("1_000", T.LNUMBER) == 1000

    def test_strings(self) -> None:
        assert parse_string_literal("'it\\'s'") == "it's"
        assert parse_string_literal("'a\\nb'") == "a\\nb"
        assert parse_string_literal('"a\\nb"') == "a\nb"
        assert parse_string_literal('"\\x41\\u{42}"') == "AB"

    def test_heredoc_removes_closing_indentation(self) -> None:
        text = "<<<EOT\n    first\n      second\n    EOT"
        assert parse_heredoc(text) == "first\n  second"

    def test_nowdoc_is_raw(self) -> None:
        assert parse_heredoc("<<<'EOT'\na\\nb\nEOT") == "a\\nb"

    def test_keywords(self) -> None:
        assert _eval("true") is True
        assert _eval("FALSE") is False
        assert _eval("null") is None


class TestOperators:
    """Tests for operator evaluation."""

    def test_precedence(self) -> None:
        assert _eval("1", "+", "2", "*", "3") == 7
        assert _eval("(", "1", "+", "2", ")", "*", "3") == 9
        assert _eval("2", "**", "3", "**", "2") == 512

    def test_concatenation_binds_looser_than_addition(self) -> None:
        assert _eval("'a'", ".", "1", "+", "2") == "a3"

    def test_unary(self) -> None:
        assert _eval("-", "5") == -5
        assert _eval("!", "0") is True
        assert _eval("~", "0") == -1

    def test_division(self) -> None:
        assert _eval("6", "/", "3") == 2
        assert _eval("7", "/", "2") == 3.5
        with pytest.raises(EvaluationError):
            _eval("1", "/", "0")

    def test_comparison(self) -> None:
        assert _eval("1", "==", "'1'") is True
        assert _eval("1", "===", "'1'") is False
        assert _eval("1", "<=>", "2") == -1

    def test_logical(self) -> None:
        assert _eval("1", "&&", "0") is False
        assert _eval("1", "or", "0") is True

    def test_ternary_and_coalesce(self) -> None:
        assert _eval("1", "?", "'yes'", ":", "'no'") == "yes"
        assert _eval("0", "?", ":", "'fallback'") == "fallback"
        assert _eval("null", "??", "3") == 3

    def test_literal_items(self) -> None:
        items = [Literal("abc"), _token("."), _token("'def'")]
        assert evaluate(items) == "abcdef"

    def test_whitespace_ignored(self) -> None:
        items = [_token("1"), Token(T.WHITESPACE, " ", 1), _token("+"), Token(T.COMMENT, "/* x */", 1), _token("1")]
        assert evaluate(items) == 2


class TestArrays:
    """Tests for array literals."""

    def test_short_list(self) -> None:
        assert _eval("[", "1", ",", "2", ",", "]") == [1, 2]

    def test_long_syntax_with_keys(self) -> None:
        assert _eval("array", "(", "'a'", "=>", "1", ",", "'b'", "=>", "2", ")") == {"a": 1, "b": 2}

    def test_numeric_string_keys_normalised(self) -> None:
        assert php_array([("0", "a"), ("1", "b")]) == ["a", "b"]
        assert php_array([(5, "a"), (None, "b")]) == {5: "a", 6: "b"}

    def test_spread(self) -> None:
        assert _eval("[", "...", "[", "1", ",", "2", "]", ",", "3", "]") == [1, 2, 3]

    def test_union(self) -> None:
        assert _eval("[", "1", "]", "+", "[", "5", ",", "6", "]") == [1, 6]


class TestErrors:
    """Tests for rejected expressions."""

    def test_empty(self) -> None:
        with pytest.raises(EvaluationError):
            evaluate([])

    def test_unresolved_name(self) -> None:
        with pytest.raises(EvaluationError):
            _eval("FOO")

    def test_trailing_tokens(self) -> None:
        with pytest.raises(EvaluationError):
            _eval("1", "2")


class TestConversions:
    """Tests for PHP value conversions."""

    def test_to_php_string(self) -> None:
        assert to_php_string(True) == "1"
        assert to_php_string(None) == ""
        assert to_php_string(2.0) == "2"
        assert to_php_string([1]) == "Array"

    def test_php_type(self) -> None:
        assert php_type(None) == "NULL"
        assert php_type(True) == "boolean"
        assert php_type(1) == "integer"
        assert php_type(1.0) == "double"
        assert php_type({}) == "array"
        assert php_type("") == "string"

    def test_php_export(self) -> None:
        assert php_export("it's") == "'it\\'s'"
        assert php_export(False) == "false"
        assert php_export([1]) == "array (\n  0 => 1,\n)"
