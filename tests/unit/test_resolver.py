"""Unit tests for name resolution helpers."""

from phpscope.reflection.resolver import (
    NO_NAMESPACE_NAME,
    NOT_RESOLVED,
    contains_unresolved,
    find_constants,
    resolve_class_fqn,
)
from phpscope.stream.tokens import T, Token


class TestResolveClassFqn:
    """Tests for class name resolution."""

    def test_fully_qualified(self) -> None:
        assert resolve_class_fqn("\\Foo\\Bar", {"Foo": "Other"}, "App") == "Foo\\Bar"

    def test_alias_of_whole_name(self) -> None:
        assert resolve_class_fqn("Bar", {"Bar": "Vendor\\Lib\\Bar"}, "App") == "Vendor\\Lib\\Bar"

    def test_alias_of_first_segment(self) -> None:
        assert resolve_class_fqn("Lib\\Baz", {"Lib": "Vendor\\Lib"}, "App") == "Vendor\\Lib\\Baz"

    def test_relative_to_namespace(self) -> None:
        assert resolve_class_fqn("Baz", {}, "App\\Model") == "App\\Model\\Baz"
        assert resolve_class_fqn("Sub\\Baz", {}, "App") == "App\\Sub\\Baz"

    def test_global_namespace(self) -> None:
        assert resolve_class_fqn("Baz", {}, "") == "Baz"
        assert resolve_class_fqn("Baz", {}, NO_NAMESPACE_NAME) == "Baz"
        assert resolve_class_fqn("Baz", {}) == "Baz"


class TestFindConstants:
    """Tests for reference discovery in value definitions."""

    def test_references_are_grouped(self) -> None:
        tokens = [
            Token(T.STRING, "Foo", 1),
            Token(T.DOUBLE_COLON, "::", 1),
            Token(T.STRING, "BAR", 1),
            Token(T.WHITESPACE, " ", 1),
            Token(".", ".", 1),
            Token(T.WHITESPACE, " ", 1),
            Token(T.NS_SEPARATOR, "\\", 1),
            Token(T.STRING, "BAZ", 1),
        ]
        assert list(find_constants(tokens)) == [(0, 3, "Foo::BAR"), (6, 8, "\\BAZ")]

    def test_literal_keywords_skipped(self) -> None:
        tokens = [Token(T.STRING, "true", 1), Token("|", "|", 1), Token(T.STRING, "NULL", 1)]
        assert list(find_constants(tokens)) == []

    def test_magic_constants_found(self) -> None:
        tokens = [Token(T.CLASS_C, "__CLASS__", 1)]
        assert list(find_constants(tokens)) == [(0, 1, "__CLASS__")]


class TestContainsUnresolved:
    """Tests for unresolved marker detection."""

    def test_nested(self) -> None:
        assert contains_unresolved(NOT_RESOLVED)
        assert contains_unresolved(f"prefix{NOT_RESOLVED}")
        assert contains_unresolved([1, {"a": NOT_RESOLVED}])
        assert not contains_unresolved([1, {"a": "b"}])
        assert not contains_unresolved(None)
