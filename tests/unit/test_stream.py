"""Unit tests for the lexer and token streams."""

import pytest

from phpscope.core.errors import ErrorCode, StreamError
from phpscope.stream import FileStream, StringStream, T, Token, TokenStream, tokenize
from phpscope.stream.tokens import classify_comment, classify_word


def _stream(*items: tuple[str, str]) -> TokenStream:
    return TokenStream([Token(kind, value, 1) for kind, value in items], "test.php")


class TestClassifiers:
    """Tests for token classification helpers."""

    def test_keywords_are_case_insensitive(self) -> None:
        assert classify_word("class") == T.CLASS
        assert classify_word("CLASS") == T.CLASS
        assert classify_word("insteadof") == T.INSTEADOF

    def test_magic_constants(self) -> None:
        assert classify_word("__LINE__") == T.LINE
        assert classify_word("__namespace__") == T.NS_C

    def test_operators(self) -> None:
        assert classify_word("\\") == T.NS_SEPARATOR
        assert classify_word("::") == T.DOUBLE_COLON
        assert classify_word("=>") == T.DOUBLE_ARROW
        assert classify_word("...") == T.ELLIPSIS

    def test_names_and_punctuation(self) -> None:
        assert classify_word("Foo") == T.STRING
        assert classify_word("_bar") == T.STRING
        assert classify_word("true") == T.STRING
        assert classify_word("return") == T.RESERVED
        assert classify_word("{") == "{"
        assert classify_word("=") == "="

    def test_doc_comment_needs_whitespace(self) -> None:
        assert classify_comment("/** Doc */") == T.DOC_COMMENT
        assert classify_comment("/**\n * Doc\n */") == T.DOC_COMMENT
        assert classify_comment("/**/") == T.COMMENT
        assert classify_comment("/**#@+*/") == T.COMMENT
        assert classify_comment("// line") == T.COMMENT
        assert classify_comment("/* block */") == T.COMMENT


class TestTokenize:
    """Tests for tree-sitter backed tokenization."""

    def test_round_trip_source(self) -> None:
        source = "<?php\nnamespace A;\n\nclass B extends C {\n    public $d = 1;\n}\n"
        tokens = tokenize(source)
        assert "".join(token.value for token in tokens) == source

    def test_line_endings_normalised(self) -> None:
        tokens = tokenize("<?php\r\nfunction f() {}\r\n")
        assert "\r" not in "".join(token.value for token in tokens)

    def test_declaration_tokens(self) -> None:
        tokens = [token for token in tokenize("<?php\nclass Foo {}\n") if token.type != T.WHITESPACE]
        assert tokens[0].type == T.OPEN_TAG
        assert (tokens[1].type, tokens[1].value) == (T.CLASS, "class")
        assert (tokens[2].type, tokens[2].value) == (T.STRING, "Foo")
        assert tokens[3].type == "{"
        assert tokens[4].type == "}"

    def test_atomic_tokens(self) -> None:
        source = "<?php\n$a = 'x y' . \"z\" + 12 + 1.5;\n"
        tokens = {token.value: token.type for token in tokenize(source)}
        assert tokens["$a"] == T.VARIABLE
        assert tokens["'x y'"] == T.CONSTANT_ENCAPSED_STRING
        assert tokens['"z"'] == T.CONSTANT_ENCAPSED_STRING
        assert tokens["12"] == T.LNUMBER
        assert tokens["1.5"] == T.DNUMBER

    def test_doc_comment_token(self) -> None:
        source = "<?php\n/**\n * Doc.\n */\nfunction f() {}\n"
        doc_comments = [token for token in tokenize(source) if token.type == T.DOC_COMMENT]
        assert len(doc_comments) == 1
        assert doc_comments[0].value == "/**\n * Doc.\n */"
        assert doc_comments[0].line == 2

    def test_line_numbers(self) -> None:
        source = "<?php\n\n\nfunction foo() {}\n"
        function = next(token for token in tokenize(source) if token.type == T.FUNCTION)
        assert function.line == 4


class TestTokenStream:
    """Tests for the stream cursor."""

    def test_skip_whitespaces_always_advances(self) -> None:
        stream = _stream((T.STRING, "a"), (T.STRING, "b"))
        stream.skip_whitespaces()
        assert stream.key() == 1

    def test_skip_whitespaces_stops_on_doc_block(self) -> None:
        stream = _stream(
            (T.STRING, "a"),
            (T.WHITESPACE, " "),
            (T.DOC_COMMENT, "/** x */"),
            (T.COMMENT, "// y"),
            (T.STRING, "b"),
        )
        assert stream.skip_whitespaces().get_type() == T.DOC_COMMENT
        stream.rewind()
        assert stream.skip_whitespaces(True).get_value() == "b"

    def test_find_moves_to_token(self) -> None:
        stream = _stream((T.STRING, "a"), (";", ";"), (T.STRING, "b"), (";", ";"))
        stream.next().next()
        assert stream.find(";").key() == 3

    def test_find_missing_raises(self) -> None:
        stream = _stream((T.STRING, "a"))
        with pytest.raises(StreamError) as exc_info:
            stream.find(";")
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST
        assert exc_info.value.file_name == "test.php"

    def test_find_matching_bracket_nested(self) -> None:
        stream = _stream(("{", "{"), ("{", "{"), ("}", "}"), ("(", "("), (")", ")"), ("}", "}"), (";", ";"))
        assert stream.find_matching_bracket().key() == 5

    def test_find_matching_bracket_requires_bracket(self) -> None:
        stream = _stream((T.STRING, "a"))
        with pytest.raises(StreamError) as exc_info:
            stream.find_matching_bracket()
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST

    def test_find_matching_bracket_unbalanced(self) -> None:
        stream = _stream(("(", "("), ("(", "("), (")", ")"))
        with pytest.raises(StreamError) as exc_info:
            stream.find_matching_bracket()
        assert exc_info.value.code == ErrorCode.READ_BEYOND_EOS

    def test_accessors_out_of_range(self) -> None:
        stream = _stream((T.STRING, "a"))
        stream.next()
        assert not stream.valid()
        assert stream.current() is None
        assert stream.get_type() is None
        assert stream.get_value(-5) is None

    def test_source_part_is_inclusive(self) -> None:
        stream = _stream((T.STRING, "a"), (T.WHITESPACE, " "), (T.STRING, "b"), (";", ";"))
        assert stream.get_source_part(0, 2) == "a b"
        assert str(stream) == "a b;"


class TestStreams:
    """Tests for stream constructors."""

    def test_string_stream(self) -> None:
        stream = StringStream("<?php\nconst A = 1;\n", "inline.php")
        assert stream.file_name == "inline.php"
        assert str(stream) == "<?php\nconst A = 1;\n"

    def test_file_stream(self, tmp_path) -> None:
        path = tmp_path / "a.php"
        path.write_text("<?php\necho 1;\n", encoding="utf-8")
        stream = FileStream(path)
        assert stream.file_name == str(path.resolve())
        assert stream.count() > 0

    def test_file_stream_missing(self, tmp_path) -> None:
        with pytest.raises(StreamError) as exc_info:
            FileStream(tmp_path / "missing.php")
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST
