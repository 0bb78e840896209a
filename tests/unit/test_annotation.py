"""Unit tests for docblock parsing."""

from phpscope.reflection.annotation import (
    DOCBLOCK_TEMPLATE_END,
    LONG_DESCRIPTION,
    SHORT_DESCRIPTION,
    ReflectionAnnotation,
    merge_templates,
    parse_docblock,
)


class TestParseDocblock:
    """Tests for parse_docblock."""

    def test_empty(self) -> None:
        assert parse_docblock(None) == {}
        assert parse_docblock("") == {}
        assert parse_docblock(DOCBLOCK_TEMPLATE_END) == {}

    def test_descriptions_and_tags(self) -> None:
        doc = """/**
         * Short text.
         *
         * Long text
         * over two lines.
         *
         * @param int $a First.
         * @param string $b Second
         * continued.
         * @return bool
         */"""
        annotations = parse_docblock(doc)
        assert annotations[SHORT_DESCRIPTION] == "Short text."
        assert annotations[LONG_DESCRIPTION] == "Long text\nover two lines."
        assert annotations["param"] == ["int $a First.", "string $b Second\ncontinued."]
        assert annotations["return"] == ["bool"]

    def test_single_line(self) -> None:
        annotations = parse_docblock("/** Just this. */")
        assert annotations == {SHORT_DESCRIPTION: "Just this."}

    def test_tag_without_value(self) -> None:
        annotations = parse_docblock("/**\n * @deprecated\n */")
        assert annotations["deprecated"] == [""]

    def test_escaped_comment_end(self) -> None:
        annotations = parse_docblock("/**\n * Ends with {@*} here.\n */")
        assert annotations[SHORT_DESCRIPTION] == "Ends with */ here."


class TestTemplates:
    """Tests for docblock template merging."""

    def test_template_tags_and_long_description(self) -> None:
        template = ReflectionAnnotation(None, "/**#@+\n * Template short.\n *\n * Shared text.\n * @access private\n */")
        merged = merge_templates(
            parse_docblock("/**\n * Own short.\n *\n * Own long.\n * @var int\n */"),
            [template],
            "/** other */",
        )
        assert merged[SHORT_DESCRIPTION] == "Own short."
        assert merged[LONG_DESCRIPTION] == "Shared text.\nOwn long."
        assert merged["access"] == ["private"]
        assert merged["var"] == ["int"]

    def test_own_template_skipped(self) -> None:
        doc = "/**#@+\n * @access private\n */"
        template = ReflectionAnnotation(None, doc)
        assert merge_templates(parse_docblock(doc), [template], doc) == parse_docblock(doc)

    def test_template_entries_come_first(self) -> None:
        template = ReflectionAnnotation(None, "/**#@+\n * @tag template\n */")
        merged = merge_templates(parse_docblock("/** @tag own */"), [template], "/** @tag own */")
        assert merged["tag"] == ["template", "own"]

    def test_nested_templates_outermost_first(self) -> None:
        inner = ReflectionAnnotation(None, "/**#@+\n * @tag inner\n */")
        outer = ReflectionAnnotation(None, "/**#@+\n * @tag outer\n */")
        merged = merge_templates(parse_docblock("/** @tag own */"), [inner, outer], "/** @tag own */")
        assert merged["tag"] == ["outer", "inner", "own"]
