"""Unit tests for comment_guard.analysis.source and parser modules."""

from pathlib import Path

import pytest

from comment_guard.analysis.parser import SourceParser, detect_language, parse_source
from comment_guard.analysis.source import CommentKind, SourceRange


class TestDetectLanguage:
    """Tests for extension to grammar mapping."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("app.js", "javascript"),
            ("App.jsx", "javascript"),
            ("lib.mjs", "javascript"),
            ("lib.cjs", "javascript"),
            ("api.ts", "typescript"),
            ("api.mts", "typescript"),
            ("view.tsx", "tsx"),
            ("README.md", None),
            ("Makefile", None),
        ],
    )
    def test_detect(self, name, expected):
        assert detect_language(name) == expected

    def test_parse_file_rejects_unknown_extension(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("// TODO: x\n")
        with pytest.raises(ValueError, match="Unsupported file type"):
            SourceParser().parse_file(path)

    def test_parse_file_reads_content(self, tmp_path: Path):
        path = tmp_path / "mod.ts"
        path.write_text("// hello\nconst x: number = 1;\n")
        source = SourceParser().parse_file(path)
        assert source.language == "typescript"
        assert source.file_path == path
        assert [c.value for c in source.get_all_comments()] == [" hello"]


class TestComments:
    """Tests for comment extraction."""

    def test_line_and_block_comments_in_order(self, parse):
        source = parse("/* head */\nlet a = 1; // tail\n/** doc */\nfunction f() {}\n")
        comments = source.get_all_comments()

        assert [c.kind for c in comments] == [
            CommentKind.BLOCK,
            CommentKind.LINE,
            CommentKind.BLOCK,
        ]
        assert [c.value for c in comments] == [" head ", " tail", "* doc "]
        assert comments[2].is_doc
        assert not comments[0].is_doc
        assert not comments[1].is_block

    def test_comment_offsets_and_location(self, parse):
        text = "let a = 1;\n  // note here\n"
        source = parse(text)
        (comment,) = source.get_all_comments()

        assert text[comment.start : comment.end] == "// note here"
        assert comment.loc == SourceRange(2, 2, 2, 14)
        assert comment.line_span == 1

    def test_multiline_block_span(self, parse):
        source = parse("/*\n * one\n * two\n */\nlet a = 1;\n")
        (comment,) = source.get_all_comments()
        assert comment.start_line == 1
        assert comment.end_line == 4
        assert comment.line_span == 4

    def test_offsets_count_characters_not_bytes(self, parse):
        text = "// café\n// next\n"
        source = parse(text)
        second = source.get_all_comments()[1]

        assert second.start == len("// café\n")
        assert text[second.start : second.end] == "// next"

    def test_columns_count_characters(self, parse):
        text = 'let s = "é"; // after\n'
        source = parse(text)
        (comment,) = source.get_all_comments()
        assert comment.loc.start_column == text.index("//")

    def test_comments_are_cached(self, parse):
        source = parse("// a\n")
        assert source.get_all_comments() is source.get_all_comments()


class TestTokens:
    """Tests for token queries around comments and nodes."""

    def test_tokens_exclude_comments(self, parse):
        source = parse("let a = 1; // x\n")
        assert [t.text for t in source.tokens] == ["let", "a", "=", "1", ";"]

    def test_token_before_and_after_comment(self, parse):
        source = parse("foo(); // x\nbar();\n")
        comment = source.get_all_comments()[0]

        before = source.get_token_before(comment)
        after = source.get_token_after(comment)
        assert before.text == ";"
        assert before.loc.end_line == 1
        assert after.text == "bar"
        assert after.loc.start_line == 2

    def test_no_tokens_around_lone_comment(self, parse):
        source = parse("// only\n")
        comment = source.get_all_comments()[0]
        assert source.get_token_before(comment) is None
        assert source.get_token_after(comment) is None

    def test_node_for_token(self, parse):
        source = parse("count++;\n")
        token = source.tokens[0]
        node = source.node_for_token(token)
        assert node.type == "identifier"
        assert node.parent.type == "update_expression"

    def test_comments_before_node(self, parse):
        source = parse("let a = 1;\n// first\n/* second */\nfunction f() {}\n")
        function = next(n for n in source.walk() if n.type == "function_declaration")
        assert [c.value.strip() for c in source.get_comments_before(function)] == [
            "first",
            "second",
        ]


class TestPositions:
    """Tests for line and program positions."""

    def test_offset_of_line(self, parse):
        source = parse("ab\ncd\nef\n")
        assert source.offset_of_line(1) == 0
        assert source.offset_of_line(3) == 6

    def test_multibyte_offsets(self, parse):
        source = parse("// é日😀\nx;\n")
        assert [source.char_offset(b) for b in (3, 5, 8, 12, 16)] == [3, 4, 5, 6, 10]
        assert source.offset_of_line(2) == 7
        assert source.get_all_comments()[0].loc.end_column == 6

    def test_offset_table_built_once(self, parse):
        source = parse("// é\nx;\n")
        source.char_offset(4)
        table = source._char_offsets
        source.char_offset(6)
        assert table is not None
        assert source._char_offsets is table

    def test_ascii_source_needs_no_table(self, parse):
        source = parse("// plain\nx;\n")
        assert source.char_offset(5) == 5
        assert source._char_offsets is None

    def test_program_location(self, parse):
        assert parse("let a;").program_location() == SourceRange(1, 0, 1, 0)

    def test_range_to_dict(self):
        assert SourceRange(1, 2, 3, 4).to_dict() == {
            "line": 1,
            "column": 2,
            "endLine": 3,
            "endColumn": 4,
        }

    def test_walk_is_preorder(self, parse):
        source = parse("let a = 1;\n")
        types = [n.type for n in source.walk()]
        assert types[0] == "program"
        assert types.index("lexical_declaration") < types.index("variable_declarator")

    def test_parse_source_shared_parser(self):
        source = parse_source("const x = 1;", language="typescript")
        assert source.is_typescript
        assert source.root.type == "program"
