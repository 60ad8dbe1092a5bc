"""Unit tests for comment length, capitalization and spacing."""

import pytest

from comment_guard.rules.format.capitalization import CapitalizationRule
from comment_guard.rules.format.comment_length import CommentLengthRule
from comment_guard.rules.format.comment_spacing import CommentSpacingRule


def message_ids(lint, rule, text, options=None):
    return [v.message_id for v in lint(rule, text, options).violations]


class TestCommentLength:
    """Tests for enforce-comment-length."""

    def test_default_max(self, lint):
        long_comment = "// " + "word " * 30 + "\n"
        result = lint(CommentLengthRule(), long_comment)
        assert [v.message_id for v in result.violations] == ["tooLong"]
        assert result.violations[0].data == {"length": "149", "max": "120"}

    def test_short_comments_allowed_by_default(self, lint):
        assert message_ids(lint, CommentLengthRule(), "// ok\n") == []

    def test_min_length(self, lint):
        result = lint(CommentLengthRule(), "// ok\n// Long enough now\n", {"minLength": 5})
        assert [(v.message_id, v.line) for v in result.violations] == [("tooShort", 1)]

    def test_urls_not_measured(self, lint):
        text = "// See https://example.com/" + "a" * 120 + "\n"
        assert message_ids(lint, CommentLengthRule(), text) == []
        assert message_ids(lint, CommentLengthRule(), text, {"ignoreUrls": False}) == ["tooLong"]

    def test_block_lines_joined(self, lint):
        text = "/**\n * First line\n * second line\n */\n"
        result = lint(CommentLengthRule(), text, {"maxLength": 20})
        assert result.violations[0].data == {"length": "22", "max": "20"}

    def test_directives_skipped(self, lint):
        text = "// eslint-disable-next-line " + "x" * 130 + "\n"
        assert message_ids(lint, CommentLengthRule(), text) == []

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            CommentLengthRule.Options.model_validate({"minLength": 50, "maxLength": 10})


class TestCapitalization:
    """Tests for enforce-capitalization."""

    @pytest.mark.parametrize(
        "text",
        [
            "// Starts upper\n",
            "// @param x\n",
            "// https://example.com\n",
            "// eslint-disable-line\n",
            "// `value` is cached\n",
            "// ./relative/path\n",
            "// e.g. this one\n",
            "// 42 is the answer\n",
            "//\n",
        ],
    )
    def test_passes(self, lint, text):
        assert message_ids(lint, CapitalizationRule(), text) == []

    def test_lowercase_line_comment(self, lint):
        assert message_ids(lint, CapitalizationRule(), "// starts lower\n") == ["notCapitalized"]

    def test_doc_comment_first_line(self, lint):
        text = "/**\n * returns the total\n */\n"
        assert message_ids(lint, CapitalizationRule(), text) == ["notCapitalized"]

    def test_ignore_patterns(self, lint):
        text = "// npm run build first\n"
        assert message_ids(lint, CapitalizationRule(), text, {"ignorePatterns": ["^npm "]}) == []

    def test_fix(self, fix):
        text = "// starts lower\n/**\n * returns the total\n */\n"
        result = fix(CapitalizationRule(), text)
        assert result.output == "// Starts lower\n/**\n * Returns the total\n */\n"


class TestCommentSpacing:
    """Tests for comment-spacing."""

    @pytest.mark.parametrize(
        "text",
        [
            "// spaced\n",
            "/// <reference path='a' />\n",
            "//\n",
            "/* spaced */\n",
            "/** doc */\n",
            "/**\n * spaced\n */\n",
        ],
    )
    def test_passes(self, lint, text):
        assert message_ids(lint, CommentSpacingRule(), text) == []

    def test_line_comment(self, fix):
        result = fix(CommentSpacingRule(), "//tight\n")
        assert result.output == "// tight\n"

    def test_single_line_block(self, lint, fix):
        assert message_ids(lint, CommentSpacingRule(), "/*tight*/\n") == ["missingSpaceAfterBlock"]
        assert fix(CommentSpacingRule(), "/*tight*/\n").output == "/* tight */\n"

    def test_multi_line_block(self, lint, fix):
        text = "/**\n *one\n * two\n *three\n */\n"
        assert message_ids(lint, CommentSpacingRule(), text) == ["missingSpaceAfterBlock"]
        assert fix(CommentSpacingRule(), text).output == "/**\n * one\n * two\n * three\n */\n"

    def test_options_disable_checks(self, lint):
        text = "//tight\n/*tight*/\n"
        options = {"requireSpaceAfterLine": False, "requireSpaceAfterBlock": False}
        assert message_ids(lint, CommentSpacingRule(), text, options) == []
