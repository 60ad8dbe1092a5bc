"""Unit tests for the require-file-header rule."""

import datetime

import pytest

from comment_guard.rules.documentation.file_header import (
    RequireFileHeaderRule,
    render_template,
)


@pytest.fixture
def rule() -> RequireFileHeaderRule:
    return RequireFileHeaderRule()


def message_ids(lint, rule, text, options=None):
    return [v.message_id for v in lint(rule, text, options).violations]


class TestRenderTemplate:
    def test_placeholders(self):
        rendered = render_template(
            "{filename} {date} {year} {author}", "app.js", datetime.date(2024, 3, 5)
        )
        assert rendered == "app.js 2024-03-05 2024 [Author]"


class TestRequireFileHeader:
    """Tests for require-file-header."""

    def test_valid_header(self, lint, rule):
        text = "/**\n * @file app.js\n */\nconst a = 1;\n"
        assert message_ids(lint, rule, text) == []

    def test_missing_header(self, lint, rule):
        result = lint(rule, "const a = 1;\n")
        assert [(v.message_id, v.line, v.column) for v in result.violations] == [
            ("missingHeader", 1, 0)
        ]

    def test_missing_header_fix(self, fix, rule):
        result = fix(rule, "const a = 1;\n")
        assert result.output == "/**\n * @file <input>\n */\n\nconst a = 1;\n"
        assert result.violations == []

    def test_shebang_fix_goes_after_first_line(self, fix, rule):
        text = "#!/usr/bin/env node\nconst a = 1;\n"
        result = fix(rule, text)
        assert result.output == (
            "#!/usr/bin/env node\n/**\n * @file <input>\n */\n\nconst a = 1;\n"
        )

    def test_missing_header_after_shebang_reported_on_line_two(self, lint, rule):
        result = lint(rule, "#!/usr/bin/env node\nconst a = 1;\n")
        assert [(v.message_id, v.line) for v in result.violations] == [("missingHeader", 2)]

    def test_wrong_style(self, lint, rule):
        result = lint(rule, "/*\n * @file app.js\n */\nconst a = 1;\n")
        assert [v.message_id for v in result.violations] == ["invalidHeaderStyle"]
        assert result.violations[0].data == {"expected": "jsdoc", "actual": "block"}

    def test_missing_tag(self, lint, rule):
        result = lint(rule, "/**\n * Application entry point.\n */\n")
        assert [v.message_id for v in result.violations] == ["missingTag"]
        assert result.violations[0].data == {"tag": "@file"}

    def test_each_missing_tag_reported(self, lint, rule):
        options = {"requiredTags": ["@file", "@author", "@license"]}
        result = lint(rule, "/**\n * @author jo\n */\n", options)
        assert [v.data["tag"] for v in result.violations] == ["@file", "@license"]

    def test_header_too_far_from_start(self, lint, rule):
        text = "const a = 1;\n/** @file app.js */\n"
        result = lint(rule, text)
        assert [v.message_id for v in result.violations] == ["headerTooFarFromStart"]
        assert result.violations[0].data == {"max": "1"}
        assert message_ids(lint, rule, text, {"maxLinesBeforeHeader": 1}) == []

    def test_line_style(self, lint, rule):
        options = {"style": "line"}
        text = "// Entry point\n// @file app.js\nconst a = 1;\n"
        assert message_ids(lint, rule, text, options) == []
        assert message_ids(lint, rule, "// Entry point\n", options) == ["missingTag"]
        assert message_ids(lint, rule, "/** @file app.js */\n", options) == ["missingHeader"]

    def test_line_style_fix(self, fix, rule):
        result = fix(rule, "const a = 1;\n", {"style": "line"})
        assert result.output == "// @file <input>\n\nconst a = 1;\n"

    def test_custom_template(self, fix, rule):
        options = {"template": "/** @file {filename} by {author} */"}
        result = fix(rule, "const a = 1;\n", options)
        assert result.output == "/** @file <input> by [Author] */\n\nconst a = 1;\n"
