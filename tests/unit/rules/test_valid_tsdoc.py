"""Unit tests for the valid-tsdoc rule."""

import pytest

from comment_guard.rules.documentation.valid_tsdoc import TsdocOptions, ValidTsdocRule

IDENTITY = """/**
 * Identity.
 * @typeParam T - the type
 * @typeParam U - not declared
 * @foo bar
 */
export function id<T>(value: T): T {
  return value;
}
"""


def message_ids(result):
    return [v.message_id for v in result.violations]


class TestValidTsdocRule:
    """Tests for valid-tsdoc through the engine."""

    def test_unknown_tag_and_type_param_name(self, lint):
        result = lint(ValidTsdocRule(), IDENTITY, language="typescript")
        assert sorted(message_ids(result)) == ["invalidTypeParamName", "unknownTag"]

        by_id = {v.message_id: v for v in result.violations}
        assert by_id["unknownTag"].data == {"tag": "foo"}
        assert by_id["invalidTypeParamName"].message == (
            "@typeParam 'U' does not match any type parameter. Available: T."
        )

    def test_allowed_tags(self, lint):
        result = lint(ValidTsdocRule(), IDENTITY, {"allowedTags": ["foo"]}, language="typescript")
        assert message_ids(result) == ["invalidTypeParamName"]

    def test_banned_tags(self, lint):
        text = "/**\n * Old.\n * @deprecated\n * @internal\n */\nfunction f() {}\n"
        options = {"bannedTags": ["deprecated", {"tag": "internal", "reason": "Use @beta."}]}
        result = lint(ValidTsdocRule(), text, options, language="typescript")

        assert [v.message for v in result.violations] == [
            "Tag '@deprecated' is not allowed. This tag is not allowed.",
            "Tag '@internal' is not allowed. Use @beta.",
        ]

    def test_duplicate_type_param(self, lint):
        text = "/**\n * @typeParam T - a\n * @typeParam T - b\n */\nfunction f<T>(v: T) {}\n"
        result = lint(ValidTsdocRule(), text, language="typescript")
        assert message_ids(result) == ["duplicateTypeParam"]

    def test_duplicate_type_param_on_class(self, lint):
        text = "/**\n * Box.\n * @typeParam T - a\n * @typeParam T - b\n */\nclass Box<T> {}\n"
        result = lint(ValidTsdocRule(), text, language="typescript")
        assert message_ids(result) == ["duplicateTypeParam"]

    def test_require_type_param(self, lint):
        text = "/**\n * Pair.\n * @typeParam A - first\n */\ninterface Pair<A, B> { a: A; b: B }\n"
        result = lint(ValidTsdocRule(), text, {"requireTypeParam": True}, language="typescript")
        assert message_ids(result) == ["missingTypeParam"]
        assert result.violations[0].data == {"name": "B"}

    def test_require_remarks_only_for_exports(self, lint):
        text = (
            "/**\n * Public.\n */\nexport function a() {}\n"
            "/**\n * Private.\n */\nfunction b() {}\n"
        )
        result = lint(ValidTsdocRule(), text, {"requireRemarks": True}, language="typescript")
        assert message_ids(result) == ["missingRemarks"]
        assert result.violations[0].line == 1

    def test_remarks_present(self, lint):
        text = "/**\n * Public.\n * @remarks Details.\n */\nexport class Store {}\n"
        result = lint(ValidTsdocRule(), text, {"requireRemarks": True}, language="typescript")
        assert result.violations == []

    def test_exported_const_arrow_is_public(self, lint):
        text = "/** Adds. */\nexport const add = (a: number) => a;\n"
        result = lint(ValidTsdocRule(), text, {"requireRemarks": True}, language="typescript")
        assert message_ids(result) == ["missingRemarks"]

    def test_type_alias_and_enum(self, lint):
        text = "/** @bogus */\ntype Id = string;\n/** @nope */\nenum Color { Red }\n"
        result = lint(ValidTsdocRule(), text, language="typescript")
        assert [v.data["tag"] for v in result.violations] == ["bogus", "nope"]

    def test_known_tags_pass(self, lint):
        text = (
            "/**\n * Loads.\n * @param id - key\n * @returns value\n * @throws Error\n"
            " * @example load(1)\n * @see other\n * @beta\n */\nfunction load(id: number) {}\n"
        )
        assert lint(ValidTsdocRule(), text, language="typescript").violations == []


class TestTsdocOptions:
    def test_banned_reasons(self):
        options = TsdocOptions.model_validate(
            {"bannedTags": ["a", {"tag": "b"}, {"tag": "c", "reason": "r"}]}
        )
        assert options.banned_reasons() == {
            "a": "This tag is not allowed.",
            "b": "This tag is not allowed.",
            "c": "r",
        }

    def test_banned_tag_requires_name(self):
        with pytest.raises(ValueError):
            TsdocOptions.model_validate({"bannedTags": [{"reason": "x"}]})
