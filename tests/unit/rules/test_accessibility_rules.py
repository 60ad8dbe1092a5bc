"""Unit tests for the JSX accessibility comment rules."""

import pytest

from comment_guard.rules.accessibility.alt_text_comments import (
    RequireAltTextCommentsRule,
    is_code_like,
)
from comment_guard.rules.accessibility.screen_reader_context import (
    ScreenReaderContextRule,
    is_directive,
    is_negative_number,
)


def message_ids(lint, rule, text, options=None, language="javascript"):
    return [v.message_id for v in lint(rule, text, options, language=language).violations]


class TestRequireAltTextComments:
    """Tests for require-alt-text-comments."""

    @pytest.fixture
    def rule(self) -> RequireAltTextCommentsRule:
        return RequireAltTextCommentsRule()

    def test_empty_alt_needs_decorative_comment(self, lint, rule):
        text = 'const a = <img src="line.png" alt="" />;\n'
        assert message_ids(lint, rule, text) == ["missingDecorativeComment"]

    def test_image_with_alt_text_passes(self, lint, rule):
        text = 'const a = <img src="cat.png" alt="A sleeping cat" />;\n'
        assert message_ids(lint, rule, text) == []

    def test_aria_label_needs_comment(self, lint, rule):
        text = 'const a = <button aria-label="Close" onClick={close} />;\n'
        assert message_ids(lint, rule, text) == ["missingAriaLabelComment"]

    def test_button_with_text_passes(self, lint, rule):
        assert message_ids(lint, rule, "const a = <button>Save</button>;\n") == []

    def test_icon_only_button_flags_button_and_icon(self, lint, rule):
        result = lint(rule, "const a = <button><CloseIcon /></button>;\n")
        assert [v.message_id for v in result.violations] == [
            "missingAccessibilityComment",
            "missingAccessibilityComment",
        ]
        assert [v.data["element"] for v in result.violations] == ["button", "CloseIcon"]

    def test_member_expression_icon_name(self, lint, rule):
        result = lint(rule, "const a = <Icons.SearchIcon />;\n")
        assert [v.data["element"] for v in result.violations] == ["SearchIcon"]

    def test_leading_comment_explains_element(self, lint, rule):
        text = "const a = (\n  // Opens the global search dialog\n  <SearchIcon />\n);\n"
        assert message_ids(lint, rule, text) == []

    def test_jsx_comment_sibling_explains_element(self, lint, rule):
        text = (
            "const a = (\n"
            "  <div>\n"
            "    {/* Closes the settings dialog */}\n"
            "    <CloseIcon />\n"
            "  </div>\n"
            ");\n"
        )
        assert message_ids(lint, rule, text) == []

    def test_short_comment_does_not_explain(self, lint, rule):
        text = "const a = (\n  <div>\n    {/* x */}\n    <CloseIcon />\n  </div>\n);\n"
        assert message_ids(lint, rule, text) == ["missingAccessibilityComment"]

    def test_code_like_comment_does_not_explain(self, lint, rule):
        text = "const a = (\n  // const icon = <SearchIcon />;\n  <SearchIcon />\n);\n"
        assert message_ids(lint, rule, text) == ["missingAccessibilityComment"]

    def test_tsx_svg(self, lint, rule):
        text = 'const a = <svg viewBox="0 0 10 10" />;\n'
        assert message_ids(lint, rule, text, language="tsx") == ["missingAccessibilityComment"]

    def test_plain_typescript_is_skipped(self, lint, rule):
        assert message_ids(lint, rule, "const a: number = 1;\n", language="typescript") == []

    def test_check_empty_alt_disabled(self, lint, rule):
        text = 'const a = <img src="line.png" alt="" />;\n'
        assert message_ids(lint, rule, text, {"checkEmptyAlt": False}) == []

    def test_custom_elements(self, lint, rule):
        text = 'const a = <Avatar aria-label="Profile" />;\n'
        assert message_ids(lint, rule, text) == []
        assert message_ids(lint, rule, text, {"elements": ["Avatar"]}) == [
            "missingAriaLabelComment"
        ]

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("import x from 'y'", True),
            ("eslint-disable-next-line", True),
            ("<Icon />", True),
            ("Opens the search dialog", False),
        ],
    )
    def test_is_code_like(self, text, expected):
        assert is_code_like(text) is expected


class TestScreenReaderContext:
    """Tests for screen-reader-context."""

    @pytest.fixture
    def rule(self) -> ScreenReaderContextRule:
        return ScreenReaderContextRule()

    @pytest.mark.parametrize(
        "element,expected",
        [
            ('<span aria-hidden="true">*</span>', "missingAriaHiddenContext"),
            ("<span aria-hidden>*</span>", "missingAriaHiddenContext"),
            ('<div role="presentation" />', "missingRolePresentationContext"),
            ('<div role="none" />', "missingRolePresentationContext"),
            ("<div tabIndex={-1} />", "missingTabindexContext"),
            ('<div tabindex="-1" />', "missingTabindexContext"),
            ('<div aria-live="polite" />', "missingAriaLiveContext"),
            ('<span className="sr-only">Loading</span>', "missingVisuallyHiddenContext"),
        ],
    )
    def test_findings(self, lint, rule, element, expected):
        assert message_ids(lint, rule, f"const a = {element};\n") == [expected]

    @pytest.mark.parametrize(
        "element",
        [
            '<span aria-hidden="false">*</span>',
            '<div role="button" />',
            "<div tabIndex={0} />",
            '<div aria-live="off" />',
            "<div aria-expanded={open} />",
            '<span className="title">Loading</span>',
        ],
    )
    def test_no_findings(self, lint, rule, element):
        assert message_ids(lint, rule, f"const a = {element};\n") == []

    def test_role_in_message(self, lint, rule):
        result = lint(rule, 'const a = <div role="none" />;\n')
        assert result.violations[0].message == (
            'Element with role="none" needs a comment explaining its presentational purpose.'
        )

    def test_one_finding_per_element(self, lint, rule):
        text = 'const a = <div aria-hidden="true" role="presentation" tabIndex={-1} />;\n'
        assert message_ids(lint, rule, text) == ["missingAriaHiddenContext"]

    def test_aria_expanded_opt_in(self, lint, rule):
        text = "const a = <button aria-expanded={open}>Menu</button>;\n"
        assert message_ids(lint, rule, text, {"checkAriaExpanded": True}) == [
            "missingAriaExpandedContext"
        ]

    def test_disabled_checks(self, lint, rule):
        text = 'const a = <span aria-hidden="true">*</span>;\n'
        assert message_ids(lint, rule, text, {"checkAriaHidden": False}) == []

    def test_explaining_comment(self, lint, rule):
        text = (
            "const a = (\n"
            "  // Decorative star, the rating is read out by the label\n"
            '  <span aria-hidden="true">*</span>\n'
            ");\n"
        )
        assert message_ids(lint, rule, text) == []

    def test_directive_comment_does_not_explain(self, lint, rule):
        text = (
            "const a = (\n"
            "  // eslint-disable-next-line jsx-a11y/no-static-element-interactions\n"
            '  <span aria-hidden="true">*</span>\n'
            ");\n"
        )
        assert message_ids(lint, rule, text) == ["missingAriaHiddenContext"]

    def test_custom_hidden_class(self, lint, rule):
        text = 'const a = <span className="offscreen">Loading</span>;\n'
        options = {"visuallyHiddenClasses": ["offscreen"]}
        assert message_ids(lint, rule, text, options) == ["missingVisuallyHiddenContext"]

    def test_tsx(self, lint, rule):
        text = 'const a = <div aria-live="assertive" />;\n'
        assert message_ids(lint, rule, text, language="tsx") == ["missingAriaLiveContext"]

    def test_helpers(self):
        assert is_directive("TODO: label this")
        assert is_directive("@ts-expect-error")
        assert not is_directive("Hidden because the label repeats it")
        assert is_negative_number("-1")
        assert not is_negative_number("0")
        assert not is_negative_number(True)
