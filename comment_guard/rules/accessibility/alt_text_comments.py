"""
Accessibility comments for images, icons and icon-only buttons.

JSX elements whose accessible name is easy to get wrong should carry a
comment saying what they convey: icons, inline SVG, buttons without
visible text, decorative images (`alt=""`) and anything labelled
through aria-label / aria-labelledby / aria-describedby.
"""

import re

from pydantic import Field, field_validator
from tree_sitter import Node

from ...analysis.jsx import (
    JSX_ELEMENT_TYPES,
    JSX_LANGUAGES,
    attribute_value,
    element_name,
    find_attribute,
    has_explaining_comment,
    has_visible_text,
)
from ..base import BaseRule, RuleContext, RuleOptions, Visitor
from ..patterns import compile_pattern

CODE_LIKE_PATTERNS = [
    re.compile(p)
    for p in (
        r"^import\s",
        r"^export\s",
        r"^const\s",
        r"^let\s",
        r"^var\s",
        r"^function\s",
        r"^class\s",
        r"^\{.*\}$",
        r"^<.*>$",
        r"eslint-disable",
        r"prettier-ignore",
    )
]

ARIA_LABEL_ATTRIBUTES = ("aria-label", "aria-labelledby", "aria-describedby")


def is_code_like(text: str) -> bool:
    return any(pattern.search(text) for pattern in CODE_LIKE_PATTERNS)


class AltTextCommentOptions(RuleOptions):
    """Options for require-alt-text-comments."""

    elements: list[str] = Field(default_factory=lambda: ["img", "svg", "Icon", "button"])
    icon_component_patterns: list[str] = Field(
        default_factory=lambda: ["Icon$", "Ico$", "^Icon", "^Svg"]
    )
    require_for_aria_labels: bool = True
    min_comment_length: int = Field(default=10, ge=1)
    check_empty_alt: bool = True

    @field_validator("icon_component_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            compile_pattern(pattern)
        return value


class RequireAltTextCommentsRule(BaseRule):
    """Require comments explaining the accessible purpose of UI elements."""

    Options = AltTextCommentOptions

    messages = {
        "missingAccessibilityComment": (
            "UI element '{{element}}' should have a comment explaining its "
            "accessibility purpose."
        ),
        "missingAriaLabelComment": (
            "Element with aria-label should have a comment explaining its "
            "accessibility purpose."
        ),
        "missingDecorativeComment": (
            "Decorative element (empty alt) should have a comment confirming it's decorative."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "require-alt-text-comments"

    @property
    def name(self) -> str:
        return "Alt Text Comments"

    @property
    def category(self) -> str:
        return "accessibility"

    @property
    def description(self) -> str:
        return "Require comments explaining the accessibility purpose of icons and images"

    @property
    def supported_languages(self) -> list[str] | None:
        return JSX_LANGUAGES

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: AltTextCommentOptions = context.options
        source = context.source
        icon_patterns = [re.compile(p, re.IGNORECASE) for p in options.icon_component_patterns]

        def is_icon(name: str) -> bool:
            return any(pattern.search(name) for pattern in icon_patterns)

        def check_element(node: Node) -> None:
            name = element_name(node, source)
            if not name or not (name in options.elements or is_icon(name)):
                return
            if has_explaining_comment(node, source, options.min_comment_length, is_code_like):
                return

            if options.require_for_aria_labels and any(
                find_attribute(node, attribute, source) is not None
                for attribute in ARIA_LABEL_ATTRIBUTES
            ):
                context.report("missingAriaLabelComment", node)
                return

            if options.check_empty_alt and attribute_value(node, "alt", source) == "":
                context.report("missingDecorativeComment", node)
                return

            if (
                is_icon(name)
                or name == "svg"
                or (name == "button" and not has_visible_text(node, source))
            ):
                context.report("missingAccessibilityComment", node, data={"element": name})

        return {node_type: check_element for node_type in JSX_ELEMENT_TYPES}
