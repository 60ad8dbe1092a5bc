"""
Comments for markup that changes what screen readers announce.

aria-hidden, presentational roles, negative tabindex, live regions,
aria-expanded and visually hidden classes all make the accessible
experience differ from the visual one. Each such JSX element needs a
comment saying why. At most one finding is reported per element.
"""

import re

from pydantic import Field
from tree_sitter import Node

from ...analysis.jsx import (
    JSX_ELEMENT_TYPES,
    JSX_LANGUAGES,
    attribute_value,
    has_explaining_comment,
)
from ..base import BaseRule, RuleContext, RuleOptions, Visitor

DIRECTIVE_PATTERN = re.compile(r"^(eslint|prettier|@ts-|TODO|FIXME|NOTE|A11Y-TODO)", re.IGNORECASE)

PRESENTATIONAL_ROLES = ("presentation", "none")


def is_directive(text: str) -> bool:
    return bool(DIRECTIVE_PATTERN.match(text))


def is_negative_number(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return int(value.strip()) < 0
    except ValueError:
        return False


class ScreenReaderContextOptions(RuleOptions):
    """Options for screen-reader-context."""

    check_aria_hidden: bool = True
    check_role_presentation: bool = True
    check_tabindex: bool = True
    check_aria_live: bool = True
    check_aria_expanded: bool = False
    visually_hidden_classes: list[str] = Field(
        default_factory=lambda: [
            "sr-only",
            "visually-hidden",
            "visuallyhidden",
            "screen-reader-only",
            "clip-hide",
        ]
    )
    min_explanation_length: int = Field(default=15, ge=1)


class ScreenReaderContextRule(BaseRule):
    """Require comments on elements that alter screen reader output."""

    Options = ScreenReaderContextOptions

    messages = {
        "missingAriaHiddenContext": (
            'Element with aria-hidden="true" needs a comment explaining why it\'s '
            "hidden from screen readers."
        ),
        "missingRolePresentationContext": (
            'Element with role="{{role}}" needs a comment explaining its presentational purpose.'
        ),
        "missingTabindexContext": (
            "Element with negative tabindex needs a comment explaining why it's "
            "removed from tab order."
        ),
        "missingAriaLiveContext": (
            "Live region (aria-live) needs a comment explaining what updates will be announced."
        ),
        "missingAriaExpandedContext": (
            "Element with aria-expanded needs a comment explaining the expand/collapse behavior."
        ),
        "missingVisuallyHiddenContext": (
            "Visually hidden element needs a comment explaining its screen reader purpose."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "screen-reader-context"

    @property
    def name(self) -> str:
        return "Screen Reader Context"

    @property
    def category(self) -> str:
        return "accessibility"

    @property
    def description(self) -> str:
        return "Require comments explaining markup that changes screen reader output"

    @property
    def supported_languages(self) -> list[str] | None:
        return JSX_LANGUAGES

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: ScreenReaderContextOptions = context.options
        source = context.source

        def value(node: Node, *names: str):
            for name in names:
                found = attribute_value(node, name, source)
                if found is not None:
                    return found
            return None

        def visually_hidden(node: Node) -> bool:
            classes = value(node, "className", "class")
            if not isinstance(classes, str) or not classes:
                return False
            return any(name in classes.split() for name in options.visually_hidden_classes)

        def finding(node: Node) -> tuple[str, dict] | None:
            if options.check_aria_hidden and value(node, "aria-hidden") in ("true", True):
                return "missingAriaHiddenContext", {}
            if options.check_role_presentation:
                role = value(node, "role")
                if role in PRESENTATIONAL_ROLES:
                    return "missingRolePresentationContext", {"role": role}
            if options.check_tabindex and is_negative_number(value(node, "tabIndex", "tabindex")):
                return "missingTabindexContext", {}
            if options.check_aria_live:
                live = value(node, "aria-live")
                if live not in (None, False, "", "off"):
                    return "missingAriaLiveContext", {}
            if options.check_aria_expanded and value(node, "aria-expanded") is not None:
                return "missingAriaExpandedContext", {}
            if visually_hidden(node):
                return "missingVisuallyHiddenContext", {}
            return None

        def check_element(node: Node) -> None:
            found = finding(node)
            if found is None:
                return
            if has_explaining_comment(node, source, options.min_explanation_length, is_directive):
                return
            message_id, data = found
            context.report(message_id, node, data=data)

        return {node_type: check_element for node_type in JSX_ELEMENT_TYPES}
