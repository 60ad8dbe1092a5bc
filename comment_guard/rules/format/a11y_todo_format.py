"""
Accessibility TODO format rule.

Requires `A11Y-TODO (reference): description` for accessibility work
items and can optionally require the reference to name a WCAG success
criterion.
"""

import re

from pydantic import Field, field_validator

from ...analysis.source import Comment
from ..base import RuleContext
from ..patterns import compile_pattern
from .structured import CommentGrammar, FormatOptions, StructuredCommentRule

DEFAULT_PATTERN = r"^(?:A11Y-TODO|ALLY-TODO)\s*\(([^)]+)\):"
WCAG_PATTERN = r"WCAG-\d+\.\d+\.\d+"
REFERENCE = re.compile(r"\(([^)]+)\)")


class A11yTodoOptions(FormatOptions):
    """Options for accessibility-todo-format."""

    require_wcag_reference: bool = False
    allowed_prefixes: list[str] = Field(
        default_factory=lambda: ["A11Y-TODO", "ALLY-TODO"], min_length=1
    )
    wcag_pattern: str = WCAG_PATTERN

    @field_validator("wcag_pattern")
    @classmethod
    def _check_wcag_pattern(cls, value: str) -> str:
        compile_pattern(value)
        return value


class AccessibilityTodoFormatRule(StructuredCommentRule):
    """Enforce a standard format for accessibility TODO comments."""

    Options = A11yTodoOptions

    messages = {
        "invalidA11yTodoFormat": (
            "Accessibility TODO must follow format 'A11Y-TODO (reference): description'."
        ),
        "missingWcagReference": (
            "Accessibility TODO should include a WCAG guideline reference (e.g., WCAG-2.1.1)."
        ),
    }
    message_id = "invalidA11yTodoFormat"
    default_pattern = DEFAULT_PATTERN
    placeholder = "WCAG-X.X.X"

    @property
    def rule_id(self) -> str:
        return "accessibility-todo-format"

    @property
    def name(self) -> str:
        return "Accessibility TODO Format"

    @property
    def description(self) -> str:
        return "Enforce a standard format for accessibility TODO comments"

    @property
    def prefixes(self) -> tuple[str, ...]:
        return ("A11Y-TODO", "ALLY-TODO")

    def grammar(self, options: A11yTodoOptions) -> CommentGrammar:
        return CommentGrammar.build(
            tuple(options.allowed_prefixes),
            options.pattern or self.default_pattern,
            self.placeholder,
        )

    def check_comment(
        self,
        context: RuleContext,
        grammar: CommentGrammar,
        comment: Comment,
        text: str,
        prefix: str,
    ) -> None:
        if not grammar.validate(text).matches:
            super().check_comment(context, grammar, comment, text, prefix)
            return

        options: A11yTodoOptions = context.options
        if not options.require_wcag_reference:
            return

        reference = REFERENCE.search(text)
        wcag = re.compile(options.wcag_pattern, re.IGNORECASE)
        if reference is not None and not wcag.search(reference.group(1)):
            # Not fixable
            context.report("missingWcagReference", comment)
