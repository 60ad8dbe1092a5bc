"""
Comment capitalization rule.

A comment whose first line starts with a lowercase ASCII letter is
reported, unless it opens with a tag, a URL, a path, inline code, an
eslint directive or an abbreviation such as `e.g.`.
"""

import re

from pydantic import Field, field_validator

from ...analysis.comment_text import first_comment_line
from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor
from ..patterns import compile_pattern

SKIP_PATTERNS = [
    re.compile(r"^@\w+"),
    re.compile(r"^https?://"),
    re.compile(r"^eslint"),
    re.compile(r"^`[^`]+`"),
    re.compile(r"^[./\\]"),
    re.compile(r"^(e\.g\.|i\.e\.|etc\.|vs\.)", re.IGNORECASE),
]

LOWERCASE = re.compile(r"[a-z]")


class CapitalizationOptions(RuleOptions):
    """Options for enforce-capitalization."""

    ignore_inline_code: bool = True
    ignore_patterns: list[str] = Field(default_factory=list)

    @field_validator("ignore_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            compile_pattern(pattern)
        return value


def capitalize_fix(comment: Comment) -> TextEdit | None:
    """Uppercase the first lowercase letter, keeping the delimiters."""
    match = LOWERCASE.search(comment.value)
    if match is None:
        return None
    index = match.start()
    value = comment.value[:index] + comment.value[index].upper() + comment.value[index + 1 :]
    text = f"/*{value}*/" if comment.is_block else f"//{value}"
    return TextEdit(comment.start, comment.end, text)


class CapitalizationRule(BaseRule):
    """Require comments to start with an uppercase letter."""

    Options = CapitalizationOptions

    messages = {
        "notCapitalized": "Comments should start with an uppercase letter.",
    }

    @property
    def rule_id(self) -> str:
        return "enforce-capitalization"

    @property
    def name(self) -> str:
        return "Comment Capitalization"

    @property
    def category(self) -> str:
        return "format"

    @property
    def description(self) -> str:
        return "Require comments to start with a capital letter"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: CapitalizationOptions = context.options
        ignore = [re.compile(p) for p in options.ignore_patterns]

        def check_program(_node) -> None:
            for comment in context.comments:
                text = first_comment_line(comment)
                if not text:
                    continue
                if any(p.search(text) for p in SKIP_PATTERNS) or any(
                    p.search(text) for p in ignore
                ):
                    continue
                if options.ignore_inline_code and text.startswith("`"):
                    continue
                if "a" <= text[0] <= "z":
                    context.report("notCapitalized", comment, fix=capitalize_fix(comment))

        return {"program": check_program}
