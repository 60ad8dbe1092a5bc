"""
Comment length rule.

Measures each comment's text with block decoration removed and lines
joined by spaces. URLs are left out of the measurement by default.
Comments starting with `@` or `eslint` are directives and are skipped.
"""

import re

from pydantic import Field, model_validator

from ...analysis.comment_text import joined_comment_text
from ..base import BaseRule, RuleContext, RuleOptions, Visitor

URL_PATTERN = re.compile(r"https?://\S+")


class CommentLengthOptions(RuleOptions):
    """Options for enforce-comment-length."""

    min_length: int | None = Field(default=None, ge=0)
    max_length: int = Field(default=120, ge=1)
    ignore_urls: bool = True

    @model_validator(mode="after")
    def _check_bounds(self) -> "CommentLengthOptions":
        if self.min_length is not None and self.min_length > self.max_length:
            raise ValueError("minLength must not exceed maxLength")
        return self


def measured_length(text: str, ignore_urls: bool) -> int:
    if ignore_urls:
        text = URL_PATTERN.sub("", text).strip()
    return len(text)


class CommentLengthRule(BaseRule):
    """Enforce minimum and maximum comment lengths."""

    Options = CommentLengthOptions

    messages = {
        "tooShort": "Comment is too short ({{length}} chars). Minimum is {{min}} characters.",
        "tooLong": "Comment is too long ({{length}} chars). Maximum is {{max}} characters.",
    }

    @property
    def rule_id(self) -> str:
        return "enforce-comment-length"

    @property
    def name(self) -> str:
        return "Comment Length"

    @property
    def category(self) -> str:
        return "format"

    @property
    def description(self) -> str:
        return "Enforce minimum and maximum comment length"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: CommentLengthOptions = context.options

        def check_program(_node) -> None:
            for comment in context.comments:
                text = joined_comment_text(comment)
                if not text or text.startswith(("@", "eslint")):
                    continue
                length = measured_length(text, options.ignore_urls)
                if options.min_length is not None and length < options.min_length:
                    context.report(
                        "tooShort", comment, data={"length": length, "min": options.min_length}
                    )
                if length > options.max_length:
                    context.report(
                        "tooLong", comment, data={"length": length, "max": options.max_length}
                    )

        return {"program": check_program}
