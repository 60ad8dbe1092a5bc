"""
Comment spacing rule.

Requires whitespace after `//` and after the opening `/*` of a one-line
block comment, and after the leading `*` of each line of a multi-line
block comment. `///` directives and `/**` doc openers are left alone.
"""

import re

from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor

UNSPACED_STAR = re.compile(r"^(\s*)\*([^\s/*])")


class CommentSpacingOptions(RuleOptions):
    """Options for comment-spacing."""

    require_space_after_line: bool = True
    require_space_after_block: bool = True


def line_fix(comment: Comment) -> TextEdit:
    return TextEdit(comment.start, comment.end, f"// {comment.value}")


def block_fix(comment: Comment) -> TextEdit:
    lines = comment.value.split("\n")
    if len(lines) == 1:
        return TextEdit(comment.start, comment.end, f"/* {comment.value} */")
    fixed = [UNSPACED_STAR.sub(r"\1* \2", line, count=1) for line in lines]
    return TextEdit(comment.start, comment.end, "/*" + "\n".join(fixed) + "*/")


def block_needs_space(value: str) -> bool:
    lines = value.split("\n")
    if len(lines) == 1:
        return bool(value) and value[0] not in " *\t"
    return any(UNSPACED_STAR.match(line) for line in lines)


class CommentSpacingRule(BaseRule):
    """Enforce a space after comment delimiters."""

    Options = CommentSpacingOptions

    messages = {
        "missingSpaceAfterLine": "Expected space after '//'.",
        "missingSpaceAfterBlock": "Expected space after '*' in block comment.",
    }

    @property
    def rule_id(self) -> str:
        return "comment-spacing"

    @property
    def name(self) -> str:
        return "Comment Spacing"

    @property
    def category(self) -> str:
        return "format"

    @property
    def description(self) -> str:
        return "Enforce a space after comment delimiters"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: CommentSpacingOptions = context.options

        def check_program(_node) -> None:
            for comment in context.comments:
                value = comment.value
                if comment.is_block:
                    if options.require_space_after_block and block_needs_space(value):
                        context.report("missingSpaceAfterBlock", comment, fix=block_fix(comment))
                elif options.require_space_after_line:
                    if value and not value.startswith("/") and value[0] not in " \t":
                        context.report("missingSpaceAfterLine", comment, fix=line_fix(comment))

        return {"program": check_program}
