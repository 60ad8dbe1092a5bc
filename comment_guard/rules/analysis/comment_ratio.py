"""
Comment-to-code ratio rule.

Reports files with too few or too many comment lines relative to their
code lines. At most one of noComments, tooFewComments and
tooManyComments is reported per file, checked in that order.
"""

import math
import re
from dataclasses import dataclass

from pydantic import Field

from ...analysis.source import Comment, SourceFile
from ..base import BaseRule, RuleContext, RuleOptions, Visitor

ACTION_COMMENT = re.compile(r"\b(TODO|FIXME|NOTE)\b", re.IGNORECASE)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class LineCounts:
    """Line tallies for one file."""

    total_lines: int
    code_lines: int
    comment_lines: int
    blank_lines: int

    def base_lines(self, count_blank_lines: bool) -> int:
        return self.code_lines + self.blank_lines if count_blank_lines else self.code_lines


class CommentRatioOptions(RuleOptions):
    """Options for comment-code-ratio."""

    min_ratio: float = Field(default=0.05, ge=0, le=1)
    max_ratio: float = Field(default=0.40, ge=0, le=1)
    min_file_lines: int = Field(default=20, ge=0)
    exclude_jsdoc: bool = Field(default=False, alias="excludeJSDoc")
    exclude_todo: bool = False
    count_blank_lines: bool = False


def count_lines(
    source: SourceFile,
    exclude_jsdoc: bool = False,
    exclude_todo: bool = False,
) -> LineCounts:
    """Tally code, comment and blank lines.

    Every physical line a comment spans counts as a comment line, and a
    line holding any part of a comment is never a code line. The
    exclusion toggles only remove comments from the comment tally.
    """
    comments = source.get_all_comments()

    comment_line_numbers: set[int] = set()
    for comment in comments:
        comment_line_numbers.update(range(comment.start_line, comment.end_line + 1))

    def counted(comment: Comment) -> bool:
        if exclude_jsdoc and comment.is_doc:
            return False
        if exclude_todo and ACTION_COMMENT.search(comment.value):
            return False
        return True

    comment_lines = sum(c.line_span for c in comments if counted(c))

    code_lines = 0
    blank_lines = 0
    for number, line in enumerate(source.lines, start=1):
        if not line.strip():
            blank_lines += 1
        elif number not in comment_line_numbers:
            code_lines += 1

    return LineCounts(
        total_lines=len(source.lines),
        code_lines=code_lines,
        comment_lines=comment_lines,
        blank_lines=blank_lines,
    )


class CommentCodeRatioRule(BaseRule):
    """Enforce a comment-to-code ratio range."""

    Options = CommentRatioOptions

    messages = {
        "tooFewComments": (
            "File has too few comments ({{actual}}%, minimum: {{min}}%). "
            "{{codeLines}} code lines, {{commentLines}} comment lines."
        ),
        "tooManyComments": (
            "File has too many comments ({{actual}}%, maximum: {{max}}%). "
            "Consider if all comments add value."
        ),
        "noComments": "File has no comments. Consider adding documentation for complex logic.",
    }

    @property
    def rule_id(self) -> str:
        return "comment-code-ratio"

    @property
    def name(self) -> str:
        return "Comment/Code Ratio"

    @property
    def category(self) -> str:
        return "analysis"

    @property
    def description(self) -> str:
        return "Enforce a minimum and maximum comment-to-code ratio"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: CommentRatioOptions = context.options

        def check_ratio(_node) -> None:
            source = context.source
            if len(source.lines) < options.min_file_lines:
                return

            counts = count_lines(source, options.exclude_jsdoc, options.exclude_todo)
            base = counts.base_lines(options.count_blank_lines)
            if base == 0:
                return

            ratio = counts.comment_lines / base
            actual = str(round_half_up(ratio * 100))

            if counts.comment_lines == 0 and options.min_ratio > 0:
                context.report("noComments")
            elif ratio < options.min_ratio:
                context.report(
                    "tooFewComments",
                    data={
                        "actual": actual,
                        "min": round_half_up(options.min_ratio * 100),
                        "codeLines": counts.code_lines,
                        "commentLines": counts.comment_lines,
                    },
                )
            elif ratio > options.max_ratio:
                context.report(
                    "tooManyComments",
                    data={"actual": actual, "max": round_half_up(options.max_ratio * 100)},
                )

        return {"program:exit": check_ratio}
