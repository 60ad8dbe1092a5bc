"""
Commented code detection rule.

Detects comments containing code that should be removed rather than
left in the codebase. Each comment line is classified with the ordered
pattern table in `rules.patterns`: skip entries (action comments, doc
tags, URLs, paths, license headers, linter directives, short prose)
are evaluated before code entries, so skip always wins.
"""

import re
from dataclasses import dataclass, field

from pydantic import Field, field_validator

from ..base import BaseRule, RuleContext, RuleOptions, Visitor
from ..patterns import LineClass, classify_line, compile_pattern

DECORATION = re.compile(r"^\s*\*\s?")


@dataclass(frozen=True)
class CodeClassification:
    """Outcome of classifying one comment."""

    is_code: bool
    code_line_count: int
    allowed: bool = False  # Suppressed by an allow pattern


def comment_lines(text: str) -> list[str]:
    """Non-empty comment lines with block decoration removed."""
    lines = (DECORATION.sub("", line).strip() for line in text.split("\n"))
    return [line for line in lines if line]


def count_code_lines(text: str) -> int:
    return sum(1 for line in comment_lines(text) if classify_line(line) == LineClass.CODE)


@dataclass
class CommentedCodeClassifier:
    """Decides whether a comment body is commented-out code.

    Attributes:
        threshold: Minimum number of code lines (compared with >=)
        allow_patterns: Regexes searched in the whole trimmed text;
            a match suppresses the comment before line evaluation
    """

    threshold: int = 1
    allow_patterns: list[re.Pattern[str]] = field(default_factory=list)

    def classify(self, text: str) -> CodeClassification:
        value = text.strip()
        if any(pattern.search(value) for pattern in self.allow_patterns):
            return CodeClassification(is_code=False, code_line_count=0, allowed=True)

        count = count_code_lines(value)
        return CodeClassification(is_code=count >= self.threshold, code_line_count=count)


class CommentedCodeOptions(RuleOptions):
    threshold: int = Field(default=1, ge=1)
    allow_patterns: list[str] = Field(default_factory=list)

    @field_validator("allow_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return [compile_pattern(pattern) for pattern in value]


class CommentedCodeRule(BaseRule):
    """Detect commented-out code that should be removed."""

    Options = CommentedCodeOptions

    messages = {
        "noCommentedCode": (
            "Commented-out code detected. Use version control (git stash, branches) "
            "to save code for later instead of commenting it out."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "no-commented-code"

    @property
    def name(self) -> str:
        return "Commented Code Detection"

    @property
    def category(self) -> str:
        return "tech_debt"

    @property
    def description(self) -> str:
        return (
            "Disallow commented-out code. Commented code clutters the codebase "
            "and can be retrieved from version control if needed."
        )

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: CommentedCodeOptions = context.options
        classifier = CommentedCodeClassifier(
            threshold=options.threshold,
            allow_patterns=[re.compile(p) for p in options.allow_patterns],
        )

        def check_program(_node) -> None:
            for comment in context.comments:
                if classifier.classify(comment.value).is_code:
                    context.report("noCommentedCode", comment)

        return {"program": check_program}
