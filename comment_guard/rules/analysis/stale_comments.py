"""
Stale comment detection rule.

Reports backtick-quoted identifiers in comments (`like this`) that are
not declared or imported anywhere in the file.
"""

import re

from pydantic import Field, field_validator

from ...analysis.functions import collect_declared_names
from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, Visitor
from ..patterns import compile_pattern

BACKTICK_REF = re.compile(r"`([A-Za-z_$][A-Za-z0-9_$]*)`")

# Prose words frequently put in backticks; compared lowercased
COMMON_WORDS = frozenset(
    """
    the this that will does should must can may might would could has have had
    been being are were was for with from into when where what which while about
    above below between before after during through also only just more most
    other some such each every both all any few many much own same too very well
    then than now here there not but and yet nor how why use used using see get
    set new old add remove delete update check test call return value data type
    name code file line case note todo fixme bug fix issue error warning info log
    debug api url html css dom http json xml sql
    """.split()
)


def extract_backtick_refs(text: str) -> list[str]:
    """Unique backtick-quoted identifiers, in order of appearance."""
    refs: list[str] = []
    for match in BACKTICK_REF.finditer(text):
        if match[1] not in refs:
            refs.append(match[1])
    return refs


class StaleCommentOptions(RuleOptions):
    min_identifier_length: int = Field(default=3, ge=1)
    ignore_patterns: list[str] = Field(default_factory=list)

    @field_validator("ignore_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return [compile_pattern(pattern) for pattern in value]


class StaleCommentRule(BaseRule):
    """Detect comments that reference identifiers not in the file."""

    Options = StaleCommentOptions

    messages = {
        "staleRef": "Comment references '{{identifier}}' which does not exist in this file.",
    }

    @property
    def rule_id(self) -> str:
        return "stale-comment-detection"

    @property
    def name(self) -> str:
        return "Stale Comment Detection"

    @property
    def category(self) -> str:
        return "analysis"

    @property
    def description(self) -> str:
        return "Detect comments that reference identifiers not in the file"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: StaleCommentOptions = context.options
        ignore = [re.compile(p) for p in options.ignore_patterns]

        def ignored(identifier: str) -> bool:
            if len(identifier) < options.min_identifier_length:
                return True
            if identifier.lower() in COMMON_WORDS:
                return True
            return any(pattern.search(identifier) for pattern in ignore)

        def check_comment(comment: Comment, declared: set[str]) -> None:
            for identifier in extract_backtick_refs(comment.value):
                if ignored(identifier) or identifier in declared:
                    continue
                context.report("staleRef", comment, data={"identifier": identifier})

        def check_program_exit(_node) -> None:
            declared = collect_declared_names(context.source)
            for comment in context.comments:
                check_comment(comment, declared)

        return {"program:exit": check_program_exit}
