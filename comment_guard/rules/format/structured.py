"""
Structured-comment grammar shared by the TODO/FIXME/NOTE/A11Y rules.

A structured comment reads `PREFIX (REFERENCE): description`. A comment
is subject to a grammar only when its trimmed text starts with one of
the grammar's prefixes; such a comment that does not match the full
pattern gets a fix re-wrapping its text in the expected shape.
"""

import re
from abc import abstractmethod
from dataclasses import dataclass

from pydantic import field_validator

from ...analysis.source import Comment, SourceFile
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor
from ..patterns import compile_pattern

DEFAULT_DESCRIPTION = "Add description here"

BLOCK_DECORATION = re.compile(r"^\s*\*+\s?")


@dataclass(frozen=True)
class FormatMatch:
    """Result of validating a comment against a grammar."""

    matches: bool
    reference: str | None = None


@dataclass(frozen=True)
class CommentGrammar:
    """Prefix detection, validation and fix construction for one comment style.

    Attributes:
        prefixes: Accepted prefixes, compared case-insensitively
        pattern: Full grammar; group 1 captures the reference
        placeholder: Reference inserted by the fix
    """

    prefixes: tuple[str, ...]
    pattern: re.Pattern[str]
    placeholder: str
    default_description: str = DEFAULT_DESCRIPTION

    @classmethod
    def build(
        cls,
        prefixes: tuple[str, ...],
        pattern: str,
        placeholder: str,
    ) -> "CommentGrammar":
        return cls(prefixes, re.compile(pattern, re.IGNORECASE), placeholder)

    def detect(self, text: str) -> str | None:
        """Return the prefix the text starts with, if any."""
        lowered = text.lower()
        for prefix in self.prefixes:
            if lowered.startswith(prefix.lower()):
                return prefix
        return None

    def validate(self, text: str) -> FormatMatch:
        match = self.pattern.search(text)
        if match is None:
            return FormatMatch(matches=False)
        reference = match.group(1) if match.re.groups else None
        return FormatMatch(matches=True, reference=reference)

    def fixed_text(self, text: str, prefix: str) -> str:
        """The comment body rewritten to the grammar's shape."""
        extract = re.compile(rf"^{re.escape(prefix)}\s*:?\s*(.*)$", re.IGNORECASE | re.DOTALL)
        match = extract.match(text)
        description = match.group(1).strip() if match else ""
        return f"{prefix} ({self.placeholder}): {description or self.default_description}"

    def build_fix(self, comment: Comment, source: SourceFile, prefix: str) -> TextEdit:
        """Replace the whole comment with its well-formed version.

        The block form is used for block comments and for comments sitting
        directly inside a JSX `{ }` expression container.
        """
        body = self.fixed_text(flatten_comment_text(comment.value), prefix)
        if comment.is_block or is_in_expression_container(comment, source):
            replacement = f"/* {body} */"
        else:
            replacement = f"// {body}"
        return TextEdit(comment.start, comment.end, replacement)


def flatten_comment_text(value: str) -> str:
    """Join a comment body onto one line, dropping ` * ` continuation decoration."""
    first, *rest = value.strip().split("\n")
    parts = [first.strip()]
    parts.extend(BLOCK_DECORATION.sub("", line).strip() for line in rest)
    return " ".join(part for part in parts if part)


def is_in_expression_container(comment: Comment, source: SourceFile) -> bool:
    """Whether the comment is bounded by `{` and `}` tokens."""
    before = source.get_token_before(comment)
    after = source.get_token_after(comment)
    return (
        before is not None
        and before.text == "{"
        and after is not None
        and after.text == "}"
    )


class FormatOptions(RuleOptions):
    """Options shared by the structured-comment format rules."""

    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str | None) -> str | None:
        return compile_pattern(value)


class StructuredCommentRule(BaseRule):
    """Base for rules that validate one structured-comment grammar."""

    Options = FormatOptions

    # Subclasses define these
    message_id: str = ""
    default_pattern: str = ""
    placeholder: str = ""

    @property
    def category(self) -> str:
        return "format"

    @property
    def fixable(self) -> bool:
        return True

    @property
    @abstractmethod
    def prefixes(self) -> tuple[str, ...]:
        """Prefixes that put a comment under this rule."""

    def grammar(self, options: FormatOptions) -> CommentGrammar:
        return CommentGrammar.build(
            self.prefixes, options.pattern or self.default_pattern, self.placeholder
        )

    def check_comment(
        self,
        context: RuleContext,
        grammar: CommentGrammar,
        comment: Comment,
        text: str,
        prefix: str,
    ) -> None:
        """Report a comment that starts with a prefix but breaks the grammar."""
        if grammar.validate(text).matches:
            return
        context.report(
            self.message_id,
            comment,
            fix=grammar.build_fix(comment, context.source, prefix),
        )

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        grammar = self.grammar(context.options)

        def check_program(_node) -> None:
            for comment in context.comments:
                text = comment.value.strip()
                prefix = grammar.detect(text)
                if prefix is not None:
                    self.check_comment(context, grammar, comment, text, prefix)

        return {"program": check_program}
