"""
Banned words rule.

Flags vague, temporary or non-inclusive wording in comments. A built-in
list can be extended or replaced through `bannedWords`. Matches inside
URLs, fenced code or inline code spans are ignored by default. One
finding is reported per comment; its fix, when the word has a
replacement, rewrites every occurrence of that word.
"""

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor
from ..patterns import compile_pattern

DEFAULT_REASON = "This word/phrase is not recommended."

URL_SPAN = re.compile(r"https?://[^\s)>\]]+", re.IGNORECASE)
CODE_BLOCK_SPAN = re.compile(r"```[\s\S]*?```")
INLINE_CODE_SPAN = re.compile(r"(?<!`)`(?!``)[^`]+`(?!`)")


class BannedWord(BaseModel):
    """A word or phrase, what to use instead and why."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    word: str = Field(min_length=1)
    replacement: str | None = None
    reason: str | None = None


DEFAULT_BANNED_WORDS = [
    BannedWord(word=word, replacement=replacement, reason=reason)
    for word, replacement, reason in (
        ("magic number", "named constant", "Use named constants instead"),
        ("magic value", "named constant", "Use named constants instead"),
        ("fix later", "TODO (TICKET-XXX):", "Use proper TODO format"),
        ("fix this", "FIXME (TICKET-XXX):", "Use proper FIXME format"),
        ("hack", "workaround", "Use 'workaround' with explanation"),
        ("kludge", "workaround", "Use 'workaround' with explanation"),
        ("xxx", "TODO", "Use standard TODO format"),
        ("obvious", None, "If it's obvious, the comment may be unnecessary"),
        ("self-explanatory", None, "If it's self-explanatory, the comment may be unnecessary"),
        ("clearly", None, "Avoid assuming clarity; explain instead"),
        ("whitelist", "allowlist", "Use inclusive language"),
        ("blacklist", "blocklist", "Use inclusive language"),
        ("master", "main/primary", "Use inclusive language"),
        ("slave", "secondary/replica", "Use inclusive language"),
    )
]


class BannedWordsOptions(RuleOptions):
    """Options for ban-specific-words."""

    banned_words: list[str | BannedWord] = Field(default_factory=list)
    case_sensitive: bool = False
    include_defaults: bool = True
    whole_word: bool = True
    ignore_urls: bool = True
    ignore_code_blocks: bool = True
    ignore_inline_code: bool = True
    ignore_regex: str | None = None

    @field_validator("ignore_regex")
    @classmethod
    def _check_ignore_regex(cls, value: str | None) -> str | None:
        return compile_pattern(value)

    def word_list(self) -> list[BannedWord]:
        words = list(DEFAULT_BANNED_WORDS) if self.include_defaults else []
        for item in self.banned_words:
            words.append(BannedWord(word=item) if isinstance(item, str) else item)
        return words


@dataclass(frozen=True)
class CompiledWord:
    entry: BannedWord
    pattern: re.Pattern[str]


def word_pattern(word: str, whole_word: bool, case_sensitive: bool) -> re.Pattern[str]:
    """Match a banned word; whole words exclude hyphenated compounds."""
    body = re.escape(word)
    if whole_word:
        # TICKET-XXX and BUG-XXX are fixer placeholders, not the word "xxx"
        body = rf"(?<![\w-]){body}(?![\w-])"
    return re.compile(body, 0 if case_sensitive else re.IGNORECASE)


def ignored_spans(text: str, options: BannedWordsOptions) -> list[tuple[int, int]]:
    """Spans of the text in which matches do not count."""
    patterns = []
    if options.ignore_urls:
        patterns.append(URL_SPAN)
    if options.ignore_code_blocks:
        patterns.append(CODE_BLOCK_SPAN)
    if options.ignore_inline_code:
        patterns.append(INLINE_CODE_SPAN)
    if options.ignore_regex:
        patterns.append(re.compile(options.ignore_regex, re.IGNORECASE))
    return [m.span() for pattern in patterns for m in pattern.finditer(text)]


def replacement_fix(comment: Comment, compiled: CompiledWord) -> TextEdit:
    value = compiled.pattern.sub(lambda _m: compiled.entry.replacement, comment.value)
    text = f"/*{value}*/" if comment.is_block else f"//{value}"
    return TextEdit(comment.start, comment.end, text)


class BanSpecificWordsRule(BaseRule):
    """Disallow specific words and phrases in comments."""

    Options = BannedWordsOptions

    messages = {
        "bannedWord": "The word '{{word}}' is banned in comments. {{reason}}",
        "bannedWordWithReplacement": (
            "The word '{{word}}' is banned. Consider using '{{replacement}}' instead. {{reason}}"
        ),
    }

    @property
    def rule_id(self) -> str:
        return "ban-specific-words"

    @property
    def name(self) -> str:
        return "Ban Specific Words"

    @property
    def category(self) -> str:
        return "tech_debt"

    @property
    def description(self) -> str:
        return "Disallow specific words and phrases in comments"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: BannedWordsOptions = context.options
        words = [
            CompiledWord(
                entry, word_pattern(entry.word, options.whole_word, options.case_sensitive)
            )
            for entry in options.word_list()
        ]

        def first_banned(text: str) -> CompiledWord | None:
            spans = ignored_spans(text, options)
            for compiled in words:
                for match in compiled.pattern.finditer(text):
                    if not any(start <= match.start() < end for start, end in spans):
                        return compiled
            return None

        def check_program(_node) -> None:
            for comment in context.comments:
                found = first_banned(comment.value)
                if found is None:
                    continue
                entry = found.entry
                data = {
                    "word": entry.word,
                    "replacement": entry.replacement or "",
                    "reason": entry.reason or DEFAULT_REASON,
                }
                if entry.replacement:
                    context.report(
                        "bannedWordWithReplacement",
                        comment,
                        data=data,
                        fix=replacement_fix(comment, found),
                    )
                else:
                    context.report("bannedWord", comment, data=data)

        return {"program": check_program}
