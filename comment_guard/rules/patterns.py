"""
Ordered pattern tables shared by the comment classifiers.

Each table is a tuple of PatternRule entries evaluated front to back;
the first entry whose predicate matches decides the outcome. Skip
entries always precede code entries, so a line matching both is
skipped.

The obvious-comment template catalog maps a statement category to the
phrasings that merely restate such a statement.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class LineClass(Enum):
    """Outcome of classifying a single comment line."""

    SKIP = "skip"  # Directive, documentation or prose marker; never code
    CODE = "code"
    PROSE = "prose"  # No table entry matched


@dataclass(frozen=True)
class PatternRule:
    """One `(predicate, outcome)` entry of an ordered table."""

    name: str
    pattern: re.Pattern[str]
    outcome: LineClass

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def compile_pattern(value: str | None) -> str | None:
    """Validate a user-supplied regex, raising ValueError when invalid."""
    if value is None:
        return None
    try:
        re.compile(value)
    except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value


def _skip(name: str, regex: str, flags: int = 0) -> PatternRule:
    return PatternRule(name, re.compile(regex, flags), LineClass.SKIP)


def _code(name: str, regex: str) -> PatternRule:
    return PatternRule(name, re.compile(regex), LineClass.CODE)


COMMENTED_CODE_TABLE: tuple[PatternRule, ...] = (
    # Skip entries
    _skip("action-comment", r"^\s*(TODO|FIXME|NOTE|HACK|XXX|BUG)\b", re.IGNORECASE),
    _skip(
        "doc-tag",
        r"^\s*\*?\s*@(param|returns?|type|typedef|example|see|link|description|file|author)",
        re.IGNORECASE,
    ),
    _skip("url", r"https?://"),
    _skip("file-path", r"^\s*[A-Za-z]:\\|^\s*/[A-Za-z]"),
    _skip(
        "license-header",
        r"^\s*\*?\s*(copyright|license|licensed|MIT|Apache|GPL)",
        re.IGNORECASE,
    ),
    _skip("linter-directive", r"^\s*eslint-"),
    _skip("short-prose", r"^[A-Z][a-z]+(\s+[a-z]+){0,10}\.?$"),
    # Code entries
    _code("declaration", r"^\s*(const|let|var)\s+\w+\s*="),
    _code("function-declaration", r"^\s*function\s+\w+\s*\("),
    _code("class-declaration", r"^\s*class\s+\w+"),
    _code("import-export", r"^\s*(import|export)\s+"),
    _code("async-declaration", r"^\s*async\s+(function|const|let)"),
    _code("statement-terminator", r";\s*$"),
    _code("arrow-body", r"=>\s*[{(]"),
    _code("arrow-assignment", r"\w+\s*=\s*\([^)]*\)\s*=>"),
    _code("bare-call", r"^\s*\w+\s*\([^)]*\)\s*;?\s*$"),
    _code("literal-assignment", r"^\s*\w+\s*=\s*[{\[]"),
    _code("method-chain", r"^\s*\.\w+\("),
    _code("return-statement", r"^\s*return\s+"),
    _code("control-flow", r"^\s*(if|else|for|while|switch|try|catch)\s*[\({]"),
    _code("console-call", r"^\s*console\.(log|warn|error|info)\("),
    _code("throw-statement", r"^\s*throw\s+new\s+\w+"),
)


def classify_line(
    line: str, table: Iterable[PatternRule] = COMMENTED_CODE_TABLE
) -> LineClass:
    """Classify a line by the first matching table entry.

    Args:
        line: One comment line with decoration removed
        table: Ordered pattern table

    Returns:
        The matching entry's outcome, or PROSE when none matches
    """
    for entry in table:
        if entry.matches(line):
            return entry.outcome
    return LineClass.PROSE


# Comments matching these are never considered obvious.
OBVIOUS_EXEMPTIONS: tuple[PatternRule, ...] = (
    _skip("doc-tag", r"^\s*\*?\s*@\w+"),
    _skip("action-comment", r"^\s*(TODO|FIXME|NOTE|HACK|XXX|BUG)\b", re.IGNORECASE),
    _skip("url", r"https?://"),
    _skip("linter-directive", r"^\s*eslint"),
    _skip("backtick-code", r"`[^`]+`"),
    _skip("license-header", r"^\s*\*?\s*(copyright|license|licensed)", re.IGNORECASE),
    _skip("file-path", r"^[./\\]"),
)

# Substrings marking a comment that explains "why" rather than "what"
WHY_INDICATORS: tuple[str, ...] = (
    "because",
    "since",
    "due to",
    "workaround",
    "bug",
    "issue",
    "fix for",
    "needed for",
    "required for",
    "necessary",
    "important",
    "note:",
    "caveat",
    "warning",
    "caution",
    "intentional",
    "deliberately",
    "performance",
    "optimization",
    "compatibility",
    "legacy",
    "deprecated",
    "temporary",
    "business",
    "rule",
    "requirement",
)


def is_exempt_from_obvious_check(text: str) -> bool:
    """Whether a comment line is exempt from obvious-comment detection."""
    if len(text) < 3:
        return True
    if classify_line(text, OBVIOUS_EXEMPTIONS) == LineClass.SKIP:
        return True
    lowered = text.lower()
    return any(indicator in lowered for indicator in WHY_INDICATORS)


class StatementCategory(Enum):
    """Kinds of statement an obvious comment may restate."""

    UPDATE = "update"
    RETURN = "return"
    CALL = "call"
    DECLARATION = "declaration"
    ASSIGNMENT = "assignment"
    CONDITIONAL = "conditional"
    FOR_LOOP = "for_loop"
    WHILE_LOOP = "while_loop"
    FUNCTION = "function"
    CLASS = "class"
    SWITCH = "switch"
    TRY = "try"
    THROW = "throw"
    BREAK = "break"
    CONTINUE = "continue"


def _update_templates() -> tuple[str, ...]:
    # Increment and decrement share one catalog entry
    templates: list[str] = []
    for verb in ("increment", "decrement"):
        templates.extend(
            [f"{verb} {{name}}", verb, f"{verb}ing {{name}}", f"{verb}s {{name}}"]
        )
    templates.extend(
        [
            "{name}++",
            "{name}--",
            "add 1 to {name}",
            "subtract 1 from {name}",
            "add one to {name}",
            "subtract one from {name}",
        ]
    )
    return tuple(templates)


# Templates use {name}, {value} and {kind}; a template whose fields are
# not available for a statement is skipped.
OBVIOUS_TEMPLATES: Mapping[StatementCategory, tuple[str, ...]] = {
    StatementCategory.UPDATE: _update_templates(),
    StatementCategory.RETURN: (
        "return",
        "return value",
        "return result",
        "returns",
        "return {name}",
        "return the {name}",
        "returns {name}",
        "return {value}",
    ),
    StatementCategory.CALL: (
        "call {name}",
        "{name}",
        "invoke {name}",
        "run {name}",
        "execute {name}",
        "calling {name}",
        "calls {name}",
    ),
    StatementCategory.DECLARATION: (
        "declare {name}",
        "{kind} {name}",
        "create {name}",
        "define {name}",
        "set {name}",
        "initialize {name}",
        "declaring {name}",
        "creates {name}",
        "variable {name}",
        "set {name} to {value}",
        "{name} equals {value}",
        "{name} is {value}",
        "declare variable",
        "create variable",
        "define variable",
    ),
    StatementCategory.ASSIGNMENT: (
        "set {name}",
        "assign {name}",
        "{name} =",
        "update {name}",
        "assign to {name}",
        "setting {name}",
        "assigns {name}",
        "set {name} to {value}",
        "{name} = {value}",
    ),
    StatementCategory.CONDITIONAL: (
        "if",
        "check if",
        "conditional",
        "check condition",
        "if statement",
        "condition check",
        "checking if",
        "checks if",
    ),
    StatementCategory.FOR_LOOP: (
        "loop",
        "for loop",
        "iterate",
        "iteration",
        "loop through",
        "iterate through",
        "iterate over",
        "looping",
        "loops",
    ),
    StatementCategory.WHILE_LOOP: (
        "while loop",
        "loop while",
        "loop",
        "while",
        "looping",
    ),
    StatementCategory.FUNCTION: (
        "function {name}",
        "define {name}",
        "create function",
        "declare function",
        "{name} function",
    ),
    StatementCategory.CLASS: (
        "class {name}",
        "define {name}",
        "create class",
        "declare class",
        "{name} class",
    ),
    StatementCategory.SWITCH: (
        "switch",
        "switch statement",
        "switch case",
        "check cases",
    ),
    StatementCategory.TRY: (
        "try",
        "try catch",
        "error handling",
        "handle errors",
    ),
    StatementCategory.THROW: (
        "throw",
        "throw error",
        "throw exception",
        "throws",
    ),
    StatementCategory.BREAK: ("break", "break loop", "exit loop"),
    StatementCategory.CONTINUE: ("continue", "continue loop", "skip iteration"),
}


def render_templates(
    category: StatementCategory, fields: Mapping[str, str]
) -> list[str]:
    """Expand a category's templates with the statement's fields.

    Args:
        category: Statement category
        fields: Values for {name}, {value} and {kind}

    Returns:
        Descriptions in catalog order
    """
    descriptions = []
    for template in OBVIOUS_TEMPLATES.get(category, ()):
        try:
            descriptions.append(template.format(**fields))
        except KeyError:
            continue
    return descriptions
