"""
Base classes and types for the comment rule engine.

This module provides the foundational abstractions for writing
comment rules: severities, violations and their text-edit fixes,
rule metadata, the per-file rule context and the BaseRule protocol
that registers visitors keyed by syntax node type.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from tree_sitter import Node

from ..analysis.source import Comment, SourceFile, SourceRange

if TYPE_CHECKING:
    from .config import RuleSetting


class Severity(Enum):
    """Severity levels for rule settings and violations."""

    OFF = "off"  # Rule does not run
    WARN = "warn"  # Reported, does not fail the run
    ERROR = "error"  # Reported, fails the run

    def __lt__(self, other: "Severity") -> bool:
        order = [Severity.OFF, Severity.WARN, Severity.ERROR]
        return order.index(self) < order.index(other)

    def __le__(self, other: "Severity") -> bool:
        return self == other or self < other

    def __gt__(self, other: "Severity") -> bool:
        return not self <= other

    def __ge__(self, other: "Severity") -> bool:
        return not self < other

    @classmethod
    def parse(cls, value: "str | int | Severity") -> "Severity":
        """Parse `off|warn|error`, `0|1|2` or a Severity.

        Raises:
            ValueError: If the value is not a known severity
        """
        if isinstance(value, Severity):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, int):
            numeric = {0: cls.OFF, 1: cls.WARN, 2: cls.ERROR}
            if value in numeric:
                return numeric[value]
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "warning":
                return cls.WARN
            return cls(normalized)
        raise ValueError(f"Invalid severity: {value!r}")


@dataclass(frozen=True)
class TextEdit:
    """Replace the characters in [range_start, range_end) with new text."""

    range_start: int
    range_end: int
    replacement_text: str

    def apply(self, text: str) -> str:
        """Apply this single edit to a string."""
        return text[: self.range_start] + self.replacement_text + text[self.range_end :]

    def to_dict(self) -> dict[str, Any]:
        """Edit as {"range": [start, end], "text": ...}."""
        return {
            "range": [self.range_start, self.range_end],
            "text": self.replacement_text,
        }


@dataclass
class Violation:
    """A single reported problem."""

    rule_id: str
    message_id: str
    message: str
    loc: SourceRange
    data: dict[str, str] = field(default_factory=dict)
    fix: TextEdit | None = None
    severity: Severity = Severity.WARN
    file_path: str | None = None

    @property
    def line(self) -> int:
        return self.loc.start_line

    @property
    def column(self) -> int:
        return self.loc.start_column

    def to_dict(self) -> dict[str, Any]:
        """camelCase form emitted in JSON lint output."""
        result: dict[str, Any] = {
            "ruleId": self.rule_id,
            "messageId": self.message_id,
            "message": self.message,
            "severity": self.severity.value,
            "data": self.data,
            **self.loc.to_dict(),
        }
        if self.file_path:
            result["filePath"] = self.file_path
        if self.fix:
            result["fix"] = self.fix.to_dict()
        return result


class RuleConfigurationError(Exception):
    """Raised from BaseRule.create when options cannot be used.

    The engine reports it as a single file-level violation using the
    given message id and data.
    """

    def __init__(self, message_id: str, data: dict[str, str] | None = None):
        self.message_id = message_id
        self.data = data or {}
        super().__init__(f"{message_id}: {self.data}")


class RuleOptions(BaseModel):
    """Base for rule option models. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )


@dataclass(frozen=True)
class RuleMeta:
    """Rule metadata exposed to hosts."""

    description: str
    messages: Mapping[str, str]
    fixable: bool = False
    schema: dict[str, Any] = field(default_factory=dict)
    rule_type: str = "suggestion"


INVALID_OPTIONS_MESSAGE = "Invalid options for rule '{{rule}}': {{errors}}"
PLACEHOLDER = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")


def render_message(template: str, data: Mapping[str, Any]) -> str:
    """Interpolate `{{name}}` placeholders; unknown names are left as is."""

    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in data:
            return str(data[key])
        return match.group(0)

    return PLACEHOLDER.sub(replace, template)


class RuleContext:
    """Per-file, per-rule context handed to BaseRule.create."""

    def __init__(
        self,
        rule: "BaseRule",
        source: SourceFile,
        options: RuleOptions | None = None,
        severity: Severity = Severity.WARN,
    ):
        self.rule = rule
        self.source = source
        self.options = options
        self.severity = severity
        self.violations: list[Violation] = []

    @property
    def comments(self) -> list[Comment]:
        return self.source.get_all_comments()

    @property
    def file_path(self) -> str | None:
        return str(self.source.file_path) if self.source.file_path else None

    def _resolve_location(self, loc: "SourceRange | Comment | Node | None") -> SourceRange:
        if loc is None:
            return self.source.program_location()
        if isinstance(loc, SourceRange):
            return loc
        if isinstance(loc, Comment):
            return loc.loc
        return self.source.node_location(loc)

    def report(
        self,
        message_id: str,
        loc: "SourceRange | Comment | Node | None" = None,
        data: Mapping[str, Any] | None = None,
        fix: TextEdit | None = None,
    ) -> Violation:
        """Record a violation for this rule.

        Args:
            message_id: Key into the rule's message templates
            loc: Comment, syntax node or range; None for file level
            data: Values interpolated into the message template
            fix: Optional autofix edit

        Returns:
            The recorded Violation
        """
        data = {key: str(value) for key, value in (data or {}).items()}
        violation = Violation(
            rule_id=self.rule.rule_id,
            message_id=message_id,
            message=self.rule.render_message(message_id, data),
            loc=self._resolve_location(loc),
            data=data,
            fix=fix,
            severity=self.severity,
            file_path=self.file_path,
        )
        self.violations.append(violation)
        return violation


Visitor = Callable[[Node], Any]


class BaseRule(ABC):
    """Abstract base class for all comment rules.

    A rule declares its message templates and an options model, and
    returns from `create` a mapping of syntax node type (plus
    "program" and "program:exit") to visitor callbacks.
    """

    # messageId -> template with {{placeholder}} interpolation
    messages: dict[str, str] = {}

    Options: type[RuleOptions] = RuleOptions

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique kebab-case rule identifier (e.g., 'no-commented-code')."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name shown by `comment-guard rules`."""

    @property
    @abstractmethod
    def category(self) -> str:
        """Rule category: format, tech_debt, documentation, analysis, accessibility."""

    @property
    def description(self) -> str:
        """One-line summary of what the rule reports."""
        return f"Rule {self.rule_id}: {self.name}"

    @property
    def fixable(self) -> bool:
        """Whether violations from this rule may carry autofixes."""
        return False

    @property
    def rule_type(self) -> str:
        return "suggestion"

    @property
    def supported_languages(self) -> list[str] | None:
        """Grammars this rule supports. None = all languages."""
        return None

    @property
    def meta(self) -> RuleMeta:
        """Description, message catalogue, fixability and options schema."""
        return RuleMeta(
            description=self.description,
            messages=dict(self.messages),
            fixable=self.fixable,
            schema=self.Options.model_json_schema(by_alias=True),
            rule_type=self.rule_type,
        )

    def parse_options(self, raw: Mapping[str, Any] | None) -> RuleOptions:
        """Validate raw options into this rule's Options model.

        Raises:
            pydantic.ValidationError: If the options do not validate
        """
        return self.Options.model_validate(dict(raw or {}))

    def render_message(self, message_id: str, data: Mapping[str, Any]) -> str:
        if message_id in self.messages:
            return render_message(self.messages[message_id], data)
        if message_id == "invalidOptions":
            return render_message(INVALID_OPTIONS_MESSAGE, data)
        return message_id

    def get_severity(self, setting: "RuleSetting | None") -> Severity:
        """Severity from a rule setting, defaulting to WARN."""
        if setting is not None:
            return setting.severity
        return Severity.WARN

    @abstractmethod
    def create(self, context: RuleContext) -> dict[str, Visitor]:
        """Return visitors keyed by node type.

        Args:
            context: RuleContext for the file being linted

        Returns:
            Mapping of node type (or "program" / "program:exit") to callback
        """
