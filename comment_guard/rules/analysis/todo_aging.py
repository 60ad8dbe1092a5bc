"""
TODO aging rule.

Escalates TODO/FIXME (and optionally NOTE) comments by age: a warning
past `maxAgeDays` and a critical report past `criticalAgeDays`. The age
comes from an AgeProvider; the default reads a date written in the
comment's reference, e.g. `TODO (jules, 2025-01-15): ...`.
"""

from datetime import date
from typing import Protocol

from pydantic import Field

from ...analysis.dates import ExtractedDate, extract_date_from_comment, format_age
from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, Visitor


class AgeProvider(Protocol):
    """Supplies the age in days of an action comment."""

    def age_in_days(self, comment: Comment, extracted: ExtractedDate) -> int | None:
        """Age in days, negative for future dates, None when unknown."""
        ...


class CommentDateAgeProvider:
    """Ages comments by the date written in them."""

    def __init__(self, today: date | None = None):
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def age_in_days(self, comment: Comment, extracted: ExtractedDate) -> int | None:
        if extracted.date is None:
            return None
        return (self.today - extracted.date).days


class TodoAgingOptions(RuleOptions):
    """Options for todo-aging-warnings."""

    max_age_days: int = Field(default=30, ge=1)
    critical_age_days: int = Field(default=90, ge=1)
    include_fixme: bool = True
    include_note: bool = False
    warn_on_no_date: bool = False
    ignore_future_dates: bool = True


AGED_MESSAGES = {"TODO": "todoAged", "FIXME": "fixmeAged", "NOTE": "noteAged"}
CRITICAL_MESSAGES = {"TODO": "todoCritical", "FIXME": "fixmeCritical", "NOTE": "noteAged"}
NO_DATE_MESSAGES = {"TODO": "todoNoDate", "FIXME": "fixmeNoDate"}


class TodoAgingRule(BaseRule):
    """Warn about TODO/FIXME comments that have been around too long."""

    Options = TodoAgingOptions

    messages = {
        "todoAged": "TODO is {{age}} old (max: {{maxAge}} days). Reference: {{reference}}",
        "todoCritical": (
            "TODO is critically overdue ({{age}} old, critical: {{criticalAge}} days). "
            "Reference: {{reference}}"
        ),
        "fixmeAged": "FIXME is {{age}} old (max: {{maxAge}} days). Reference: {{reference}}",
        "fixmeCritical": (
            "FIXME is critically overdue ({{age}} old, critical: {{criticalAge}} days). "
            "This bug has been known for too long."
        ),
        "noteAged": "NOTE is {{age}} old (max: {{maxAge}} days). Reference: {{reference}}",
        "todoNoDate": (
            "TODO has no date. Consider using format: TODO (author, YYYY-MM-DD): description"
        ),
        "fixmeNoDate": (
            "FIXME has no date. Consider using format: FIXME (author, YYYY-MM-DD): description"
        ),
    }

    def __init__(self, age_provider: AgeProvider | None = None):
        self.age_provider = age_provider or CommentDateAgeProvider()

    @property
    def rule_id(self) -> str:
        return "todo-aging-warnings"

    @property
    def name(self) -> str:
        return "TODO Aging"

    @property
    def category(self) -> str:
        return "analysis"

    @property
    def description(self) -> str:
        return "Warn about TODO/FIXME comments that are too old"

    def _included(self, keyword: str | None, options: TodoAgingOptions) -> bool:
        if keyword is None:
            return False
        if keyword == "NOTE":
            return options.include_note
        if keyword == "FIXME":
            return options.include_fixme
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: TodoAgingOptions = context.options

        def check_comment(comment: Comment) -> None:
            extracted = extract_date_from_comment(comment.value)
            keyword = extracted.keyword
            if not self._included(keyword, options):
                return

            age = self.age_provider.age_in_days(comment, extracted)
            if age is None:
                if options.warn_on_no_date and keyword in NO_DATE_MESSAGES:
                    context.report(NO_DATE_MESSAGES[keyword], comment)
                return

            if age < 0:
                # Future date
                if options.ignore_future_dates:
                    return
                age = 0

            data = {
                "age": format_age(age),
                "maxAge": options.max_age_days,
                "criticalAge": options.critical_age_days,
                "reference": extracted.reference or "no reference",
            }
            if age >= options.critical_age_days:
                context.report(CRITICAL_MESSAGES[keyword], comment, data=data)
            elif age >= options.max_age_days:
                context.report(AGED_MESSAGES[keyword], comment, data=data)

        def check_program(_node) -> None:
            for comment in context.comments:
                check_comment(comment)

        return {"program": check_program}
