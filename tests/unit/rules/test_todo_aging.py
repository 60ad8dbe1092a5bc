"""Unit tests for the todo-aging-warnings rule."""

from datetime import date

import pytest

from comment_guard.analysis.dates import ExtractedDate
from comment_guard.rules.analysis.todo_aging import CommentDateAgeProvider, TodoAgingRule

TODAY = date(2025, 6, 1)


@pytest.fixture
def rule() -> TodoAgingRule:
    return TodoAgingRule(age_provider=CommentDateAgeProvider(today=TODAY))


def message_ids(result):
    return [v.message_id for v in result.violations]


class TestCommentDateAgeProvider:
    def test_age_from_date(self):
        provider = CommentDateAgeProvider(today=TODAY)
        extracted = ExtractedDate(keyword="TODO", date=date(2025, 5, 1))
        assert provider.age_in_days(None, extracted) == 31

    def test_unknown_without_date(self):
        provider = CommentDateAgeProvider(today=TODAY)
        assert provider.age_in_days(None, ExtractedDate(keyword="TODO")) is None

    def test_defaults_to_today(self):
        assert CommentDateAgeProvider().today == date.today()


class TestTodoAgingRule:
    """Tests for todo-aging-warnings through the engine."""

    def test_aged_todo(self, lint, rule):
        (violation,) = lint(rule, "// TODO (alice, 2025-05-01): tidy\n").violations
        assert violation.message == (
            "TODO is 1 month old (max: 30 days). Reference: alice, 2025-05-01"
        )

    def test_critical_todo(self, lint, rule):
        (violation,) = lint(rule, "// TODO (alice, 2025-01-01): tidy\n").violations
        assert violation.message_id == "todoCritical"
        assert violation.data["age"] == "5 months"
        assert violation.data["criticalAge"] == "90"

    def test_fresh_todo(self, lint, rule):
        assert lint(rule, "// TODO (2025-05-20): soon\n").violations == []

    def test_fixme_messages(self, lint, rule):
        text = "// FIXME (2025-05-01): a\n// FIXME (2024-01-01): b\n"
        assert message_ids(lint(rule, text)) == ["fixmeAged", "fixmeCritical"]

    def test_fixme_excluded(self, lint, rule):
        text = "// FIXME (2024-01-01): b\n"
        assert lint(rule, text, {"includeFixme": False}).violations == []

    def test_note_opt_in(self, lint, rule):
        text = "// NOTE (2024-01-01): context\n"
        assert lint(rule, text).violations == []
        assert message_ids(lint(rule, text, {"includeNote": True})) == ["noteAged"]

    def test_no_date_warning(self, lint, rule):
        text = "// TODO (alice): x\n// FIXME: y\n// NOTE (bob): z\n"
        assert lint(rule, text).violations == []
        result = lint(rule, text, {"warnOnNoDate": True, "includeNote": True})
        assert message_ids(result) == ["todoNoDate", "fixmeNoDate"]

    def test_future_dates(self, lint, rule):
        text = "// TODO (2026-01-01): later\n"
        assert lint(rule, text).violations == []
        options = {"ignoreFutureDates": False, "maxAgeDays": 1}
        assert lint(rule, text, options).violations == []

    def test_date_in_unstructured_comment(self, lint, rule):
        result = lint(rule, "// todo since April 20, 2025 clean up\n")
        assert message_ids(result) == ["todoAged"]
        assert result.violations[0].data["reference"] == "no reference"

    def test_thresholds(self, lint, rule):
        text = "// TODO (2025-05-25): x\n"
        result = lint(rule, text, {"maxAgeDays": 7, "criticalAgeDays": 30})
        assert message_ids(result) == ["todoAged"]
        assert result.violations[0].data["age"] == "1 week"

    def test_custom_age_provider(self, lint):
        class FixedAge:
            def age_in_days(self, comment, extracted):
                return 400

        result = lint(TodoAgingRule(age_provider=FixedAge()), "// TODO: whatever\n")
        assert message_ids(result) == ["todoCritical"]
        assert result.violations[0].data["age"] == "1 year"
