"""Unit tests for comment_guard.analysis.dates module."""

from datetime import date
from typing import get_type_hints

import pytest

from comment_guard.analysis.dates import (
    ExtractedDate,
    extract_date_from_comment,
    format_age,
    parse_date,
)


class TestParseDate:
    """Tests for date recognition."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2025-01-15", date(2025, 1, 15)),
            ("due 3/7/2024 latest", date(2024, 3, 7)),
            ("January 5th, 2024", date(2024, 1, 5)),
            ("Sep 30 2023", date(2023, 9, 30)),
            ("31.12.2022", date(2022, 12, 31)),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_date(text) == expected

    def test_invalid_calendar_date(self):
        assert parse_date("2025-02-30") is None

    def test_no_date(self):
        assert parse_date("someday") is None
        assert parse_date(None) is None
        assert parse_date("") is None


class TestExtractDateFromComment:
    """Tests for reading keyword, reference and date from comments."""

    def test_structured_comment(self):
        extracted = extract_date_from_comment(" TODO (alice, 2025-01-15): tidy up")
        assert extracted.keyword == "TODO"
        assert extracted.reference == "alice, 2025-01-15"
        assert extracted.description == "tidy up"
        assert extracted.date == date(2025, 1, 15)

    def test_structured_comment_ignores_date_in_description(self):
        extracted = extract_date_from_comment("FIXME (BUG-1): broken since 2024-06-01")
        assert extracted.keyword == "FIXME"
        assert extracted.date is None

    def test_unstructured_comment_uses_any_date(self):
        extracted = extract_date_from_comment("todo 2024-06-01 clean this")
        assert extracted.keyword == "TODO"
        assert extracted.reference is None
        assert extracted.date == date(2024, 6, 1)

    def test_no_keyword(self):
        extracted = extract_date_from_comment("released 2024-06-01")
        assert extracted.keyword is None
        assert extracted.date == date(2024, 6, 1)


class TestFormatAge:
    @pytest.mark.parametrize(
        "days,expected",
        [
            (0, "today"),
            (1, "1 day"),
            (6, "6 days"),
            (7, "1 week"),
            (20, "2 weeks"),
            (31, "1 month"),
            (151, "5 months"),
            (365, "1 year"),
            (800, "2 years"),
        ],
    )
    def test_format(self, days, expected):
        assert format_age(days) == expected


class TestExtractedDate:
    def test_date_field_type(self):
        assert get_type_hints(ExtractedDate)["date"] == date | None

    def test_defaults(self):
        extracted = ExtractedDate()
        assert extracted.keyword is None
        assert extracted.date is None
