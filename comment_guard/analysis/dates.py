"""Date extraction from TODO/FIXME/NOTE comments and age formatting."""

import datetime
import re
from dataclasses import dataclass

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Ordered: first pattern producing a real calendar date wins
DATE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("iso", re.compile(r"(\d{4})-(\d{2})-(\d{2})")),
    ("us", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")),
    (
        "written",
        re.compile(
            r"(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
            r"|Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
            r"\s+(\d{1,2})(?:st|nd|rd|th)?,?\s*(\d{4})",
            re.IGNORECASE,
        ),
    ),
    ("european", re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{4})")),
]

STRUCTURED_PATTERN = re.compile(r"\b(TODO|FIXME|NOTE)\s*\(([^)]+)\)\s*:\s*(.*)", re.IGNORECASE)
KEYWORD_PATTERN = re.compile(r"\b(TODO|FIXME|NOTE)\b", re.IGNORECASE)


@dataclass(frozen=True)
class ExtractedDate:
    """What an action comment says about itself."""

    keyword: str | None = None
    reference: str | None = None
    description: str | None = None
    date: datetime.date | None = None


def _to_date(kind: str, match: re.Match[str]) -> datetime.date | None:
    if kind == "iso":
        year, month, day = int(match[1]), int(match[2]), int(match[3])
    elif kind == "us":
        year, month, day = int(match[3]), int(match[1]), int(match[2])
    elif kind == "written":
        year, month, day = int(match[3]), MONTHS[match[1][:3].lower()], int(match[2])
    else:
        year, month, day = int(match[3]), int(match[2]), int(match[1])
    try:
        return datetime.date(year, month, day)
    except ValueError:
        return None


def parse_date(text: str | None) -> datetime.date | None:
    """Find the first valid date in a string, or None."""
    if not text:
        return None
    for kind, pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            parsed = _to_date(kind, match)
            if parsed is not None:
                return parsed
    return None


def extract_date_from_comment(text: str) -> ExtractedDate:
    """Extract keyword, reference and date from an action comment.

    A structured comment (`TODO (ref): desc`) only takes its date from the
    reference. Otherwise any date in the text is used.
    """
    structured = STRUCTURED_PATTERN.search(text)
    if structured:
        reference = structured[2].strip()
        return ExtractedDate(
            keyword=structured[1].upper(),
            reference=reference,
            description=structured[3].strip(),
            date=parse_date(reference),
        )

    keyword = KEYWORD_PATTERN.search(text)
    return ExtractedDate(
        keyword=keyword[1].upper() if keyword else None,
        date=parse_date(text),
    )


def format_age(days: int) -> str:
    """Human readable age: today, 1 day, N days, weeks, months, years."""
    if days < 0:
        return "unknown"
    if days == 0:
        return "today"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 30:
        weeks = days // 7
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    if days < 365:
        months = days // 30
        return "1 month" if months == 1 else f"{months} months"
    years = days // 365
    return "1 year" if years == 1 else f"{years} years"
