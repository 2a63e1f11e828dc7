"""
Normalization utilities for forum listing data.

Handles:
- Publisher forum dates ("Dec 10, 2025, 8:00:35 PM")
- Partner forum dates ("2025. 12. 10. 오후 8:00", "2025-12-10 20:00", "2025년 12월 10일")
- Title and whitespace cleanup

Dates that match none of the known formats are returned as None; no
default is ever substituted.
"""

import re
from datetime import datetime
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


ENGLISH_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# "Dec 10, 2025, 8:00:35 PM" / "December 10, 2025" / "Dec 10, 2025 8:00 pm"
ENGLISH_DATE = re.compile(
    r"\b([A-Za-z]{3})[a-z]*\.?\s+(\d{1,2}),?\s+(\d{4})"
    r"(?:,?\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?)?"
)

# "2025. 12. 10. 오후 8:00:35" / "2025-12-10 20:00" / "2025/12/10"
NUMERIC_DATE = re.compile(
    r"\b(\d{4})\s*[.\-/]\s*(\d{1,2})\s*[.\-/]\s*(\d{1,2})\.?"
    r"(?:\s*(오전|오후|AM|PM|am|pm)?\s*(\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)

# "2025년 12월 10일 오후 8:00"
KOREAN_DATE = re.compile(
    r"(\d{4})년\s*(\d{1,2})월\s*(\d{1,2})일"
    r"(?:\s*(오전|오후)?\s*(\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)

PM_MARKERS = {"pm", "오후"}
AM_MARKERS = {"am", "오전"}


def clean_date_text(text: Optional[str]) -> str:
    """
    Strip listing decoration around a date string.

    The publisher forum renders "by Author, Dec 10, 2025"; the date cell
    text then starts with a separator comma.
    """
    if not text:
        return ""
    text = " ".join(text.split())
    return re.sub(r"^,\s*", "", text)


def _to_24h(hour: int, meridiem: Optional[str]) -> int:
    if not meridiem:
        return hour
    marker = meridiem.lower()
    if marker in PM_MARKERS and hour < 12:
        return hour + 12
    if marker in AM_MARKERS and hour == 12:
        return 0
    return hour


def _build(
    text: str,
    year: str,
    month: int,
    day: str,
    hour: Optional[str],
    minute: Optional[str],
    second: Optional[str],
    meridiem: Optional[str],
) -> Optional[datetime]:
    try:
        return datetime(
            int(year),
            month,
            int(day),
            _to_24h(int(hour), meridiem) if hour else 0,
            int(minute) if minute else 0,
            int(second) if second else 0,
        )
    except ValueError as e:
        logger.warning("invalid_date", text=text, error=str(e))
        return None


def parse_post_date(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a forum post date into a naive datetime.

    Supported formats:
    - "Dec 10, 2025, 8:00:35 PM" (publisher forum)
    - "2025. 12. 10. 오후 8:00:35" (partner forum)
    - "2025-12-10 20:00", "2025/12/10"
    - "2025년 12월 10일"

    Args:
        text: Date cell text, with or without a leading ", "

    Returns:
        datetime or None if the format is not recognised
    """
    text = clean_date_text(text)
    if not text:
        return None

    match = ENGLISH_DATE.search(text)
    if match:
        month_name, day, year, hour, minute, second, meridiem = match.groups()
        month = ENGLISH_MONTHS.get(month_name.lower())
        if month is not None:
            return _build(text, year, month, day, hour, minute, second, meridiem)

    match = NUMERIC_DATE.search(text)
    if match:
        year, month, day, meridiem, hour, minute, second = match.groups()
        return _build(text, year, int(month), day, hour, minute, second, meridiem)

    match = KOREAN_DATE.search(text)
    if match:
        year, month, day, meridiem, hour, minute, second = match.groups()
        return _build(text, year, int(month), day, hour, minute, second, meridiem)

    logger.debug("unrecognized_date", text=text)
    return None


def normalize_title(title: Optional[str]) -> str:
    """
    Normalize post title.

    - Collapse whitespace
    - Strip surrounding quotes
    """
    if not title:
        return ""

    title = " ".join(title.split())
    title = title.strip("\"'")

    return title


def extract_thread_id(link: str) -> str:
    """Numeric thread id from a view-thread link, else the link itself."""
    match = re.search(r"view-thread/(\d+)", link)
    return match.group(1) if match else link
