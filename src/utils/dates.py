"""Date range parsing for ledger filters and reports."""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional

from .exceptions import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Inclusive end of day, millisecond resolution.
END_OF_DAY = time(23, 59, 59, 999000)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the store keeps naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class DateRange:
    """Inclusive datetime range built from two calendar dates."""

    start: datetime
    end: datetime

    @classmethod
    def for_day(cls, day: date) -> "DateRange":
        return cls(
            start=datetime.combine(day, time.min),
            end=datetime.combine(day, END_OF_DAY)
        )

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat()
        }


def parse_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` string.

    Raises:
        ValidationError: If the value is not a valid calendar date
    """
    if not DATE_PATTERN.match(value):
        raise ValidationError(
            "Invalid date format. Please use YYYY-MM-DD format",
            details={"example": "?startDate=2025-05-01&endDate=2025-05-31"}
        )
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def parse_date_range(start_date: Optional[str], end_date: Optional[str]) -> DateRange:
    """
    Build an inclusive range from query parameters.

    The start is midnight of ``start_date``; the end is normalized to
    23:59:59.999 of ``end_date``.

    Raises:
        ValidationError: If a bound is missing, malformed or the range is reversed
    """
    if not start_date or not end_date:
        raise ValidationError(
            "Please provide start and end dates",
            details={"received": {"startDate": start_date, "endDate": end_date}}
        )

    start = parse_date(start_date)
    end = parse_date(end_date)

    if start > end:
        raise ValidationError(
            "Invalid date range: startDate must be before or equal to endDate",
            details={"startDate": start_date, "endDate": end_date}
        )

    return DateRange(
        start=datetime.combine(start, time.min),
        end=datetime.combine(end, END_OF_DAY)
    )


def today_range() -> DateRange:
    """Range covering the current UTC calendar day."""
    return DateRange.for_day(utcnow().date())


def optional_date_range(start_date: Optional[str], end_date: Optional[str]) -> Optional[DateRange]:
    """Range filter for list endpoints: applied only when both bounds are given."""
    if start_date and end_date:
        return parse_date_range(start_date, end_date)
    return None


def day_key(value: datetime) -> str:
    """Calendar date key (``YYYY-MM-DD``) used for daily grouping."""
    return value.date().isoformat()


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None

