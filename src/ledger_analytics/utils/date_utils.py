"""Date parsing and calendar-month helpers."""

import calendar
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

# Date format patterns accepted from the store.
#
# Slash-separated dates are read as year-first (2024/01/05) when the year
# leads, otherwise as US format (01/05/2024). ISO timestamps keep only their
# date part.
DATE_PATTERNS = [
    (r"^(\d{4})-(\d{1,2})-(\d{1,2})$", "%Y-%m-%d"),
    (r"^(\d{4})/(\d{1,2})/(\d{1,2})$", "%Y/%m/%d"),
    (r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$", "%Y.%m.%d"),
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})$", "%m/%d/%Y"),
    (r"^(\d{8})$", "%Y%m%d"),
]

COMPILED_PATTERNS = [(re.compile(pattern), fmt) for pattern, fmt in DATE_PATTERNS]

# ISO timestamp such as 2024-01-05T09:30:00.000Z
_ISO_TIMESTAMP = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")


def parse_date(raw_date: object) -> date:
    """Parse a stored date into a date object.

    Accepts date and datetime objects, ISO dates, ISO timestamps and the
    formats in DATE_PATTERNS.

    Args:
        raw_date: The stored date value.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if isinstance(raw_date, datetime):
        return raw_date.date()
    if isinstance(raw_date, date):
        return raw_date
    if raw_date is None:
        raise ValueError("Empty date")

    date_str = str(raw_date).strip()
    if not date_str:
        raise ValueError("Empty date string")

    timestamp_match = _ISO_TIMESTAMP.match(date_str)
    if timestamp_match:
        date_str = timestamp_match.group(1)

    for pattern, fmt in COMPILED_PATTERNS:
        if pattern.match(date_str):
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD)."""
    return d.isoformat()


def get_month_year(d: date) -> tuple[int, int]:
    """Get (year, month) for a date."""
    return (d.year, d.month)


def month_label(year: int, month: int) -> str:
    """Return the display label for a calendar month, e.g. "2024-01"."""
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move a (year, month) pair by offset months (negative goes back)."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def is_date_in_range(
    d: date,
    start_date: date | None = None,
    end_date: date | None = None,
) -> bool:
    """Check if a date is within a range.

    Args:
        d: Date to check.
        start_date: Start of range (inclusive). None means no lower bound.
        end_date: End of range (inclusive). None means no upper bound.

    Returns:
        True if date is within range.
    """
    if start_date is not None and d < start_date:
        return False
    if end_date is not None and d > end_date:
        return False
    return True


def generate_month_range(start: date, end: date) -> list[tuple[int, int]]:
    """Generate (year, month) tuples covering a date range.

    Args:
        start: Start date.
        end: End date.

    Returns:
        List of (year, month) tuples covering the range, oldest first.
    """
    months = []
    current_year = start.year
    current_month = start.month

    while (current_year, current_month) <= (end.year, end.month):
        months.append((current_year, current_month))
        current_month += 1
        if current_month > 12:
            current_month = 1
            current_year += 1

    return months


def elapsed_months(start: date, end: date, days_per_month: int = 30) -> int:
    """Approximate number of months between two dates, at least 1.

    The span in days is divided by days_per_month and rounded to the
    nearest whole month, halves rounding up.
    """
    days = abs((end - start).days)
    months = (Decimal(days) / Decimal(days_per_month)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(1, int(months))
