"""Currency and date helpers shared by the expense core and exports."""

import re
import calendar
from typing import Optional, Tuple, Union
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from .exceptions import ValidationError

DateLike = Union[str, date, datetime]

_CURRENCY_NOISE = re.compile(r'[^\d.-]')


def format_currency(amount: Union[Decimal, float, int]) -> str:
    """
    Format an amount as US dollars.

    Args:
        amount: The amount to format

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "-$5.00")
    """
    formatted = f"{abs(amount):,.2f}"
    return f"-${formatted}" if amount < 0 else f"${formatted}"


def parse_currency(value: Union[str, Decimal, float, int, None]) -> Decimal:
    """
    Parse user-entered currency text such as "$1,234.50".

    Everything except digits, '.' and '-' is dropped. Input that still
    doesn't parse yields zero.
    """
    if value is None:
        return Decimal('0')

    if isinstance(value, Decimal):
        return value

    cleaned = _CURRENCY_NOISE.sub('', str(value))
    try:
        parsed = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return Decimal('0')

    return parsed if parsed.is_finite() else Decimal('0')


def format_amount_plain(amount: Union[Decimal, float, int]) -> str:
    """Render an amount as plain decimal text without trailing zeros ("12.5", "40")."""
    text = format(Decimal(str(amount)).normalize(), 'f')
    return '0' if text in ('-0', '') else text


def parse_date(value: DateLike) -> date:
    """
    Coerce an ISO date/datetime string (or date object) to a calendar date.

    Time-of-day is discarded so range checks compare whole days.

    Raises:
        ValidationError: If the value isn't a recognizable ISO date
    """
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}. Use YYYY-MM-DD")


def format_date(value: DateLike) -> str:
    """Human-readable short date, e.g. "Jan 05, 2024"."""
    return parse_date(value).strftime('%b %d, %Y')


def format_date_input(value: DateLike) -> str:
    """ISO date suitable for a date input field, e.g. "2024-01-05"."""
    return parse_date(value).isoformat()


def local_today() -> date:
    """Today's calendar date on the local wall clock."""
    return date.today()


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def month_bounds(day: date) -> Tuple[date, date]:
    """Return the first and last calendar day of the month containing day."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def is_date_in_current_month(value: DateLike, today: Optional[date] = None) -> bool:
    start, end = month_bounds(today or local_today())
    return start <= parse_date(value) <= end


def is_date_in_range(
    value: DateLike,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None
) -> bool:
    """
    Check whether a date falls within an optional, inclusive range.

    Args:
        value: Date to check
        start: Optional lower bound (inclusive)
        end: Optional upper bound (inclusive)

    Returns:
        True when no bound is given or every given bound is satisfied
    """
    if not start and not end:
        return True

    day = parse_date(value)

    if start and day < parse_date(start):
        return False

    if end and day > parse_date(end):
        return False

    return True
