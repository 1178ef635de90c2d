"""Pure calendar range calculations."""
import calendar
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from processor.exceptions import ValidationError

WEEK_LENGTH = 7

# Sunday-first weeks
_CALENDAR = calendar.Calendar(firstweekday=calendar.SUNDAY)


class ViewMode(str, Enum):
    MONTH = 'month'
    WEEK = 'week'
    DAY = 'day'

    @classmethod
    def parse(cls, value) -> 'ViewMode':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown view mode: {value!r}") from None


def start_of_week(day: date) -> date:
    """Return the Sunday on or before the given date."""
    return day - timedelta(days=(day.weekday() + 1) % WEEK_LENGTH)


def generate_range(reference: date, mode: ViewMode) -> List[date]:
    """
    Return the ordered dates to render for a view.

    Month views cover whole Sunday-to-Saturday weeks, so leading and
    trailing days from the neighbouring months are included.
    """
    mode = ViewMode.parse(mode)

    if mode is ViewMode.DAY:
        return [reference]

    if mode is ViewMode.WEEK:
        start = start_of_week(reference)
        return [start + timedelta(days=i) for i in range(WEEK_LENGTH)]

    weeks = _CALENDAR.monthdatescalendar(reference.year, reference.month)
    return [day for week in weeks for day in week]


def is_current_period(day: date, reference: date, mode: ViewMode) -> bool:
    """Only month views have cells outside the current period."""
    if ViewMode.parse(mode) is ViewMode.MONTH:
        return (day.year, day.month) == (reference.year, reference.month)
    return True


def prev_month(year: int, month: int) -> tuple:
    """Return (year, month) for one month earlier."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> tuple:
    """Return (year, month) for one month later."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def shift_reference_date(
    reference: date,
    mode: ViewMode,
    direction: str,
    today: Optional[date] = None
) -> date:
    """
    Move the reference date one unit of the view mode.

    Args:
        reference: Current reference date
        mode: View mode deciding the unit (month, 7 days or 1 day)
        direction: 'prev', 'next' or 'today'
        today: Value returned for 'today' (defaults to date.today())

    Returns:
        New reference date. Month moves land on the first of the month.

    Raises:
        ValidationError: If the direction is unknown
    """
    mode = ViewMode.parse(mode)

    if direction == 'today':
        return today or date.today()
    if direction not in ('prev', 'next'):
        raise ValidationError(f"Unknown navigation direction: {direction!r}")

    forward = direction == 'next'

    if mode is ViewMode.MONTH:
        step = next_month if forward else prev_month
        year, month = step(reference.year, reference.month)
        return date(year, month, 1)

    days = WEEK_LENGTH if mode is ViewMode.WEEK else 1
    return reference + timedelta(days=days if forward else -days)
