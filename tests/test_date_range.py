"""Unit tests for date range generation and navigation."""
import calendar
from datetime import date, timedelta

import pytest

from calendar_view.date_range import (
    ViewMode,
    generate_range,
    is_current_period,
    shift_reference_date,
    start_of_week,
)
from processor.exceptions import ValidationError

SUNDAY = 6
SATURDAY = 5


def _sample_dates():
    """A spread of reference dates across leap years and month edges."""
    start = date(2023, 12, 25)
    return [start + timedelta(days=offset) for offset in range(0, 800, 13)]


class TestGenerateRange:
    """Test cases for generate_range."""

    @pytest.mark.parametrize('reference', _sample_dates())
    def test_month_covers_whole_weeks(self, reference):
        days = generate_range(reference, ViewMode.MONTH)

        assert len(days) % 7 == 0
        assert days[0].weekday() == SUNDAY
        assert days[-1].weekday() == SATURDAY
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))

        month_days = [d for d in days if (d.year, d.month) == (reference.year, reference.month)]
        month_length = calendar.monthrange(reference.year, reference.month)[1]
        assert [d.day for d in month_days] == list(range(1, month_length + 1))

    @pytest.mark.parametrize('reference', _sample_dates())
    def test_week_contains_reference(self, reference):
        days = generate_range(reference, ViewMode.WEEK)

        assert len(days) == 7
        assert reference in days
        assert days[0].weekday() == SUNDAY
        assert days == [days[0] + timedelta(days=i) for i in range(7)]

    @pytest.mark.parametrize('reference', _sample_dates())
    def test_day_is_reference(self, reference):
        assert generate_range(reference, ViewMode.DAY) == [reference]

    def test_thirty_day_month_starting_wednesday(self):
        # April 2026 has 30 days and starts on a Wednesday
        reference = date(2026, 4, 15)
        first = date(2026, 4, 1)
        last = date(2026, 4, 30)
        assert first.weekday() == 2

        days = generate_range(reference, ViewMode.MONTH)

        leading = (first.weekday() + 1) % 7
        trailing = (SATURDAY - last.weekday()) % 7
        assert days[0] == first - timedelta(days=leading)
        assert days[-1] == last + timedelta(days=trailing)
        assert len(days) == leading + 30 + trailing
        assert days[0] == date(2026, 3, 29)
        assert days[-1] == date(2026, 5, 2)

    def test_leap_february(self):
        days = generate_range(date(2024, 2, 10), ViewMode.MONTH)

        assert date(2024, 2, 29) in days
        assert len([d for d in days if d.month == 2]) == 29

    def test_week_starting_on_sunday(self):
        sunday = date(2024, 5, 12)

        assert generate_range(sunday, 'week')[0] == sunday

    def test_mode_strings_are_parsed(self):
        assert generate_range(date(2024, 5, 10), 'DAY') == [date(2024, 5, 10)]

    def test_unknown_mode(self):
        with pytest.raises(ValidationError, match='Unknown view mode'):
            generate_range(date(2024, 5, 10), 'year')


class TestCurrentPeriod:
    """Test cases for is_current_period."""

    def test_month_padding_is_not_current(self):
        reference = date(2024, 5, 10)

        assert is_current_period(date(2024, 5, 1), reference, ViewMode.MONTH)
        assert not is_current_period(date(2024, 4, 28), reference, ViewMode.MONTH)
        assert not is_current_period(date(2024, 6, 1), reference, ViewMode.MONTH)

    def test_week_spanning_months_is_current(self):
        reference = date(2024, 5, 1)

        assert is_current_period(date(2024, 4, 28), reference, ViewMode.WEEK)


class TestShiftReferenceDate:
    """Test cases for navigation."""

    def test_next_month_rolls_year(self):
        assert shift_reference_date(date(2024, 12, 15), ViewMode.MONTH, 'next') == date(2025, 1, 1)

    def test_prev_month_rolls_year(self):
        assert shift_reference_date(date(2024, 1, 31), ViewMode.MONTH, 'prev') == date(2023, 12, 1)

    def test_month_from_day_31(self):
        # Land on the first so short months never overflow
        assert shift_reference_date(date(2024, 1, 31), ViewMode.MONTH, 'next') == date(2024, 2, 1)

    def test_week_moves_seven_days(self):
        reference = date(2024, 5, 10)

        assert shift_reference_date(reference, ViewMode.WEEK, 'next') == date(2024, 5, 17)
        assert shift_reference_date(reference, ViewMode.WEEK, 'prev') == date(2024, 5, 3)

    def test_day_moves_one_day(self):
        assert shift_reference_date(date(2024, 2, 28), ViewMode.DAY, 'next') == date(2024, 2, 29)
        assert shift_reference_date(date(2024, 3, 1), ViewMode.DAY, 'prev') == date(2024, 2, 29)

    def test_today(self):
        today = date(2026, 10, 19)

        assert shift_reference_date(date(2020, 1, 1), ViewMode.WEEK, 'today', today=today) == today

    def test_unknown_direction(self):
        with pytest.raises(ValidationError, match='Unknown navigation direction'):
            shift_reference_date(date(2024, 5, 10), ViewMode.DAY, 'sideways')


def test_start_of_week():
    assert start_of_week(date(2024, 5, 10)) == date(2024, 5, 5)
    assert start_of_week(date(2024, 5, 5)) == date(2024, 5, 5)
    assert start_of_week(date(2024, 5, 11)) == date(2024, 5, 5)
