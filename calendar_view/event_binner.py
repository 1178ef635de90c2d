"""Groups events into per-day buckets and builds calendar cells."""
import logging
from datetime import date
from typing import Dict, Iterable, List, Sequence

from calendar_view.date_range import ViewMode, generate_range, is_current_period
from calendar_view.holiday_classifier import HolidayClassifier
from processor.models import CalendarCell, Event

logger = logging.getLogger(__name__)


def bin_events(events: Iterable[Event], dates: Sequence[date]) -> Dict[date, List[Event]]:
    """
    Group events by exact calendar date.

    Every date in ``dates`` gets a bucket, empty if nothing matches. Events
    keep their input order within a bucket; events dated outside the range
    are left out.
    """
    buckets: Dict[date, List[Event]] = {day: [] for day in dates}

    for event in events:
        try:
            event_day = date.fromisoformat(event.event_date)
        except (TypeError, ValueError):
            logger.warning(
                f"Skipping event {event.event_id} with invalid date: {event.event_date!r}"
            )
            continue

        bucket = buckets.get(event_day)
        if bucket is not None:
            bucket.append(event)

    return buckets


def build_cells(
    reference: date,
    mode: ViewMode,
    events: Iterable[Event],
    classifier: HolidayClassifier,
    today: date
) -> List[CalendarCell]:
    """Compute the rendered cells for a view from scratch."""
    dates = generate_range(reference, mode)
    buckets = bin_events(events, dates)

    return [
        CalendarCell(
            date=day,
            is_current_period=is_current_period(day, reference, mode),
            is_red_day=classifier.is_red_day(day),
            red_day_reason=classifier.red_day_reason(day),
            is_today=day == today,
            holiday_name=classifier.holiday_name(day),
            events=buckets[day]
        )
        for day in dates
    ]
