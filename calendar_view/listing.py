"""Event lists outside the grid: today's notifications and the data view."""
from datetime import date
from typing import Iterable, List

from processor.models import Event


def todays_events(events: Iterable[Event], today: date) -> List[Event]:
    """Events dated today, in input order."""
    today_str = today.isoformat()
    return [event for event in events if event.event_date == today_str]


def search_events(events: Iterable[Event], term: str = '') -> List[Event]:
    """
    Filter events by title or type, newest date first.

    An empty term returns every event.
    """
    term = (term or '').strip().lower()
    matches = [
        event for event in events
        if not term
        or term in event.title.lower()
        or term in event.type.value
    ]
    return sorted(matches, key=lambda event: event.event_date, reverse=True)
