"""View controller owning calendar state and coordinating the event store."""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, List, Mapping, Optional

from calendar_view.date_range import ViewMode, shift_reference_date
from calendar_view.event_binner import build_cells
from calendar_view.holiday_classifier import HolidayClassifier
from calendar_view.listing import todays_events
from processor.event_processor import EventProcessor
from processor.exceptions import BackendError, ValidationError
from processor.models import CalendarCell, Event, Notice

logger = logging.getLogger(__name__)


@dataclass
class ViewState:
    """Anchor date and granularity of the visible grid."""
    reference_date: date = field(default_factory=date.today)
    mode: ViewMode = ViewMode.MONTH


class ViewController:
    """
    Holds the view state and fetched events, and rebuilds the cells after
    every change.

    The store is any object with blocking ``list_events``, ``create_event``,
    ``create_events`` and ``delete_event`` methods (see DynamoDBManager).
    Those calls run in a worker thread so the event loop stays free. Only
    the most recently started refresh may replace the event list.
    """

    def __init__(
        self,
        store,
        classifier: HolidayClassifier,
        processor: Optional[EventProcessor] = None,
        state: Optional[ViewState] = None,
        clock: Callable[[], date] = date.today
    ):
        self.store = store
        self.classifier = classifier
        self.processor = processor or EventProcessor()
        self.clock = clock
        self.state = state or ViewState(reference_date=clock())
        self.events: List[Event] = []
        self.cells: List[CalendarCell] = []
        self.notice: Optional[Notice] = None
        self._fetch_seq = 0
        self.rebuild()

    def rebuild(self) -> None:
        """Recompute the derived cells from the current state and events."""
        self.cells = build_cells(
            reference=self.state.reference_date,
            mode=self.state.mode,
            events=self.events,
            classifier=self.classifier,
            today=self.clock()
        )

    def set_mode(self, mode) -> None:
        self.state.mode = ViewMode.parse(mode)
        self.rebuild()

    async def navigate(self, direction: str) -> bool:
        """
        Move to the previous/next period or back to today, then refetch.

        Raises:
            ValidationError: If the direction is unknown
        """
        self.state.reference_date = shift_reference_date(
            self.state.reference_date,
            self.state.mode,
            direction,
            today=self.clock()
        )
        self.rebuild()
        return await self.refresh()

    async def refresh(self) -> bool:
        """
        Fetch all events and rebuild the cells.

        Returns:
            True if the fetched events were applied, False if the fetch
            failed or was superseded by a newer refresh
        """
        self._fetch_seq += 1
        seq = self._fetch_seq

        try:
            events = await asyncio.to_thread(self.store.list_events)
        except BackendError as e:
            if seq == self._fetch_seq:
                self._report(Notice.BACKEND, f"Could not load events: {e}")
            return False

        if seq != self._fetch_seq:
            logger.info(f"Discarding stale event fetch #{seq} (latest is #{self._fetch_seq})")
            return False

        self.events = list(events)
        self.notice = None
        self.rebuild()
        logger.info(f"Loaded {len(self.events)} events")
        return True

    async def create_event(
        self,
        title: Optional[str],
        event_date,
        event_type=None,
        description: Optional[str] = None,
        memo: Optional[str] = None
    ) -> Optional[Event]:
        """
        Validate and store one event, then refetch.

        Returns:
            The stored Event, or None if validation or the store failed
        """
        try:
            draft = self.processor.prepare_event(
                title=title,
                event_date=event_date,
                event_type=event_type,
                description=description,
                memo=memo
            )
        except ValidationError as e:
            self._report(Notice.VALIDATION, str(e))
            return None

        try:
            event = await asyncio.to_thread(self.store.create_event, draft)
        except BackendError as e:
            self._report(Notice.BACKEND, f"Could not save event: {e}")
            return None

        await self._refresh_after_write("Event saved")
        return event

    async def import_events(self, rows: Iterable[Mapping]) -> List[Event]:
        """
        Store the titled rows of a bulk import, then refetch.

        Returns:
            The stored events (only the rows written before a partial
            failure), or an empty list if nothing was saved
        """
        try:
            drafts = self.processor.prepare_bulk(rows)
        except ValidationError as e:
            self._report(Notice.VALIDATION, str(e))
            return []

        try:
            created = await asyncio.to_thread(self.store.create_events, drafts)
        except BackendError as e:
            if e.written:
                self._report(
                    Notice.BACKEND,
                    f"Saved {len(e.written)} of {len(drafts)} events before the failure; "
                    f"resubmit only the remaining rows: {e}"
                )
                return e.written
            self._report(Notice.BACKEND, f"Could not save events: {e}")
            return []

        await self._refresh_after_write(f"{len(created)} events saved")
        return created

    async def delete_event(self, event_id: str) -> bool:
        """Delete an event, then refetch."""
        if not event_id:
            self._report(Notice.VALIDATION, 'Event id is required')
            return False

        try:
            await asyncio.to_thread(self.store.delete_event, event_id)
        except BackendError as e:
            self._report(Notice.BACKEND, f"Could not delete event: {e}")
            return False

        await self._refresh_after_write("Event deleted")
        return True

    async def _refresh_after_write(self, action: str) -> None:
        self.notice = None
        if not await self.refresh() and self.notice and self.notice.kind == Notice.BACKEND:
            self.notice = Notice(
                kind=Notice.STALE,
                message=f"{action}, but the calendar could not be reloaded: {self.notice.message}"
            )

    @property
    def todays_events(self) -> List[Event]:
        return todays_events(self.events, self.clock())

    def render(self) -> dict:
        """JSON-ready snapshot of the current view."""
        reference = self.state.reference_date
        return {
            'reference_date': reference.isoformat(),
            'mode': self.state.mode.value,
            'title': f"{reference.year}-{reference.month:02d}",
            'cells': [cell.to_dict() for cell in self.cells],
            'todays_events': [event.to_dict() for event in self.todays_events],
            'notice': self.notice.to_dict() if self.notice else None,
        }

    def _report(self, kind: str, message: str) -> None:
        if kind == Notice.BACKEND:
            logger.error(message)
        else:
            logger.warning(message)
        self.notice = Notice(kind=kind, message=message)
