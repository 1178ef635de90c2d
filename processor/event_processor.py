"""Event processor for validating and normalizing event input."""
import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Union

from processor.exceptions import ValidationError
from processor.models import EventDraft, EventType

logger = logging.getLogger(__name__)


class EventProcessor:
    """Validates form and bulk-import input before it reaches the store."""

    MAX_TITLE_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 2000
    MAX_MEMO_LENGTH = 2000

    def prepare_event(
        self,
        title: Optional[str],
        event_date: Union[str, date, None],
        event_type: Union[str, EventType, None] = EventType.OTHER,
        description: Optional[str] = None,
        memo: Optional[str] = None
    ) -> EventDraft:
        """
        Validate and normalize a single event submission.

        Args:
            title: Event title (required)
            event_date: Date as a date object or string
            event_type: One of the EventType values
            description: Optional short description
            memo: Optional free-form memo

        Returns:
            EventDraft ready for the store

        Raises:
            ValidationError: If any field is missing or malformed
        """
        if title is not None and not isinstance(title, str):
            raise ValidationError(f"Event title must be text, got {type(title).__name__}")
        if not title or not title.strip():
            raise ValidationError('Event title is required')

        normalized_date = self.normalize_date(event_date)
        if not normalized_date:
            raise ValidationError(
                f"Invalid date for event '{title.strip()}': {event_date!r}"
            )

        return EventDraft(
            title=title.strip()[:self.MAX_TITLE_LENGTH],
            event_date=normalized_date,
            type=self.parse_type(event_type),
            description=self._clean_optional('description', description, self.MAX_DESCRIPTION_LENGTH),
            memo=self._clean_optional('memo', memo, self.MAX_MEMO_LENGTH)
        )

    def prepare_bulk(self, rows: Iterable[Mapping]) -> List[EventDraft]:
        """
        Validate rows from the bulk input form.

        Rows with an empty title are dropped silently, matching the form
        where blank rows are left over from editing. Any remaining row that
        is malformed fails the whole batch.

        Args:
            rows: Mappings with title, date (or event_date), type,
                description and memo keys

        Returns:
            List of EventDraft objects in input order

        Raises:
            ValidationError: If no titled rows remain or a row is invalid
        """
        drafts = []
        skipped = 0

        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise ValidationError(
                    f"Row {index + 1}: expected an object, got {type(row).__name__}"
                )

            title = row.get('title') or ''
            if isinstance(title, str) and not title.strip():
                skipped += 1
                continue

            try:
                draft = self.prepare_event(
                    title=title,
                    event_date=row.get('event_date', row.get('date')),
                    event_type=row.get('type', EventType.OTHER),
                    description=row.get('description'),
                    memo=row.get('memo')
                )
            except ValidationError as e:
                raise ValidationError(f"Row {index + 1}: {e}") from e
            drafts.append(draft)

        if not drafts:
            raise ValidationError('No events to save: enter a title for at least one row')

        if skipped:
            logger.info(f"Skipped {skipped} bulk rows without a title")
        return drafts

    def parse_type(self, value: Union[str, EventType, None]) -> EventType:
        """
        Resolve an event type value.

        Raises:
            ValidationError: If the value is not one of the known types
        """
        if value is None or value == '':
            return EventType.OTHER
        if isinstance(value, EventType):
            return value
        try:
            return EventType(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown event type: {value!r}") from None

    def normalize_date(self, value: Union[str, date, None]) -> Optional[str]:
        """
        Normalize a date to ISO 8601 format (YYYY-MM-DD).

        Args:
            value: date object or string in one of the accepted formats

        Returns:
            ISO 8601 formatted date string or None if parsing fails
        """
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if not value or not str(value).strip():
            return None

        date_formats = [
            '%Y-%m-%d',      # ISO 8601
            '%Y/%m/%d',
            '%Y.%m.%d',
            '%Y%m%d',
        ]

        for fmt in date_formats:
            try:
                return datetime.strptime(str(value).strip(), fmt).date().isoformat()
            except ValueError:
                continue

        return None

    def _clean_optional(self, field_name: str, value: Optional[str], max_length: int) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"Event {field_name} must be text, got {type(value).__name__}")
        value = value.strip()
        return value[:max_length] if value else None
