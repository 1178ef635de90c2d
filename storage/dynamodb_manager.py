"""DynamoDB manager for event storage operations."""
import logging
import time
import uuid
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from processor.exceptions import BackendError
from processor.models import Event, EventDraft, EventType

logger = logging.getLogger(__name__)


class DynamoDBManager:
    """Manager for DynamoDB operations on the events table."""

    BATCH_SIZE = 25  # DynamoDB batch operation limit

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region, or None for the boto3 default chain
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBManager for table: {table_name}")

    def list_events(self) -> List[Event]:
        """
        Retrieve all events from DynamoDB using Scan operation.

        Returns:
            Events ordered by creation time

        Raises:
            BackendError: If the scan fails
        """
        logger.info("Scanning DynamoDB table for all events")

        try:
            response = self.table.scan()
            items = response.get('Items', [])

            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = self.table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error scanning DynamoDB table: {e}")
            raise BackendError(f"Failed to list events: {e}") from e

        events = []
        for item in items:
            event = self._item_to_event(item)
            if event:
                events.append(event)

        events.sort(key=lambda event: (event.created_at, event.event_id))
        logger.info(f"Retrieved {len(events)} events from DynamoDB")
        return events

    def create_event(self, draft: EventDraft) -> Event:
        """
        Store a single new event.

        Args:
            draft: Validated event fields

        Returns:
            The stored Event with its generated identifier

        Raises:
            BackendError: If the write fails
        """
        event = self._draft_to_event(draft, self._now_millis())

        try:
            self.table.put_item(Item=self._event_to_item(event))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error writing event '{draft.title}': {e}")
            raise BackendError(f"Failed to create event: {e}") from e

        logger.info(f"Created event {event.event_id} on {event.event_date}")
        return event

    def create_events(self, drafts: List[EventDraft]) -> List[Event]:
        """
        Write events to DynamoDB in batches of 25 items.

        Creation timestamps are consecutive so the events list back in
        input order.

        Args:
            drafts: Validated event fields

        Returns:
            The stored Event objects in input order

        Raises:
            BackendError: If any batch fails
        """
        if not drafts:
            return []

        logger.info(f"Writing {len(drafts)} events to DynamoDB")
        base = self._now_millis()
        events = [
            self._draft_to_event(draft, base + offset)
            for offset, draft in enumerate(drafts)
        ]

        # Process in batches of 25 (DynamoDB limit)
        for i in range(0, len(events), self.BATCH_SIZE):
            batch = events[i:i + self.BATCH_SIZE]

            try:
                with self.table.batch_writer() as writer:
                    for event in batch:
                        writer.put_item(Item=self._event_to_item(event))
            except (BotoCoreError, ClientError) as e:
                written = events[:i]
                logger.error(
                    f"Error writing batch {i // self.BATCH_SIZE + 1}: {e}. "
                    f"Already written: {[event.event_id for event in written]}"
                )
                raise BackendError(
                    f"Failed to import events after {i} of {len(events)}: {e}",
                    written=written
                ) from e

        logger.info(f"Successfully wrote {len(events)} events")
        return events

    def delete_event(self, event_id: str) -> None:
        """
        Delete an event by identifier.

        Raises:
            BackendError: If the delete fails
        """
        try:
            self.table.delete_item(Key={'event_id': event_id})
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting event {event_id}: {e}")
            raise BackendError(f"Failed to delete event: {e}") from e

        logger.info(f"Deleted event {event_id}")

    def _item_to_event(self, item: dict) -> Optional[Event]:
        """
        Convert DynamoDB item to Event object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Event object or None if conversion fails
        """
        try:
            return Event(
                event_id=item['event_id'],
                title=item['title'],
                event_date=item['event_date'],
                type=EventType(item.get('type', EventType.OTHER.value)),
                description=item.get('description'),
                memo=item.get('memo'),
                created_at=int(item.get('created_at', 0))
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to convert item to Event: {e}")
            return None

    def _event_to_item(self, event: Event) -> dict:
        """
        Convert Event object to DynamoDB item.

        Args:
            event: Event object

        Returns:
            DynamoDB item dictionary
        """
        item = {
            'event_id': event.event_id,
            'title': event.title,
            'event_date': event.event_date,
            'type': event.type.value,
            'created_at': event.created_at
        }

        # Add optional fields if present
        if event.description:
            item['description'] = event.description
        if event.memo:
            item['memo'] = event.memo

        return item

    def _draft_to_event(self, draft: EventDraft, created_at: int) -> Event:
        return Event(
            event_id=str(uuid.uuid4()),
            title=draft.title,
            event_date=draft.event_date,
            type=draft.type,
            description=draft.description,
            memo=draft.memo,
            created_at=created_at
        )

    @staticmethod
    def _now_millis() -> int:
        return int(time.time() * 1000)
