"""Data models for calendar events and rendered cells."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class EventType(str, Enum):
    """Closed set of HR event categories."""
    PAYROLL = 'payroll'
    SETTLEMENT = 'settlement'
    ONBOARDING = 'onboarding'
    RESIGNATION = 'resignation'
    VACATION = 'vacation'
    EDUCATION = 'education'
    NOTICE = 'notice'
    OTHER = 'other'

    @property
    def label(self) -> str:
        return EVENT_TYPE_LABELS[self]


EVENT_TYPE_LABELS = {
    EventType.PAYROLL: '급여지급',
    EventType.SETTLEMENT: '급여 정산 마감',
    EventType.ONBOARDING: '입사',
    EventType.RESIGNATION: '퇴사',
    EventType.VACATION: '단체연차',
    EventType.EDUCATION: '법정의무교육',
    EventType.NOTICE: '공지',
    EventType.OTHER: '기타',
}


@dataclass
class EventDraft:
    """Validated fields of an event that has not been stored yet."""
    title: str
    event_date: str
    type: EventType
    description: Optional[str] = None
    memo: Optional[str] = None


@dataclass
class Event:
    """Stored calendar event."""
    event_id: str
    title: str
    event_date: str
    type: EventType
    description: Optional[str] = None
    memo: Optional[str] = None
    created_at: int = 0

    def to_dict(self) -> dict:
        return {
            'id': self.event_id,
            'title': self.title,
            'event_date': self.event_date,
            'type': self.type.value,
            'type_label': self.type.label,
            'description': self.description,
            'memo': self.memo,
        }


@dataclass
class CalendarCell:
    """A single rendered day of the calendar grid."""
    date: date
    is_current_period: bool
    is_red_day: bool
    red_day_reason: Optional[str]
    is_today: bool
    holiday_name: Optional[str]
    events: List[Event] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'is_current_period': self.is_current_period,
            'is_red_day': self.is_red_day,
            'red_day_reason': self.red_day_reason,
            'is_today': self.is_today,
            'holiday_name': self.holiday_name,
            'events': [event.to_dict() for event in self.events],
        }


@dataclass
class Notice:
    """Non-fatal message surfaced to the user."""
    kind: str
    message: str

    VALIDATION = 'validation'
    BACKEND = 'backend'
    # write stored, reload failed
    STALE = 'stale'

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message}
