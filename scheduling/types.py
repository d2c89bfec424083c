"""
Data types and constants for the session scheduling core.

This module contains:
- The occurrence sum type (single session vs. member of a weekly series)
- DTOs (Data Transfer Objects) for service layer operations
- Constants used across the application
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, time
from typing import Dict, List, Optional, Union

from django.conf import settings


DEFAULT_START_TIME = getattr(settings, 'SCHEDULING_DEFAULT_START_TIME', '14:30')
DEFAULT_DURATION_MINUTES = getattr(settings, 'SCHEDULING_DEFAULT_DURATION', 90)
MAX_SERIES_WEEKS = getattr(settings, 'SCHEDULING_MAX_SERIES_WEEKS', 52)

DELETE_SINGLE = 'single'
DELETE_FUTURE = 'future'
DELETE_MODES = (DELETE_SINGLE, DELETE_FUTURE)

# Fields a "this and all future" edit may overwrite across a series.
CASCADABLE_FIELDS = ('staff_id', 'room_id', 'start_time', 'duration_minutes', 'note')


@dataclass(frozen=True)
class SingleOccurrence:
    """A stand-alone session that belongs to no series."""

    is_recurring = False


@dataclass(frozen=True)
class RecurringMember:
    """One occurrence of a weekly series."""

    series_id: uuid.UUID
    weekday: int

    is_recurring = True


Occurrence = Union[SingleOccurrence, RecurringMember]


@dataclass
class SessionRequest:
    """DTO for a create request, single or recurring."""
    site_id: Optional[int]
    date: Optional[date]
    start_time: Union[time, str, None] = None
    duration_minutes: Optional[int] = None
    staff_id: Optional[int] = None
    room_id: Optional[int] = None
    subject_ids: List[int] = field(default_factory=list)
    participant_ids: List[str] = field(default_factory=list)
    note: str = ''
    weeks_to_create: int = 1


@dataclass
class SessionUpdateData:
    """DTO for session edit operations. ``None`` means "leave unchanged"."""
    date: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = None
    staff_id: Optional[int] = None
    room_id: Optional[int] = None
    note: Optional[str] = None
    completed: Optional[bool] = None
    subject_ids: Optional[List[int]] = None
    participant_ids: Optional[List[str]] = None
    clear_staff: bool = False
    clear_room: bool = False


@dataclass(frozen=True)
class SkippedWeek:
    date: date
    reason: str


@dataclass(frozen=True)
class FailedWeek:
    date: date
    error: str


@dataclass
class ScheduleResult:
    """Outcome of a create request; partial generation is a normal result."""
    series_id: Optional[uuid.UUID] = None
    created: list = field(default_factory=list)
    skipped: List[SkippedWeek] = field(default_factory=list)
    failed: List[FailedWeek] = field(default_factory=list)
    conflicts: Dict[date, list] = field(default_factory=dict)
