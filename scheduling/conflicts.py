"""
Double-booking detection for staff members.

Conflicts are advisory: they are reported to the scheduler, never used to
reject a booking.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import List, Optional, Union

from .intervals import Interval
from .models import Session
from .types import DEFAULT_DURATION_MINUTES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """An existing session overlapping a candidate booking."""

    session: Session
    site_name: str
    time_range: str
    subjects: List[str]

    @classmethod
    def from_session(cls, session: Session) -> 'Conflict':
        return cls(
            session=session,
            site_name=session.site.name,
            time_range=session.interval.format_range(),
            subjects=[subject.name for subject in session.subjects.all()],
        )

    def as_dict(self):
        return {
            'id': self.session.pk,
            'site': self.site_name,
            'date': self.session.date,
            'start_time': self.session.start_time.strftime('%H:%M'),
            'duration_minutes': self.session.duration_minutes,
            'time_range': self.time_range,
            'subjects': self.subjects,
        }


def find_conflicts(
    staff_id: int,
    day: date,
    start_time: Union[str, time],
    duration_minutes: Optional[int] = None,
    exclude_session_id: Optional[int] = None
) -> List[Conflict]:
    """
    Find a staff member's sessions overlapping a candidate booking.

    Args:
        staff_id: Staff member to check
        day: Calendar date of the candidate
        start_time: Candidate start (time or "HH:MM")
        duration_minutes: Candidate duration, defaults to 90
        exclude_session_id: Session to ignore, e.g. the one being edited

    Returns:
        Conflicting sessions ordered by their start time; empty if none

    Raises:
        ValueError: If a required argument is missing or malformed
    """
    if not staff_id or day is None or not start_time:
        raise ValueError("staff_id, day and start_time are required")
    if duration_minutes is None:
        duration_minutes = DEFAULT_DURATION_MINUTES

    candidate = Interval.build(day, start_time, duration_minutes)

    existing = Session.objects.for_staff_on_date(staff_id, day).with_details()
    if exclude_session_id is not None:
        existing = existing.exclude(pk=exclude_session_id)

    overlapping = [
        session for session in existing
        if session.interval.overlaps(candidate)
    ]
    overlapping.sort(key=lambda s: (s.interval.start, s.pk))

    if overlapping:
        logger.debug(
            "Staff %s has %d overlapping session(s) on %s at %s",
            staff_id, len(overlapping), day, candidate.format_range()
        )
    return [Conflict.from_session(session) for session in overlapping]


def conflict_message(conflicts: List[Conflict]) -> str:
    """Warning text naming where the staff member is already booked."""
    if not conflicts:
        return ''

    first = conflicts[0]
    subjects = ', '.join(first.subjects) or 'group'
    message = (
        f"Staff member is already booked at {first.site_name} "
        f"({first.time_range}, {subjects})."
    )
    if len(conflicts) > 1:
        message += f" {len(conflicts) - 1} further overlapping session(s)."
    return message + " Please coordinate with the site management before booking."
