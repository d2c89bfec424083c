"""
Half-open time intervals on a calendar date.

A session occupies ``[start, start + duration)`` minutes of its day. Two
intervals overlap only when they share a date and neither ends at or before
the other's start, so back-to-back sessions never collide.
"""

import re
from dataclasses import dataclass
from datetime import date, time
from typing import Union

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


def parse_clock_time(value: Union[str, time]) -> time:
    """
    Parse a 24h ``HH:MM`` clock time.

    Raises:
        ValueError: If the value is not a valid clock time
    """
    if isinstance(value, time):
        return value

    match = _CLOCK_RE.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
    return time(hour, minute)


def minutes_of_day(value: Union[str, time]) -> int:
    """Minutes elapsed since midnight."""
    t = parse_clock_time(value)
    return t.hour * 60 + t.minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Interval:
    """Occupied minutes ``[start, end)`` of one calendar day."""

    day: date
    start: int
    end: int

    @classmethod
    def build(cls, day: date, start_time: Union[str, time], duration_minutes: int) -> 'Interval':
        if duration_minutes <= 0:
            raise ValueError("Duration must be positive")
        start = minutes_of_day(start_time)
        return cls(day, start, start + duration_minutes)

    @classmethod
    def for_session(cls, session) -> 'Interval':
        return cls.build(session.date, session.start_time, session.duration_minutes)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: 'Interval') -> bool:
        return self.day == other.day and self.start < other.end and other.start < self.end

    def format_range(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


def format_time_range(session) -> str:
    """Human readable ``HH:MM-HH:MM`` range of a session."""
    return Interval.for_session(session).format_range()
