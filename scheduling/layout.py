"""
Side-by-side layout of overlapping sessions for calendar rendering.

Sessions of one bucket (one day of one view) are packed greedily into
columns: sorted by start, each session goes into the first column whose
last session has ended by the time it starts. The resulting column count
equals the largest number of sessions running at the same instant.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from .intervals import Interval


@dataclass(frozen=True)
class LayoutSlot:
    session: object
    column_index: int
    column_count: int

    @property
    def width_fraction(self) -> float:
        return 1 / self.column_count

    @property
    def offset_fraction(self) -> float:
        return self.column_index / self.column_count


def layout_sessions(sessions: Iterable) -> List[LayoutSlot]:
    """
    Assign every session of one bucket a column.

    Args:
        sessions: Objects with ``date``, ``start_time`` and
            ``duration_minutes`` attributes, all on the same day

    Returns:
        One LayoutSlot per session, ordered by start time
    """
    items = sorted(
        ((Interval.for_session(session), session) for session in sessions),
        key=lambda item: (item[0].start, item[0].end),
    )

    column_ends: List[int] = []
    placed = []
    for interval, session in items:
        for index, end in enumerate(column_ends):
            if end <= interval.start:
                column_ends[index] = interval.end
                break
        else:
            index = len(column_ends)
            column_ends.append(interval.end)
        placed.append((session, index))

    column_count = len(column_ends)
    return [LayoutSlot(session, index, column_count) for session, index in placed]


def layout_calendar(sessions: Iterable) -> Dict[date, List[LayoutSlot]]:
    """Bucket sessions by calendar day and lay out each day independently."""
    by_day = defaultdict(list)
    for session in sessions:
        by_day[session.date].append(session)

    return {day: layout_sessions(by_day[day]) for day in sorted(by_day)}
