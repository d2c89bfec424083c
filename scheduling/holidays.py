"""
Holiday calendar lookups.

A site is suppressed on a date when a window of its assigned holiday set
contains that date. Lookups fail open: if holiday data cannot be read the
date counts as not suppressed so scheduling keeps working.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from django.db import DatabaseError, transaction

from .models import HolidayWindow

logger = logging.getLogger(__name__)


class HolidayCalendar:
    """Holiday windows of one site, loaded once and queried per date."""

    def __init__(self, windows: List[HolidayWindow], degraded: bool = False):
        self.windows = list(windows)
        self.degraded = degraded

    @classmethod
    def for_site(cls, site_id: int) -> 'HolidayCalendar':
        """
        Load the windows of the holiday set assigned to a site.

        A site without a holiday set yields an empty calendar. A failed
        lookup yields an empty calendar flagged as degraded.
        """
        try:
            with transaction.atomic():
                windows = list(HolidayWindow.objects.for_site(site_id))
        except DatabaseError:
            logger.warning(
                "Holiday data unavailable for site %s, treating all dates as open",
                site_id,
                exc_info=True,
            )
            return cls([], degraded=True)

        return cls(windows)

    def is_suppressed(self, day: date) -> Tuple[bool, Optional[str]]:
        """Return (suppressed, window name); the first matching window wins."""
        for window in self.windows:
            if window.contains(day):
                return True, window.name
        return False, None


def is_suppressed(site_id: int, day: date) -> Tuple[bool, Optional[str]]:
    """One-off lookup for a single site and date."""
    return HolidayCalendar.for_site(site_id).is_suppressed(day)
