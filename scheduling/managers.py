"""
Custom managers and querysets for scheduling models.

QuerySets define chainable query methods.
Managers use QuerySets to enable method chaining.
No business logic should be here - only query operations.
"""

from django.db import models


class HolidayWindowQuerySet(models.QuerySet):
    """Custom queryset for HolidayWindow model with chainable methods."""

    def for_site(self, site_id):
        """Get the windows of the holiday set assigned to a site."""
        return self.filter(holiday_set__sites__id=site_id).order_by('start_date', 'id')


class HolidayWindowManager(models.Manager):
    """Custom manager for HolidayWindow model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return HolidayWindowQuerySet(self.model, using=self._db)

    def for_site(self, site_id):
        return self.get_queryset().for_site(site_id)


class SessionQuerySet(models.QuerySet):
    """Custom queryset for Session model with chainable methods."""

    def for_staff_on_date(self, staff_id, day):
        """
        Get one staff member's sessions on a calendar date.

        Args:
            staff_id: user primary key
            day: date object
        """
        return self.filter(staff_id=staff_id, date=day)

    def for_site(self, site_id):
        return self.filter(site_id=site_id)

    def in_range(self, start_date, end_date):
        """
        Get sessions within an inclusive date range.

        Args:
            start_date: date object
            end_date: date object
        """
        return self.filter(date__gte=start_date, date__lte=end_date)

    def in_series(self, series_id):
        """Get all members of a series."""
        return self.filter(series_id=series_id)

    def series_from(self, series_id, cutoff):
        """
        Get the members of a series dated on or after a cutoff.

        Args:
            series_id: UUID shared by the series
            cutoff: date object (inclusive)
        """
        return self.filter(series_id=series_id, date__gte=cutoff)

    def one_time(self):
        """Get sessions that belong to no series."""
        return self.filter(series_id__isnull=True)

    def recurring(self):
        """Get sessions that belong to a series."""
        return self.filter(series_id__isnull=False)

    def with_details(self):
        """Prefetch what conflict messages and API output read."""
        return self.select_related('site', 'staff', 'room').prefetch_related('subjects')


class SessionManager(models.Manager):
    """Custom manager for Session model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return SessionQuerySet(self.model, using=self._db)

    def for_staff_on_date(self, staff_id, day):
        return self.get_queryset().for_staff_on_date(staff_id, day)

    def for_site(self, site_id):
        return self.get_queryset().for_site(site_id)

    def in_range(self, start_date, end_date):
        return self.get_queryset().in_range(start_date, end_date)

    def in_series(self, series_id):
        return self.get_queryset().in_series(series_id)

    def series_from(self, series_id, cutoff):
        return self.get_queryset().series_from(series_id, cutoff)

    def one_time(self):
        return self.get_queryset().one_time()

    def recurring(self):
        return self.get_queryset().recurring()

    def with_details(self):
        return self.get_queryset().with_details()
