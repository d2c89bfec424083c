"""
Models for the session scheduling core.

Sessions are materialized individually:
- One-time sessions have no series_id/weekday
- Sessions generated from one recurring request share a series_id and
  remember the weekday the series was anchored to
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .intervals import Interval, format_minutes
from .managers import HolidayWindowManager, SessionManager
from .types import DEFAULT_DURATION_MINUTES, RecurringMember, SingleOccurrence


WEEKDAY_CHOICES = [
    (0, 'Monday'),
    (1, 'Tuesday'),
    (2, 'Wednesday'),
    (3, 'Thursday'),
    (4, 'Friday'),
    (5, 'Saturday'),
    (6, 'Sunday'),
]


class HolidaySet(models.Model):
    """A named collection of holiday windows that sites can be assigned to."""

    name = models.CharField(max_length=200, unique=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class HolidayWindow(models.Model):
    """
    An inclusive date range during which sessions are not generated
    for any site using the owning holiday set.
    """

    holiday_set = models.ForeignKey(
        HolidaySet,
        on_delete=models.CASCADE,
        related_name='windows'
    )
    name = models.CharField(max_length=200)
    start_date = models.DateField()
    end_date = models.DateField()
    school_year = models.CharField(max_length=20, blank=True, default='')

    objects = HolidayWindowManager()

    class Meta:
        ordering = ['start_date', 'id']
        indexes = [
            models.Index(fields=['holiday_set', 'start_date', 'end_date'], name='scheduling__holiday_3b9f1e_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F('end_date')),
                name='holiday_window_start_before_end',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.start_date} - {self.end_date})"

    def contains(self, day):
        return self.start_date <= day <= self.end_date

    def clean(self):
        """Validate window data."""
        super().clean()

        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({
                'end_date': 'End date must not be before start date.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)


class Site(models.Model):
    name = models.CharField(max_length=200)
    holiday_set = models.ForeignKey(
        HolidaySet,
        on_delete=models.SET_NULL,
        related_name='sites',
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Room(models.Model):
    name = models.CharField(max_length=100)
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name='rooms')

    class Meta:
        ordering = ['site', 'name']

    def __str__(self):
        return f"{self.site.name} / {self.name}"


class Subject(models.Model):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Session(models.Model):
    """
    A staff member meeting a group of participants at a site.

    series_id and weekday are set together for members of a weekly series
    and are both null for one-time sessions.
    """

    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name='sessions')
    staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='scheduled_sessions',
        null=True,
        blank=True,
    )
    room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        related_name='sessions',
        null=True,
        blank=True,
    )
    subjects = models.ManyToManyField(Subject, related_name='sessions', blank=True)
    participant_ids = models.JSONField(
        default=list,
        blank=True,
        help_text="Identifiers of enrolled participants"
    )

    date = models.DateField()
    start_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(
        default=DEFAULT_DURATION_MINUTES,
        validators=[MinValueValidator(1)]
    )
    note = models.TextField(blank=True, default='')
    completed = models.BooleanField(default=False)

    series_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Shared by all sessions generated from one recurring request"
    )
    weekday = models.PositiveSmallIntegerField(
        choices=WEEKDAY_CHOICES,
        null=True,
        blank=True,
        help_text="Weekday the series was anchored to (0=Monday, 6=Sunday)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SessionManager()

    class Meta:
        ordering = ['date', 'start_time', 'id']
        indexes = [
            models.Index(fields=['staff', 'date'], name='scheduling__staff_i_5c2a8d_idx'),
            models.Index(fields=['series_id', 'date'], name='scheduling__series__e41b07_idx'),
            models.Index(fields=['site', 'date'], name='scheduling__site_id_9a6c3f_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(series_id__isnull=True, weekday__isnull=True)
                    | models.Q(series_id__isnull=False, weekday__isnull=False)
                ),
                name='session_series_id_with_weekday',
            ),
        ]

    def __str__(self):
        done = " [completed]" if self.completed else ""
        return f"{self.site} - {self.date} {self.start_time.strftime('%H:%M')}{done}"

    @property
    def occurrence(self):
        if self.series_id is None:
            return SingleOccurrence()
        return RecurringMember(series_id=self.series_id, weekday=self.weekday)

    @occurrence.setter
    def occurrence(self, value):
        if isinstance(value, RecurringMember):
            self.series_id = value.series_id
            self.weekday = value.weekday
        else:
            self.series_id = None
            self.weekday = None

    @property
    def is_recurring(self):
        return self.occurrence.is_recurring

    @property
    def interval(self):
        return Interval.for_session(self)

    @property
    def end_time(self):
        return format_minutes(self.interval.end)

    def clean(self):
        """Validate session data."""
        super().clean()

        if (self.series_id is None) != (self.weekday is None):
            raise ValidationError({
                'series_id': 'Series members need both series_id and weekday.'
            })
        if self.room_id and self.site_id and self.room.site_id != self.site_id:
            raise ValidationError({
                'room': 'Room belongs to a different site.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)
