"""Shared fixtures for scheduling tests."""

import uuid
from datetime import date, time, timedelta

from django.contrib.auth import get_user_model

from scheduling.models import Session, Site


def make_staff(username='teacher'):
    return get_user_model().objects.create_user(username=username, password='secret')


def make_site(name='Main Site', holiday_set=None):
    return Site.objects.create(name=name, holiday_set=holiday_set)


def make_session(site, day, start='14:00', duration=90, staff=None, **extra):
    hour, minute = (int(part) for part in start.split(':'))
    return Session.objects.create(
        site=site,
        staff=staff,
        date=day,
        start_time=time(hour, minute),
        duration_minutes=duration,
        **extra
    )


def make_series(site, first_day, weeks, staff=None, start='14:00', duration=90):
    """Create a weekly series directly, bypassing the generator."""
    series_id = uuid.uuid4()
    sessions = [
        make_session(
            site,
            first_day + timedelta(weeks=week),
            start=start,
            duration=duration,
            staff=staff,
            series_id=series_id,
            weekday=first_day.weekday(),
        )
        for week in range(weeks)
    ]
    return series_id, sessions


MONDAY = date(2025, 3, 10)
