"""
Tests for creating single sessions and generating weekly series.
"""

from datetime import date, time, timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase

from scheduling import services
from scheduling.models import HolidaySet, HolidayWindow, Room, Session, Subject
from scheduling.types import RecurringMember, SessionRequest, SingleOccurrence

from .utils import MONDAY, make_session, make_site, make_staff


class SingleSessionTests(TestCase):
    """Test non-recurring create requests."""

    def setUp(self):
        self.site = make_site()
        self.staff = make_staff()

    def test_single_request_creates_one_session(self):
        result = services.schedule_sessions(SessionRequest(
            site_id=self.site.pk,
            date=MONDAY,
            start_time='14:30',
            duration_minutes=60,
            staff_id=self.staff.pk,
            participant_ids=['p-1', 'p-2'],
            note="Bring exercise books",
        ))

        self.assertIsNone(result.series_id)
        self.assertEqual(len(result.created), 1)
        session = result.created[0]
        self.assertFalse(session.is_recurring)
        self.assertIsNone(session.series_id)
        self.assertIsNone(session.weekday)
        self.assertEqual(session.occurrence, SingleOccurrence())
        self.assertEqual(session.start_time, time(14, 30))
        self.assertEqual(session.participant_ids, ['p-1', 'p-2'])
        self.assertEqual(Session.objects.count(), 1)

    def test_one_week_request_is_not_recurring(self):
        result = services.schedule_sessions(SessionRequest(
            site_id=self.site.pk, date=MONDAY, weeks_to_create=1
        ))
        self.assertEqual(len(result.created), 1)
        self.assertFalse(result.created[0].is_recurring)

    def test_defaults_applied(self):
        result = services.schedule_sessions(SessionRequest(site_id=self.site.pk, date=MONDAY))
        session = result.created[0]
        self.assertEqual(session.start_time, time(14, 30))
        self.assertEqual(session.duration_minutes, 90)

    def test_subjects_attached(self):
        maths = Subject.objects.create(name="Maths")
        result = services.schedule_sessions(SessionRequest(
            site_id=self.site.pk, date=MONDAY, subject_ids=[maths.pk]
        ))
        self.assertEqual(list(result.created[0].subjects.all()), [maths])

    def test_missing_site_and_date_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            services.schedule_sessions(SessionRequest(site_id=None, date=None))

        self.assertIn('site', ctx.exception.message_dict)
        self.assertIn('date', ctx.exception.message_dict)
        self.assertEqual(Session.objects.count(), 0)

    def test_invalid_values_rejected_before_persisting(self):
        other_site = make_site(name="Other")
        room = Room.objects.create(name="R1", site=other_site)

        with self.assertRaises(ValidationError) as ctx:
            services.schedule_sessions(SessionRequest(
                site_id=self.site.pk,
                date=MONDAY,
                start_time='25:00',
                duration_minutes=0,
                room_id=room.pk,
                subject_ids=[999],
                weeks_to_create=4,
            ))

        errors = ctx.exception.message_dict
        self.assertEqual(
            set(errors),
            {'start_time', 'duration_minutes', 'room', 'subject_ids'}
        )
        self.assertEqual(Session.objects.count(), 0)

    def test_non_numeric_duration_is_a_field_error(self):
        with self.assertRaises(ValidationError) as ctx:
            services.schedule_sessions(SessionRequest(
                site_id=self.site.pk, date=MONDAY, duration_minutes='ninety'
            ))

        self.assertIn('duration_minutes', ctx.exception.message_dict)
        self.assertEqual(Session.objects.count(), 0)

    def test_numeric_string_duration_accepted(self):
        result = services.schedule_sessions(SessionRequest(
            site_id=self.site.pk, date=MONDAY, duration_minutes='60'
        ))
        self.assertEqual(result.created[0].duration_minutes, 60)

    def test_conflict_is_reported_but_session_created(self):
        existing = make_session(self.site, MONDAY, start='14:00', staff=self.staff)

        result = services.schedule_sessions(SessionRequest(
            site_id=self.site.pk,
            date=MONDAY,
            start_time='15:00',
            duration_minutes=60,
            staff_id=self.staff.pk,
        ))

        self.assertEqual(len(result.created), 1)
        self.assertEqual([c.session for c in result.conflicts[MONDAY]], [existing])
        self.assertEqual(Session.objects.count(), 2)


class SeriesGenerationTests(TestCase):
    """Test weekly series generation."""

    def setUp(self):
        self.holiday_set = HolidaySet.objects.create(name="Vienna")
        self.site = make_site(holiday_set=self.holiday_set)
        self.staff = make_staff()

    def _request(self, weeks, **overrides):
        values = dict(
            site_id=self.site.pk,
            date=MONDAY,
            start_time='14:30',
            duration_minutes=90,
            staff_id=self.staff.pk,
            weeks_to_create=weeks,
        )
        values.update(overrides)
        return SessionRequest(**values)

    def test_series_shares_id_and_weekday(self):
        result = services.schedule_sessions(self._request(6))

        self.assertEqual(len(result.created), 6)
        self.assertEqual(result.skipped, [])
        self.assertEqual(
            [s.date for s in result.created],
            [MONDAY + timedelta(weeks=w) for w in range(6)]
        )
        for session in result.created:
            self.assertEqual(
                session.occurrence,
                RecurringMember(series_id=result.series_id, weekday=0)
            )
        self.assertEqual(Session.objects.in_series(result.series_id).count(), 6)

    def test_weekday_follows_anchor_date(self):
        saturday = date(2025, 3, 15)
        result = services.schedule_sessions(self._request(2, date=saturday))
        self.assertEqual({s.weekday for s in result.created}, {5})

    def test_holiday_week_skipped_without_compensation(self):
        skipped_day = MONDAY + timedelta(weeks=2)
        HolidayWindow.objects.create(
            holiday_set=self.holiday_set,
            name="Easter Break",
            start_date=skipped_day,
            end_date=skipped_day,
        )

        result = services.schedule_sessions(self._request(4))

        self.assertEqual(
            [s.date for s in result.created],
            [MONDAY, MONDAY + timedelta(weeks=1), MONDAY + timedelta(weeks=3)]
        )
        self.assertEqual(len(result.skipped), 1)
        self.assertEqual(result.skipped[0].date, skipped_day)
        self.assertEqual(result.skipped[0].reason, "Easter Break")
        self.assertEqual(len({s.series_id for s in result.created}), 1)

    def test_twelve_weeks_with_two_holiday_weeks(self):
        HolidayWindow.objects.create(
            holiday_set=self.holiday_set,
            name="Semester Break",
            start_date=MONDAY + timedelta(weeks=5),
            end_date=MONDAY + timedelta(weeks=6, days=4),
        )

        result = services.schedule_sessions(self._request(12))

        self.assertEqual(len(result.created), 10)
        self.assertEqual(
            [w.date for w in result.skipped],
            [MONDAY + timedelta(weeks=5), MONDAY + timedelta(weeks=6)]
        )
        self.assertEqual(result.created[-1].date, MONDAY + timedelta(weeks=11))

    def test_weeks_clamped_to_a_year(self):
        result = services.schedule_sessions(self._request(60))
        self.assertEqual(len(result.created), 52)
        self.assertEqual(result.created[-1].date, MONDAY + timedelta(weeks=51))

    def test_holiday_lookup_failure_does_not_block(self):
        HolidayWindow.objects.create(
            holiday_set=self.holiday_set,
            name="Easter Break",
            start_date=MONDAY,
            end_date=MONDAY + timedelta(weeks=4),
        )

        with mock.patch.object(
            HolidayWindow.objects, 'for_site', side_effect=DatabaseError("unreachable")
        ):
            with self.assertLogs('scheduling.holidays', level='WARNING'):
                result = services.schedule_sessions(self._request(3))

        self.assertEqual(len(result.created), 3)
        self.assertEqual(result.skipped, [])

    def test_persist_failure_recorded_and_remaining_weeks_continue(self):
        failing_day = MONDAY + timedelta(weeks=1)
        persist = services._persist_session

        def flaky_persist(fields, day, occurrence, subject_ids):
            if day == failing_day:
                raise DatabaseError("disk full")
            return persist(fields, day, occurrence, subject_ids)

        with mock.patch('scheduling.services._persist_session', side_effect=flaky_persist):
            with self.assertLogs('scheduling.services', level='ERROR'):
                result = services.schedule_sessions(self._request(3))

        self.assertEqual(
            [s.date for s in result.created],
            [MONDAY, MONDAY + timedelta(weeks=2)]
        )
        self.assertEqual(len(result.failed), 1)
        self.assertEqual(result.failed[0].date, failing_day)
        self.assertIn("disk full", result.failed[0].error)

    def test_rejected_week_recorded_and_remaining_weeks_continue(self):
        failing_day = MONDAY + timedelta(weeks=2)
        persist = services._persist_session

        def rejecting_persist(fields, day, occurrence, subject_ids):
            if day == failing_day:
                raise ValidationError({'room': 'Room is not available.'})
            return persist(fields, day, occurrence, subject_ids)

        with mock.patch('scheduling.services._persist_session', side_effect=rejecting_persist):
            with self.assertLogs('scheduling.services', level='ERROR'):
                result = services.schedule_sessions(self._request(4))

        self.assertEqual(len(result.created), 3)
        self.assertEqual([week.date for week in result.failed], [failing_day])
        self.assertIn("Room is not available.", result.failed[0].error)
        self.assertEqual(Session.objects.in_series(result.series_id).count(), 3)

    def test_conflict_lookup_failure_does_not_abort_series(self):
        calls = []

        def flaky_lookup(*args, **kwargs):
            calls.append(args)
            if len(calls) == 3:
                raise DatabaseError("db hiccup")
            return []

        with mock.patch('scheduling.services.find_conflicts', side_effect=flaky_lookup):
            with self.assertLogs('scheduling.services', level='WARNING') as logs:
                result = services.schedule_sessions(self._request(5))

        self.assertEqual(len(result.created), 5)
        self.assertEqual(result.failed, [])
        self.assertEqual(result.conflicts, {})
        self.assertTrue(any("Conflict check" in line for line in logs.output))

    def test_conflicts_collected_per_week(self):
        busy_day = MONDAY + timedelta(weeks=1)
        make_session(self.site, busy_day, start='15:00', duration=60, staff=self.staff)

        result = services.schedule_sessions(self._request(3))

        self.assertEqual(len(result.created), 3)
        self.assertEqual(list(result.conflicts), [busy_day])
