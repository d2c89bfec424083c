"""
Tests for staff double-booking detection.
"""

from datetime import date

from django.test import TestCase

from scheduling.conflicts import conflict_message, find_conflicts
from scheduling.models import Subject

from .utils import MONDAY, make_series, make_session, make_site, make_staff


class FindConflictsTests(TestCase):
    """Test find_conflicts against existing bookings."""

    def setUp(self):
        self.staff = make_staff()
        self.site = make_site(name="North")
        self.existing = make_session(self.site, MONDAY, start='14:00', duration=90, staff=self.staff)
        self.existing.subjects.set([
            Subject.objects.create(name="Maths"),
            Subject.objects.create(name="German"),
        ])

    def test_overlapping_request_conflicts(self):
        conflicts = find_conflicts(self.staff.pk, MONDAY, '15:00', 60)

        self.assertEqual(len(conflicts), 1)
        conflict = conflicts[0]
        self.assertEqual(conflict.session, self.existing)
        self.assertEqual(conflict.site_name, "North")
        self.assertEqual(conflict.time_range, "14:00-15:30")
        self.assertEqual(conflict.subjects, ["German", "Maths"])

    def test_boundary_touch_is_not_a_conflict(self):
        self.assertEqual(find_conflicts(self.staff.pk, MONDAY, '15:30', 90), [])
        self.assertEqual(find_conflicts(self.staff.pk, MONDAY, '12:30', 90), [])

    def test_duration_defaults_to_90_minutes(self):
        # 12:31 + 90 ends at 14:01, one minute into the existing session
        self.assertEqual(len(find_conflicts(self.staff.pk, MONDAY, '12:31')), 1)
        self.assertEqual(find_conflicts(self.staff.pk, MONDAY, '12:30'), [])

    def test_excluded_session_is_ignored(self):
        conflicts = find_conflicts(
            self.staff.pk, MONDAY, '14:00', 90,
            exclude_session_id=self.existing.pk
        )
        self.assertEqual(conflicts, [])

    def test_other_staff_and_other_days_are_ignored(self):
        other_staff = make_staff(username="other")
        make_session(self.site, MONDAY, start='15:00', staff=other_staff)
        make_session(self.site, date(2025, 3, 11), start='15:00', staff=self.staff)

        conflicts = find_conflicts(self.staff.pk, MONDAY, '15:00', 30)
        self.assertEqual([c.session for c in conflicts], [self.existing])

    def test_results_ordered_by_start_time(self):
        later = make_session(self.site, MONDAY, start='16:00', duration=60, staff=self.staff)
        earlier = make_session(self.site, MONDAY, start='10:00', duration=60, staff=self.staff)

        conflicts = find_conflicts(self.staff.pk, MONDAY, '09:00', 8 * 60)
        self.assertEqual(
            [c.session for c in conflicts],
            [earlier, self.existing, later]
        )

    def test_conflicts_are_mutual(self):
        _, (first, _) = make_series(self.site, date(2025, 3, 17), 2, staff=self.staff, start='09:00')
        second = make_session(self.site, date(2025, 3, 17), start='10:00', staff=self.staff)

        self.assertEqual(
            [c.session for c in find_conflicts(self.staff.pk, first.date, '09:00', 90, first.pk)],
            [second]
        )
        self.assertEqual(
            [c.session for c in find_conflicts(self.staff.pk, second.date, '10:00', 90, second.pk)],
            [first]
        )

    def test_missing_arguments_raise(self):
        with self.assertRaises(ValueError):
            find_conflicts(None, MONDAY, '14:00')
        with self.assertRaises(ValueError):
            find_conflicts(self.staff.pk, MONDAY, '')

    def test_malformed_start_time_raises(self):
        with self.assertRaises(ValueError):
            find_conflicts(self.staff.pk, MONDAY, '2pm')


class ConflictMessageTests(TestCase):
    """Test the human readable warning text."""

    def setUp(self):
        self.staff = make_staff()
        self.site = make_site(name="South")

    def test_empty_message_without_conflicts(self):
        self.assertEqual(conflict_message([]), '')

    def test_message_names_site_and_time(self):
        make_session(self.site, MONDAY, start='14:00', staff=self.staff)
        make_session(self.site, MONDAY, start='15:00', staff=self.staff)

        message = conflict_message(find_conflicts(self.staff.pk, MONDAY, '14:30', 60))

        self.assertIn("South", message)
        self.assertIn("14:00-15:30", message)
        self.assertIn("group", message)
        self.assertIn("1 further overlapping session(s)", message)
