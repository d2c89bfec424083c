"""
Management command to report staff double bookings in a date range.

Double bookings are allowed when sessions are created, so this command is
meant to be run periodically (e.g., daily via cron) to review them.
"""

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date

from scheduling.conflicts import find_conflicts
from scheduling.models import Session


class Command(BaseCommand):
    help = 'Report staff members booked into overlapping sessions'

    def add_arguments(self, parser):
        parser.add_argument(
            '--start',
            help='First date to check, YYYY-MM-DD (default: today)'
        )
        parser.add_argument(
            '--days',
            type=int,
            default=7,
            help='Number of days to check (default: 7)'
        )

    def handle(self, *args, **options):
        start = timezone.localdate()
        if options['start']:
            start = parse_date(options['start'])
            if start is None:
                raise CommandError(f"Invalid --start date {options['start']!r}")
        if options['days'] < 1:
            raise CommandError('--days must be at least 1')

        end = start + timedelta(days=options['days'] - 1)
        self.stdout.write(f'Checking double bookings from {start} to {end}...')

        sessions = (
            Session.objects.in_range(start, end)
            .filter(staff__isnull=False)
            .select_related('site', 'staff')
        )

        reported = set()
        for session in sessions:
            conflicts = find_conflicts(
                session.staff_id,
                session.date,
                session.start_time,
                session.duration_minutes,
                exclude_session_id=session.pk,
            )
            for conflict in conflicts:
                pair = tuple(sorted((session.pk, conflict.session.pk)))
                if pair in reported:
                    continue
                reported.add(pair)
                self.stdout.write(
                    f'{session.date} {session.staff.get_username()}: '
                    f'{session.site.name} {session.interval.format_range()} overlaps '
                    f'{conflict.site_name} {conflict.time_range}'
                )

        if reported:
            self.stdout.write(
                self.style.WARNING(f'Found {len(reported)} double booking(s)')
            )
        else:
            self.stdout.write(self.style.SUCCESS('No double bookings found'))
