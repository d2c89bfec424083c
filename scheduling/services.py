"""
Service layer for session scheduling.
Services are framework-agnostic and handle all business operations.
"""

import logging
import uuid
from datetime import date, timedelta
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from .conflicts import find_conflicts
from .exceptions import SeriesNotFound
from .holidays import HolidayCalendar
from .intervals import parse_clock_time
from .layout import LayoutSlot, layout_calendar
from .models import Room, Session, Site, Subject
from .types import (
    CASCADABLE_FIELDS,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_START_TIME,
    DELETE_FUTURE,
    DELETE_MODES,
    DELETE_SINGLE,
    MAX_SERIES_WEEKS,
    FailedWeek,
    RecurringMember,
    ScheduleResult,
    SessionRequest,
    SessionUpdateData,
    SingleOccurrence,
    SkippedWeek,
)

logger = logging.getLogger(__name__)


def schedule_sessions(request: SessionRequest) -> ScheduleResult:
    """
    Create a single session or a weekly series.

    Requests for more than one week generate one occurrence per week from
    the anchor date, skipping weeks that fall into a holiday window of the
    site. Skipped weeks are not made up at the end of the series.

    Args:
        request: SessionRequest describing the booking

    Returns:
        ScheduleResult with created sessions, skipped and failed weeks and
        advisory staff conflicts per date

    Raises:
        ValidationError: If the request is incomplete or inconsistent
    """
    fields = _validate_request(request)
    weeks = min(request.weeks_to_create or 1, MAX_SERIES_WEEKS)

    if weeks <= 1:
        return _create_single(request, fields)
    return _generate_series(request, fields, weeks)


def _create_single(request: SessionRequest, fields: dict) -> ScheduleResult:
    result = ScheduleResult()
    _collect_conflicts(result, fields, request.date)

    with transaction.atomic():
        session = _persist_session(fields, request.date, SingleOccurrence(), request.subject_ids)

    result.created.append(session)
    return result


def _generate_series(request: SessionRequest, fields: dict, weeks: int) -> ScheduleResult:
    """Materialize one occurrence per week, each persisted independently."""
    anchor = request.date
    member = RecurringMember(series_id=uuid.uuid4(), weekday=anchor.weekday())
    calendar = HolidayCalendar.for_site(request.site_id)
    result = ScheduleResult(series_id=member.series_id)

    for week in range(weeks):
        day = anchor + timedelta(weeks=week)

        suppressed, reason = calendar.is_suppressed(day)
        if suppressed:
            result.skipped.append(SkippedWeek(date=day, reason=reason))
            continue

        _collect_conflicts(result, fields, day)

        # full_clean in save can still reject a week
        try:
            with transaction.atomic():
                session = _persist_session(fields, day, member, request.subject_ids)
        except (DatabaseError, ValidationError) as exc:
            logger.error(
                "Could not store week %d (%s) of series %s",
                week, day, member.series_id,
                exc_info=True,
            )
            result.failed.append(FailedWeek(date=day, error=str(exc)))
            continue

        result.created.append(session)

    logger.info(
        "Series %s at site %s: %d created, %d skipped, %d failed",
        member.series_id, request.site_id,
        len(result.created), len(result.skipped), len(result.failed)
    )
    if result.skipped:
        logger.info(
            "Series %s skipped holiday weeks: %s",
            member.series_id,
            ', '.join(f"{week.date} ({week.reason})" for week in result.skipped)
        )
    return result


def _validate_request(request: SessionRequest) -> dict:
    """Validate a create request and return the shared session fields."""
    errors = {}

    if not request.site_id:
        errors['site'] = 'Site is required.'
    elif not Site.objects.filter(pk=request.site_id).exists():
        errors['site'] = f'Site {request.site_id} does not exist.'

    if request.date is None:
        errors['date'] = 'Date is required.'

    start_time = None
    try:
        start_time = parse_clock_time(request.start_time or DEFAULT_START_TIME)
    except ValueError as exc:
        errors['start_time'] = str(exc)

    duration = request.duration_minutes
    if duration is None:
        duration = DEFAULT_DURATION_MINUTES
    try:
        duration = int(duration)
    except (TypeError, ValueError):
        errors['duration_minutes'] = 'Duration must be a whole number of minutes.'
    else:
        if duration <= 0:
            errors['duration_minutes'] = 'Duration must be positive.'

    if request.staff_id and not get_user_model().objects.filter(pk=request.staff_id).exists():
        errors['staff'] = f'Staff member {request.staff_id} does not exist.'

    if request.room_id and not Room.objects.filter(
        pk=request.room_id, site_id=request.site_id
    ).exists():
        errors['room'] = f'Room {request.room_id} does not exist at this site.'

    subject_ids = set(request.subject_ids or [])
    if subject_ids and Subject.objects.filter(pk__in=subject_ids).count() != len(subject_ids):
        errors['subject_ids'] = 'Unknown subject.'

    if errors:
        raise ValidationError(errors)

    return {
        'site_id': request.site_id,
        'staff_id': request.staff_id or None,
        'room_id': request.room_id or None,
        'start_time': start_time,
        'duration_minutes': duration,
        'note': request.note or '',
        'participant_ids': list(request.participant_ids or []),
    }


def _persist_session(fields: dict, day: date, occurrence, subject_ids: List[int]) -> Session:
    session = Session(date=day, **fields)
    session.occurrence = occurrence
    session.save()
    if subject_ids:
        session.subjects.set(subject_ids)
    return session


def _collect_conflicts(result: ScheduleResult, fields: dict, day: date) -> None:
    """Record advisory staff conflicts for one candidate date."""
    if not fields['staff_id']:
        return

    try:
        conflicts = find_conflicts(
            fields['staff_id'], day, fields['start_time'], fields['duration_minutes']
        )
    except DatabaseError:
        logger.warning(
            "Conflict check for staff %s on %s failed, booking without advice",
            fields['staff_id'], day,
            exc_info=True,
        )
        return
    if conflicts:
        logger.info(
            "Staff %s double-booked on %s (%d overlapping session(s)), booking anyway",
            fields['staff_id'], day, len(conflicts)
        )
        result.conflicts[day] = conflicts


@transaction.atomic
def cascade_update(series_id: uuid.UUID, cutoff: date, **changes) -> int:
    """
    Overwrite fields on every series member dated on or after a cutoff.

    Earlier members are never touched. Reapplying the same update leaves
    the series unchanged.

    Args:
        series_id: Series to update
        cutoff: First date (inclusive) affected
        **changes: Field values, limited to CASCADABLE_FIELDS

    Returns:
        Number of sessions updated

    Raises:
        ValidationError: If a field cannot be cascaded or a value is invalid
        SeriesNotFound: If no session carries series_id
    """
    if cutoff is None:
        raise ValidationError({'cutoff': 'Cutoff date is required.'})
    if not changes:
        raise ValidationError({'changes': 'Nothing to update.'})

    unknown = sorted(set(changes) - set(CASCADABLE_FIELDS))
    if unknown:
        raise ValidationError({
            name: 'Field cannot be cascaded across a series.' for name in unknown
        })

    site_id = (
        Session.objects.in_series(series_id)
        .values_list('site_id', flat=True)
        .first()
    )
    if site_id is None:
        raise SeriesNotFound(f"Series {series_id} does not exist.")

    changes = _validate_changes(changes, site_id)
    count = Session.objects.series_from(series_id, cutoff).update(
        updated_at=timezone.now(), **changes
    )
    logger.info(
        "Updated %s on %d session(s) of series %s from %s",
        ', '.join(sorted(changes)), count, series_id, cutoff
    )
    return count


def _validate_changes(changes: dict, site_id: int) -> dict:
    errors = {}
    changes = dict(changes)

    if 'start_time' in changes:
        try:
            changes['start_time'] = parse_clock_time(changes['start_time'])
        except ValueError as exc:
            errors['start_time'] = str(exc)

    if 'duration_minutes' in changes:
        try:
            changes['duration_minutes'] = int(changes['duration_minutes'])
        except (TypeError, ValueError):
            errors['duration_minutes'] = 'Duration must be a whole number of minutes.'
        else:
            if changes['duration_minutes'] <= 0:
                errors['duration_minutes'] = 'Duration must be positive.'

    staff_id = changes.get('staff_id')
    if staff_id and not get_user_model().objects.filter(pk=staff_id).exists():
        errors['staff'] = f'Staff member {staff_id} does not exist.'

    room_id = changes.get('room_id')
    if room_id and not Room.objects.filter(pk=room_id, site_id=site_id).exists():
        errors['room'] = f'Room {room_id} does not exist at this site.'

    if errors:
        raise ValidationError(errors)
    return changes


@transaction.atomic
def update_session(
    session_id: int,
    update_data: SessionUpdateData,
    cascade_future: bool = False
) -> Session:
    """
    Edit one session, optionally carrying the edit through its series.

    With cascade_future the cascadable fields (staff, room, start time,
    duration, note) are also written to every later member of the series,
    starting from the session's date before the edit.

    Raises:
        Session.DoesNotExist: If the session does not exist
        ValidationError: If the new values are invalid
    """
    session = Session.objects.select_for_update().get(pk=session_id)
    cutoff = session.date

    fields_to_update = {
        'date': update_data.date,
        'start_time': update_data.start_time,
        'duration_minutes': update_data.duration_minutes,
        'staff_id': update_data.staff_id,
        'room_id': update_data.room_id,
        'note': update_data.note,
        'completed': update_data.completed,
        'participant_ids': update_data.participant_ids,
    }
    if update_data.clear_staff:
        fields_to_update['staff_id'] = None
    if update_data.clear_room:
        fields_to_update['room_id'] = None

    changes = {
        name: value for name, value in fields_to_update.items()
        if value is not None
        or (name == 'staff_id' and update_data.clear_staff)
        or (name == 'room_id' and update_data.clear_room)
    }
    changes = _validate_changes(changes, session.site_id)

    _apply_field_updates(session, changes)
    session.save()

    if update_data.subject_ids is not None:
        session.subjects.set(update_data.subject_ids)

    if cascade_future and session.series_id is not None:
        cascaded = {
            name: value for name, value in changes.items()
            if name in CASCADABLE_FIELDS
        }
        if cascaded:
            cascade_update(session.series_id, cutoff, **cascaded)

    return session


def delete_session(session_id: int, mode: str = DELETE_SINGLE) -> int:
    """
    Delete a session, or a session and the rest of its series.

    In "future" mode every member of the session's series dated on or after
    the session's own date is deleted; earlier members survive. A session
    without a series is deleted alone in either mode.

    Returns:
        Number of sessions deleted

    Raises:
        ValidationError: If mode is unknown
        Session.DoesNotExist: If the session does not exist
    """
    if mode not in DELETE_MODES:
        raise ValidationError({
            'mode': f"Unknown delete mode {mode!r}, expected one of {', '.join(DELETE_MODES)}."
        })

    session = Session.objects.get(pk=session_id)

    with transaction.atomic():
        if mode == DELETE_FUTURE and session.series_id is not None:
            _, per_model = Session.objects.series_from(session.series_id, session.date).delete()
            count = per_model.get(Session._meta.label, 0)
            logger.info(
                "Deleted %d session(s) of series %s from %s",
                count, session.series_id, session.date
            )
            return count

        session.delete()
    return 1


@transaction.atomic
def complete_session(session_id: int) -> Session:
    """
    Mark a session as completed.

    Raises:
        Session.DoesNotExist: If the session does not exist
        ValidationError: If the session is already completed
    """
    session = Session.objects.select_for_update().get(pk=session_id)
    if session.completed:
        raise ValidationError({'completed': 'Session is already completed.'})

    session.completed = True
    session.save()
    return session


def get_sessions(
    site_id: Optional[int] = None,
    staff_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    completed: Optional[bool] = None,
    recurring: Optional[bool] = None
) -> List[Session]:
    """
    Get sessions filtered by site, staff, date range and flags.

    Raises:
        ValidationError: If start_date is after end_date
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError({'end': 'End date must not be before start date.'})

    queryset = Session.objects.with_details()
    if site_id:
        queryset = queryset.for_site(site_id)
    if staff_id:
        queryset = queryset.filter(staff_id=staff_id)
    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)
    if completed is not None:
        queryset = queryset.filter(completed=completed)
    if recurring is True:
        queryset = queryset.recurring()
    elif recurring is False:
        queryset = queryset.one_time()

    return list(queryset)


def get_calendar(
    start_date: date,
    end_date: date,
    site_id: Optional[int] = None,
    staff_id: Optional[int] = None
) -> Dict[date, List[LayoutSlot]]:
    """Sessions of a date window laid out into display columns per day."""
    if start_date > end_date:
        raise ValidationError({'end': 'End date must not be before start date.'})

    queryset = Session.objects.in_range(start_date, end_date).with_details()
    if site_id:
        queryset = queryset.for_site(site_id)
    if staff_id:
        queryset = queryset.filter(staff_id=staff_id)

    return layout_calendar(queryset)


def _apply_field_updates(obj, fields: dict) -> None:
    """Apply field updates to object."""
    for field_name, value in fields.items():
        setattr(obj, field_name, value)
