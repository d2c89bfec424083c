"""Views for the scheduling API."""

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .conflicts import conflict_message, find_conflicts
from .models import HolidaySet, HolidayWindow, Session
from .serializers import (
    CalendarQuerySerializer,
    ConflictQuerySerializer,
    HolidaySetSerializer,
    HolidayWindowSerializer,
    LayoutSlotSerializer,
    SessionCreateSerializer,
    SessionDeleteQuerySerializer,
    SessionListQuerySerializer,
    SessionReadSerializer,
    SessionUpdateSerializer,
)
from . import services
from .types import SessionRequest, SessionUpdateData


class SessionListCreateView(APIView):
    """
    List sessions or create a single session / weekly series.

    GET /api/sessions/?site=&staff=&date=&start=&end=&completed=&recurring=
    POST /api/sessions/
    """

    def get(self, request):
        """List sessions matching the filters."""
        query_serializer = SessionListQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        start, end = data.get('start'), data.get('end')
        if data.get('date'):
            start = end = data['date']

        sessions = services.get_sessions(
            site_id=data.get('site'),
            staff_id=data.get('staff'),
            start_date=start,
            end_date=end,
            completed=data.get('completed'),
            recurring=data.get('recurring'),
        )
        serializer = SessionReadSerializer(sessions, many=True)
        return Response(serializer.data)

    def post(self, request):
        """Create one session, or one per week for recurring requests."""
        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        result = services.schedule_sessions(SessionRequest(
            site_id=data['site'],
            date=data['date'],
            start_time=data.get('start_time'),
            duration_minutes=data.get('duration_minutes'),
            staff_id=data.get('staff'),
            room_id=data.get('room'),
            subject_ids=data.get('subject_ids', []),
            participant_ids=data.get('participant_ids', []),
            note=data.get('note', ''),
            weeks_to_create=data.get('weeks_to_create', 1),
        ))

        return Response({
            'series_id': result.series_id,
            'sessions': SessionReadSerializer(result.created, many=True).data,
            'skipped_dates': [
                {'date': week.date, 'reason': week.reason} for week in result.skipped
            ],
            'failed': [
                {'date': week.date, 'error': week.error} for week in result.failed
            ],
            'conflicts': [
                {
                    'date': day,
                    'message': conflict_message(conflicts),
                    'sessions': [conflict.as_dict() for conflict in conflicts],
                }
                for day, conflicts in sorted(result.conflicts.items())
            ],
        }, status=status.HTTP_201_CREATED)


class SessionDetailView(APIView):
    """
    Retrieve, update, or delete a session.

    GET /api/sessions/{id}/ - Retrieve session
    PATCH /api/sessions/{id}/ - Update session (cascade_future for the series)
    DELETE /api/sessions/{id}/?mode=single|future - Delete session(s)
    """

    def get(self, request, pk):
        """Retrieve a session."""
        session = get_object_or_404(Session.objects.with_details(), pk=pk)
        serializer = SessionReadSerializer(session)
        return Response(serializer.data)

    def patch(self, request, pk):
        """Update a session and optionally the rest of its series."""
        serializer = SessionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        update_data = SessionUpdateData(
            date=data.get('date'),
            start_time=data.get('start_time'),
            duration_minutes=data.get('duration_minutes'),
            staff_id=data.get('staff'),
            room_id=data.get('room'),
            note=data.get('note'),
            completed=data.get('completed'),
            subject_ids=data.get('subject_ids'),
            participant_ids=data.get('participant_ids'),
            clear_staff='staff' in data and data['staff'] is None,
            clear_room='room' in data and data['room'] is None,
        )
        session = services.update_session(
            pk,
            update_data,
            cascade_future=data.get('cascade_future', False)
        )

        response_serializer = SessionReadSerializer(session)
        return Response(response_serializer.data)

    def delete(self, request, pk):
        """Delete a session, or it and all later members of its series."""
        query_serializer = SessionDeleteQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        deleted = services.delete_session(pk, mode=query_serializer.validated_data['mode'])

        return Response({
            'message': f'{deleted} session(s) deleted.',
            'deleted': deleted,
        }, status=status.HTTP_200_OK)


class SessionCompleteView(APIView):
    """
    Mark a session as completed.

    POST /api/sessions/{id}/complete/
    """

    def post(self, request, pk):
        """Mark session as completed."""
        session = services.complete_session(pk)

        return Response({
            'message': f'Session on {session.date} has been marked as completed.'
        }, status=status.HTTP_200_OK)


class ConflictCheckView(APIView):
    """
    Check a staff member for double bookings.

    GET /api/sessions/conflicts/?staff=&date=&start_time=HH:MM&duration=90&exclude=
    """

    def get(self, request):
        """Report sessions overlapping the candidate booking."""
        query_serializer = ConflictQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        conflicts = find_conflicts(
            data['staff'],
            data['date'],
            data['start_time'],
            duration_minutes=data.get('duration'),
            exclude_session_id=data.get('exclude'),
        )

        return Response({
            'has_conflict': bool(conflicts),
            'conflicts': [conflict.as_dict() for conflict in conflicts],
            'message': conflict_message(conflicts),
        })


class CalendarView(APIView):
    """
    Sessions of a date window, laid out into display columns per day.

    GET /api/calendar/?start=&end=&site=&staff=
    """

    def get(self, request):
        query_serializer = CalendarQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        days = services.get_calendar(
            data['start'],
            data['end'],
            site_id=data.get('site'),
            staff_id=data.get('staff'),
        )

        return Response([
            {'date': day, 'slots': LayoutSlotSerializer(slots, many=True).data}
            for day, slots in days.items()
        ])


class HolidaySetListCreateView(APIView):
    """
    List holiday sets with their windows or create a new set.

    GET /api/holiday-sets/
    POST /api/holiday-sets/
    """

    def get(self, request):
        sets = HolidaySet.objects.prefetch_related('windows')
        serializer = HolidaySetSerializer(sets, many=True)
        return Response(serializer.data)

    def post(self, request):
        serializer = HolidaySetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class HolidayWindowCreateView(APIView):
    """
    Add a window to a holiday set.

    POST /api/holiday-sets/{id}/windows/
    """

    def post(self, request, pk):
        holiday_set = get_object_or_404(HolidaySet, pk=pk)
        serializer = HolidayWindowSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(holiday_set=holiday_set)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class HolidayWindowDetailView(APIView):
    """
    Remove a holiday window. Sessions already generated are kept.

    DELETE /api/holiday-windows/{id}/
    """

    def delete(self, request, pk):
        window = get_object_or_404(HolidayWindow, pk=pk)
        name = window.name
        window.delete()
        return Response({
            'message': f'Holiday "{name}" has been deleted.'
        }, status=status.HTTP_200_OK)
