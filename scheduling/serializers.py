"""
Serializers for the scheduling API.
"""

from rest_framework import serializers

from .models import HolidaySet, HolidayWindow, Session
from .types import DELETE_MODES, DELETE_SINGLE, MAX_SERIES_WEEKS


class SessionReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying Session (output)."""

    site_name = serializers.CharField(source='site.name', read_only=True)
    staff_name = serializers.SerializerMethodField()
    room_name = serializers.CharField(source='room.name', read_only=True, allow_null=True)
    subjects = serializers.SlugRelatedField(many=True, read_only=True, slug_field='name')
    start_time = serializers.TimeField(format='%H:%M')
    end_time = serializers.CharField(read_only=True)
    recurring = serializers.BooleanField(source='is_recurring', read_only=True)

    class Meta:
        model = Session
        fields = [
            'id',
            'site',
            'site_name',
            'staff',
            'staff_name',
            'room',
            'room_name',
            'subjects',
            'participant_ids',
            'date',
            'start_time',
            'end_time',
            'duration_minutes',
            'note',
            'completed',
            'recurring',
            'series_id',
            'weekday',
            'created_at',
            'updated_at',
        ]

    def get_staff_name(self, obj):
        if obj.staff is None:
            return None
        return obj.staff.get_full_name() or obj.staff.get_username()


class SessionCreateSerializer(serializers.Serializer):
    """Serializer for creating a single session or a weekly series."""

    site = serializers.IntegerField()
    date = serializers.DateField()
    start_time = serializers.TimeField(required=False, allow_null=True, input_formats=['%H:%M', '%H:%M:%S'])
    duration_minutes = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    staff = serializers.IntegerField(required=False, allow_null=True)
    room = serializers.IntegerField(required=False, allow_null=True)
    subject_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    participant_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    recurring = serializers.BooleanField(default=False)
    weeks_to_create = serializers.IntegerField(required=False, default=1)

    def validate_weeks_to_create(self, value):
        """Anything below two weeks is a single session."""
        return max(1, min(value, MAX_SERIES_WEEKS))

    def validate(self, data):
        """A non-recurring request always yields exactly one session."""
        if not data.get('recurring'):
            data['weeks_to_create'] = 1
        return data


class SessionUpdateSerializer(serializers.Serializer):
    """Serializer for editing a session."""

    date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False, input_formats=['%H:%M', '%H:%M:%S'])
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    staff = serializers.IntegerField(required=False, allow_null=True)
    room = serializers.IntegerField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True)
    completed = serializers.BooleanField(required=False)
    subject_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    participant_ids = serializers.ListField(child=serializers.CharField(), required=False)
    cascade_future = serializers.BooleanField(default=False)


class SessionDeleteQuerySerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=DELETE_MODES, default=DELETE_SINGLE)


class SessionListQuerySerializer(serializers.Serializer):
    """Serializer for session list filters."""

    site = serializers.IntegerField(required=False)
    staff = serializers.IntegerField(required=False)
    date = serializers.DateField(required=False)
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    completed = serializers.BooleanField(required=False, allow_null=True, default=None)
    recurring = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, data):
        """Ensure start is not after end."""
        start, end = data.get('start'), data.get('end')
        if start and end and start > end:
            raise serializers.ValidationError(
                "Start date must not be after end date."
            )
        return data


class ConflictQuerySerializer(serializers.Serializer):
    """Serializer for conflict check query parameters."""

    staff = serializers.IntegerField()
    date = serializers.DateField()
    start_time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
    duration = serializers.IntegerField(min_value=1, required=False, default=None, allow_null=True)
    exclude = serializers.IntegerField(required=False, allow_null=True, default=None)


class CalendarQuerySerializer(serializers.Serializer):
    """Serializer for calendar window query parameters."""

    start = serializers.DateField()
    end = serializers.DateField()
    site = serializers.IntegerField(required=False, allow_null=True, default=None)
    staff = serializers.IntegerField(required=False, allow_null=True, default=None)

    def validate(self, data):
        """Ensure start is not after end."""
        if data['start'] > data['end']:
            raise serializers.ValidationError(
                "Start date must not be after end date."
            )
        return data


class LayoutSlotSerializer(serializers.Serializer):
    session = SessionReadSerializer()
    column_index = serializers.IntegerField()
    column_count = serializers.IntegerField()


class HolidayWindowSerializer(serializers.ModelSerializer):

    class Meta:
        model = HolidayWindow
        fields = ['id', 'holiday_set', 'name', 'start_date', 'end_date', 'school_year']
        read_only_fields = ['holiday_set']

    def validate(self, data):
        """Validate window range."""
        if data['start_date'] > data['end_date']:
            raise serializers.ValidationError({
                'end_date': 'End date must not be before start date.'
            })
        return data


class HolidaySetSerializer(serializers.ModelSerializer):
    windows = HolidayWindowSerializer(many=True, read_only=True)
    site_count = serializers.IntegerField(source='sites.count', read_only=True)

    class Meta:
        model = HolidaySet
        fields = ['id', 'name', 'windows', 'site_count']
