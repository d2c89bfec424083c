"""
Admin configuration for the scheduling app.
"""

from django.contrib import admin
from .models import HolidaySet, HolidayWindow, Room, Session, Site, Subject


class HolidayWindowInline(admin.TabularInline):
    model = HolidayWindow
    extra = 1
    fields = ['name', 'start_date', 'end_date', 'school_year']


@admin.register(HolidaySet)
class HolidaySetAdmin(admin.ModelAdmin):
    """Admin interface for HolidaySet model."""

    list_display = ['name']
    search_fields = ['name']
    inlines = [HolidayWindowInline]


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ['name', 'holiday_set']
    list_filter = ['holiday_set']
    search_fields = ['name']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['name', 'site']
    list_filter = ['site']


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    search_fields = ['name']


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    """Admin interface for Session model."""

    list_display = ['date', 'start_time', 'duration_minutes', 'site', 'staff', 'room', 'completed', 'series_id']
    list_filter = ['site', 'completed', 'weekday', 'date']
    search_fields = ['note', 'staff__username', 'site__name']
    date_hierarchy = 'date'
    filter_horizontal = ['subjects']

    fieldsets = (
        ('Booking', {
            'fields': ('site', 'room', 'staff', 'subjects', 'participant_ids', 'note')
        }),
        ('Schedule', {
            'fields': ('date', 'start_time', 'duration_minutes', 'completed')
        }),
        ('Series', {
            'fields': ('series_id', 'weekday')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['series_id', 'weekday', 'created_at', 'updated_at']
