"""
URL routing for the scheduling API.
"""

from django.urls import path
from .views import (
    CalendarView,
    ConflictCheckView,
    HolidaySetListCreateView,
    HolidayWindowCreateView,
    HolidayWindowDetailView,
    SessionCompleteView,
    SessionDetailView,
    SessionListCreateView,
)

urlpatterns = [
    path('sessions/', SessionListCreateView.as_view(), name='session-list-create'),
    path('sessions/conflicts/', ConflictCheckView.as_view(), name='session-conflicts'),
    path('sessions/<int:pk>/', SessionDetailView.as_view(), name='session-detail'),
    path('sessions/<int:pk>/complete/', SessionCompleteView.as_view(), name='session-complete'),
    path('calendar/', CalendarView.as_view(), name='calendar'),
    path('holiday-sets/', HolidaySetListCreateView.as_view(), name='holiday-set-list-create'),
    path('holiday-sets/<int:pk>/windows/', HolidayWindowCreateView.as_view(), name='holiday-window-create'),
    path('holiday-windows/<int:pk>/', HolidayWindowDetailView.as_view(), name='holiday-window-detail'),
]
