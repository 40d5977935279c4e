"""
URL configuration for the planner app.

Mounted under /api/trips/.
"""

from django.urls import path
from .views import (
    TripListCreateView,
    TripDetailView,
    TripLogsView,
    TripLogDayView,
)

app_name = 'planner'

urlpatterns = [
    # GET /api/trips/ - List all trips
    # POST /api/trips/ - Create new trip with full planning
    path('', TripListCreateView.as_view(), name='trip_list_create'),

    # GET/DELETE /api/trips/{id}/
    path('<uuid:trip_id>/', TripDetailView.as_view(), name='trip_detail'),

    # GET /api/trips/{id}/logs/
    path('<uuid:trip_id>/logs/', TripLogsView.as_view(), name='trip_logs'),

    # GET /api/trips/{id}/logs/{day}/
    path('<uuid:trip_id>/logs/<int:day_number>/', TripLogDayView.as_view(), name='trip_log_day'),
]
