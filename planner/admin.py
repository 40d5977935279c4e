"""
Admin configuration for Trip models.
"""

from django.contrib import admin
from .models import Trip, DailyLogRecord, TripStop


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ['id', 'current_location', 'dropoff_location', 'total_distance_miles', 'total_days', 'cycle_compliant', 'created_at']
    list_filter = ['cycle_compliant', 'created_at']
    search_fields = ['current_location', 'pickup_location', 'dropoff_location']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(DailyLogRecord)
class DailyLogRecordAdmin(admin.ModelAdmin):
    list_display = ['trip', 'day_of_trip', 'log_date', 'total_drive_time', 'distance_traveled', 'hos_compliant']
    list_filter = ['hos_compliant', 'log_date']


@admin.register(TripStop)
class TripStopAdmin(admin.ModelAdmin):
    list_display = ['trip', 'stop_type', 'day_number', 'miles_from_start', 'sequence']
    list_filter = ['stop_type']
