"""
Trip Models for the HOS Trip Planner.

Stores planned trips, their daily log sheets and placed stops for
persistence and historical tracking.
"""

from django.db import models
from django.core.validators import MinValueValidator
import uuid


class Trip(models.Model):
    """
    Represents a planned trip with origin, pickup, and dropoff locations.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Location inputs
    current_location = models.CharField(max_length=500, help_text="Starting location address")
    pickup_location = models.CharField(max_length=500, help_text="Pickup location address")
    dropoff_location = models.CharField(max_length=500, help_text="Dropoff location address")

    # Coordinates (stored after geocoding)
    current_location_lat = models.FloatField(null=True, blank=True)
    current_location_lon = models.FloatField(null=True, blank=True)
    pickup_location_lat = models.FloatField(null=True, blank=True)
    pickup_location_lon = models.FloatField(null=True, blank=True)
    dropoff_location_lat = models.FloatField(null=True, blank=True)
    dropoff_location_lon = models.FloatField(null=True, blank=True)

    # HOS tracking
    cycle_hours_used = models.FloatField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Hours already used in the 8-day cycle"
    )

    # Planning results
    total_distance_miles = models.FloatField(null=True, blank=True)
    total_driving_hours = models.FloatField(null=True, blank=True)
    total_on_duty_hours = models.FloatField(null=True, blank=True)
    total_days = models.IntegerField(null=True, blank=True)
    cycle_compliant = models.BooleanField(default=True)
    driving_prohibited = models.BooleanField(default=False)
    start_date = models.DateField(null=True, blank=True)
    route_geometry = models.JSONField(default=list, blank=True, help_text="Route points as [lat, lng]")

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Trip'
        verbose_name_plural = 'Trips'

    def __str__(self):
        return f"Trip {self.id}: {self.current_location} -> {self.dropoff_location}"

    @property
    def locations(self):
        return {
            'current': {
                'address': self.current_location,
                'latitude': self.current_location_lat,
                'longitude': self.current_location_lon
            },
            'pickup': {
                'address': self.pickup_location,
                'latitude': self.pickup_location_lat,
                'longitude': self.pickup_location_lon
            },
            'dropoff': {
                'address': self.dropoff_location,
                'latitude': self.dropoff_location_lat,
                'longitude': self.dropoff_location_lon
            }
        }


class DailyLogRecord(models.Model):
    """
    One day's ELD log sheet for a trip: the 96-slot grid and its summary.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='daily_logs')

    day_of_trip = models.IntegerField(help_text="Day number of the trip (1, 2, 3...)")
    log_date = models.DateField()

    grid = models.JSONField(default=list, help_text="96 duty statuses, one per 15 minutes")
    duty_status_changes = models.JSONField(default=list, blank=True)

    # Hours breakdown
    total_drive_time = models.FloatField(default=0)
    total_on_duty_time = models.FloatField(default=0)
    total_off_duty_time = models.FloatField(default=0)
    total_sleeper_berth_time = models.FloatField(default=0)

    # Distance
    odometer_start = models.FloatField(default=0)
    odometer_end = models.FloatField(default=0)
    distance_traveled = models.FloatField(default=0)

    # Compliance
    cycle_hours_used = models.FloatField(default=0)
    prior_off_duty_hours = models.FloatField(null=True, blank=True)
    violations = models.JSONField(default=list, blank=True)
    hos_compliant = models.BooleanField(default=True)

    class Meta:
        ordering = ['trip', 'day_of_trip']
        unique_together = ['trip', 'day_of_trip']
        verbose_name = 'Daily Log'
        verbose_name_plural = 'Daily Logs'

    def __str__(self):
        return f"Day {self.day_of_trip} - {self.log_date}: {self.total_drive_time}h driving"

    @classmethod
    def from_daily_log(cls, trip, log):
        """Unsaved record for a DailyLog produced by ELDLogService."""
        return cls(
            trip=trip,
            day_of_trip=log.day_of_trip,
            log_date=log.date,
            grid=[status.value for status in log.grid],
            duty_status_changes=[c.to_dict() for c in log.duty_status_changes],
            total_drive_time=log.total_drive_time,
            total_on_duty_time=log.total_on_duty_time,
            total_off_duty_time=log.total_off_duty_time,
            total_sleeper_berth_time=log.total_sleeper_berth_time,
            odometer_start=log.odometer_start,
            odometer_end=log.odometer_end,
            distance_traveled=log.distance_traveled,
            cycle_hours_used=log.cycle_hours_used,
            prior_off_duty_hours=log.prior_off_duty_hours,
            violations=list(log.violations),
            hos_compliant=log.hos_compliant
        )


class TripStop(models.Model):
    """
    Represents a planned stop during a trip (rest stops, fuel stops).
    """
    STOP_TYPE_CHOICES = [
        ('rest', 'Rest Stop (10-hour off-duty)'),
        ('fuel', 'Fuel Stop'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='stops')

    stop_type = models.CharField(max_length=20, choices=STOP_TYPE_CHOICES)
    day_number = models.IntegerField(help_text="Trip day on which the stop happens")
    latitude = models.FloatField()
    longitude = models.FloatField()
    miles_from_start = models.FloatField(help_text="Miles from trip start")
    duration_hours = models.FloatField(help_text="Stop duration in hours")
    notes = models.CharField(max_length=500, blank=True)

    # Order in the trip
    sequence = models.IntegerField(help_text="Order of this stop in the trip")

    class Meta:
        ordering = ['trip', 'sequence']
        verbose_name = 'Trip Stop'
        verbose_name_plural = 'Trip Stops'

    def __str__(self):
        return f"{self.get_stop_type_display()} at mile {self.miles_from_start:.1f}"
