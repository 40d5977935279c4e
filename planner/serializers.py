"""
Serializers for the Trip Planning API.

Handles validation of planning requests and serialization of trips,
daily logs and stops.
"""

from rest_framework import serializers
from .models import Trip, DailyLogRecord, TripStop


class LogMetadataSerializer(serializers.Serializer):
    """
    Optional carrier/driver fields printed on every log sheet.
    """
    driver_name = serializers.CharField(max_length=200, required=False, default="Demo Driver")
    carrier_name = serializers.CharField(max_length=200, required=False, default="HOS Trip Planner Demo")
    vehicle_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    trailer_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    starting_odometer = serializers.FloatField(min_value=0, required=False, default=0)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)


class TripPlanInputSerializer(LogMetadataSerializer):
    """
    Input serializer for trip planning requests.
    """
    current_location = serializers.CharField(
        max_length=500,
        help_text="Starting location address (e.g., 'Chicago, IL')"
    )
    pickup_location = serializers.CharField(
        max_length=500,
        help_text="Pickup location address"
    )
    dropoff_location = serializers.CharField(
        max_length=500,
        help_text="Dropoff location address"
    )
    current_cycle_used_hours = serializers.FloatField(
        min_value=0,
        default=0,
        help_text="Hours already used in the 8-day/70-hour cycle"
    )
    stop_placement = serializers.ChoiceField(
        choices=['linear', 'polyline'],
        required=False,
        default='linear',
        help_text="Place stops on the straight line between endpoints or along the route"
    )

    def validate(self, data):
        """Validate that consecutive locations are different."""
        locations = [
            data['current_location'].lower().strip(),
            data['pickup_location'].lower().strip(),
            data['dropoff_location'].lower().strip()
        ]

        if locations[1] == locations[2]:
            raise serializers.ValidationError({
                'dropoff_location': 'Dropoff location cannot be the same as pickup location.'
            })

        return data


class RouteInputSerializer(serializers.Serializer):
    """
    Input serializer for routing-only requests.
    """
    current_location = serializers.CharField(max_length=500)
    pickup_location = serializers.CharField(max_length=500)
    dropoff_location = serializers.CharField(max_length=500)


class ELDGenerateInputSerializer(LogMetadataSerializer):
    """
    Input serializer for planning straight from trip totals (no routing).
    """
    total_distance_miles = serializers.FloatField(min_value=0)
    total_duration_hours = serializers.FloatField(
        min_value=0,
        required=False,
        default=0,
        help_text="Pure driving time; estimated from average speed when 0"
    )
    current_cycle_used_hours = serializers.FloatField(min_value=0, default=0)


class LogValidateInputSerializer(serializers.Serializer):
    """
    Input serializer for externally supplied daily logs.
    """
    logs = serializers.ListField(
        child=serializers.DictField(),
        min_length=1,
        help_text="Daily logs, each with a 96-entry 'grid' of duty statuses"
    )


class TripModelSerializer(serializers.ModelSerializer):
    """
    Full model serializer for Trip persistence.
    """
    class Meta:
        model = Trip
        exclude = ['route_geometry']
        read_only_fields = ['id', 'created_at', 'updated_at']


class DailyLogRecordSerializer(serializers.ModelSerializer):
    """
    Model serializer for stored daily logs.
    """
    date = serializers.DateField(source='log_date', read_only=True)

    class Meta:
        model = DailyLogRecord
        exclude = ['trip', 'log_date']
        read_only_fields = ['id']


class TripStopModelSerializer(serializers.ModelSerializer):
    """
    Model serializer for TripStop persistence.
    """
    class Meta:
        model = TripStop
        exclude = ['trip']
        read_only_fields = ['id']


class HealthCheckSerializer(serializers.Serializer):
    """
    Serializer for health check response.
    """
    status = serializers.CharField()
    message = serializers.CharField()
    version = serializers.CharField()
    timestamp = serializers.DateTimeField()
