"""
Trip Planning API Views.

REST API for the HOS Trip Planner with:
- Health check
- Route calculation
- Trip planning, storage and retrieval
- ELD log generation and validation
- HOS configuration
"""

import logging
from datetime import date, datetime

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Trip, DailyLogRecord, TripStop
from .serializers import (
    DailyLogRecordSerializer,
    ELDGenerateInputSerializer,
    HealthCheckSerializer,
    LogValidateInputSerializer,
    RouteInputSerializer,
    TripModelSerializer,
    TripPlanInputSerializer,
    TripStopModelSerializer,
)
from .services import (
    ELDLogService, HOSConfig, HOSService, InvalidLogError, InvalidTripError,
    RouteService, RouteServiceError,
)
from .services import violation_service
from .services.clock import DutyStatus
from .services.eld_service import generate_grid_data
from .services.hos_service import TripRequest
from .services.stop_service import place_stops

logger = logging.getLogger(__name__)

API_VERSION = '1.0.0'


def _error(message, details, http_status):
    return Response({'error': message, 'details': details}, status=http_status)


def _route_failed(e):
    logger.error(f"Route calculation failed: {e}")
    return _error('Route calculation failed', str(e), status.HTTP_502_BAD_GATEWAY)


def _log_service(data, config):
    return ELDLogService(
        carrier_name=data.get('carrier_name', 'HOS Trip Planner Demo'),
        driver_name=data.get('driver_name', 'Demo Driver'),
        vehicle_id=data.get('vehicle_id', ''),
        trailer_id=data.get('trailer_id', ''),
        starting_odometer=data.get('starting_odometer', 0),
        config=config
    )


def _plan_summary(trip_plan, logs):
    return {
        'total_days': trip_plan.total_days_needed,
        'total_distance_miles': trip_plan.total_distance_miles,
        'total_driving_hours': trip_plan.total_driving_hours,
        'total_on_duty_hours': trip_plan.total_on_duty_hours,
        'cycle_hours_remaining': round(trip_plan.cycle_hours_remaining, 2),
        'cycle_compliant': trip_plan.cycle_compliant,
        'driving_prohibited': trip_plan.driving_prohibited,
        'degraded': trip_plan.degraded,
        'hos_compliant': all(log.hos_compliant for log in logs),
    }


class HealthCheckView(APIView):
    """
    Health check endpoint for monitoring and load balancers.

    GET /api/health/
    """

    def get(self, request):
        """Return health status of the API."""
        data = {
            'status': 'healthy',
            'message': 'HOS Trip Planner API is running',
            'version': API_VERSION,
            'timestamp': datetime.now()
        }
        serializer = HealthCheckSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


# =============================================================================
# Route Service - POST /api/routes/calculate
# =============================================================================

class RouteCalculateView(APIView):
    """
    POST /api/routes/calculate
    Geocode the trip locations and route current -> pickup -> dropoff.
    """

    def post(self, request):
        input_serializer = RouteInputSerializer(data=request.data)
        if not input_serializer.is_valid():
            return _error('Validation failed', input_serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = input_serializer.validated_data
        try:
            trip_route = RouteService().get_trip_routes(
                current_location=data['current_location'],
                pickup_location=data['pickup_location'],
                dropoff_location=data['dropoff_location']
            )
        except RouteServiceError as e:
            return _route_failed(e)

        return Response(trip_route.to_dict(), status=status.HTTP_200_OK)


# =============================================================================
# Trip Management - /api/trips/
# =============================================================================

class TripListCreateView(APIView):
    """
    GET /api/trips/ - List all trips
    POST /api/trips/ - Plan a trip (route -> plan -> logs -> stops) and store it
    """

    def get(self, request):
        trips = Trip.objects.all().order_by('-created_at')
        serializer = TripModelSerializer(trips, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request):
        """
        Request:
        {
            "current_location": "Chicago, IL",
            "pickup_location": "Indianapolis, IN",
            "dropoff_location": "Nashville, TN",
            "current_cycle_used_hours": 0
        }
        """
        input_serializer = TripPlanInputSerializer(data=request.data)
        if not input_serializer.is_valid():
            return _error('Validation failed', input_serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = input_serializer.validated_data
        config = HOSConfig.from_settings()

        try:
            TripRequest(
                current_location=data['current_location'],
                pickup_location=data['pickup_location'],
                dropoff_location=data['dropoff_location'],
                cycle_hours_used=data['current_cycle_used_hours']
            ).validate(config)

            logger.info(
                f"Planning trip: {data['current_location']} -> "
                f"{data['pickup_location']} -> {data['dropoff_location']}"
            )

            # Step 1: Route both legs
            trip_route = RouteService().get_trip_routes(
                current_location=data['current_location'],
                pickup_location=data['pickup_location'],
                dropoff_location=data['dropoff_location']
            )

            # Step 2: Segment into HOS-compliant days
            trip_plan = HOSService(config).plan(
                trip_route.route,
                data['current_cycle_used_hours'],
                approach=trip_route.approach,
                start_date=data.get('start_date') or date.today(),
                locations={
                    'current': data['current_location'],
                    'pickup': data['pickup_location'],
                    'dropoff': data['dropoff_location'],
                }
            )

            # Step 3: Daily log sheets
            logs = _log_service(data, config).generate_logs(trip_plan)

            # Step 4: Rest and fuel stops on the map
            stops = place_stops(
                trip_plan, trip_route.geometry, mode=data['stop_placement'], config=config
            )
        except InvalidTripError as e:
            return _error('Invalid trip', str(e), status.HTTP_400_BAD_REQUEST)
        except RouteServiceError as e:
            return _route_failed(e)
        except Exception as e:
            logger.exception(f"Trip planning failed: {e}")
            return _error('Trip planning failed', str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        try:
            trip = self._persist(data, trip_route, trip_plan, logs, stops)
        except Exception as e:
            logger.exception(f"Trip creation failed: {e}")
            return _error('Trip creation failed', str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info(f"Trip {trip.id} created: {trip_plan.total_days_needed} day(s)")
        return Response({
            'id': str(trip.id),
            'trip_id': str(trip.id),
            'locations': trip_route.locations,
            'route': trip_route.to_dict(),
            'plan': trip_plan.to_dict(),
            'summary': _plan_summary(trip_plan, logs),
            'daily_logs': [log.to_dict() for log in logs],
            'planned_stops': [stop.to_dict() for stop in stops],
            'created_at': trip.created_at.isoformat()
        }, status=status.HTTP_201_CREATED)

    @staticmethod
    @transaction.atomic
    def _persist(data, trip_route, trip_plan, logs, stops):
        locations = trip_route.locations
        trip = Trip.objects.create(
            current_location=data['current_location'],
            pickup_location=data['pickup_location'],
            dropoff_location=data['dropoff_location'],
            current_location_lat=locations['current']['latitude'],
            current_location_lon=locations['current']['longitude'],
            pickup_location_lat=locations['pickup']['latitude'],
            pickup_location_lon=locations['pickup']['longitude'],
            dropoff_location_lat=locations['dropoff']['latitude'],
            dropoff_location_lon=locations['dropoff']['longitude'],
            cycle_hours_used=data['current_cycle_used_hours'],
            total_distance_miles=trip_plan.total_distance_miles,
            total_driving_hours=trip_plan.total_driving_hours,
            total_on_duty_hours=trip_plan.total_on_duty_hours,
            total_days=trip_plan.total_days_needed,
            cycle_compliant=trip_plan.cycle_compliant,
            driving_prohibited=trip_plan.driving_prohibited,
            start_date=trip_plan.start_date,
            route_geometry=[list(point) for point in trip_route.geometry]
        )
        DailyLogRecord.objects.bulk_create(
            DailyLogRecord.from_daily_log(trip, log) for log in logs
        )
        TripStop.objects.bulk_create(
            TripStop(
                trip=trip,
                stop_type=stop.stop_type,
                day_number=stop.day,
                latitude=stop.latitude,
                longitude=stop.longitude,
                miles_from_start=stop.miles,
                duration_hours=stop.duration_hours,
                notes=stop.notes,
                sequence=index + 1
            )
            for index, stop in enumerate(stops)
        )
        return trip


class TripDetailView(APIView):
    """
    GET /api/trips/{id}/ - Get trip details
    DELETE /api/trips/{id}/ - Delete trip
    """

    def get(self, request, trip_id):
        """Get full trip details including stops and logs."""
        trip = get_object_or_404(Trip, id=trip_id)
        data = TripModelSerializer(trip).data
        data.update({
            'locations': trip.locations,
            'route_coordinates': [
                {'latitude': lat, 'longitude': lng} for lat, lng in trip.route_geometry
            ],
            'stops': TripStopModelSerializer(trip.stops.all(), many=True).data,
            'daily_logs': DailyLogRecordSerializer(trip.daily_logs.all(), many=True).data,
        })
        return Response(data, status=status.HTTP_200_OK)

    def delete(self, request, trip_id):
        """Delete trip and all related data."""
        trip = get_object_or_404(Trip, id=trip_id)
        trip.delete()
        logger.info(f"Trip {trip_id} deleted")
        return Response(status=status.HTTP_204_NO_CONTENT)


class TripLogsView(APIView):
    """
    GET /api/trips/{id}/logs/
    All stored daily logs for a trip.
    """

    def get(self, request, trip_id):
        trip = get_object_or_404(Trip, id=trip_id)
        return Response({
            'trip_id': str(trip.id),
            'logs': DailyLogRecordSerializer(trip.daily_logs.all(), many=True).data
        }, status=status.HTTP_200_OK)


class TripLogDayView(APIView):
    """
    GET /api/trips/{id}/logs/{day}/
    One stored daily log with grid data for rendering.
    """

    def get(self, request, trip_id, day_number):
        trip = get_object_or_404(Trip, id=trip_id)
        record = get_object_or_404(DailyLogRecord, trip=trip, day_of_trip=day_number)
        data = DailyLogRecordSerializer(record).data
        data['grid_data'] = generate_grid_data([DutyStatus.parse(s) for s in record.grid])
        return Response(data, status=status.HTTP_200_OK)


# =============================================================================
# ELD Log Generation & Validation
# =============================================================================

class ELDGenerateView(APIView):
    """
    POST /api/eld/generate
    Plan and generate ELD logs from trip totals (no routing, not persisted).
    """

    def post(self, request):
        """
        Request:
        {
            "total_distance_miles": 1200,
            "total_duration_hours": 20,
            "current_cycle_used_hours": 10
        }
        """
        input_serializer = ELDGenerateInputSerializer(data=request.data)
        if not input_serializer.is_valid():
            return _error('Validation failed', input_serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = input_serializer.validated_data
        config = HOSConfig.from_settings()

        try:
            trip_plan = HOSService(config).plan_from_totals(
                distance_miles=data['total_distance_miles'],
                duration_hours=data['total_duration_hours'],
                cycle_hours_used=data['current_cycle_used_hours'],
                start_date=data.get('start_date') or date.today()
            )
            logs = _log_service(data, config).generate_logs(trip_plan)
        except InvalidTripError as e:
            return _error('Invalid trip', str(e), status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            logger.exception(f"ELD generation failed: {e}")
            return _error('ELD generation failed', str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'plan': trip_plan.to_dict(),
            'logs': [log.to_dict() for log in logs],
            'summary': _plan_summary(trip_plan, logs)
        }, status=status.HTTP_200_OK)


class ELDValidateView(APIView):
    """
    POST /api/eld/validate
    Run the HOS violation checks on externally supplied daily logs.
    """

    def post(self, request):
        input_serializer = LogValidateInputSerializer(data=request.data)
        if not input_serializer.is_valid():
            return _error('Validation failed', input_serializer.errors, status.HTTP_400_BAD_REQUEST)

        config = HOSConfig.from_settings()
        try:
            logs = ELDLogService(config=config).validate_logs(
                input_serializer.validated_data['logs']
            )
        except InvalidLogError as e:
            return _error('Invalid log', str(e), status.HTTP_400_BAD_REQUEST)

        return Response({
            'logs': [
                {
                    'day_of_trip': log.day_of_trip,
                    'date': log.date.isoformat(),
                    'hours_by_status': log.hours_by_status,
                    'violations': list(log.violations),
                    'hos_compliant': log.hos_compliant,
                }
                for log in logs
            ],
            'hos_compliant': all(log.hos_compliant for log in logs),
            'cycle_compliant': violation_service.is_cycle_compliant(logs, config)
        }, status=status.HTTP_200_OK)


# =============================================================================
# HOS Configuration
# =============================================================================

class HOSConfigView(APIView):
    """
    GET /api/config/hos - Get the active HOS rules and assumptions
    """

    def get(self, request):
        config = HOSConfig.from_settings()
        return Response({
            'config': config.to_dict(),
            'cycle': {
                'days': config.cycle_days,
                'hours': config.cycle_hours,
                'description': f'{config.cycle_hours:g} hours in {config.cycle_days} consecutive days'
            },
            'daily_limits': {
                'max_driving_hours': config.max_driving_hours,
                'max_on_duty_hours': config.max_on_duty_hours,
                'description': (
                    f'{config.max_driving_hours:g} hours driving within '
                    f'{config.max_on_duty_hours:g}-hour window'
                )
            },
            'breaks': {
                'break_required_after_hours': config.break_required_after_hours,
                'break_duration_hours': config.break_duration_hours,
                'description': (
                    f'{config.break_duration_hours * 60:g}-minute break required after '
                    f'{config.break_required_after_hours:g} hours driving'
                )
            },
            'rest': {
                'off_duty_reset_hours': config.off_duty_reset_hours,
                'rest_status': config.rest_status.value,
                'description': f'{config.off_duty_reset_hours:g}-hour off-duty between duty periods'
            },
            'assumptions': [
                'Property-carrying driver (not passenger)',
                f'{config.cycle_hours:g}-hour/{config.cycle_days}-day cycle',
                f'Fueling every {config.fuel_interval_miles:,.0f} miles',
                f'{config.pickup_duration_hours:g} hour for pickup, '
                f'{config.dropoff_duration_hours:g} hour for dropoff',
                f'Shift starts at {config.shift_start_hour:g}:00 each day',
                'Log grid in 15-minute increments'
            ]
        }, status=status.HTTP_200_OK)


@api_view(['GET'])
def api_root(request):
    """
    GET /api/
    API documentation and endpoint listing.
    """
    return Response({
        'name': 'HOS Trip Planner API',
        'version': API_VERSION,
        'description': 'Trip segmentation and ELD duty log grids under FMCSA HOS rules',
        'endpoints': {
            'health': {
                'GET /api/health/': 'Health check'
            },
            'routes': {
                'POST /api/routes/calculate': 'Calculate route between locations'
            },
            'trips': {
                'GET /api/trips/': 'List all trips',
                'POST /api/trips/': 'Create new trip with full planning',
                'GET /api/trips/{id}/': 'Get trip details',
                'DELETE /api/trips/{id}/': 'Delete trip',
                'GET /api/trips/{id}/logs/': 'Get daily logs for a trip',
                'GET /api/trips/{id}/logs/{day}/': 'Get one day log with grid data'
            },
            'eld': {
                'POST /api/eld/generate': 'Plan and generate ELD logs from trip totals',
                'POST /api/eld/validate': 'Check supplied daily logs for HOS violations'
            },
            'config': {
                'GET /api/config/hos': 'Get HOS rules and assumptions'
            }
        }
    })
