"""
Services package for the HOS Trip Planner.

Contains the planning engine, separated from views:
- rules / clock: HOS rule set and 15-minute slot primitives
- hos_service: trip segmentation into daily plans
- eld_service: 96-slot daily log grids
- violation_service: rule checks on plans and logs
- stop_service: rest/fuel stop placement on the route
- route_service: geocoding and routing collaborator
"""

from .rules import HOSConfig
from .hos_service import HOSService, InvalidTripError, RouteSummary, TripPlan
from .eld_service import ELDLogService, InvalidLogError
from .route_service import RouteService, RouteServiceError

__all__ = [
    'HOSConfig',
    'HOSService',
    'InvalidTripError',
    'RouteSummary',
    'TripPlan',
    'ELDLogService',
    'InvalidLogError',
    'RouteService',
    'RouteServiceError',
]
