"""
Stop Placement Service.

Geo-locates the rest and fuel stops of a TripPlan on the route:
- one rest stop where each non-final day ends
- one fuel stop at every fuel stop recorded in the daily plans

Each stop sits at fraction = cumulative miles / total trip miles of the route.
The default "linear" mode interpolates straight between the route's first and
last point; "polyline" mode walks the route geometry by great-circle distance.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .hos_service import TripPlan
from .rules import HOSConfig

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]

EARTH_RADIUS_MILES = 3958.8

REST_STOP = 'rest'
FUEL_STOP = 'fuel'


@dataclass(frozen=True)
class PlannedStop:
    """A rest or fuel stop placed on the route."""
    stop_type: str
    day: int
    miles: float
    fraction: float
    latitude: float
    longitude: float
    duration_hours: float
    notes: str = ""

    def to_dict(self) -> Dict:
        return {
            'type': self.stop_type,
            'day': self.day,
            'miles': round(self.miles, 1),
            'fraction': round(self.fraction, 4),
            'latitude': self.latitude,
            'longitude': self.longitude,
            'duration_hours': self.duration_hours,
            'notes': self.notes,
        }


def locate(start: LatLng, end: LatLng, f: float) -> LatLng:
    """Linear interpolation between two points for 0 < f < 1."""
    if not 0 < f < 1:
        raise ValueError(f"Fraction must be strictly between 0 and 1, got {f}")
    lat = start[0] + (end[0] - start[0]) * f
    lng = start[1] + (end[1] - start[1]) * f
    return lat, lng


def haversine_miles(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two (lat, lng) points."""
    lat1, lng1, lat2, lng2 = map(math.radians, (a[0], a[1], b[0], b[1]))
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_MILES * math.asin(min(1.0, math.sqrt(h)))


def locate_along_polyline(geometry: Sequence[LatLng], f: float) -> LatLng:
    """
    Point at fraction f of the polyline's arc length.

    Walks the segments by cumulative great-circle length and interpolates
    linearly inside the segment containing the target distance.
    """
    if not 0 < f < 1:
        raise ValueError(f"Fraction must be strictly between 0 and 1, got {f}")
    if not geometry:
        raise ValueError("Geometry is empty")
    if len(geometry) == 1:
        return tuple(geometry[0])

    lengths = [haversine_miles(a, b) for a, b in zip(geometry, geometry[1:])]
    total = sum(lengths)
    if total <= 0:
        return tuple(geometry[0])

    target = total * f
    walked = 0.0
    for index, length in enumerate(lengths):
        if length > 0 and walked + length >= target:
            inside = (target - walked) / length
            if inside <= 0:
                return tuple(geometry[index])
            if inside >= 1:
                return tuple(geometry[index + 1])
            return locate(geometry[index], geometry[index + 1], inside)
        walked += length
    return tuple(geometry[-1])


def _position(geometry: Sequence[LatLng], fraction: float, mode: str) -> LatLng:
    # Stops at the very start or end of the route sit on the endpoints.
    if fraction <= 0:
        return tuple(geometry[0])
    if fraction >= 1:
        return tuple(geometry[-1])
    if mode == 'polyline':
        return locate_along_polyline(geometry, fraction)
    return locate(geometry[0], geometry[-1], fraction)


def place_stops(
    trip_plan: TripPlan,
    geometry: Sequence[LatLng],
    mode: str = 'linear',
    config: Optional[HOSConfig] = None
) -> List[PlannedStop]:
    """
    Place the trip's rest and fuel stops on the route geometry.

    Args:
        trip_plan: Plan from HOSService
        geometry: Route points as (lat, lng), current location first
        mode: 'linear' (first to last point) or 'polyline' (along the path)

    Returns:
        Stops ordered by distance along the route
    """
    if mode not in ('linear', 'polyline'):
        raise ValueError(f"Unknown stop placement mode: {mode}")

    total = trip_plan.total_distance_miles
    if total <= 0 or not geometry:
        return []

    config = config or HOSConfig()

    stops = []
    daily_plans = trip_plan.daily_plans
    for plan in daily_plans:
        for miles in plan.fuel_stop_miles:
            fraction = miles / total
            lat, lng = _position(geometry, fraction, mode)
            stops.append(PlannedStop(
                stop_type=FUEL_STOP,
                day=plan.day,
                miles=miles,
                fraction=fraction,
                latitude=lat,
                longitude=lng,
                duration_hours=config.fuel_stop_duration_hours,
                notes="Fuel stop"
            ))
        if plan is not daily_plans[-1]:
            fraction = plan.end_miles / total
            lat, lng = _position(geometry, fraction, mode)
            stops.append(PlannedStop(
                stop_type=REST_STOP,
                day=plan.day,
                miles=plan.end_miles,
                fraction=fraction,
                latitude=lat,
                longitude=lng,
                duration_hours=config.off_duty_reset_hours,
                notes=f"End of day {plan.day} - {config.off_duty_reset_hours:g}-hour rest"
            ))

    stops.sort(key=lambda s: (s.miles, s.stop_type != FUEL_STOP))
    logger.debug(f"Placed {len(stops)} stop(s) along {total:.1f} miles ({mode})")
    return stops
