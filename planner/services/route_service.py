"""
Route Calculation Service.

Uses free routing APIs for:
- Geocoding addresses to coordinates (Nominatim)
- Calculating the current -> pickup -> dropoff route (OSRM)
- Decoding polylines to per-leg coordinate arrays

The planner only needs distance, driving time and geometry for each leg;
RouteService turns the OSRM response into the RouteSummary values
HOSService consumes.
"""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import polyline
import requests
from django.conf import settings
from django.core.cache import cache

from .hos_service import RouteSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    """Geographic coordinates."""
    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def as_lonlat(self) -> Tuple[float, float]:
        """Return as (lon, lat) for routing APIs."""
        return (self.longitude, self.latitude)


@dataclass(frozen=True)
class TripRoute:
    """Both legs of a trip plus the resolved locations."""
    approach: RouteSummary
    route: RouteSummary
    locations: Dict[str, Dict] = field(default_factory=dict)

    @property
    def geometry(self) -> List[Tuple[float, float]]:
        """Combined path, current location first; the shared pickup point appears once."""
        points = list(self.approach.geometry)
        route_points = list(self.route.geometry)
        if points and route_points and points[-1] == route_points[0]:
            route_points = route_points[1:]
        return points + route_points

    @property
    def total_distance_miles(self) -> float:
        return self.approach.distance_miles + self.route.distance_miles

    @property
    def total_duration_hours(self) -> float:
        return self.approach.duration_hours + self.route.duration_hours

    def to_dict(self) -> Dict:
        return {
            'locations': self.locations,
            'total_distance_miles': round(self.total_distance_miles, 1),
            'total_duration_hours': round(self.total_duration_hours, 2),
            'legs': {
                'approach': self.approach.to_dict(),
                'route': self.route.to_dict(),
            },
            'route_coordinates': [
                {'latitude': lat, 'longitude': lng}
                for lat, lng in self.geometry
            ],
        }


class RouteServiceError(Exception):
    """Custom exception for route service errors."""
    pass


class RouteService:
    """
    Service for geocoding and route calculation.

    Uses:
    - Nominatim for geocoding (free, no API key required)
    - OSRM for routing (free, no API key required)

    Geocoding results are cached in the Django cache. Failures are not
    retried here; they surface as RouteServiceError.
    """

    METERS_TO_MILES = 0.000621371
    SECONDS_TO_HOURS = 1 / 3600

    def __init__(self):
        self.config = getattr(settings, 'ROUTING_CONFIG', {})
        self.nominatim_url = self.config.get(
            'NOMINATIM_BASE_URL',
            'https://nominatim.openstreetmap.org'
        )
        self.osrm_url = self.config.get(
            'OSRM_BASE_URL',
            'https://router.project-osrm.org'
        )
        self.timeout = self.config.get('REQUEST_TIMEOUT', 30)
        self.cache_seconds = self.config.get('GEOCODE_CACHE_SECONDS', 60 * 60 * 24)
        self.geocode_delay = self.config.get('GEOCODE_DELAY_SECONDS', 1.1)

        # Nominatim usage policy requires an identifying User-Agent
        self.headers = {
            'User-Agent': self.config.get(
                'USER_AGENT', 'HOSTripPlanner/1.0 (trip segmentation and duty logs)'
            ),
            'Accept': 'application/json',
            'Accept-Language': 'en-US,en;q=0.9',
        }

        # Session for connection pooling
        self.session = requests.Session()
        self.session.headers.update(self.headers)

    def geocode_address(self, address: str) -> Coordinates:
        """
        Convert an address to coordinates using Nominatim.

        Args:
            address: Human-readable address string

        Returns:
            Coordinates object with lat/lon

        Raises:
            RouteServiceError: If geocoding fails
        """
        cache_key = self._geocode_cache_key(address)
        cached = cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Geocode cache hit for '{address}'")
            return Coordinates(latitude=cached[0], longitude=cached[1])

        # Respect Nominatim's rate limit (1 request per second)
        if self.geocode_delay:
            time.sleep(self.geocode_delay)

        try:
            response = self.session.get(
                f"{self.nominatim_url}/search",
                params={'q': address, 'format': 'json', 'limit': 1},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Geocoding request failed: {e}")
            raise RouteServiceError(f"Geocoding service error: {str(e)}")
        except ValueError as e:
            raise RouteServiceError(f"Geocoding service returned invalid JSON: {e}")

        if not data:
            raise RouteServiceError(f"Could not geocode address: {address}")

        try:
            coords = Coordinates(
                latitude=float(data[0]['lat']),
                longitude=float(data[0]['lon'])
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RouteServiceError(f"Unexpected geocoding response for '{address}': {e}")

        cache.set(cache_key, coords.as_tuple(), self.cache_seconds)
        logger.info(f"Geocoded '{address}' to {coords}")
        return coords

    def calculate_route(
        self,
        origin: Coordinates,
        destination: Coordinates,
        waypoints: Optional[List[Coordinates]] = None
    ) -> List[RouteSummary]:
        """
        Calculate route between points using OSRM.

        OSRM API format:
        GET /route/v1/{profile}/{coordinates}?overview=full&geometries=polyline&steps=true

        Coordinates format: lon,lat;lon,lat;lon,lat

        Returns:
            One RouteSummary per leg (len(waypoints) + 1 legs)
        """
        points = [origin] + list(waypoints or []) + [destination]
        coords_str = ';'.join(f"{p.longitude},{p.latitude}" for p in points)

        try:
            response = self.session.get(
                f"{self.osrm_url}/route/v1/driving/{coords_str}",
                params={'overview': 'full', 'geometries': 'polyline', 'steps': 'true'},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"OSRM request failed: {e}")
            raise RouteServiceError(f"Routing service error: {str(e)}")
        except ValueError as e:
            raise RouteServiceError(f"Routing service returned invalid JSON: {e}")

        if data.get('code') != 'Ok':
            raise RouteServiceError(f"OSRM error: {data.get('message', 'Unknown error')}")

        try:
            legs = [self._leg_summary(leg) for leg in data['routes'][0]['legs']]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RouteServiceError(f"Unexpected OSRM response: {e}")

        logger.info(
            f"Route calculated: {sum(l.distance_miles for l in legs):.1f} miles, "
            f"{sum(l.duration_hours for l in legs):.1f} hours, {len(legs)} leg(s)"
        )
        return legs

    def get_trip_routes(
        self,
        current_location: str,
        pickup_location: str,
        dropoff_location: str
    ) -> TripRoute:
        """
        Geocode the three trip locations and route current -> pickup -> dropoff.

        Returns:
            TripRoute with the approach (current -> pickup) and route
            (pickup -> dropoff) legs
        """
        current_coords = self.geocode_address(current_location)
        pickup_coords = self.geocode_address(pickup_location)
        dropoff_coords = self.geocode_address(dropoff_location)

        legs = self.calculate_route(
            origin=current_coords,
            destination=dropoff_coords,
            waypoints=[pickup_coords]
        )
        if len(legs) != 2:
            raise RouteServiceError(f"Expected 2 route legs, got {len(legs)}")

        return TripRoute(
            approach=legs[0],
            route=legs[1],
            locations={
                'current': self._location(current_location, current_coords),
                'pickup': self._location(pickup_location, pickup_coords),
                'dropoff': self._location(dropoff_location, dropoff_coords),
            }
        )

    def _leg_summary(self, leg: Dict) -> RouteSummary:
        geometry: List[Tuple[float, float]] = []
        for step in leg.get('steps', []):
            for point in polyline.decode(step['geometry']):
                if not geometry or geometry[-1] != point:
                    geometry.append(point)
        return RouteSummary(
            distance_miles=leg['distance'] * self.METERS_TO_MILES,
            duration_hours=leg['duration'] * self.SECONDS_TO_HOURS,
            geometry=tuple(geometry)
        )

    @staticmethod
    def _location(address: str, coords: Coordinates) -> Dict:
        return {
            'address': address,
            'latitude': coords.latitude,
            'longitude': coords.longitude
        }

    @staticmethod
    def _geocode_cache_key(address: str) -> str:
        normalized = ' '.join(address.lower().split())
        return 'geocode:' + hashlib.sha1(normalized.encode('utf-8')).hexdigest()
