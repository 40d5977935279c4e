"""
Tests for rest and fuel stop placement.
"""

import pytest
from planner.services.hos_service import HOSService
from planner.services.stop_service import (
    FUEL_STOP, REST_STOP, haversine_miles, locate, locate_along_polyline, place_stops,
)


class TestLocate:

    def test_midpoint(self):
        assert locate((40.0, -90.0), (42.0, -86.0), 0.5) == pytest.approx((41.0, -88.0))

    def test_quarter(self):
        assert locate((0.0, 0.0), (4.0, 8.0), 0.25) == pytest.approx((1.0, 2.0))

    @pytest.mark.parametrize('fraction', [0, 1, -0.1, 1.5])
    def test_fraction_out_of_range(self, fraction):
        with pytest.raises(ValueError):
            locate((0.0, 0.0), (1.0, 1.0), fraction)


class TestPolylineWalk:

    def test_haversine_one_degree_of_longitude_on_equator(self):
        assert haversine_miles((0.0, 0.0), (0.0, 1.0)) == pytest.approx(69.09, abs=0.1)

    def test_walks_by_arc_length(self):
        geometry = [(0.0, 0.0), (0.0, 1.0), (0.0, 3.0)]

        lat, lng = locate_along_polyline(geometry, 0.5)
        assert lat == pytest.approx(0.0)
        assert lng == pytest.approx(1.5, abs=1e-6)

    def test_lands_on_vertex(self):
        geometry = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]

        assert locate_along_polyline(geometry, 0.5) == pytest.approx((0.0, 1.0))

    def test_empty_geometry(self):
        with pytest.raises(ValueError):
            locate_along_polyline([], 0.5)


class TestPlaceStops:

    def setup_method(self):
        self.hos_service = HOSService()
        self.geometry = [(0.0, 0.0), (0.0, 12.0), (0.0, 24.0)]

    def test_multi_day_trip_stops(self):
        plan = self.hos_service.plan_from_totals(2400, 40, 0)
        stops = place_stops(plan, self.geometry)

        rest = [s for s in stops if s.stop_type == REST_STOP]
        fuel = [s for s in stops if s.stop_type == FUEL_STOP]
        assert len(rest) == plan.total_days_needed - 1
        assert len(fuel) == 2
        assert [s.miles for s in stops] == sorted(s.miles for s in stops)

        first_rest = rest[0]
        assert first_rest.day == 1
        assert first_rest.fraction == pytest.approx(660 / 2400)
        assert first_rest.longitude == pytest.approx(24.0 * 660 / 2400)
        assert first_rest.duration_hours == 10

        assert fuel[0].miles == pytest.approx(1005)
        assert fuel[0].longitude == pytest.approx(24.0 * 1005 / 2400)

    def test_single_day_trip_has_no_rest_stop(self):
        plan = self.hos_service.plan_from_totals(500, 8, 0)

        assert place_stops(plan, self.geometry) == []

    def test_zero_distance(self):
        plan = self.hos_service.plan_from_totals(0, 0, 0)

        assert place_stops(plan, self.geometry) == []

    def test_empty_geometry(self):
        plan = self.hos_service.plan_from_totals(2400, 40, 0)

        assert place_stops(plan, []) == []

    def test_polyline_mode_follows_route(self):
        plan = self.hos_service.plan_from_totals(2400, 40, 0)
        bent = [(0.0, 0.0), (0.0, 1.0), (0.0, 3.0)]

        linear = place_stops(plan, bent, mode='linear')
        along = place_stops(plan, bent, mode='polyline')
        assert [s.miles for s in linear] == [s.miles for s in along]
        assert along[0].longitude == pytest.approx(linear[0].longitude, abs=1e-6)

    def test_unknown_mode(self):
        plan = self.hos_service.plan_from_totals(500, 8, 0)

        with pytest.raises(ValueError):
            place_stops(plan, self.geometry, mode='spline')

    def test_to_dict(self):
        plan = self.hos_service.plan_from_totals(2400, 40, 0)
        data = place_stops(plan, self.geometry)[0].to_dict()

        assert data['type'] == REST_STOP
        assert set(data) >= {'day', 'miles', 'latitude', 'longitude', 'duration_hours'}
