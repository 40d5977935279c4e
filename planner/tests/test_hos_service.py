"""
Tests for the HOS trip segmentation service.

Tests the day-by-day planning against FMCSA limits.
"""

import pytest
from datetime import date
from planner.services.clock import DutyStatus, HOURS_PER_DAY
from planner.services.eld_service import ELDLogService
from planner.services.hos_service import (
    HOSService, InvalidTripError, RouteSummary, TripRequest,
)
from planner.services.rules import HOSConfig


def _changes_cover_day(plan):
    changes = plan.duty_status_changes
    if changes[0].start_hour != 0 or changes[-1].end_hour != HOURS_PER_DAY:
        return False
    return all(a.end_hour == b.start_hour for a, b in zip(changes, changes[1:]))


class TestScenarios:
    """Reference trips."""

    def setup_method(self):
        self.service = HOSService()

    def test_single_day_trip(self):
        """500 miles / 8 hours fits in one day with no fuel stop."""
        plan = self.service.plan_from_totals(500, 8, 0)

        assert plan.total_days_needed == 1
        day = plan.daily_plans[0]
        assert day.driving_hours == 8
        assert day.fuel_stops == 0
        assert day.distance_miles == 500
        assert plan.cycle_compliant
        assert not plan.degraded

    def test_multi_day_trip(self):
        """2400 miles / 40 hours needs four days and two fuel stops."""
        plan = self.service.plan_from_totals(2400, 40, 0)

        assert plan.total_days_needed == 4
        assert [d.driving_hours for d in plan.daily_plans] == [11, 11, 11, 7]
        assert sum(d.fuel_stops for d in plan.daily_plans) == 2
        fuel_miles = [m for d in plan.daily_plans for m in d.fuel_stop_miles]
        assert fuel_miles == [pytest.approx(1005), pytest.approx(2010)]
        assert plan.total_on_duty_hours <= 70
        assert plan.cycle_compliant

    def test_near_cycle_limit(self):
        """68 hours used caps the first day's driving at the 2 hours left."""
        plan = self.service.plan_from_totals(600, 10, 68)

        assert plan.daily_plans[0].driving_hours == 2
        assert plan.daily_plans[1].driving_hours == 8
        assert plan.daily_plans[1].prior_off_duty_hours >= 10
        # Inspection and pickup time push the cycle past 70
        assert not plan.cycle_compliant

    def test_zero_distance(self):
        plan = self.service.plan_from_totals(0, 0, 0)

        assert plan.total_days_needed == 1
        assert plan.degraded
        day = plan.daily_plans[0]
        assert day.driving_hours == 0
        assert [c.status for c in day.duty_status_changes] == [DutyStatus.OFF_DUTY]


class TestPlanInvariants:

    def setup_method(self):
        self.service = HOSService()

    @pytest.mark.parametrize('miles,hours,cycle', [
        (500, 8, 0),
        (2400, 40, 0),
        (600, 10, 68),
        (3100, 52, 20),
        (123.4, 2.1, 5),
    ])
    def test_distance_sums_to_route(self, miles, hours, cycle):
        plan = self.service.plan_from_totals(miles, hours, cycle)

        assert sum(d.distance_miles for d in plan.daily_plans) == pytest.approx(miles, abs=0.5)

    @pytest.mark.parametrize('miles,hours', [(2400, 40), (3100, 52), (900, 16)])
    def test_daily_limits_hold(self, miles, hours):
        plan = self.service.plan_from_totals(miles, hours, 0)

        for day in plan.daily_plans:
            assert day.driving_hours <= 11
            assert _changes_cover_day(day)
            on_duty = [c for c in day.duty_status_changes if c.status.is_on_duty]
            assert on_duty[-1].end_hour - on_duty[0].start_hour <= 14

    def test_rest_between_days(self):
        plan = self.service.plan_from_totals(2400, 40, 0)

        for day in plan.daily_plans[1:]:
            first_on_duty = next(c for c in day.duty_status_changes if c.status.is_on_duty)
            assert day.prior_off_duty_hours + first_on_duty.start_hour >= 10

    def test_break_after_eight_hours(self):
        plan = self.service.plan_from_totals(2400, 40, 0)

        day = plan.daily_plans[0]
        assert day.mandatory_breaks == 1
        continuous = 0.0
        for change in day.duty_status_changes:
            if change.status == DutyStatus.DRIVING:
                continuous += change.duration_hours
                assert continuous <= 8
            elif change.duration_hours >= 0.5:
                continuous = 0.0

    def test_plan_is_deterministic(self):
        first = self.service.plan_from_totals(2400, 40, 12, start_date=date(2024, 1, 15))
        second = self.service.plan_from_totals(2400, 40, 12, start_date=date(2024, 1, 15))

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_quarter_hour_boundaries(self):
        plan = self.service.plan_from_totals(700, 11.3, 0)

        for day in plan.daily_plans:
            for change in day.duty_status_changes:
                assert (change.start_hour * 4) == pytest.approx(round(change.start_hour * 4))


class TestApproachLeg:

    def setup_method(self):
        self.service = HOSService()

    def test_approach_driven_before_pickup(self):
        plan = self.service.plan(
            RouteSummary(distance_miles=300, duration_hours=5),
            cycle_hours_used=0,
            approach=RouteSummary(distance_miles=60, duration_hours=1),
            locations={'current': 'Chicago, IL', 'pickup': 'Gary, IN', 'dropoff': 'Columbus, OH'}
        )

        day = plan.daily_plans[0]
        assert plan.total_distance_miles == 360
        assert day.driving_hours == 6
        pickup = next(c for c in day.duty_status_changes if c.notes.startswith('Pickup'))
        assert pickup.location == 'Gary, IN'
        drives = [c for c in day.duty_status_changes if c.status == DutyStatus.DRIVING]
        assert drives[0].end_hour <= pickup.start_hour
        assert drives[-1].start_hour >= pickup.end_hour

    def test_missing_duration_estimated_from_speed(self):
        plan = self.service.plan(RouteSummary(distance_miles=110, duration_hours=0), 0)

        assert plan.total_driving_hours == 2


class TestCycleExhausted:

    def test_driving_prohibited_at_limit(self):
        plan = HOSService().plan_from_totals(500, 8, 70)

        assert plan.driving_prohibited
        assert plan.total_days_needed == 1
        assert plan.total_driving_hours == 0
        assert plan.cycle_compliant

    def test_over_limit_is_reported(self):
        plan = HOSService().plan_from_totals(500, 8, 75)

        assert plan.driving_prohibited
        assert not plan.cycle_compliant

    def test_strict_mode_rejects_over_limit(self):
        service = HOSService(HOSConfig(strict_cycle_validation=True))

        with pytest.raises(InvalidTripError):
            service.plan_from_totals(500, 8, 75)


class TestInvalidInput:

    def setup_method(self):
        self.service = HOSService()

    def test_negative_cycle_hours(self):
        with pytest.raises(InvalidTripError):
            self.service.plan_from_totals(500, 8, -1)

    def test_negative_distance(self):
        with pytest.raises(InvalidTripError):
            self.service.plan_from_totals(-10, 8, 0)

    def test_negative_duration(self):
        with pytest.raises(InvalidTripError):
            self.service.plan_from_totals(500, -8, 0)

    def test_trip_request_requires_locations(self):
        with pytest.raises(InvalidTripError):
            TripRequest('Chicago, IL', '', 'Nashville, TN').validate()

    def test_trip_request_valid(self):
        TripRequest('Chicago, IL', 'Gary, IN', 'Nashville, TN', 10).validate()


class TestSleeperRest:

    def test_rest_status_configurable(self):
        service = HOSService(HOSConfig(rest_status=DutyStatus.SLEEPER_BERTH))
        plan = service.plan_from_totals(2400, 40, 0)

        statuses = {c.status for d in plan.daily_plans for c in d.duty_status_changes}
        assert DutyStatus.SLEEPER_BERTH in statuses
        # First morning is plain off duty
        assert plan.daily_plans[0].duty_status_changes[0].status == DutyStatus.OFF_DUTY


class TestShiftStart:

    def test_latest_shift_start_stays_on_the_sheet(self):
        service = HOSService(HOSConfig(shift_start_hour=10))
        plan = service.plan_from_totals(2400, 40, 0)

        for day in plan.daily_plans:
            assert _changes_cover_day(day)
            log = ELDLogService(config=service.config).to_grid(day, date(2024, 1, 15))
            assert log.total_drive_time == day.driving_hours
        assert sum(d.driving_hours for d in plan.daily_plans) == 40

    def test_shift_running_past_midnight_rejected(self):
        with pytest.raises(ValueError):
            HOSService(HOSConfig(shift_start_hour=12))


class TestFuelStops:

    def setup_method(self):
        self.service = HOSService()

    def test_no_fuel_stop_at_trip_end(self):
        plan = self.service.plan_from_totals(2000, 32, 0)

        assert sum(d.fuel_stops for d in plan.daily_plans) == 1
        assert [m for d in plan.daily_plans for m in d.fuel_stop_miles] == [pytest.approx(1000, abs=70)]

    def test_fuel_disabled(self):
        service = HOSService(HOSConfig(fuel_interval_miles=0))
        plan = service.plan_from_totals(2400, 40, 0)

        assert sum(d.fuel_stops for d in plan.daily_plans) == 0
