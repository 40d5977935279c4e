"""
Tests for the HOS violation detector.
"""

from planner.services import violation_service
from planner.services.clock import DutyStatus
from planner.services.hos_service import DailyPlan, DutyStatusChange, HOSService
from planner.services.violation_service import (
    BREAK_NOT_TAKEN, CYCLE_LIMIT_EXCEEDED, DAILY_DRIVING_EXCEEDED,
    INSUFFICIENT_REST, ON_DUTY_WINDOW_EXCEEDED, detect,
)

OFF = DutyStatus.OFF_DUTY
ON = DutyStatus.ON_DUTY_NOT_DRIVING
D = DutyStatus.DRIVING


def _day(spans, cycle_hours_used=0.0, prior_off_duty_hours=None):
    """Build a DailyPlan from (start, end, status) spans."""
    changes = tuple(DutyStatusChange(start, end, status) for start, end, status in spans)
    return DailyPlan(
        day=1,
        driving_hours=sum(c.duration_hours for c in changes if c.status == D),
        distance_miles=0.0,
        fuel_stops=0,
        mandatory_breaks=0,
        duty_status_changes=changes,
        cycle_hours_used=cycle_hours_used,
        prior_off_duty_hours=prior_off_duty_hours
    )


class TestDailyDriving:

    def test_twelve_hours_flagged(self):
        day = _day([(0, 6, OFF), (6, 12, D), (12, 12.5, ON), (12.5, 18.5, D), (18.5, 24, OFF)])

        assert detect(day) == [DAILY_DRIVING_EXCEEDED]

    def test_eleven_hours_allowed(self):
        day = _day([(0, 6, OFF), (6, 12, D), (12, 12.5, ON), (12.5, 17.5, D), (17.5, 24, OFF)])

        assert detect(day) == []


class TestOnDutyWindow:

    def test_window_over_fourteen_hours(self):
        day = _day([(0, 5, OFF), (5, 20, ON), (20, 24, OFF)])

        assert detect(day) == [ON_DUTY_WINDOW_EXCEEDED]

    def test_off_duty_inside_window_still_counts(self):
        day = _day([(0, 5, OFF), (5, 8, D), (8, 16, OFF), (16, 19.5, D), (19.5, 24, OFF)])

        assert ON_DUTY_WINDOW_EXCEEDED in detect(day)


class TestBreak:

    def test_continuous_driving_over_eight_hours(self):
        day = _day([(0, 6, OFF), (6, 14.5, D), (14.5, 24, OFF)])

        assert detect(day) == [BREAK_NOT_TAKEN]

    def test_break_resets_continuous_driving(self):
        day = _day([(0, 6, OFF), (6, 10, D), (10, 10.5, ON), (10.5, 16.5, D), (16.5, 24, OFF)])

        assert detect(day) == []

    def test_short_pauses_add_up(self):
        day = _day([
            (0, 6, OFF), (6, 10, D), (10, 10.25, ON), (10.25, 10.5, OFF), (10.5, 16.5, D),
            (16.5, 24, OFF),
        ])

        assert BREAK_NOT_TAKEN not in detect(day)

    def test_quarter_hour_pause_is_not_a_break(self):
        day = _day([(0, 6, OFF), (6, 10, D), (10, 10.25, ON), (10.25, 15, D), (15, 24, OFF)])

        assert detect(day) == [BREAK_NOT_TAKEN]


class TestCycleAndRest:

    def test_cycle_over_limit(self):
        day = _day([(0, 6, OFF), (6, 8, D), (8, 24, OFF)], cycle_hours_used=71)

        assert detect(day) == [CYCLE_LIMIT_EXCEEDED]

    def test_insufficient_rest(self):
        day = _day([(0, 5, OFF), (5, 8, D), (8, 24, OFF)], prior_off_duty_hours=4)

        assert detect(day) == [INSUFFICIENT_REST]

    def test_rest_spanning_midnight(self):
        day = _day([(0, 6, OFF), (6, 8, D), (8, 24, OFF)], prior_off_duty_hours=4)

        assert detect(day) == []

    def test_first_day_has_no_rest_check(self):
        day = _day([(0, 1, D), (1, 24, OFF)])

        assert detect(day) == []


class TestMultipleViolations:

    def test_every_check_reports(self):
        day = _day(
            [(0, 2, OFF), (2, 17, D), (17, 24, OFF)],
            cycle_hours_used=80,
            prior_off_duty_hours=2
        )

        assert detect(day) == [
            DAILY_DRIVING_EXCEEDED,
            ON_DUTY_WINDOW_EXCEEDED,
            BREAK_NOT_TAKEN,
            CYCLE_LIMIT_EXCEEDED,
            INSUFFICIENT_REST,
        ]


class TestPlannedTrips:

    def test_planned_trip_is_clean(self):
        plan = HOSService().plan_from_totals(2400, 40, 0)

        assert plan.total_days_needed == 4
        assert all(detect(day) == [] for day in plan.daily_plans)
        assert violation_service.is_cycle_compliant(plan.daily_plans)

    def test_cycle_overrun_detected_on_plan(self):
        plan = HOSService().plan_from_totals(600, 10, 68)

        assert not violation_service.is_cycle_compliant(plan.daily_plans)
        assert CYCLE_LIMIT_EXCEEDED in detect(plan.daily_plans[0])
