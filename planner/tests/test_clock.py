"""
Tests for the 15-minute slot clock primitives.
"""

import pytest
from planner.services.clock import (
    DutyStatus, Interval, SLOTS_PER_DAY,
    format_hour, hour_to_slot, intervals_from_grid, round_down_to_slot,
    round_up_to_slot, slot_label, slot_to_time, time_to_slot,
)


class TestSlotConversion:
    """Slot <-> time of day."""

    def test_every_slot_round_trips(self):
        for slot in range(SLOTS_PER_DAY):
            hour, minute = slot_to_time(slot)
            assert time_to_slot(hour, minute) == slot

    def test_known_slots(self):
        assert slot_to_time(0) == (0, 0)
        assert slot_to_time(1) == (0, 15)
        assert slot_to_time(95) == (23, 45)
        assert slot_label(26) == "06:30"

    def test_out_of_range_slot(self):
        with pytest.raises(ValueError):
            slot_to_time(96)
        with pytest.raises(ValueError):
            slot_to_time(-1)

    def test_minute_not_on_boundary(self):
        with pytest.raises(ValueError):
            time_to_slot(6, 10)

    def test_hour_out_of_range(self):
        with pytest.raises(ValueError):
            time_to_slot(24, 0)

    def test_hour_to_slot_rounds_down(self):
        assert hour_to_slot(6.0) == 24
        assert hour_to_slot(6.2) == 24
        assert hour_to_slot(24.0) == 95


class TestHourHelpers:

    def test_format_hour(self):
        assert format_hour(0) == "00:00"
        assert format_hour(6.5) == "06:30"
        assert format_hour(24.0) == "24:00"

    def test_round_to_slot(self):
        assert round_up_to_slot(0.1) == 0.25
        assert round_up_to_slot(8.0) == 8.0
        assert round_up_to_slot(0) == 0.0
        assert round_down_to_slot(2.9) == 2.75
        assert round_down_to_slot(-1) == 0.0


class TestDutyStatus:

    def test_parse(self):
        assert DutyStatus.parse('driving') == DutyStatus.DRIVING
        assert DutyStatus.parse(' Sleeper_Berth ') == DutyStatus.SLEEPER_BERTH
        assert DutyStatus.parse(DutyStatus.ON_DUTY_NOT_DRIVING) == DutyStatus.ON_DUTY_NOT_DRIVING
        assert DutyStatus.parse('unknown') == DutyStatus.OFF_DUTY

    def test_on_duty_and_rest(self):
        assert DutyStatus.DRIVING.is_on_duty
        assert DutyStatus.ON_DUTY_NOT_DRIVING.is_on_duty
        assert DutyStatus.SLEEPER_BERTH.is_rest
        assert not DutyStatus.OFF_DUTY.is_on_duty


def test_intervals_from_grid():
    grid = [DutyStatus.OFF_DUTY] * 24 + [DutyStatus.DRIVING] * 8 + [DutyStatus.OFF_DUTY] * 64
    assert intervals_from_grid(grid) == [
        Interval(0.0, 6.0, DutyStatus.OFF_DUTY),
        Interval(6.0, 8.0, DutyStatus.DRIVING),
        Interval(8.0, 24.0, DutyStatus.OFF_DUTY),
    ]
