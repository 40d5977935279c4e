"""
Tests for the HOS rule set.
"""

import pytest
from planner.services import rules
from planner.services.clock import DutyStatus
from planner.services.rules import HOSConfig


class TestHOSConfig:
    """Test HOS configuration defaults and overrides."""

    def test_default_config(self):
        config = HOSConfig()

        assert config.cycle_days == 8
        assert config.cycle_hours == 70.0
        assert config.max_driving_hours == 11.0
        assert config.max_on_duty_hours == 14.0
        assert config.break_required_after_hours == 8.0
        assert config.break_duration_hours == 0.5
        assert config.off_duty_reset_hours == 10.0
        assert config.fuel_interval_miles == 1000.0
        assert config.pickup_duration_hours == 1.0
        assert config.dropoff_duration_hours == 1.0
        assert config.rest_status == DutyStatus.OFF_DUTY

    def test_from_dict_parses_statuses_and_skips_unknown_keys(self):
        config = HOSConfig.from_dict({
            'REST_STATUS': 'sleeper_berth',
            'shift_start_hour': 5.0,
            'restart_hours': 34,
        })

        assert config.rest_status == DutyStatus.SLEEPER_BERTH
        assert config.shift_start_hour == 5.0

    def test_to_dict_uses_status_values(self):
        data = HOSConfig().to_dict()

        assert data['rest_status'] == 'off_duty'
        assert data['break_status'] == 'on_duty_not_driving'
        assert data['max_driving_hours'] == 11.0

    def test_from_settings(self, settings):
        settings.HOS_CONFIG = {'STRICT_CYCLE_VALIDATION': True}

        assert HOSConfig.from_settings().strict_cycle_validation is True

    @pytest.mark.parametrize('shift_start_hour', [-1, 10.25, 12])
    def test_shift_must_fit_in_the_day(self, shift_start_hour):
        with pytest.raises(ValueError):
            HOSConfig(shift_start_hour=shift_start_hour)

    def test_shift_from_settings_validated(self):
        with pytest.raises(ValueError):
            HOSConfig.from_dict({'SHIFT_START_HOUR': 12})


class TestPredicates:

    def test_daily_limits(self):
        assert not rules.exceeds_daily_driving(11.0)
        assert rules.exceeds_daily_driving(11.25)
        assert not rules.exceeds_on_duty_window(14.0)
        assert rules.exceeds_on_duty_window(14.25)

    def test_break_rules(self):
        assert rules.break_required(8.0)
        assert not rules.break_required(7.75)
        assert not rules.exceeds_continuous_driving(8.0)
        assert rules.exceeds_continuous_driving(8.25)
        assert rules.is_qualifying_break(0.5)
        assert not rules.is_qualifying_break(0.25)

    def test_rest_and_cycle(self):
        assert rules.insufficient_rest(9.75)
        assert not rules.insufficient_rest(10.0)
        assert not rules.exceeds_cycle(70.0)
        assert rules.exceeds_cycle(70.25)
        assert rules.remaining_cycle_budget(68) == 2
        assert rules.remaining_cycle_budget(75) == -5


class TestCycleWindow:

    def test_prior_hours_count_inside_window(self):
        assert rules.cycle_hours_in_window(10, [5, 5, 5]) == 25

    def test_prior_hours_drop_out_after_eight_days(self):
        assert rules.cycle_hours_in_window(10, [5] * 8) == 40

    def test_window_only_keeps_last_eight_days(self):
        assert rules.cycle_hours_in_window(0, [1] * 2 + [5] * 8) == 40


class TestFuel:

    def test_next_fuel_threshold(self):
        assert rules.next_fuel_threshold(0) == 1000
        assert rules.next_fuel_threshold(999.9) == 1000
        assert rules.next_fuel_threshold(1000) == 2000

    def test_fuel_disabled(self):
        config = HOSConfig(fuel_interval_miles=0)

        assert rules.next_fuel_threshold(10, config) is None
