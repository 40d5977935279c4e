"""
FMCSA Hours of Service (HOS) rule set.

Limits for property-carrying drivers on the 70-hour/8-day schedule:
============================
1. 11-Hour Driving Limit: Max 11 hours driving after 10 consecutive hours off-duty
2. 14-Hour On-Duty Window: All on-duty time within 14 hours of coming on duty
3. 30-Minute Break: Required after 8 hours of continuous driving
4. 10-Hour Off-Duty: Required between duty periods
5. 70-Hour/8-Day Rule: Max 70 hours on-duty in any 8 consecutive days
6. Fuel Stop: Every ~1,000 miles (practical consideration, not regulation)

Every predicate here is a pure function of elapsed hours/miles and an
HOSConfig; nothing keeps state between calls.

References:
- https://www.fmcsa.dot.gov/regulations/hours-of-service
"""

import logging
from dataclasses import dataclass, fields, asdict
from typing import Dict, Optional, Sequence

from django.core.exceptions import ImproperlyConfigured

from .clock import DutyStatus, EPSILON, HOURS_PER_DAY

logger = logging.getLogger(__name__)

MAX_DRIVING_PER_DAY = 11.0
MAX_ON_DUTY_WINDOW = 14.0
BREAK_REQUIRED_AFTER_DRIVING = 8.0
BREAK_DURATION = 0.5
REQUIRED_REST_BETWEEN_DAYS = 10.0
MAX_CYCLE_HOURS = 70.0
CYCLE_DAYS = 8
FUEL_STOP_INTERVAL_MILES = 1000.0
FUEL_STOP_DURATION = 0.5


@dataclass(frozen=True)
class HOSConfig:
    """
    Configuration for HOS rules.
    All values can be adjusted for testing or through settings.HOS_CONFIG.
    """
    # Cycle limits
    cycle_days: int = CYCLE_DAYS
    cycle_hours: float = MAX_CYCLE_HOURS

    # Daily limits
    max_driving_hours: float = MAX_DRIVING_PER_DAY
    max_on_duty_hours: float = MAX_ON_DUTY_WINDOW

    # Break requirements
    break_required_after_hours: float = BREAK_REQUIRED_AFTER_DRIVING
    break_duration_hours: float = BREAK_DURATION
    break_status: DutyStatus = DutyStatus.ON_DUTY_NOT_DRIVING

    # Reset requirements
    off_duty_reset_hours: float = REQUIRED_REST_BETWEEN_DAYS
    rest_status: DutyStatus = DutyStatus.OFF_DUTY

    # Practical stops
    fuel_interval_miles: float = FUEL_STOP_INTERVAL_MILES
    fuel_stop_duration_hours: float = FUEL_STOP_DURATION

    # Loading/unloading and inspection
    pickup_duration_hours: float = 1.0
    dropoff_duration_hours: float = 1.0
    pre_trip_inspection_hours: float = 0.5

    # Daily schedule
    shift_start_hour: float = 6.0

    # Only used when a route comes back with distance but no duration
    average_speed_mph: float = 55.0

    # Reject cycle hours above the cycle limit instead of flagging them
    strict_cycle_validation: bool = False

    def __post_init__(self):
        # The whole on-duty window has to fit on one log sheet
        if self.shift_start_hour < 0:
            raise ValueError(f"shift_start_hour must not be negative, got {self.shift_start_hour:g}")
        if self.shift_start_hour + self.max_on_duty_hours > HOURS_PER_DAY + EPSILON:
            raise ValueError(
                f"Shift starting at {self.shift_start_hour:g}h with a "
                f"{self.max_on_duty_hours:g}h on-duty window runs past midnight"
            )

    @classmethod
    def from_settings(cls) -> "HOSConfig":
        """Build a config from defaults overridden by settings.HOS_CONFIG."""
        try:
            from django.conf import settings
            overrides = dict(getattr(settings, 'HOS_CONFIG', None) or {})
        except ImproperlyConfigured:
            return cls()
        return cls.from_dict(overrides)

    @classmethod
    def from_dict(cls, values: Dict) -> "HOSConfig":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = key.lower()
            if name not in known:
                logger.warning(f"Ignoring unknown HOS setting: {key}")
                continue
            if name in ('break_status', 'rest_status'):
                value = DutyStatus.parse(value)
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['break_status'] = self.break_status.value
        data['rest_status'] = self.rest_status.value
        return data


DEFAULT_CONFIG = HOSConfig()


def exceeds_daily_driving(driving_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    return driving_hours > config.max_driving_hours + EPSILON


def exceeds_on_duty_window(window_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    return window_hours > config.max_on_duty_hours + EPSILON


def break_required(continuous_driving_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    """True once continuous driving has used up the allowance before a break."""
    return continuous_driving_hours >= config.break_required_after_hours - EPSILON


def exceeds_continuous_driving(continuous_driving_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    return continuous_driving_hours > config.break_required_after_hours + EPSILON


def is_qualifying_break(non_driving_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    """
    Any consecutive non-driving time (off duty, sleeper berth or on duty
    not driving) of at least the break duration resets continuous driving.
    """
    return non_driving_hours >= config.break_duration_hours - EPSILON


def insufficient_rest(rest_hours: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    return rest_hours < config.off_duty_reset_hours - EPSILON


def exceeds_cycle(cycle_hours_used: float, config: HOSConfig = DEFAULT_CONFIG) -> bool:
    return cycle_hours_used > config.cycle_hours + EPSILON


def remaining_cycle_budget(cycle_hours_used: float, config: HOSConfig = DEFAULT_CONFIG) -> float:
    """Hours left in the cycle; negative once the limit has been overrun."""
    return config.cycle_hours - cycle_hours_used


def cycle_hours_in_window(
    prior_hours: float,
    daily_on_duty_hours: Sequence[float],
    config: HOSConfig = DEFAULT_CONFIG
) -> float:
    """
    On-duty hours inside the trailing cycle window ending on the last day of
    daily_on_duty_hours (day 1 of the trip is the first entry).

    prior_hours were worked before the trip on unknown days, so they are
    counted in full while the window still reaches back before day 1 and
    dropped once it no longer does.
    """
    day = len(daily_on_duty_hours)
    window = daily_on_duty_hours[max(0, day - config.cycle_days):]
    total = sum(window)
    if day < config.cycle_days:
        total += prior_hours
    return total


def next_fuel_threshold(miles: float, config: HOSConfig = DEFAULT_CONFIG) -> Optional[float]:
    """First fuel-interval multiple strictly after the given mileage."""
    interval = config.fuel_interval_miles
    if interval <= 0:
        return None
    return (int((miles + EPSILON) // interval) + 1) * interval
