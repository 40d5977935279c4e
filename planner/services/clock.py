"""
Clock and duty-status interval primitives.

A log day is 24 hours starting at midnight, divided into 96 slots of
15 minutes each:

    slot 0  = 00:00-00:15
    slot 1  = 00:15-00:30
    ...
    slot 95 = 23:45-24:00

Everything above this module (planning, grid generation, violation
detection) expresses time as decimal hours from midnight of the log day
(e.g. 6.5 = 06:30) and uses these helpers to move between hours, slots
and "HH:MM" labels.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple, Union

SLOT_MINUTES = 15
SLOTS_PER_HOUR = 60 // SLOT_MINUTES
SLOT_HOURS = SLOT_MINUTES / 60
SLOTS_PER_DAY = 24 * SLOTS_PER_HOUR
HOURS_PER_DAY = 24.0

# Float noise allowed when snapping hours onto the slot grid
EPSILON = 1e-6


class DutyStatus(Enum):
    """Driver duty status as defined by FMCSA."""
    OFF_DUTY = "off_duty"
    SLEEPER_BERTH = "sleeper_berth"
    DRIVING = "driving"
    ON_DUTY_NOT_DRIVING = "on_duty_not_driving"

    @classmethod
    def parse(cls, value: Union["DutyStatus", str, None]) -> "DutyStatus":
        """Coerce a status or its string value; anything unknown is off duty."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OFF_DUTY

    @property
    def is_on_duty(self) -> bool:
        return self in (DutyStatus.DRIVING, DutyStatus.ON_DUTY_NOT_DRIVING)

    @property
    def is_rest(self) -> bool:
        return self in (DutyStatus.OFF_DUTY, DutyStatus.SLEEPER_BERTH)

    @property
    def display(self) -> str:
        return STATUS_DISPLAY[self]


STATUS_DISPLAY = {
    DutyStatus.OFF_DUTY: 'Off Duty',
    DutyStatus.SLEEPER_BERTH: 'Sleeper Berth',
    DutyStatus.DRIVING: 'Driving',
    DutyStatus.ON_DUTY_NOT_DRIVING: 'On Duty (Not Driving)',
}


@dataclass(frozen=True)
class Interval:
    """A half-open span [start_hour, end_hour) of one duty status."""
    start_hour: float
    end_hour: float
    status: DutyStatus

    @property
    def duration_hours(self) -> float:
        return self.end_hour - self.start_hour


def slot_to_time(slot: int) -> Tuple[int, int]:
    """Return the (hour, minute) at which a slot starts."""
    if not 0 <= slot < SLOTS_PER_DAY:
        raise ValueError(f"Slot {slot} outside 0-{SLOTS_PER_DAY - 1}")
    return slot // SLOTS_PER_HOUR, (slot % SLOTS_PER_HOUR) * SLOT_MINUTES


def time_to_slot(hour: int, minute: int) -> int:
    """Return the slot that starts at hour:minute. Inverse of slot_to_time."""
    if not 0 <= hour < 24:
        raise ValueError(f"Hour {hour} outside 0-23")
    if minute not in range(0, 60, SLOT_MINUTES):
        raise ValueError(f"Minute {minute} is not on a {SLOT_MINUTES}-minute boundary")
    return hour * SLOTS_PER_HOUR + minute // SLOT_MINUTES


def slot_label(slot: int) -> str:
    hour, minute = slot_to_time(slot)
    return f"{hour:02d}:{minute:02d}"


def hour_to_slot(hours: float) -> int:
    """Slot active at a decimal-hour instant (instants inside a slot round down)."""
    slot = math.floor(hours * SLOTS_PER_HOUR + EPSILON)
    return max(0, min(slot, SLOTS_PER_DAY - 1))


def format_hour(hours: float) -> str:
    """Convert decimal hours to an HH:MM label; 24.0 renders as 24:00."""
    total_minutes = int(round(hours * 60))
    h, m = divmod(total_minutes, 60)
    return f"{h:02d}:{m:02d}"


def round_up_to_slot(hours: float) -> float:
    """Round a duration up to the next whole 15-minute slot."""
    if hours <= 0:
        return 0.0
    return math.ceil(hours * SLOTS_PER_HOUR - EPSILON) / SLOTS_PER_HOUR


def round_down_to_slot(hours: float) -> float:
    if hours <= 0:
        return 0.0
    return math.floor(hours * SLOTS_PER_HOUR + EPSILON) / SLOTS_PER_HOUR


def intervals_from_grid(grid: Sequence[DutyStatus]) -> List[Interval]:
    """Run-length encode a 96-slot grid into contiguous intervals."""
    intervals: List[Interval] = []
    run_start = 0
    for slot in range(1, len(grid) + 1):
        if slot == len(grid) or grid[slot] != grid[run_start]:
            intervals.append(Interval(
                start_hour=run_start * SLOT_HOURS,
                end_hour=slot * SLOT_HOURS,
                status=grid[run_start]
            ))
            run_start = slot
    return intervals
