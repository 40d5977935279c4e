"""
HOS Violation Detector.

Scans a single day, either a DailyPlan (read from its duty status changes)
or a DailyLog (read from its 96-slot grid), for rule breaches. It never
relies on how the day was generated, so it also validates logs supplied
from outside the planner.

Each rule is an independent check function in CHECKS; new rules are added
by appending a function.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from . import rules
from .clock import DutyStatus, Interval, intervals_from_grid
from .rules import HOSConfig

logger = logging.getLogger(__name__)

DAILY_DRIVING_EXCEEDED = "Daily driving limit exceeded"
ON_DUTY_WINDOW_EXCEEDED = "Daily on-duty window exceeded"
BREAK_NOT_TAKEN = "Required 30-minute break not taken"
CYCLE_LIMIT_EXCEEDED = "70-hour cycle limit exceeded"
INSUFFICIENT_REST = "Insufficient rest period"


@dataclass(frozen=True)
class DayTimeline:
    """Normalized view of one log day shared by all checks."""
    intervals: Sequence[Interval]
    cycle_hours_used: float = 0.0
    prior_off_duty_hours: Optional[float] = None

    @property
    def driving_hours(self) -> float:
        return sum(i.duration_hours for i in self.intervals if i.status == DutyStatus.DRIVING)

    @property
    def on_duty_intervals(self) -> List[Interval]:
        return [i for i in self.intervals if i.status.is_on_duty and i.duration_hours > 0]

    @property
    def on_duty_window_hours(self) -> float:
        on_duty = self.on_duty_intervals
        if not on_duty:
            return 0.0
        return on_duty[-1].end_hour - on_duty[0].start_hour


def timeline_for(day) -> DayTimeline:
    """Build a DayTimeline from a DailyPlan or a DailyLog."""
    if getattr(day, 'grid', None) is not None:
        intervals = intervals_from_grid([DutyStatus.parse(s) for s in day.grid])
    else:
        intervals = [
            Interval(c.start_hour, c.end_hour, DutyStatus.parse(c.status))
            for c in sorted(day.duty_status_changes, key=lambda c: c.start_hour)
        ]
    return DayTimeline(
        intervals=intervals,
        cycle_hours_used=getattr(day, 'cycle_hours_used', 0.0) or 0.0,
        prior_off_duty_hours=getattr(day, 'prior_off_duty_hours', None)
    )


def check_daily_driving(timeline: DayTimeline, config: HOSConfig) -> Optional[str]:
    if rules.exceeds_daily_driving(timeline.driving_hours, config):
        return DAILY_DRIVING_EXCEEDED
    return None


def check_on_duty_window(timeline: DayTimeline, config: HOSConfig) -> Optional[str]:
    if rules.exceeds_on_duty_window(timeline.on_duty_window_hours, config):
        return ON_DUTY_WINDOW_EXCEEDED
    return None


def check_break(timeline: DayTimeline, config: HOSConfig) -> Optional[str]:
    longest = _longest_continuous_driving(timeline, config)
    if rules.exceeds_continuous_driving(longest, config):
        return BREAK_NOT_TAKEN
    return None


def check_cycle(timeline: DayTimeline, config: HOSConfig) -> Optional[str]:
    if rules.exceeds_cycle(timeline.cycle_hours_used, config):
        return CYCLE_LIMIT_EXCEEDED
    return None


def check_rest(timeline: DayTimeline, config: HOSConfig) -> Optional[str]:
    """Rest between the previous day's last on-duty and today's first on-duty."""
    on_duty = timeline.on_duty_intervals
    if not on_duty or timeline.prior_off_duty_hours is None:
        return None
    rest = timeline.prior_off_duty_hours + on_duty[0].start_hour
    if rules.insufficient_rest(rest, config):
        return INSUFFICIENT_REST
    return None


def _longest_continuous_driving(timeline: DayTimeline, config: HOSConfig) -> float:
    # Non-driving time of any status counts toward the break once it adds up
    # to the break duration without driving in between.
    longest = 0.0
    continuous = 0.0
    non_driving = 0.0
    for interval in timeline.intervals:
        if interval.status == DutyStatus.DRIVING:
            if rules.is_qualifying_break(non_driving, config):
                continuous = 0.0
            non_driving = 0.0
            continuous += interval.duration_hours
            longest = max(longest, continuous)
        else:
            non_driving += interval.duration_hours
    return longest


Check = Callable[[DayTimeline, HOSConfig], Optional[str]]

CHECKS: List[Check] = [
    check_daily_driving,
    check_on_duty_window,
    check_break,
    check_cycle,
    check_rest,
]


def detect(day, config: Optional[HOSConfig] = None) -> List[str]:
    """
    Return the ordered violation descriptions for a DailyPlan or DailyLog.

    Every check runs, so one day can report several violations.
    """
    config = config or HOSConfig()
    timeline = timeline_for(day)
    violations = []
    for check in CHECKS:
        message = check(timeline, config)
        if message:
            violations.append(message)
    if violations:
        logger.debug(f"HOS violations: {'; '.join(violations)}")
    return violations


def is_cycle_compliant(days, config: Optional[HOSConfig] = None) -> bool:
    """A trip is cycle compliant when no day reports a cycle violation."""
    return not any(CYCLE_LIMIT_EXCEEDED in detect(day, config) for day in days)
