"""
ELD (Electronic Logging Device) Log Generator Service.

Turns each DailyPlan into an ELD-style daily log sheet and annotates it
with HOS violations.

ELD Log Format:
==============
Each day's log is a 24-hour grid of 96 slots of 15 minutes:
- slot i covers [i x 15min, (i + 1) x 15min)
- a slot holds the duty status active at the slot's start instant
- time not covered by any duty status change is Off Duty

Summary totals are derived by counting slots per status x 0.25h, so
drive + on duty + off duty (including sleeper berth) always adds up to 24.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple, Union

from . import violation_service
from .clock import (
    DutyStatus, EPSILON, SLOT_HOURS, SLOTS_PER_DAY,
    intervals_from_grid,
)
from .hos_service import DailyPlan, DutyStatusChange, TripPlan
from .rules import HOSConfig

logger = logging.getLogger(__name__)


class InvalidLogError(ValueError):
    """Raised for externally supplied log data that cannot be read as a log sheet."""
    pass


@dataclass(frozen=True)
class DailyLog:
    """
    Complete ELD log for a single day.

    Contains the 96-slot grid plus the summary needed for rendering and audit.
    """
    day_of_trip: int
    date: date
    grid: Tuple[DutyStatus, ...]

    # Summary hours (for the right side of the log)
    total_drive_time: float
    total_on_duty_time: float
    total_off_duty_time: float
    total_sleeper_berth_time: float

    # Distance
    odometer_start: float = 0.0
    odometer_end: float = 0.0
    distance_traveled: float = 0.0

    # Carrier info (pass-through)
    driver_name: str = ""
    carrier_name: str = ""
    vehicle_id: str = ""
    trailer_id: str = ""

    duty_status_changes: Tuple[DutyStatusChange, ...] = ()
    cycle_hours_used: float = 0.0
    prior_off_duty_hours: Optional[float] = None
    violations: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def hos_compliant(self) -> bool:
        return not self.violations

    @property
    def hours_by_status(self) -> Dict[str, float]:
        return {
            DutyStatus.OFF_DUTY.value: self.total_off_duty_time - self.total_sleeper_berth_time,
            DutyStatus.SLEEPER_BERTH.value: self.total_sleeper_berth_time,
            DutyStatus.DRIVING.value: self.total_drive_time,
            DutyStatus.ON_DUTY_NOT_DRIVING.value: self.total_on_duty_time,
        }

    def to_dict(self) -> Dict:
        return {
            'day_of_trip': self.day_of_trip,
            'date': self.date.isoformat(),
            'day_of_week': self.date.strftime('%A'),
            'driver_name': self.driver_name,
            'carrier_name': self.carrier_name,
            'vehicle_id': self.vehicle_id,
            'trailer_id': self.trailer_id,
            'grid': [status.value for status in self.grid],
            'total_drive_time': self.total_drive_time,
            'total_on_duty_time': self.total_on_duty_time,
            'total_off_duty_time': self.total_off_duty_time,
            'total_sleeper_berth_time': self.total_sleeper_berth_time,
            'hours_by_status': self.hours_by_status,
            'odometer_start': self.odometer_start,
            'odometer_end': self.odometer_end,
            'distance_traveled': self.distance_traveled,
            'duty_status_changes': [c.to_dict() for c in self.duty_status_changes],
            'cycle_hours_used': round(self.cycle_hours_used, 2),
            'prior_off_duty_hours': self.prior_off_duty_hours,
            'violations': list(self.violations),
            'hos_compliant': self.hos_compliant,
            'grid_data': generate_grid_data(self.grid),
        }


def grid_from_changes(changes: Sequence[DutyStatusChange]) -> Tuple[DutyStatus, ...]:
    """Quantize duty status changes into the 96-slot grid."""
    ordered = sorted(changes, key=lambda c: c.start_hour)
    grid = []
    for slot in range(SLOTS_PER_DAY):
        instant = slot * SLOT_HOURS
        status = DutyStatus.OFF_DUTY
        for change in ordered:
            if change.start_hour - EPSILON <= instant < change.end_hour - EPSILON:
                status = DutyStatus.parse(change.status)
        grid.append(status)
    return tuple(grid)


def grid_totals(grid: Sequence[DutyStatus]) -> Dict[DutyStatus, float]:
    """Hours per status, counted in whole slots."""
    totals = {status: 0.0 for status in DutyStatus}
    for status in grid:
        totals[status] += SLOT_HOURS
    return totals


def generate_grid_data(grid: Sequence[DutyStatus]) -> Dict:
    """
    Generate grid data for frontend rendering.

    The grid has:
    - X-axis: 24 hours (0-24)
    - Y-axis: 4 rows (Off Duty, Sleeper Berth, Driving, On Duty Not Driving)
    - Horizontal segments for each status period, vertical transitions between them
    """
    segments = []
    transitions = []
    previous = None
    for interval in intervals_from_grid(list(grid)):
        row = GRID_ROWS[interval.status]
        segments.append({
            'row': row,
            'start_x': interval.start_hour,
            'end_x': interval.end_hour,
            'status': interval.status.value,
            'status_display': interval.status.display,
            'duration': interval.duration_hours,
        })
        if previous is not None:
            transitions.append({
                'x': interval.start_hour,
                'from_row': GRID_ROWS[previous],
                'to_row': row,
            })
        previous = interval.status

    return {
        'segments': segments,
        'transitions': transitions,
        'hours': list(range(25)),
        'rows': [
            {'id': 1, 'label': 'Off Duty', 'short': 'OFF'},
            {'id': 2, 'label': 'Sleeper Berth', 'short': 'SB'},
            {'id': 3, 'label': 'Driving', 'short': 'D'},
            {'id': 4, 'label': 'On Duty (Not Driving)', 'short': 'ON'}
        ]
    }


# Grid row mapping for duty statuses
GRID_ROWS = {
    DutyStatus.OFF_DUTY: 1,
    DutyStatus.SLEEPER_BERTH: 2,
    DutyStatus.DRIVING: 3,
    DutyStatus.ON_DUTY_NOT_DRIVING: 4,
}


class ELDLogService:
    """
    Service for generating ELD daily log sheets.

    Takes the DailyPlans of a TripPlan and produces DailyLogs with the
    96-slot grid, summary totals and violations.
    """

    def __init__(
        self,
        carrier_name: str = "HOS Trip Planner Demo",
        driver_name: str = "Demo Driver",
        vehicle_id: str = "",
        trailer_id: str = "",
        starting_odometer: float = 0.0,
        config: Optional[HOSConfig] = None
    ):
        self.carrier_name = carrier_name
        self.driver_name = driver_name
        self.vehicle_id = vehicle_id
        self.trailer_id = trailer_id
        self.starting_odometer = starting_odometer
        self.config = config or HOSConfig()

    def to_grid(self, plan: DailyPlan, log_date: date) -> DailyLog:
        """Generate the log sheet for one DailyPlan."""
        grid = grid_from_changes(plan.duty_status_changes)
        log = self._build_log(
            day_of_trip=plan.day,
            log_date=log_date,
            grid=grid,
            odometer_start=round(self.starting_odometer + plan.start_miles, 1),
            distance_traveled=plan.distance_miles,
            duty_status_changes=tuple(plan.duty_status_changes),
            cycle_hours_used=plan.cycle_hours_used,
            prior_off_duty_hours=plan.prior_off_duty_hours
        )
        logger.debug(
            f"Day {plan.day} log: {log.total_drive_time}h driving, "
            f"{len(log.violations)} violation(s)"
        )
        return log

    def generate_logs(
        self,
        trip_plan: TripPlan,
        start_date: Optional[date] = None
    ) -> List[DailyLog]:
        """
        Generate ELD daily logs for every day of a trip plan.

        Args:
            trip_plan: Complete plan from HOSService
            start_date: Date of day 1 (defaults to the plan's start date, then today)

        Returns:
            List of DailyLog objects, one per day
        """
        first_day = start_date or trip_plan.start_date or date.today()
        logs = [
            self.to_grid(plan, first_day + timedelta(days=plan.day - 1))
            for plan in trip_plan.daily_plans
        ]
        logger.info(f"Generated {len(logs)} daily ELD logs")
        return logs

    def log_from_dict(self, data: Dict) -> DailyLog:
        """
        Rebuild a DailyLog from externally supplied JSON.

        Totals and violations are recomputed from the grid; whatever the
        caller sent for them is ignored.
        """
        raw_grid = data.get('grid')
        if not isinstance(raw_grid, (list, tuple)) or len(raw_grid) != SLOTS_PER_DAY:
            raise InvalidLogError(f"grid must contain exactly {SLOTS_PER_DAY} slots")
        known = {status.value for status in DutyStatus}
        unknown = sorted({str(value) for value in raw_grid if str(value) not in known})
        if unknown:
            raise InvalidLogError(f"Unknown duty status(es) in grid: {', '.join(unknown)}")
        grid = tuple(DutyStatus(value) for value in raw_grid)

        try:
            day_of_trip = int(data.get('day_of_trip') or 1)
            log_date = _parse_date(data.get('date'))
            odometer_start = float(data.get('odometer_start') or 0.0)
            distance = float(data.get('distance_traveled') or 0.0)
            cycle_hours = float(data.get('cycle_hours_used') or 0.0)
            prior = data.get('prior_off_duty_hours')
            prior = float(prior) if prior is not None else None
        except (TypeError, ValueError) as e:
            raise InvalidLogError(f"Invalid log field: {e}")

        return self._build_log(
            day_of_trip=day_of_trip,
            log_date=log_date,
            grid=grid,
            odometer_start=odometer_start,
            distance_traveled=distance,
            cycle_hours_used=cycle_hours,
            prior_off_duty_hours=prior,
            driver_name=data.get('driver_name', self.driver_name),
            carrier_name=data.get('carrier_name', self.carrier_name),
            vehicle_id=data.get('vehicle_id', self.vehicle_id),
            trailer_id=data.get('trailer_id', self.trailer_id)
        )

    def validate_logs(self, entries: Sequence[Dict]) -> List[DailyLog]:
        """
        Rebuild and check a sequence of consecutive daily logs.

        A log without prior_off_duty_hours inherits the rest at the end of
        the log before it, so rest between days is checked across the set.
        """
        logs: List[DailyLog] = []
        for entry in entries:
            data = dict(entry)
            if logs and data.get('prior_off_duty_hours') is None:
                data['prior_off_duty_hours'] = trailing_rest_hours(logs[-1].grid)
            logs.append(self.log_from_dict(data))
        flagged = [log.day_of_trip for log in logs if log.violations]
        logger.info(f"Validated {len(logs)} log(s); violations on day(s) {flagged or 'none'}")
        return logs

    def _build_log(
        self,
        day_of_trip: int,
        log_date: date,
        grid: Tuple[DutyStatus, ...],
        odometer_start: float,
        distance_traveled: float,
        duty_status_changes: Tuple[DutyStatusChange, ...] = (),
        cycle_hours_used: float = 0.0,
        prior_off_duty_hours: Optional[float] = None,
        **metadata
    ) -> DailyLog:
        totals = grid_totals(grid)
        log = DailyLog(
            day_of_trip=day_of_trip,
            date=log_date,
            grid=grid,
            total_drive_time=totals[DutyStatus.DRIVING],
            total_on_duty_time=totals[DutyStatus.ON_DUTY_NOT_DRIVING],
            total_off_duty_time=totals[DutyStatus.OFF_DUTY] + totals[DutyStatus.SLEEPER_BERTH],
            total_sleeper_berth_time=totals[DutyStatus.SLEEPER_BERTH],
            odometer_start=odometer_start,
            odometer_end=round(odometer_start + distance_traveled, 1),
            distance_traveled=distance_traveled,
            driver_name=metadata.get('driver_name', self.driver_name),
            carrier_name=metadata.get('carrier_name', self.carrier_name),
            vehicle_id=metadata.get('vehicle_id', self.vehicle_id),
            trailer_id=metadata.get('trailer_id', self.trailer_id),
            duty_status_changes=duty_status_changes,
            cycle_hours_used=cycle_hours_used,
            prior_off_duty_hours=prior_off_duty_hours
        )
        return replace(log, violations=tuple(violation_service.detect(log, self.config)))


def _parse_date(value: Union[date, str, None]) -> date:
    if value is None or value == '':
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


def trailing_rest_hours(grid: Sequence[DutyStatus]) -> float:
    """Off-duty/sleeper hours at the end of a day's grid."""
    rest = 0.0
    for status in reversed(grid):
        if not status.is_rest:
            break
        rest += SLOT_HOURS
    return rest
