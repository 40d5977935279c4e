"""
FMCSA Hours of Service (HOS) Trip Segmentation Service.

Splits a continuous driving task into calendar days that respect the
property-carrying driver rules in rules.py, and describes each day as a
contiguous sequence of duty status changes covering 00:00-24:00.

Daily layout:
=============
    00:00 - shift start    off duty (day 1) / rest carried over from the night before
    shift start            pre-trip inspection (on duty)
                           pickup, driving, 30-min breaks, fuel stops, dropoff
    end of shift - 24:00   10-hour rest (continues past midnight), or off duty
                           once the trip is complete

Every duration is planned on the 15-minute log grid, so the totals of a
DailyPlan are exactly what its log sheet shows.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from . import rules
from .clock import (
    DutyStatus, EPSILON, HOURS_PER_DAY, SLOT_HOURS,
    format_hour, round_down_to_slot, round_up_to_slot,
)
from .rules import HOSConfig

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]


class InvalidTripError(ValueError):
    """Raised for trip input that cannot be planned and must be corrected."""
    pass


@dataclass(frozen=True)
class TripRequest:
    """Planning request as received from the driver."""
    current_location: str
    pickup_location: str
    dropoff_location: str
    cycle_hours_used: float = 0.0

    def validate(self, config: Optional[HOSConfig] = None) -> None:
        config = config or HOSConfig()
        for name in ('current_location', 'pickup_location', 'dropoff_location'):
            if not str(getattr(self, name) or '').strip():
                raise InvalidTripError(f"{name} is required")
        validate_cycle_hours(self.cycle_hours_used, config)


@dataclass(frozen=True)
class RouteSummary:
    """Distance, pure driving time and path of one routed leg."""
    distance_miles: float
    duration_hours: float
    geometry: Tuple[Coordinate, ...] = ()

    @property
    def start(self) -> Optional[Coordinate]:
        return self.geometry[0] if self.geometry else None

    @property
    def end(self) -> Optional[Coordinate]:
        return self.geometry[-1] if self.geometry else None

    def to_dict(self) -> Dict:
        return {
            'distance_miles': round(self.distance_miles, 1),
            'duration_hours': round(self.duration_hours, 2),
            'geometry': [list(point) for point in self.geometry],
        }


@dataclass(frozen=True)
class DutyStatusChange:
    """One contiguous block of a single duty status within a log day."""
    start_hour: float
    end_hour: float
    status: DutyStatus
    location: str = ""
    notes: str = ""

    @property
    def time(self) -> str:
        return format_hour(self.start_hour)

    @property
    def duration_hours(self) -> float:
        return self.end_hour - self.start_hour

    def to_dict(self) -> Dict:
        return {
            'time': self.time,
            'end_time': format_hour(self.end_hour),
            'start_hour': self.start_hour,
            'end_hour': self.end_hour,
            'duration_hours': self.duration_hours,
            'status': self.status.value,
            'location': self.location,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class DailyPlan:
    """HOS plan for a single day of the trip."""
    day: int
    driving_hours: float
    distance_miles: float
    fuel_stops: int
    mandatory_breaks: int
    duty_status_changes: Tuple[DutyStatusChange, ...]
    on_duty_hours: float = 0.0
    cycle_hours_used: float = 0.0
    prior_off_duty_hours: Optional[float] = None
    fuel_stop_miles: Tuple[float, ...] = ()
    start_miles: float = 0.0
    end_miles: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'day': self.day,
            'driving_hours': self.driving_hours,
            'on_duty_hours': self.on_duty_hours,
            'distance_miles': self.distance_miles,
            'fuel_stops': self.fuel_stops,
            'mandatory_breaks': self.mandatory_breaks,
            'cycle_hours_used': round(self.cycle_hours_used, 2),
            'prior_off_duty_hours': self.prior_off_duty_hours,
            'fuel_stop_miles': list(self.fuel_stop_miles),
            'start_miles': self.start_miles,
            'end_miles': self.end_miles,
            'duty_status_changes': [c.to_dict() for c in self.duty_status_changes],
        }


@dataclass(frozen=True)
class TripPlan:
    """Complete day-by-day HOS plan for a trip."""
    route: RouteSummary
    daily_plans: Tuple[DailyPlan, ...]
    total_days_needed: int
    cycle_compliant: bool
    approach: Optional[RouteSummary] = None
    total_distance_miles: float = 0.0
    total_driving_hours: float = 0.0
    total_on_duty_hours: float = 0.0
    starting_cycle_hours: float = 0.0
    cycle_hours_remaining: float = 0.0
    driving_prohibited: bool = False
    degraded: bool = False
    start_date: Optional[date] = None

    def to_dict(self) -> Dict:
        return {
            'route': self.route.to_dict(),
            'approach': self.approach.to_dict() if self.approach else None,
            'daily_plans': [p.to_dict() for p in self.daily_plans],
            'total_days_needed': self.total_days_needed,
            'cycle_compliant': self.cycle_compliant,
            'total_distance_miles': self.total_distance_miles,
            'total_driving_hours': self.total_driving_hours,
            'total_on_duty_hours': self.total_on_duty_hours,
            'starting_cycle_hours': self.starting_cycle_hours,
            'cycle_hours_remaining': round(self.cycle_hours_remaining, 2),
            'driving_prohibited': self.driving_prohibited,
            'degraded': self.degraded,
            'start_date': self.start_date.isoformat() if self.start_date else None,
        }


def validate_cycle_hours(cycle_hours_used: float, config: HOSConfig) -> None:
    if cycle_hours_used is None or cycle_hours_used < 0:
        raise InvalidTripError(f"cycle_hours_used must be >= 0, got {cycle_hours_used}")
    if config.strict_cycle_validation and cycle_hours_used > config.cycle_hours:
        raise InvalidTripError(
            f"cycle_hours_used must be <= {config.cycle_hours:g}, got {cycle_hours_used}"
        )


@dataclass
class _Task:
    """A unit of trip work: a driving leg or an on-duty stop."""
    kind: str  # 'drive' or 'stop'
    hours: float
    miles: float = 0.0
    location: str = ""
    notes: str = ""
    done_hours: float = 0.0
    done_miles: float = 0.0

    @property
    def remaining_hours(self) -> float:
        return self.hours - self.done_hours

    @property
    def remaining_miles(self) -> float:
        return self.miles - self.done_miles

    @property
    def speed(self) -> float:
        return self.miles / self.hours if self.hours > 0 else 0.0


@dataclass
class _DayDraft:
    """Accumulator for one day; turned into a DailyPlan once the trip is laid out."""
    day: int
    changes: List[DutyStatusChange] = field(default_factory=list)
    driving_hours: float = 0.0
    on_duty_hours: float = 0.0
    fuel_stops: int = 0
    mandatory_breaks: int = 0
    fuel_stop_miles: List[float] = field(default_factory=list)
    start_miles: float = 0.0
    end_miles: float = 0.0
    clock: float = 0.0

    def add(self, hours: float, status: DutyStatus, location: str = "", notes: str = "") -> None:
        end = self.clock + hours
        self.changes.append(DutyStatusChange(
            start_hour=self.clock,
            end_hour=end,
            status=status,
            location=location,
            notes=notes
        ))
        self.clock = end
        if status == DutyStatus.DRIVING:
            self.driving_hours += hours
        if status.is_on_duty:
            self.on_duty_hours += hours

    def trailing_rest_hours(self) -> float:
        rest = 0.0
        for change in reversed(self.changes):
            if not change.status.is_rest:
                break
            rest += change.duration_hours
        return rest


class HOSService:
    """
    Service for segmenting a trip into HOS-compliant daily plans.

    Usage:
        plan = HOSService().plan(route, cycle_hours_used=12)
    """

    def __init__(self, config: Optional[HOSConfig] = None):
        self.config = config or HOSConfig()

    def plan(
        self,
        route: RouteSummary,
        cycle_hours_used: float,
        approach: Optional[RouteSummary] = None,
        start_date: Optional[date] = None,
        locations: Optional[Dict[str, str]] = None
    ) -> TripPlan:
        """
        Build the day-by-day plan for a trip.

        Args:
            route: Pickup -> dropoff leg from the routing collaborator
            cycle_hours_used: Hours already used in the 8-day cycle
            approach: Optional current location -> pickup leg, driven first
            start_date: Date of day 1, carried through to the log sheets
            locations: Optional 'current'/'pickup'/'dropoff' labels for the log

        Returns:
            TripPlan with one DailyPlan per calendar day

        Raises:
            InvalidTripError: negative distance, duration or cycle hours
        """
        self._validate(route, approach, cycle_hours_used)
        locations = locations or {}

        logger.info(
            f"Planning trip: {route.distance_miles:.1f} miles, "
            f"{route.duration_hours:.1f}h driving, "
            f"cycle used: {cycle_hours_used:.1f}h"
        )

        tasks = self._build_tasks(route, approach, locations)
        trip_miles = sum(t.miles for t in tasks if t.kind == 'drive')

        if trip_miles <= 0:
            logger.warning("Trip has no distance to drive; returning a single off-duty day")
            return self._single_day_plan(
                route, approach, cycle_hours_used, start_date,
                notes="No driving required", degraded=True
            )

        initial_budget = rules.remaining_cycle_budget(
            rules.cycle_hours_in_window(cycle_hours_used, [0.0], self.config),
            self.config
        )
        if initial_budget < SLOT_HOURS - EPSILON:
            logger.warning(
                f"Cycle exhausted at trip start ({cycle_hours_used:.1f}h used); "
                f"driving prohibited"
            )
            return self._single_day_plan(
                route, approach, cycle_hours_used, start_date,
                notes=f"Driving prohibited: {self.config.cycle_hours:g}-hour cycle exhausted",
                driving_prohibited=True
            )

        drafts = self._lay_out_days(tasks, trip_miles, cycle_hours_used)
        daily_plans = self._finalize(drafts, trip_miles, cycle_hours_used)

        trip_plan = self._build_trip_plan(
            route, approach, daily_plans, cycle_hours_used, start_date
        )
        logger.info(
            f"Planned {trip_plan.total_days_needed} day(s), "
            f"{trip_plan.total_driving_hours:.2f}h driving, "
            f"cycle compliant: {trip_plan.cycle_compliant}"
        )
        return trip_plan

    def plan_from_totals(
        self,
        distance_miles: float,
        duration_hours: float,
        cycle_hours_used: float,
        start_date: Optional[date] = None
    ) -> TripPlan:
        """Plan a trip known only by its total distance and driving time."""
        return self.plan(
            RouteSummary(distance_miles=distance_miles, duration_hours=duration_hours),
            cycle_hours_used,
            start_date=start_date
        )

    def _validate(
        self,
        route: RouteSummary,
        approach: Optional[RouteSummary],
        cycle_hours_used: float
    ) -> None:
        for leg_name, leg in (('route', route), ('approach', approach)):
            if leg is None:
                continue
            if leg.distance_miles is None or leg.distance_miles < 0:
                raise InvalidTripError(f"{leg_name} distance must be >= 0")
            if leg.duration_hours is not None and leg.duration_hours < 0:
                raise InvalidTripError(f"{leg_name} duration must be >= 0")
        validate_cycle_hours(cycle_hours_used, self.config)

    def _leg_hours(self, leg: RouteSummary) -> float:
        hours = leg.duration_hours or 0.0
        if hours <= 0 and leg.distance_miles > 0:
            hours = leg.distance_miles / self.config.average_speed_mph
            logger.warning(
                f"Route has no duration; estimated {hours:.2f}h "
                f"at {self.config.average_speed_mph:g} mph"
            )
        return round_up_to_slot(hours)

    def _build_tasks(
        self,
        route: RouteSummary,
        approach: Optional[RouteSummary],
        locations: Dict[str, str]
    ) -> List[_Task]:
        tasks = []
        if approach is not None and approach.distance_miles > 0:
            tasks.append(_Task(
                kind='drive',
                hours=self._leg_hours(approach),
                miles=approach.distance_miles,
                location=locations.get('current', ''),
                notes="Driving to pickup"
            ))
        if route.distance_miles > 0 or tasks:
            tasks.append(_Task(
                kind='stop',
                hours=self.config.pickup_duration_hours,
                location=locations.get('pickup', 'Pickup Location'),
                notes="Pickup - loading cargo"
            ))
        if route.distance_miles > 0:
            tasks.append(_Task(
                kind='drive',
                hours=self._leg_hours(route),
                miles=route.distance_miles,
                location=locations.get('pickup', ''),
                notes="Driving to dropoff"
            ))
        if tasks:
            tasks.append(_Task(
                kind='stop',
                hours=self.config.dropoff_duration_hours,
                location=locations.get('dropoff', 'Dropoff Location'),
                notes="Dropoff - unloading cargo"
            ))
        return [t for t in tasks if t.hours > 0]

    def _lay_out_days(
        self,
        tasks: List[_Task],
        trip_miles: float,
        cycle_hours_used: float
    ) -> List[_DayDraft]:
        """Simulate the trip day by day, threading the cycle budget through."""
        queue: Deque[_Task] = deque(tasks)
        drafts: List[_DayDraft] = []
        daily_on_duty: List[float] = []
        state = {'miles': 0.0, 'fuel_pending': None}

        while queue:
            day = len(drafts) + 1
            cycle_before = rules.cycle_hours_in_window(
                cycle_hours_used, daily_on_duty + [0.0], self.config
            )
            budget = rules.remaining_cycle_budget(cycle_before, self.config)
            if budget >= SLOT_HOURS - EPSILON:
                driving_cap = min(self.config.max_driving_hours, round_down_to_slot(budget))
            else:
                # Cycle already overrun: keep to the daily limits and let the
                # violation detector report the overrun.
                driving_cap = self.config.max_driving_hours

            progress_before = (len(queue), state['miles'], state['fuel_pending'])
            draft = self._plan_day(day, queue, state, trip_miles, driving_cap)
            if (len(queue), state['miles'], state['fuel_pending']) == progress_before:
                raise InvalidTripError(
                    "Trip cannot be scheduled: a stop does not fit in the on-duty window"
                )

            drafts.append(draft)
            daily_on_duty.append(draft.on_duty_hours)
            logger.debug(
                f"Day {day} closed at {format_hour(draft.clock)}: "
                f"{draft.driving_hours:.2f}h driving, {draft.on_duty_hours:.2f}h on duty"
            )
        return drafts

    def _plan_day(
        self,
        day: int,
        queue: Deque[_Task],
        state: Dict,
        trip_miles: float,
        driving_cap: float
    ) -> _DayDraft:
        config = self.config
        draft = _DayDraft(day=day, start_miles=state['miles'])

        if config.shift_start_hour > 0 and day == 1:
            draft.add(config.shift_start_hour, DutyStatus.OFF_DUTY, notes="Off duty")
        elif config.shift_start_hour > 0:
            draft.add(config.shift_start_hour, config.rest_status,
                      notes=f"{config.off_duty_reset_hours:g}-hour rest")

        window_end = config.shift_start_hour + config.max_on_duty_hours
        if config.pre_trip_inspection_hours > 0:
            draft.add(config.pre_trip_inspection_hours, DutyStatus.ON_DUTY_NOT_DRIVING,
                      location=queue[0].location, notes="Pre-trip inspection")

        continuous = 0.0
        while queue:
            task = queue[0]
            window_left = window_end - draft.clock

            if task.kind == 'stop':
                if task.hours > window_left + EPSILON:
                    break
                draft.add(task.hours, DutyStatus.ON_DUTY_NOT_DRIVING,
                          location=task.location, notes=task.notes)
                if rules.is_qualifying_break(task.hours, config):
                    continuous = 0.0
                queue.popleft()
                continue

            drive_left = driving_cap - draft.driving_hours
            if drive_left < SLOT_HOURS - EPSILON:
                break

            if state['fuel_pending'] is not None:
                if config.fuel_stop_duration_hours > window_left + EPSILON:
                    break
                draft.add(config.fuel_stop_duration_hours, DutyStatus.ON_DUTY_NOT_DRIVING,
                          location=f"Fuel Station at mile {state['miles']:.0f}",
                          notes="Fuel stop")
                draft.fuel_stops += 1
                draft.fuel_stop_miles.append(round(state['miles'], 1))
                state['fuel_pending'] = None
                if rules.is_qualifying_break(config.fuel_stop_duration_hours, config):
                    continuous = 0.0
                logger.debug(f"Added fuel stop at {state['miles']:.1f} miles")
                continue

            if rules.break_required(continuous, config):
                if config.break_duration_hours + SLOT_HOURS > window_left + EPSILON:
                    break
                draft.add(config.break_duration_hours, config.break_status,
                          location=f"Rest Area at mile {state['miles']:.0f}",
                          notes=f"30-minute break ({config.break_required_after_hours:g}-hour driving rule)")
                draft.mandatory_breaks += 1
                continuous = 0.0
                logger.debug(f"Added 30-min break at {state['miles']:.1f} miles")
                continue

            chunk = min(
                drive_left,
                config.break_required_after_hours - continuous,
                window_left,
                task.remaining_hours
            )

            # Leave room in the window for a stop that follows the leg
            finishes_leg = chunk >= task.remaining_hours - EPSILON
            if finishes_leg and len(queue) > 1 and queue[1].kind == 'stop':
                if chunk + queue[1].hours > window_left + EPSILON:
                    chunk = window_left - queue[1].hours

            fuel_due = False
            threshold = rules.next_fuel_threshold(state['miles'], config)
            leg_end_miles = state['miles'] + task.remaining_miles
            if (threshold is not None and task.speed > 0
                    and threshold < trip_miles - EPSILON
                    and threshold <= leg_end_miles + EPSILON):
                hours_to_fuel = round_up_to_slot((threshold - state['miles']) / task.speed)
                if hours_to_fuel <= chunk + EPSILON:
                    chunk = hours_to_fuel
                    fuel_due = True

            chunk = round_down_to_slot(chunk)
            if chunk < SLOT_HOURS - EPSILON:
                break

            if chunk >= task.remaining_hours - EPSILON:
                chunk = task.remaining_hours
                miles = task.remaining_miles
            else:
                miles = chunk * task.speed

            draft.add(chunk, DutyStatus.DRIVING, location=task.location,
                      notes=f"Driving {miles:.1f} miles")
            task.done_hours += chunk
            task.done_miles += miles
            state['miles'] += miles
            continuous += chunk
            if task.remaining_hours <= EPSILON:
                queue.popleft()
            if fuel_due and state['miles'] < trip_miles - EPSILON:
                state['fuel_pending'] = threshold

        draft.end_miles = state['miles']
        self._close_day(draft, trip_complete=not queue)
        return draft

    def _close_day(self, draft: _DayDraft, trip_complete: bool) -> None:
        remaining = HOURS_PER_DAY - draft.clock
        if remaining <= EPSILON:
            return
        if trip_complete:
            draft.add(remaining, DutyStatus.OFF_DUTY, notes="Off duty - trip complete")
        else:
            draft.add(remaining, self.config.rest_status,
                      notes=f"{self.config.off_duty_reset_hours:g}-hour rest")

    def _finalize(
        self,
        drafts: List[_DayDraft],
        trip_miles: float,
        cycle_hours_used: float
    ) -> List[DailyPlan]:
        """Apportion distance with the rounding remainder on the last day."""
        plans = []
        daily_on_duty: List[float] = []
        allocated = 0.0
        prior_off_duty = None

        for index, draft in enumerate(drafts):
            if index == len(drafts) - 1:
                distance = round(trip_miles - allocated, 1)
            else:
                distance = round(draft.end_miles - draft.start_miles, 1)
            start_miles = round(allocated, 1)
            allocated += distance

            daily_on_duty.append(draft.on_duty_hours)
            plans.append(DailyPlan(
                day=draft.day,
                driving_hours=draft.driving_hours,
                distance_miles=distance,
                fuel_stops=draft.fuel_stops,
                mandatory_breaks=draft.mandatory_breaks,
                duty_status_changes=tuple(draft.changes),
                on_duty_hours=draft.on_duty_hours,
                cycle_hours_used=rules.cycle_hours_in_window(
                    cycle_hours_used, daily_on_duty, self.config
                ),
                prior_off_duty_hours=prior_off_duty,
                fuel_stop_miles=tuple(draft.fuel_stop_miles),
                start_miles=start_miles,
                end_miles=round(allocated, 1)
            ))
            prior_off_duty = draft.trailing_rest_hours()
        return plans

    def _single_day_plan(
        self,
        route: RouteSummary,
        approach: Optional[RouteSummary],
        cycle_hours_used: float,
        start_date: Optional[date],
        notes: str,
        degraded: bool = False,
        driving_prohibited: bool = False
    ) -> TripPlan:
        day = DailyPlan(
            day=1,
            driving_hours=0.0,
            distance_miles=0.0,
            fuel_stops=0,
            mandatory_breaks=0,
            duty_status_changes=(
                DutyStatusChange(0.0, HOURS_PER_DAY, DutyStatus.OFF_DUTY, notes=notes),
            ),
            cycle_hours_used=rules.cycle_hours_in_window(cycle_hours_used, [0.0], self.config)
        )
        return self._build_trip_plan(
            route, approach, [day], cycle_hours_used, start_date,
            degraded=degraded, driving_prohibited=driving_prohibited
        )

    def _build_trip_plan(
        self,
        route: RouteSummary,
        approach: Optional[RouteSummary],
        daily_plans: Sequence[DailyPlan],
        cycle_hours_used: float,
        start_date: Optional[date],
        degraded: bool = False,
        driving_prohibited: bool = False
    ) -> TripPlan:
        last_cycle_hours = daily_plans[-1].cycle_hours_used
        return TripPlan(
            route=route,
            approach=approach,
            daily_plans=tuple(daily_plans),
            total_days_needed=len(daily_plans),
            cycle_compliant=not any(
                rules.exceeds_cycle(p.cycle_hours_used, self.config) for p in daily_plans
            ),
            total_distance_miles=round(sum(p.distance_miles for p in daily_plans), 1),
            total_driving_hours=sum(p.driving_hours for p in daily_plans),
            total_on_duty_hours=sum(p.on_duty_hours for p in daily_plans),
            starting_cycle_hours=cycle_hours_used,
            cycle_hours_remaining=rules.remaining_cycle_budget(last_cycle_hours, self.config),
            driving_prohibited=driving_prohibited,
            degraded=degraded,
            start_date=start_date
        )
