"""Domain models for the shift-assignment system.

This module contains the core data structures shared by the engine, the
validators and the reporting helpers: work rules, staff, per-day requests,
and the assignment/statistics values a generation run produces.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional, Union

from crewplanner.domain.shifts import BLOCK_ORDER, ShiftBlock, parse_block

DateLike = Union[date, str]


def to_date(value: Any) -> Optional[date]:
    """Interpret a date or strict ISO ``YYYY-MM-DD`` string.

    Returns:
        The date, or None if the value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) == 10:
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


def date_range(start: date, end: date) -> list[date]:
    """All dates from start to end inclusive (empty if end precedes start)."""
    dates = []
    current = start
    while current <= end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


@dataclass
class WorkRules:
    """Daily staffing rules.

    Attributes:
        min_headcount: Minimum distinct staff working each day.
        max_headcount: Maximum distinct staff working each day.
        work_hours: Length of a full working day in hours.
        break_hours: Unpaid break within a full day, in hours.
    """

    min_headcount: float = 2
    max_headcount: float = 3
    work_hours: float = 8.0
    break_hours: float = 1.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WorkRules":
        """Build rules from a stored mapping, tolerating older layouts.

        Accepts either the snake_case field names or the stored upper-case
        keys (``DAILY_STAFF_BASE``, ``DAILY_STAFF_MAX``, ``WORK_HOURS``,
        ``BREAK_HOURS``). Very old records only carry a single
        ``DAILY_STAFF`` value, which is used for both bounds. Missing or
        non-numeric values fall back to the defaults, and the maximum is
        lifted to at least the minimum.
        """
        defaults = cls()

        def pick(*keys: str) -> Optional[float]:
            for key in keys:
                value = data.get(key)
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    return value
            return None

        legacy = pick("daily_staff", "DAILY_STAFF")
        base = pick("min_headcount", "DAILY_STAFF_BASE")
        if base is None:
            base = legacy if legacy is not None else defaults.min_headcount
        top = pick("max_headcount", "DAILY_STAFF_MAX")
        if top is None:
            top = legacy if legacy is not None else defaults.max_headcount

        work = pick("work_hours", "WORK_HOURS")
        rest = pick("break_hours", "BREAK_HOURS")

        return cls(
            min_headcount=base,
            max_headcount=max(base, top),
            work_hours=defaults.work_hours if work is None else work,
            break_hours=defaults.break_hours if rest is None else rest,
        )


@dataclass
class StaffMember:
    """A crew member who can be scheduled.

    Attributes:
        id: Unique identifier.
        name: Display name.
        available_shifts: Blocks this person can work.
        required_shift: If set, the only block this person may be given.
        preferred_shift: Block this person would rather work.
        priority: Per-block priority weights (carried as data, not used
            by the allocator).
    """

    id: str
    name: str
    available_shifts: set[ShiftBlock] = field(default_factory=set)
    required_shift: Optional[ShiftBlock] = None
    preferred_shift: Optional[ShiftBlock] = None
    priority: dict[ShiftBlock, int] = field(default_factory=dict)

    def __post_init__(self):
        self.available_shifts = {parse_block(b) for b in self.available_shifts}
        if self.required_shift is not None:
            self.required_shift = parse_block(self.required_shift)
        if self.preferred_shift is not None:
            self.preferred_shift = parse_block(self.preferred_shift)
        self.priority = {parse_block(b): p for b, p in self.priority.items()}

    def can_work(self, block: ShiftBlock) -> bool:
        """Check if the block is among this person's available shifts."""
        return block in self.available_shifts

    def ordered_shifts(self) -> list[ShiftBlock]:
        """Available shifts in open, middle, close order."""
        return [b for b in BLOCK_ORDER if b in self.available_shifts]


@dataclass(frozen=True)
class HalfDayRequest:
    """A request to work only half a shift on a given day."""

    staff_id: str
    block: ShiftBlock

    def __post_init__(self):
        object.__setattr__(self, "block", parse_block(self.block))


@dataclass
class DayRequest:
    """Per-day absences and half-day requests.

    Attributes:
        date: The day these requests apply to.
        off_staff_ids: Staff who are not working at all.
        half_staff_requests: Staff asking for a half shift.
        need_delta: Requested headcount adjustment. Stored with the
            request but not used by the allocator.
    """

    date: DateLike
    off_staff_ids: set[str] = field(default_factory=set)
    half_staff_requests: list[HalfDayRequest] = field(default_factory=list)
    need_delta: float = 0.0

    def is_off(self, staff_id: str) -> bool:
        return staff_id in self.off_staff_ids

    def half_request_for(self, staff_id: str) -> Optional[HalfDayRequest]:
        """First half-day request for this staff member, if any."""
        for request in self.half_staff_requests:
            if request.staff_id == staff_id:
                return request
        return None


@dataclass(frozen=True)
class BlockAssignment:
    """One staff member placed in a block, with a workload unit of 1.0 or 0.5."""

    staff_id: str
    unit: float


@dataclass(frozen=True)
class ScheduleAssignment:
    """Generated assignments for a single day, grouped by block."""

    date: date
    by_block: dict[ShiftBlock, tuple[BlockAssignment, ...]] = field(
        default_factory=dict
    )

    def assignees(self, block: ShiftBlock) -> tuple[BlockAssignment, ...]:
        return tuple(self.by_block.get(block, ()))

    def staff_ids(self) -> set[str]:
        """Distinct staff assigned anywhere on this day."""
        return {a.staff_id for block in BLOCK_ORDER for a in self.assignees(block)}

    @property
    def headcount(self) -> int:
        return len(self.staff_ids())

    def units_for(self, staff_id: str) -> float:
        """Total workload units for a staff member on this day."""
        return sum(
            a.unit
            for block in BLOCK_ORDER
            for a in self.assignees(block)
            if a.staff_id == staff_id
        )

    def block_for(self, staff_id: str) -> Optional[ShiftBlock]:
        for block in BLOCK_ORDER:
            if any(a.staff_id == staff_id for a in self.assignees(block)):
                return block
        return None


@dataclass(frozen=True)
class ScheduleStats:
    """Per-staff summary over a generated date range."""

    staff_id: str
    name: str
    off_days: int = 0
    half_days: int = 0
    full_days: int = 0
    work_units: float = 0.0


@dataclass
class GenerationRequest:
    """Everything needed to generate a schedule over a date range.

    Attributes:
        start_date: First date (inclusive), a date or ISO string.
        end_date: Last date (inclusive), a date or ISO string.
        staff: Roster in display order. Order matters for tie-breaks.
        work_rules: Daily headcount and hour rules.
        requests: Per-day absences and half-day requests.
    """

    start_date: DateLike
    end_date: DateLike
    staff: list[StaffMember]
    work_rules: WorkRules = field(default_factory=WorkRules)
    requests: list[DayRequest] = field(default_factory=list)

    @property
    def first_date(self) -> Optional[date]:
        return to_date(self.start_date)

    @property
    def last_date(self) -> Optional[date]:
        return to_date(self.end_date)

    @property
    def schedule_dates(self) -> list[date]:
        """List of all dates in the range (empty if the range is invalid)."""
        start, end = self.first_date, self.last_date
        if start is None or end is None:
            return []
        return date_range(start, end)

    @property
    def num_days(self) -> int:
        return len(self.schedule_dates)

    @property
    def staff_map(self) -> dict[str, StaffMember]:
        return {s.id: s for s in self.staff}

    def requests_by_date(self) -> dict[date, DayRequest]:
        """Day requests keyed by date. A later entry for a date wins."""
        by_date = {}
        for request in self.requests:
            d = to_date(request.date)
            if d is not None:
                by_date[d] = request
        return by_date

    def request_for(self, schedule_date: date) -> DayRequest:
        """Request for a date, or an empty one if none is stored."""
        return self.requests_by_date().get(schedule_date) or DayRequest(
            date=schedule_date
        )


@dataclass(frozen=True)
class ExtraWork:
    """Extra hours worked outside the generated schedule."""

    id: str
    schedule_id: str
    date: DateLike
    staff_id: str
    hours: float
    note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class SavedSchedule:
    """A generated schedule as handed to the storage layer.

    ``year`` and ``month`` are derived from the start date and kept for
    display and grouping.
    """

    id: str
    start_date: date
    end_date: date
    year: int
    month: int
    created_at: datetime
    updated_at: datetime
    work_rules: WorkRules
    staff: list[StaffMember]
    requests: list[DayRequest]
    assignments: list[ScheduleAssignment]
    stats: list[ScheduleStats]
    edit_source_schedule_id: Optional[str] = None


def to_saved_schedule(
    schedule_id: str,
    request: GenerationRequest,
    assignments: list[ScheduleAssignment],
    stats: list[ScheduleStats],
    edit_source_schedule_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SavedSchedule:
    """Bundle a request and its generated output into a SavedSchedule.

    Args:
        schedule_id: Identifier assigned by the caller.
        request: The request the schedule was generated from.
        assignments: Generated (or edited) daily assignments.
        stats: Per-staff statistics.
        edit_source_schedule_id: ID of the schedule this one was edited from.
        now: Timestamp for created/updated fields (defaults to now).
    """
    now = now or datetime.now()
    start = request.first_date
    end = request.last_date
    year_month_source = start or now.date()
    return SavedSchedule(
        id=schedule_id,
        start_date=start,
        end_date=end,
        year=year_month_source.year,
        month=year_month_source.month,
        created_at=now,
        updated_at=now,
        work_rules=request.work_rules,
        staff=list(request.staff),
        requests=list(request.requests),
        assignments=list(assignments),
        stats=list(stats),
        edit_source_schedule_id=edit_source_schedule_id,
    )
