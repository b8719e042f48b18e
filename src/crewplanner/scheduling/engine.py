"""Greedy per-day shift assignment engine.

Each date in the requested range is filled independently, in order:
1. Check the day is feasible (enough staff, open/close/middle coverage)
2. Fill the mandatory open and close slots, plus middle on larger days
3. Fill remaining headcount best-effort, preferences first
4. Record the day so later dates can balance blocks fairly

Earlier picks are never revisited. A day can therefore fail even when a
different pick order would have worked.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from crewplanner.domain.models import (
    BlockAssignment,
    DayRequest,
    GenerationRequest,
    ScheduleAssignment,
    ScheduleStats,
    StaffMember,
)
from crewplanner.domain.shifts import (
    BLOCK_ORDER,
    MIDDLE_REQUIRED_FROM,
    ShiftBlock,
    ShiftCode,
    ShiftModel,
)
from crewplanner.reporting.stats import build_stats
from crewplanner.scheduling.fairness import FairnessTracker

_SNAPSHOT_LIMIT = 50


class GenerationFailure(Enum):
    """Reasons a generation run is aborted."""

    INSUFFICIENT_STAFF = "insufficient_staff"
    NO_OPEN_CAPABLE = "no_open_capable"
    NO_CLOSE_CAPABLE = "no_close_capable"
    NO_MIDDLE_CAPABLE = "no_middle_capable"
    MANDATORY_SLOT_UNFILLED = "mandatory_slot_unfilled"


class ScheduleGenerationError(Exception):
    """Raised when a date cannot be staffed; no partial schedule exists.

    Attributes:
        failure: Which rule made the day infeasible.
        schedule_date: The offending date.
        details: Counts and a snapshot of the candidate pool at failure.
    """

    def __init__(
        self,
        failure: GenerationFailure,
        schedule_date: date,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.failure = failure
        self.schedule_date = schedule_date
        self.message = message
        self.details = details or {}
        super().__init__(f"{schedule_date.isoformat()}: {message}")


@dataclass
class GenerationResult:
    """Output of a generation run."""

    assignments: list[ScheduleAssignment]
    stats: list[ScheduleStats]

    def stats_for(self, staff_id: str) -> Optional[ScheduleStats]:
        for entry in self.stats:
            if entry.staff_id == staff_id:
                return entry
        return None


@dataclass
class DayState:
    """Working state while one date is being filled.

    Attributes:
        schedule_date: Date being filled.
        request: That date's absences and half-day requests.
        available: Staff not off today, in roster order.
        target: Headcount to aim for.
        allowed: Ordered shift codes each available staff member may take.
        picks: Chosen code per staff member, in pick order.
    """

    schedule_date: date
    request: DayRequest
    available: list[StaffMember]
    target: int
    allowed: dict[str, list[ShiftCode]] = field(default_factory=dict)
    picks: dict[str, ShiftCode] = field(default_factory=dict)

    @property
    def assigned_count(self) -> int:
        return len(self.picks)

    def is_assigned(self, staff_id: str) -> bool:
        return staff_id in self.picks

    def unassigned(self) -> list[StaffMember]:
        return [s for s in self.available if s.id not in self.picks]

    def codes_in_block(
        self, staff_id: str, block: ShiftBlock, shift_model: ShiftModel
    ) -> list[ShiftCode]:
        return [
            code
            for code in self.allowed.get(staff_id, [])
            if shift_model.block_of(code) == block
        ]

    def allowed_blocks(self, staff_id: str, shift_model: ShiftModel) -> list[ShiftBlock]:
        """Distinct blocks covered by a staff member's allowed codes."""
        blocks: list[ShiftBlock] = []
        for code in self.allowed.get(staff_id, []):
            block = shift_model.block_of(code)
            if block is not None and block not in blocks:
                blocks.append(block)
        return blocks


class AssignmentEngine:
    """Greedy allocator producing daily assignments over a date range.

    Every call is self-contained: the fairness tracker and workload totals
    are created per call and dropped on return, so identical requests
    always give identical schedules.

    Example:
        >>> engine = AssignmentEngine()
        >>> result = engine.generate(request)
        >>> result.assignments[0].assignees(ShiftBlock.OPEN)
        (BlockAssignment(staff_id='bob', unit=1.0),)
    """

    def __init__(self, shift_model: Optional[ShiftModel] = None):
        self.shift_model = shift_model or ShiftModel()

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate assignments for every date in the request.

        Args:
            request: Date range, rules, roster and day requests. Should have
                passed InputValidator first.

        Returns:
            GenerationResult with one ScheduleAssignment per date and one
            ScheduleStats per staff member.

        Raises:
            ScheduleGenerationError: On the first date that cannot be staffed.
        """
        requests_by_date = request.requests_by_date()
        tracker = FairnessTracker()
        workload: dict[str, float] = {}
        assignments: list[ScheduleAssignment] = []

        min_headcount = math.floor(request.work_rules.min_headcount)
        max_headcount = math.floor(request.work_rules.max_headcount)

        for schedule_date in request.schedule_dates:
            day_request = requests_by_date.get(schedule_date) or DayRequest(
                date=schedule_date
            )
            state = self._prepare_day(
                schedule_date, day_request, request.staff, min_headcount, max_headcount
            )
            self._fill_mandatory(state, tracker)
            self._fill_remaining(state, tracker)

            assignment = self._to_assignment(state)
            for staff_id, code in state.picks.items():
                workload[staff_id] = workload.get(staff_id, 0.0) + self.shift_model.unit_of(code)

            assignments.append(assignment)
            tracker.record(assignment)

        stats = build_stats(request.staff, requests_by_date, assignments, workload)
        return GenerationResult(assignments=assignments, stats=stats)

    def _prepare_day(
        self,
        schedule_date: date,
        day_request: DayRequest,
        staff: list[StaffMember],
        min_headcount: int,
        max_headcount: int,
    ) -> DayState:
        """Run the feasibility checks and build per-staff allowed codes."""
        available = [s for s in staff if not day_request.is_off(s.id)]
        available_count = len(available)

        if available_count < min_headcount:
            raise ScheduleGenerationError(
                GenerationFailure.INSUFFICIENT_STAFF,
                schedule_date,
                f"available staff ({available_count}) is below the minimum "
                f"headcount ({min_headcount})",
                details={
                    "available_count": available_count,
                    "min_headcount": min_headcount,
                },
            )

        target = min(max_headcount, available_count)

        for block, failure in (
            (ShiftBlock.OPEN, GenerationFailure.NO_OPEN_CAPABLE),
            (ShiftBlock.CLOSE, GenerationFailure.NO_CLOSE_CAPABLE),
        ):
            if not any(s.can_work(block) for s in available):
                raise ScheduleGenerationError(
                    failure,
                    schedule_date,
                    f"no available staff can work {block.value}",
                    details={"block": block.value, "available_count": available_count},
                )

        if target >= MIDDLE_REQUIRED_FROM and not any(
            s.can_work(ShiftBlock.MIDDLE) for s in available
        ):
            raise ScheduleGenerationError(
                GenerationFailure.NO_MIDDLE_CAPABLE,
                schedule_date,
                f"target headcount is {target} but no available staff can work middle",
                details={"block": ShiftBlock.MIDDLE.value, "target": target},
            )

        state = DayState(
            schedule_date=schedule_date,
            request=day_request,
            available=available,
            target=target,
        )
        for member in available:
            state.allowed[member.id] = self._allowed_codes(member, day_request)
        return state

    def _allowed_codes(self, member: StaffMember, day_request: DayRequest) -> list[ShiftCode]:
        """Full and half codes for each workable block.

        A required shift narrows the blocks to that one. A half-day request
        guarantees the half code of the requested block without excluding
        the other blocks.
        """
        codes: list[ShiftCode] = []
        half_request = day_request.half_request_for(member.id)
        if half_request is not None:
            codes.append(self.shift_model.code_for(half_request.block, half=True))

        blocks = member.ordered_shifts()
        if member.required_shift is not None:
            blocks = [b for b in blocks if b == member.required_shift]

        for block in blocks:
            for code in self.shift_model.codes_for(block):
                if code not in codes:
                    codes.append(code)
        return codes

    def _fill_mandatory(self, state: DayState, tracker: FairnessTracker) -> None:
        blocks = [ShiftBlock.OPEN, ShiftBlock.CLOSE]
        if state.target >= MIDDLE_REQUIRED_FROM:
            blocks.append(ShiftBlock.MIDDLE)

        for block in blocks:
            if self._assign_slot(state, block, tracker) is None:
                raise ScheduleGenerationError(
                    GenerationFailure.MANDATORY_SLOT_UNFILLED,
                    state.schedule_date,
                    f"could not fill the mandatory {block.value} slot "
                    f"(target headcount {state.target})",
                    details=self._failure_snapshot(state, block),
                )

    def _assign_slot(
        self,
        state: DayState,
        block: ShiftBlock,
        tracker: FairnessTracker,
        prefer_preferred: bool = True,
    ) -> Optional[StaffMember]:
        """Place one person in ``block``; returns them, or None if nobody fits.

        Candidates who prefer the block go first when there are any. Ties
        are broken by fewest recent assignments to the block, then roster
        order.
        """
        candidates = [
            s
            for s in state.unassigned()
            if state.codes_in_block(s.id, block, self.shift_model)
        ]
        if not candidates:
            return None

        pool = candidates
        if prefer_preferred:
            preferred = [s for s in candidates if s.preferred_shift == block]
            if preferred:
                pool = preferred

        pool = sorted(
            pool,
            key=lambda s: tracker.recent_block_count(s.id, block, state.schedule_date),
        )
        selected = pool[0]

        code = self._choose_code(state, selected, block)
        if code is None:
            return None
        state.picks[selected.id] = code
        return selected

    def _fill_remaining(self, state: DayState, tracker: FairnessTracker) -> None:
        """Hire until the target is met or nobody else can be placed."""
        while state.assigned_count < state.target:
            remaining = state.unassigned()
            if not remaining:
                break

            choice = self._next_hire(state, remaining, tracker)
            if choice is None:
                break
            member, block = choice

            code = self._choose_code(state, member, block)
            if code is None:
                break
            state.picks[member.id] = code

    def _next_hire(
        self,
        state: DayState,
        remaining: list[StaffMember],
        tracker: FairnessTracker,
    ) -> Optional[tuple[StaffMember, ShiftBlock]]:
        """Pick the next person and block for a best-effort slot.

        The first remaining person whose preferred block is allowed wins
        outright. Otherwise the first remaining person is placed in the
        allowed block they worked least recently.
        """
        fallback: Optional[tuple[StaffMember, ShiftBlock]] = None
        for member in remaining:
            blocks = state.allowed_blocks(member.id, self.shift_model)
            if member.preferred_shift is not None and member.preferred_shift in blocks:
                return member, member.preferred_shift
            if fallback is None and blocks:
                ranked = sorted(
                    blocks,
                    key=lambda b: tracker.recent_block_count(
                        member.id, b, state.schedule_date
                    ),
                )
                fallback = (member, ranked[0])
        return fallback

    def _choose_code(
        self, state: DayState, member: StaffMember, block: ShiftBlock
    ) -> Optional[ShiftCode]:
        """Half code if the person asked for a half day, else full."""
        codes = state.codes_in_block(member.id, block, self.shift_model)
        if state.request.half_request_for(member.id) is not None:
            return next((c for c in codes if c.is_half), None)
        return next((c for c in codes if c.is_full), codes[0] if codes else None)

    def _to_assignment(self, state: DayState) -> ScheduleAssignment:
        by_block: dict[ShiftBlock, list[BlockAssignment]] = {b: [] for b in BLOCK_ORDER}
        for staff_id, code in state.picks.items():
            block = self.shift_model.block_of(code)
            if block is None:
                continue
            by_block[block].append(
                BlockAssignment(staff_id=staff_id, unit=self.shift_model.unit_of(code))
            )
        return ScheduleAssignment(
            date=state.schedule_date,
            by_block={b: tuple(entries) for b, entries in by_block.items()},
        )

    def _failure_snapshot(self, state: DayState, block: ShiftBlock) -> dict[str, Any]:
        """Candidate pool and allowed codes at the moment a slot failed."""
        candidates = []
        for member in state.available[:_SNAPSHOT_LIMIT]:
            half_request = state.request.half_request_for(member.id)
            candidates.append(
                {
                    "id": member.id,
                    "name": member.name,
                    "available_shifts": [b.value for b in member.ordered_shifts()],
                    "assigned": state.is_assigned(member.id),
                    "half_request": half_request.block.value if half_request else None,
                    "preferred": (
                        member.preferred_shift.value if member.preferred_shift else None
                    ),
                    "allowed_codes": [c.value for c in state.allowed.get(member.id, [])],
                }
            )
        return {
            "block": block.value,
            "target": state.target,
            "available_count": len(state.available),
            "assigned": list(state.picks),
            "candidates": candidates,
        }


def generate_schedule(
    request: GenerationRequest,
    shift_model: Optional[ShiftModel] = None,
) -> GenerationResult:
    """Generate a schedule with a default engine."""
    return AssignmentEngine(shift_model=shift_model).generate(request)
