"""Validation of generation requests and generated schedules.

Both validators report problems as data and never raise. The input
validator gates generation: a request with any error should not be passed
to the engine. The output validator re-checks a schedule after generation
or after manual edits; a caller may still choose to accept an imperfect
schedule.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from crewplanner.domain.models import (
    GenerationRequest,
    ScheduleAssignment,
    to_date,
)
from crewplanner.domain.shifts import BLOCK_ORDER, MIDDLE_REQUIRED_FROM, ShiftBlock

# Longest allowed gap between start and end date (a 371-day span).
MAX_RANGE_DAYS = 370


class ValidationErrorType(Enum):
    """Types of validation errors."""

    # Request checks
    INVALID_DATE = "invalid_date"
    DATE_RANGE_REVERSED = "date_range_reversed"
    DATE_RANGE_TOO_LONG = "date_range_too_long"
    EMPTY_ROSTER = "empty_roster"
    MISSING_NAME = "missing_name"
    NO_AVAILABLE_SHIFTS = "no_available_shifts"
    REQUIRED_SHIFT_UNAVAILABLE = "required_shift_unavailable"
    PREFERRED_SHIFT_UNAVAILABLE = "preferred_shift_unavailable"
    HALF_REQUEST_UNKNOWN_STAFF = "half_request_unknown_staff"
    HALF_REQUEST_SHIFT_UNAVAILABLE = "half_request_shift_unavailable"
    HALF_REQUEST_CONFLICTS_REQUIRED = "half_request_conflicts_required"
    INVALID_MIN_HEADCOUNT = "invalid_min_headcount"
    INVALID_MAX_HEADCOUNT = "invalid_max_headcount"
    NON_INTEGER_HEADCOUNT = "non_integer_headcount"
    INVALID_WORK_HOURS = "invalid_work_hours"
    INVALID_BREAK_HOURS = "invalid_break_hours"
    # Schedule checks
    HEADCOUNT_BELOW_MIN = "headcount_below_min"
    HEADCOUNT_ABOVE_MAX = "headcount_above_max"
    OPEN_OR_CLOSE_EMPTY = "open_or_close_empty"
    MIDDLE_EMPTY = "middle_empty"
    UNKNOWN_STAFF = "unknown_staff"
    SHIFT_NOT_AVAILABLE = "shift_not_available"
    REQUIRED_SHIFT_VIOLATED = "required_shift_violated"
    OFF_STAFF_ASSIGNED = "off_staff_assigned"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    schedule_date: Optional[date] = None
    staff_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.schedule_date is not None:
            parts.append(f"{self.schedule_date.isoformat()}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of a validation pass."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def messages(self) -> list[str]:
        return [str(error) for error in self.errors]

    def has_error(self, error_type: ValidationErrorType) -> bool:
        return any(e.error_type == error_type for e in self.errors)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class InputValidator:
    """Checks a GenerationRequest before any allocation runs.

    Example:
        >>> errors = InputValidator().validate(request)
        >>> if errors:
        ...     print("\\n".join(errors))
    """

    def validate(self, request: GenerationRequest) -> list[str]:
        """Error messages for the request; empty means safe to generate."""
        return self.check(request).messages()

    def check(self, request: GenerationRequest) -> ValidationResult:
        """Validate a request, returning typed errors and warnings."""
        result = ValidationResult()
        self._validate_dates(request, result)
        self._validate_staff(request, result)
        self._validate_day_requests(request, result)
        self._validate_work_rules(request, result)
        return result

    def _validate_dates(self, request: GenerationRequest, result: ValidationResult) -> None:
        start = to_date(request.start_date)
        end = to_date(request.end_date)
        if start is None:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_DATE,
                    message=f"Start date {request.start_date!r} is not a valid date",
                )
            )
        if end is None:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_DATE,
                    message=f"End date {request.end_date!r} is not a valid date",
                )
            )
        if start is None or end is None:
            return

        if end < start:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DATE_RANGE_REVERSED,
                    message=f"End date {end.isoformat()} is before start date {start.isoformat()}",
                )
            )
        elif (end - start).days > MAX_RANGE_DAYS:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DATE_RANGE_TOO_LONG,
                    message=(
                        f"Date range spans {(end - start).days + 1} days; "
                        f"choose at most {MAX_RANGE_DAYS + 1}"
                    ),
                    details={"days": (end - start).days + 1},
                )
            )

    def _validate_staff(self, request: GenerationRequest, result: ValidationResult) -> None:
        if not request.staff:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_ROSTER,
                    message="At least one staff member is required",
                )
            )
            return

        for member in request.staff:
            label = member.name or "(unnamed)"
            if not (member.name or "").strip():
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.MISSING_NAME,
                        message=f"Staff {member.id} has an empty name",
                        staff_id=member.id,
                    )
                )
            if not member.available_shifts:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NO_AVAILABLE_SHIFTS,
                        message=f"{label}: select at least one available shift",
                        staff_id=member.id,
                    )
                )
            if member.required_shift is not None and not member.can_work(member.required_shift):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.REQUIRED_SHIFT_UNAVAILABLE,
                        message=(
                            f"{label}: required shift {member.required_shift.value} "
                            f"is not among available shifts"
                        ),
                        staff_id=member.id,
                    )
                )
            if member.preferred_shift is not None and not member.can_work(member.preferred_shift):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.PREFERRED_SHIFT_UNAVAILABLE,
                        message=(
                            f"{label}: preferred shift {member.preferred_shift.value} "
                            f"is not among available shifts"
                        ),
                        staff_id=member.id,
                    )
                )

    def _validate_day_requests(
        self, request: GenerationRequest, result: ValidationResult
    ) -> None:
        staff_map = request.staff_map

        for day_request in request.requests:
            request_date = to_date(day_request.date)

            for half in day_request.half_staff_requests:
                member = staff_map.get(half.staff_id)
                if member is None:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.HALF_REQUEST_UNKNOWN_STAFF,
                            message=f"Half-day request for unknown staff {half.staff_id}",
                            schedule_date=request_date,
                            staff_id=half.staff_id,
                        )
                    )
                    continue
                if not member.can_work(half.block):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.HALF_REQUEST_SHIFT_UNAVAILABLE,
                            message=(
                                f"{member.name}: half-day shift {half.block.value} "
                                f"is not among available shifts"
                            ),
                            schedule_date=request_date,
                            staff_id=member.id,
                        )
                    )
                if member.required_shift is not None and member.required_shift != half.block:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.HALF_REQUEST_CONFLICTS_REQUIRED,
                            message=(
                                f"{member.name}: half-day shift {half.block.value} differs "
                                f"from required shift {member.required_shift.value}"
                            ),
                            schedule_date=request_date,
                            staff_id=member.id,
                        )
                    )
                if day_request.is_off(half.staff_id):
                    result.add_warning(
                        f"{request_date or day_request.date}: {member.name} is both off "
                        f"and requesting a half day; the day off wins"
                    )

            if day_request.need_delta:
                result.add_warning(
                    f"{request_date or day_request.date}: headcount adjustment "
                    f"{day_request.need_delta} is ignored by the generator"
                )

    def _validate_work_rules(self, request: GenerationRequest, result: ValidationResult) -> None:
        rules = request.work_rules
        min_hc, max_hc = rules.min_headcount, rules.max_headcount

        if not _is_number(min_hc) or min_hc < 1:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_MIN_HEADCOUNT,
                    message=f"Minimum headcount must be at least 1 (got {min_hc!r})",
                )
            )
        if not _is_number(max_hc) or (_is_number(min_hc) and max_hc < min_hc):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_MAX_HEADCOUNT,
                    message=(
                        f"Maximum headcount must be at least the minimum "
                        f"(got {max_hc!r} < {min_hc!r})"
                    ),
                )
            )
        for label, value in (("Minimum", min_hc), ("Maximum", max_hc)):
            if _is_number(value) and not float(value).is_integer():
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NON_INTEGER_HEADCOUNT,
                        message=f"{label} headcount must be a whole number (got {value})",
                    )
                )

        if not _is_number(rules.work_hours) or rules.work_hours <= 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_WORK_HOURS,
                    message=f"Work hours must be positive (got {rules.work_hours!r})",
                )
            )
        if not _is_number(rules.break_hours) or rules.break_hours < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_BREAK_HOURS,
                    message=f"Break hours must not be negative (got {rules.break_hours!r})",
                )
            )


class OutputValidator:
    """Re-checks a schedule against the request it was generated for.

    Headcount bounds are rounded to the nearest whole number here, while
    the engine floors them.
    """

    def validate(
        self,
        request: GenerationRequest,
        assignments: list[ScheduleAssignment],
    ) -> list[str]:
        """Violation messages for the schedule; empty means it checks out."""
        return self.check(request, assignments).messages()

    def check(
        self,
        request: GenerationRequest,
        assignments: list[ScheduleAssignment],
    ) -> ValidationResult:
        """Validate a schedule, returning typed errors."""
        result = ValidationResult()
        rules = request.work_rules
        if not (_is_number(rules.min_headcount) and _is_number(rules.max_headcount)):
            result.add_warning("Headcount rules are not numeric; headcount checks skipped")
            min_hc = max_hc = None
        else:
            min_hc = _round_half_up(rules.min_headcount)
            max_hc = _round_half_up(rules.max_headcount)

        requests_by_date = request.requests_by_date()
        staff_map = request.staff_map

        for assignment in assignments:
            day_request = requests_by_date.get(assignment.date)
            off_ids = day_request.off_staff_ids if day_request is not None else set()

            if min_hc is not None:
                self._validate_headcount(
                    assignment, request, off_ids, min_hc, max_hc, result
                )
            self._validate_coverage(assignment, result)

            for block in BLOCK_ORDER:
                for entry in assignment.assignees(block):
                    self._validate_entry(
                        assignment.date, block, entry.staff_id, staff_map, off_ids, result
                    )

        return result

    def _validate_headcount(
        self,
        assignment: ScheduleAssignment,
        request: GenerationRequest,
        off_ids: set[str],
        min_hc: int,
        max_hc: int,
        result: ValidationResult,
    ) -> None:
        headcount = assignment.headcount
        if headcount < min_hc:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.HEADCOUNT_BELOW_MIN,
                    message=f"Assigned staff ({headcount}) is below the minimum ({min_hc})",
                    schedule_date=assignment.date,
                    details={"headcount": headcount, "min": min_hc},
                )
            )
        if headcount > max_hc:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.HEADCOUNT_ABOVE_MAX,
                    message=f"Assigned staff ({headcount}) exceeds the maximum ({max_hc})",
                    schedule_date=assignment.date,
                    details={"headcount": headcount, "max": max_hc},
                )
            )

        available_count = sum(1 for s in request.staff if s.id not in off_ids)
        target = min(max_hc, available_count)
        if target >= MIDDLE_REQUIRED_FROM and not assignment.assignees(ShiftBlock.MIDDLE):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MIDDLE_EMPTY,
                    message=f"Middle is empty although the target headcount is {target}",
                    schedule_date=assignment.date,
                    details={"target": target},
                )
            )

    def _validate_coverage(self, assignment: ScheduleAssignment, result: ValidationResult) -> None:
        if not assignment.assignees(ShiftBlock.OPEN) or not assignment.assignees(ShiftBlock.CLOSE):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.OPEN_OR_CLOSE_EMPTY,
                    message="Open or close has nobody assigned",
                    schedule_date=assignment.date,
                )
            )

    def _validate_entry(
        self,
        schedule_date: date,
        block: ShiftBlock,
        staff_id: str,
        staff_map: dict,
        off_ids: set[str],
        result: ValidationResult,
    ) -> None:
        member = staff_map.get(staff_id)
        if member is None:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.UNKNOWN_STAFF,
                    message=f"Unknown staff {staff_id} assigned to {block.value}",
                    schedule_date=schedule_date,
                    staff_id=staff_id,
                )
            )
        else:
            if not member.can_work(block):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SHIFT_NOT_AVAILABLE,
                        message=f"{member.name} cannot work {block.value}",
                        schedule_date=schedule_date,
                        staff_id=staff_id,
                    )
                )
            if member.required_shift is not None and member.required_shift != block:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.REQUIRED_SHIFT_VIOLATED,
                        message=(
                            f"{member.name} is assigned {block.value} but requires "
                            f"{member.required_shift.value}"
                        ),
                        schedule_date=schedule_date,
                        staff_id=staff_id,
                    )
                )
        if staff_id in off_ids:
            name = member.name if member is not None else staff_id
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.OFF_STAFF_ASSIGNED,
                    message=f"{name} is off but assigned to {block.value}",
                    schedule_date=schedule_date,
                    staff_id=staff_id,
                )
            )


def validate_request(request: GenerationRequest) -> list[str]:
    """Error messages for a generation request (empty if valid)."""
    return InputValidator().validate(request)


def validate_schedule(
    request: GenerationRequest,
    assignments: list[ScheduleAssignment],
) -> list[str]:
    """Violation messages for a generated schedule (empty if valid)."""
    return OutputValidator().validate(request, assignments)
