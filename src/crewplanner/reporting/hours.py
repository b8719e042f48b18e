"""Work-hour totals derived from schedules and extra-work records."""

from typing import Iterable, Mapping, Optional, Union

from crewplanner.domain.models import ExtraWork, SavedSchedule, ScheduleAssignment
from crewplanner.domain.shifts import BLOCK_ORDER, ShiftBlock, ShiftModel

_DEFAULT_MODEL = ShiftModel()


def hours_of(
    block: ShiftBlock,
    unit: float,
    shift_model: Optional[ShiftModel] = None,
) -> float:
    """Hours for one assignment (8 for a full shift, 4 for a half)."""
    return (shift_model or _DEFAULT_MODEL).hours_of(block, unit)


def total_hours(
    schedule: Union[SavedSchedule, Iterable[ScheduleAssignment]],
    extra_hours_by_staff: Optional[Mapping[str, float]] = None,
    shift_model: Optional[ShiftModel] = None,
) -> dict[str, float]:
    """Total hours per staff member over a schedule.

    Args:
        schedule: A SavedSchedule or its list of daily assignments.
        extra_hours_by_staff: Extra hours per staff member worked outside
            the schedule, added on top.
        shift_model: Duration table (defaults to the standard one).

    Returns:
        Dict mapping staff ID to hours, in order of first appearance.
    """
    assignments = schedule.assignments if isinstance(schedule, SavedSchedule) else schedule
    totals: dict[str, float] = {}

    for assignment in assignments:
        for block in BLOCK_ORDER:
            for entry in assignment.assignees(block):
                hours = hours_of(block, entry.unit, shift_model)
                totals[entry.staff_id] = totals.get(entry.staff_id, 0.0) + hours

    if extra_hours_by_staff:
        for staff_id, hours in extra_hours_by_staff.items():
            totals[staff_id] = totals.get(staff_id, 0.0) + hours

    return totals


def extra_hours_by_staff(
    extra_work: Iterable[ExtraWork],
    schedule_id: Optional[str] = None,
) -> dict[str, float]:
    """Sum extra-work hours per staff member, optionally for one schedule."""
    totals: dict[str, float] = {}
    for record in extra_work:
        if schedule_id is not None and record.schedule_id != schedule_id:
            continue
        totals[record.staff_id] = totals.get(record.staff_id, 0.0) + record.hours
    return totals
