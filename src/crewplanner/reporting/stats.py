"""Per-staff day-type statistics for a generated schedule."""

from datetime import date
from typing import Mapping, Optional

from crewplanner.domain.models import (
    DayRequest,
    ScheduleAssignment,
    ScheduleStats,
    StaffMember,
)
from crewplanner.domain.shifts import HALF_UNIT, FULL_UNIT


def build_stats(
    staff: list[StaffMember],
    requests_by_date: Mapping[date, DayRequest],
    assignments: list[ScheduleAssignment],
    workload: Optional[Mapping[str, float]] = None,
) -> list[ScheduleStats]:
    """Summarize off, half and full days per staff member.

    A day counts as off when the person was listed off for it, as a half
    day when their units total 0.5, and as a full day from 1.0 up. Days
    where the person was available but not picked count as none of these.

    Args:
        staff: Roster; output follows its order.
        requests_by_date: Day requests keyed by date.
        assignments: Daily assignments to summarize.
        workload: Precomputed units per staff. Summed from the assignments
            when omitted.

    Returns:
        One ScheduleStats per staff member.
    """
    if workload is None:
        workload = unit_totals(assignments)

    stats = []
    for member in staff:
        off_days = half_days = full_days = 0
        for assignment in assignments:
            day_request = requests_by_date.get(assignment.date)
            if day_request is not None and day_request.is_off(member.id):
                off_days += 1
                continue
            units = assignment.units_for(member.id)
            if units == HALF_UNIT:
                half_days += 1
            elif units >= FULL_UNIT:
                full_days += 1

        stats.append(
            ScheduleStats(
                staff_id=member.id,
                name=member.name,
                off_days=off_days,
                half_days=half_days,
                full_days=full_days,
                work_units=workload.get(member.id, 0.0),
            )
        )
    return stats


def unit_totals(assignments: list[ScheduleAssignment]) -> dict[str, float]:
    """Total workload units per staff member across all days."""
    totals: dict[str, float] = {}
    for assignment in assignments:
        for entries in assignment.by_block.values():
            for entry in entries:
                totals[entry.staff_id] = totals.get(entry.staff_id, 0.0) + entry.unit
    return totals
