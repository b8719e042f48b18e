"""Domain models and the shift table."""

from crewplanner.domain.models import (
    BlockAssignment,
    DayRequest,
    ExtraWork,
    GenerationRequest,
    HalfDayRequest,
    SavedSchedule,
    ScheduleAssignment,
    ScheduleStats,
    StaffMember,
    WorkRules,
    date_range,
    to_date,
    to_saved_schedule,
)
from crewplanner.domain.shifts import (
    BLOCK_ORDER,
    FULL_UNIT,
    HALF_UNIT,
    ShiftBlock,
    ShiftCode,
    ShiftModel,
    parse_block,
)

__all__ = [
    # Models
    "BlockAssignment",
    "DayRequest",
    "ExtraWork",
    "GenerationRequest",
    "HalfDayRequest",
    "SavedSchedule",
    "ScheduleAssignment",
    "ScheduleStats",
    "StaffMember",
    "WorkRules",
    "date_range",
    "to_date",
    "to_saved_schedule",
    # Shifts
    "BLOCK_ORDER",
    "FULL_UNIT",
    "HALF_UNIT",
    "ShiftBlock",
    "ShiftCode",
    "ShiftModel",
    "parse_block",
]
