"""Scheduling engine for assigning staff to daily shifts."""

from crewplanner.scheduling.engine import (
    AssignmentEngine,
    GenerationFailure,
    GenerationResult,
    ScheduleGenerationError,
    generate_schedule,
)
from crewplanner.scheduling.fairness import FAIRNESS_WINDOW_DAYS, FairnessTracker

__all__ = [
    "AssignmentEngine",
    "GenerationFailure",
    "GenerationResult",
    "ScheduleGenerationError",
    "generate_schedule",
    "FAIRNESS_WINDOW_DAYS",
    "FairnessTracker",
]
