"""Derived metrics for generated schedules."""

from crewplanner.reporting.hours import extra_hours_by_staff, hours_of, total_hours
from crewplanner.reporting.stats import build_stats, unit_totals

__all__ = [
    "build_stats",
    "extra_hours_by_staff",
    "hours_of",
    "total_hours",
    "unit_totals",
]
