"""Fairness tracking for block assignments across days.

The tracker only sees days produced earlier in the same generation run.
Schedules generated by earlier runs are not consulted.
"""

from datetime import date, timedelta

from crewplanner.domain.models import ScheduleAssignment
from crewplanner.domain.shifts import ShiftBlock

FAIRNESS_WINDOW_DAYS = 14


class FairnessTracker:
    """Counts recent block assignments per staff member.

    Used to break ties between equally eligible candidates: the person who
    worked a block least often in the trailing window goes first.

    Example:
        >>> tracker = FairnessTracker()
        >>> tracker.record(day_one)
        >>> tracker.recent_block_count("bob", ShiftBlock.OPEN, day_two_date)
        1
    """

    def __init__(self, window_days: int = FAIRNESS_WINDOW_DAYS):
        self.window_days = window_days
        self._by_date: dict[date, ScheduleAssignment] = {}

    def record(self, assignment: ScheduleAssignment) -> None:
        """Make a finished day visible to later lookups."""
        self._by_date[assignment.date] = assignment

    def recent_block_count(
        self,
        staff_id: str,
        block: ShiftBlock,
        on_date: date,
    ) -> int:
        """Days in the window before ``on_date`` where staff worked ``block``.

        The window covers the ``window_days`` calendar days strictly before
        ``on_date``; the day itself is never counted.
        """
        count = 0
        for offset in range(1, self.window_days + 1):
            assignment = self._by_date.get(on_date - timedelta(days=offset))
            if assignment is None:
                continue
            if any(a.staff_id == staff_id for a in assignment.assignees(block)):
                count += 1
        return count

    def __len__(self) -> int:
        return len(self._by_date)
