"""Tests for domain models."""

from datetime import date, datetime

import pytest

from crewplanner.domain.models import (
    BlockAssignment,
    DayRequest,
    GenerationRequest,
    HalfDayRequest,
    ScheduleAssignment,
    StaffMember,
    WorkRules,
    to_date,
    to_saved_schedule,
)
from crewplanner.domain.shifts import ShiftBlock


class TestToDate:
    """Tests for date parsing."""

    def test_date_and_datetime(self):
        assert to_date(date(2024, 3, 4)) == date(2024, 3, 4)
        assert to_date(datetime(2024, 3, 4, 9, 30)) == date(2024, 3, 4)

    def test_iso_string(self):
        assert to_date("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-3-4", "20240304", "", None, 5])
    def test_invalid(self, value):
        assert to_date(value) is None


class TestWorkRules:
    """Tests for WorkRules.from_mapping."""

    def test_defaults(self):
        rules = WorkRules.from_mapping({})
        assert rules == WorkRules(min_headcount=2, max_headcount=3, work_hours=8.0, break_hours=1.0)

    def test_stored_keys(self):
        rules = WorkRules.from_mapping(
            {"DAILY_STAFF_BASE": 3, "DAILY_STAFF_MAX": 5, "WORK_HOURS": 7.5, "BREAK_HOURS": 0.5}
        )
        assert rules == WorkRules(min_headcount=3, max_headcount=5, work_hours=7.5, break_hours=0.5)

    def test_legacy_single_value(self):
        rules = WorkRules.from_mapping({"DAILY_STAFF": 4})
        assert (rules.min_headcount, rules.max_headcount) == (4, 4)

    def test_max_lifted_to_min(self):
        rules = WorkRules.from_mapping({"min_headcount": 4, "max_headcount": 2})
        assert rules.max_headcount == 4

    def test_non_numeric_falls_back(self):
        rules = WorkRules.from_mapping({"min_headcount": "lots", "work_hours": True})
        assert rules.min_headcount == 2
        assert rules.work_hours == 8.0


class TestStaffMember:
    """Tests for StaffMember."""

    def test_blocks_parsed_from_strings(self):
        member = StaffMember(
            id="a",
            name="A",
            available_shifts={"close", "O"},
            preferred_shift="close",
            priority={"open": 2},
        )
        assert member.available_shifts == {ShiftBlock.OPEN, ShiftBlock.CLOSE}
        assert member.preferred_shift == ShiftBlock.CLOSE
        assert member.priority == {ShiftBlock.OPEN: 2}
        assert member.ordered_shifts() == [ShiftBlock.OPEN, ShiftBlock.CLOSE]
        assert not member.can_work(ShiftBlock.MIDDLE)


class TestGenerationRequest:
    """Tests for GenerationRequest helpers."""

    @pytest.fixture
    def request_(self):
        return GenerationRequest(
            start_date="2024-02-27",
            end_date="2024-03-02",
            staff=[StaffMember(id="a", name="A", available_shifts={"open"})],
            requests=[
                DayRequest(date="2024-02-28", off_staff_ids={"a"}),
                DayRequest(date="not-a-date", off_staff_ids={"a"}),
                DayRequest(date=date(2024, 2, 28)),
            ],
        )

    def test_schedule_dates_cross_leap_day(self, request_):
        assert request_.schedule_dates == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
            date(2024, 3, 2),
        ]
        assert request_.num_days == 5

    def test_invalid_range_has_no_dates(self, request_):
        request_.end_date = "2024-02-30"
        assert request_.schedule_dates == []

    def test_later_request_wins(self, request_):
        by_date = request_.requests_by_date()
        assert list(by_date) == [date(2024, 2, 28)]
        assert not by_date[date(2024, 2, 28)].is_off("a")

    def test_request_for_missing_date(self, request_):
        empty = request_.request_for(date(2024, 3, 1))
        assert empty.off_staff_ids == set()
        assert empty.half_staff_requests == []


class TestDayRequest:
    """Tests for DayRequest lookups."""

    def test_first_half_request_used(self):
        request = DayRequest(
            date=date(2024, 3, 4),
            half_staff_requests=[
                HalfDayRequest("a", "middle"),
                HalfDayRequest("a", "close"),
            ],
        )
        assert request.half_request_for("a").block == ShiftBlock.MIDDLE
        assert request.half_request_for("b") is None


class TestScheduleAssignment:
    """Tests for ScheduleAssignment accessors."""

    def test_headcount_and_units(self):
        assignment = ScheduleAssignment(
            date=date(2024, 3, 4),
            by_block={
                ShiftBlock.OPEN: (BlockAssignment("a", 1.0),),
                ShiftBlock.CLOSE: (BlockAssignment("b", 0.5), BlockAssignment("a", 1.0)),
            },
        )
        assert assignment.headcount == 2
        assert assignment.units_for("a") == 2.0
        assert assignment.units_for("b") == 0.5
        assert assignment.block_for("b") == ShiftBlock.CLOSE
        assert assignment.block_for("z") is None
        assert assignment.assignees(ShiftBlock.MIDDLE) == ()


class TestSavedSchedule:
    """Tests for to_saved_schedule."""

    def test_year_and_month_from_start(self):
        request = GenerationRequest(
            start_date="2024-03-30",
            end_date="2024-04-02",
            staff=[StaffMember(id="a", name="A", available_shifts={"open"})],
        )
        now = datetime(2024, 3, 1, 12, 0)

        saved = to_saved_schedule("sched-1", request, [], [], edit_source_schedule_id="sched-0", now=now)

        assert (saved.year, saved.month) == (2024, 3)
        assert saved.start_date == date(2024, 3, 30)
        assert saved.end_date == date(2024, 4, 2)
        assert saved.created_at == saved.updated_at == now
        assert saved.edit_source_schedule_id == "sched-0"
        assert saved.work_rules is request.work_rules
