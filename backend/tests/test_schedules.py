"""
Tests for weekly work schedules and the working-time helpers.
"""

import pytest
from sqlalchemy import select

from rest_api.models import WorkSchedule, WorkScheduleDay
from shared.config.constants import Weekday
from shared.utils.worktime import (
    clock_to_minutes,
    minutes_to_hours,
    schedule_deviation,
    shift_minutes,
)


def week(start="09:00", end="17:00", rest=("SATURDAY", "SUNDAY"), **overrides):
    """Request body days: ``start``-``end`` except on ``rest`` days."""
    days = []
    for weekday in Weekday.ALL:
        working = weekday not in rest
        day = {"day_of_week": weekday.lower(), "is_working_day": working}
        if working:
            day.update(start_time=start, end_time=end)
        day.update(overrides.get(weekday, {}))
        days.append(day)
    return days


class TestWorkTime:
    def test_clock_to_minutes(self):
        assert clock_to_minutes("00:00") == 0
        assert clock_to_minutes("07:45") == 465
        with pytest.raises(ValueError):
            clock_to_minutes("24:00")

    def test_shift_wraps_past_midnight(self):
        assert shift_minutes("09:00", "17:30") == 510
        assert shift_minutes("22:00", "06:00") == 480

    def test_zero_length_shift_rejected(self):
        with pytest.raises(ValueError, match="differ"):
            shift_minutes("08:00", "08:00")

    def test_minutes_to_hours_rounds(self):
        assert minutes_to_hours(510) == 8.5
        assert minutes_to_hours(100) == 1.67
        assert minutes_to_hours(None) == 0

    def test_deviation_late_and_overtime(self):
        deviation = schedule_deviation("09:10", "17:30", "09:00", "17:00")
        assert deviation.late_minutes == 10
        assert deviation.overtime_minutes == 20

    def test_early_arrival_is_not_late(self):
        deviation = schedule_deviation("08:50", "16:30", "09:00", "17:00")
        assert deviation.late_minutes == 0
        assert deviation.overtime_minutes == -20

    def test_deviation_across_midnight(self):
        deviation = schedule_deviation("00:15", "06:00", "23:45", "06:00")
        assert deviation.late_minutes == 30
        assert deviation.overtime_minutes == -30


class TestScheduleHours:
    def test_weekly_hours_sum_effective_days(self):
        schedule = WorkSchedule(
            name="Mixed",
            days=[
                WorkScheduleDay(day_of_week="MONDAY", is_working_day=True, planned_minutes=480),
                WorkScheduleDay(
                    day_of_week="TUESDAY", is_working_day=True, planned_minutes=480, manual_minutes=0
                ),
                WorkScheduleDay(
                    day_of_week="SUNDAY", is_working_day=False, planned_minutes=None, manual_minutes=None
                ),
            ],
        )
        assert [d.effective_minutes for d in schedule.ordered_days] == [480, 0, 0]
        assert schedule.weekly_minutes == 480


class TestSchedules:
    def test_create_computes_weekly_hours(self, auth_client):
        response = auth_client.post("/api/schedules", json={"name": "Office", "days": week()})
        assert response.status_code == 201
        data = response.json()
        assert data["weekly_hours"] == 40
        assert data["working_days"] == 5
        assert data["average_daily_hours"] == 8
        assert [d["day_of_week"] for d in data["days"]] == Weekday.ALL
        assert data["days"][5] == {
            "day_of_week": "SATURDAY",
            "is_working_day": False,
            "start_time": None,
            "end_time": None,
            "planned_hours": None,
            "manual_hours": None,
            "effective_hours": 0,
        }

    def test_overnight_shift(self, auth_client):
        body = {"name": "Night", "days": week(start="22:00", end="06:00", rest=())}
        data = auth_client.post("/api/schedules", json=body).json()
        assert data["weekly_hours"] == 56
        assert data["days"][0]["planned_hours"] == 8

    def test_manual_hours_override(self, auth_client):
        days = week(MONDAY={"manual_hours": 6.5})
        data = auth_client.post("/api/schedules", json={"name": "Manual", "days": days}).json()
        assert data["days"][0]["planned_hours"] == 8
        assert data["days"][0]["effective_hours"] == 6.5
        assert data["weekly_hours"] == 38.5

    def test_rest_days_drop_their_times(self, auth_client):
        days = week(SUNDAY={"start_time": "10:00", "end_time": "12:00"})
        data = auth_client.post("/api/schedules", json={"name": "Office", "days": days}).json()
        assert data["days"][6]["start_time"] is None
        assert data["weekly_hours"] == 40

    @pytest.mark.parametrize(
        "days",
        [
            week()[:6],
            week()[:6] + [week()[0]],
            week(MONDAY={"end_time": None}),
            week(MONDAY={"end_time": "09:00"}),
            week(MONDAY={"start_time": "9h"}),
        ],
        ids=["six-days", "repeated-day", "missing-end", "zero-length", "bad-time"],
    )
    def test_invalid_days_rejected(self, auth_client, days):
        response = auth_client.post("/api/schedules", json={"name": "Broken", "days": days})
        assert response.status_code == 400

    def test_create_assigns_employees(self, auth_client, db_session, establishment, make_employee):
        ana = make_employee(establishment)
        response = auth_client.post(
            "/api/schedules", json={"name": "Office", "days": week(), "employee_ids": [ana.id]}
        )
        schedule = response.json()
        assert [e["id"] for e in schedule["employees"]] == [ana.id]

        db_session.refresh(ana)
        assert ana.schedule_id == schedule["id"]

    def test_unknown_employee_creates_nothing(
        self, auth_client, db_session, other_establishment, make_employee
    ):
        theirs = make_employee(other_establishment)
        response = auth_client.post(
            "/api/schedules", json={"name": "Office", "days": week(), "employee_ids": [theirs.id]}
        )
        assert response.status_code == 404
        assert db_session.scalars(select(WorkSchedule)).all() == []

    def test_list_newest_first(self, auth_client):
        auth_client.post("/api/schedules", json={"name": "First", "days": week()})
        auth_client.post("/api/schedules", json={"name": "Second", "days": week()})
        names = [s["name"] for s in auth_client.get("/api/schedules").json()]
        assert names == ["Second", "First"]

    def test_delete_unassigns_employees(
        self, auth_client, db_session, establishment, make_employee, make_schedule
    ):
        schedule = make_schedule(establishment)
        ana = make_employee(establishment, schedule=schedule)

        assert auth_client.delete(f"/api/schedules/{schedule.id}").status_code == 204
        db_session.refresh(ana)
        assert ana.schedule_id is None
        assert db_session.scalars(select(WorkScheduleDay)).all() == []
        assert auth_client.get(f"/api/schedules/{schedule.id}").status_code == 404
