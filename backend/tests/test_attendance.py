"""
Tests for attendance months, daily attendance and the monthly report.
"""

from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from rest_api.models import Attendance, AttendanceMonth
from shared.config.constants import Weekday
from shared.utils.worktime import utc_today


@pytest.fixture
def today():
    return utc_today()


@pytest.fixture
def make_month(db_session):
    def _make(establishment, year, month, status="OPEN"):
        attendance_month = AttendanceMonth(
            establishment_id=establishment.id, year=year, month=month, status=status
        )
        db_session.add(attendance_month)
        db_session.commit()
        db_session.refresh(attendance_month)
        return attendance_month

    return _make


@pytest.fixture
def current_month(establishment, make_month, today):
    return make_month(establishment, today.year, today.month)


class TestAttendanceMonths:
    def test_open(self, auth_client):
        response = auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 3})
        assert response.status_code == 201
        assert response.json()["status"] == "OPEN"
        assert response.json()["opened_at"] is not None

    def test_second_open_month_conflicts(self, auth_client):
        auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 3})
        response = auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 4})

        assert response.status_code == 409
        body = response.json()
        assert "close it first" in body["error"]
        assert (body["open_month"]["year"], body["open_month"]["month"]) == (2026, 3)

    def test_reopening_closed_month_conflicts(self, auth_client):
        auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 3})
        auth_client.post("/api/attendance-month/close", json={"year": 2026, "month": 3})

        response = auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 3})
        assert response.status_code == 409
        assert response.json()["attendance_month"]["status"] == "CLOSED"

    @pytest.mark.parametrize("body", [{"year": 2026, "month": 13}, {"year": 1999, "month": 1}])
    def test_out_of_range_rejected(self, auth_client, body):
        assert auth_client.post("/api/attendance-month/open", json=body).status_code == 400

    def test_close(self, auth_client):
        auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 3})
        response = auth_client.post("/api/attendance-month/close", json={"year": 2026, "month": 3})
        assert response.status_code == 200
        assert response.json()["status"] == "CLOSED"
        assert response.json()["closed_at"] is not None

    def test_close_unknown_month(self, auth_client):
        response = auth_client.post("/api/attendance-month/close", json={"year": 2026, "month": 3})
        assert response.status_code == 404

    def test_close_twice_conflicts(self, auth_client, establishment, make_month):
        make_month(establishment, 2026, 3, status="CLOSED")
        response = auth_client.post("/api/attendance-month/close", json={"year": 2026, "month": 3})
        assert response.status_code == 409

    def test_current(self, auth_client, establishment, make_month):
        make_month(establishment, 2025, 12, status="CLOSED")
        make_month(establishment, 2026, 1, status="CLOSED")
        make_month(establishment, 2026, 2)

        data = auth_client.get("/api/attendance-month/current").json()
        assert (data["open_month"]["year"], data["open_month"]["month"]) == (2026, 2)
        assert (data["last_closed_month"]["year"], data["last_closed_month"]["month"]) == (2026, 1)

    def test_current_when_empty(self, auth_client):
        data = auth_client.get("/api/attendance-month/current").json()
        assert data == {"open_month": None, "last_closed_month": None}

    def test_one_open_month_enforced_by_database(self, db_session, establishment, make_month):
        make_month(establishment, 2026, 3)
        db_session.add(AttendanceMonth(establishment_id=establishment.id, year=2026, month=4, status="OPEN"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_months_are_per_establishment(
        self, auth_client, other_establishment, make_month
    ):
        make_month(other_establishment, 2026, 3)
        response = auth_client.post("/api/attendance-month/open", json={"year": 2026, "month": 4})
        assert response.status_code == 201


class TestDailyAttendance:
    def test_requires_open_month(self, auth_client, establishment, make_employee):
        ana = make_employee(establishment)
        response = auth_client.post(
            "/api/attendance/today", json={"employee_id": ana.id, "status": "ABSENT"}
        )
        assert response.status_code == 403

    def test_closed_month_is_frozen(self, auth_client, establishment, make_employee, make_month, today):
        make_month(establishment, today.year, today.month, status="CLOSED")
        ana = make_employee(establishment)
        response = auth_client.post(
            "/api/attendance/today", json={"employee_id": ana.id, "status": "ABSENT"}
        )
        assert response.status_code == 403

    def test_unknown_employee(self, auth_client, current_month):
        response = auth_client.post("/api/attendance/today", json={"employee_id": 999, "status": "ABSENT"})
        assert response.status_code == 404

    def test_present_against_schedule(
        self, auth_client, establishment, current_month, make_employee, make_schedule, today
    ):
        ana = make_employee(establishment, schedule=make_schedule(establishment, rest_days=()))
        response = auth_client.post(
            "/api/attendance/today",
            json={"employee_id": ana.id, "status": "present", "start_time": "09:10", "end_time": "17:30"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["work_date"] == today.isoformat()
        assert data["employee_name"] == "Ana Lopez"
        assert data["worked_hours"] == 8.33
        assert data["late_minutes"] == 10
        assert data["overtime_minutes"] == 20

    def test_present_without_schedule_counts_worked_time_only(
        self, auth_client, establishment, current_month, make_employee
    ):
        ana = make_employee(establishment)
        data = auth_client.post(
            "/api/attendance/today",
            json={"employee_id": ana.id, "status": "PRESENT", "start_time": "22:00", "end_time": "02:00"},
        ).json()
        assert data["worked_hours"] == 4
        assert data["late_minutes"] == 0
        assert data["overtime_minutes"] == 0

    def test_second_record_same_day_conflicts(self, auth_client, establishment, current_month, make_employee):
        ana = make_employee(establishment)
        body = {"employee_id": ana.id, "status": "ABSENT"}
        assert auth_client.post("/api/attendance/today", json=body).status_code == 201
        assert auth_client.post("/api/attendance/today", json=body).status_code == 409

    def test_rest_day_presence_needs_exception(
        self, auth_client, establishment, current_month, make_employee, make_schedule, today
    ):
        rest_day = Weekday.ALL[today.weekday()]
        ana = make_employee(establishment, schedule=make_schedule(establishment, rest_days=(rest_day,)))
        body = {"employee_id": ana.id, "status": "PRESENT", "start_time": "10:00", "end_time": "14:00"}

        response = auth_client.post("/api/attendance/today", json=body)
        assert response.status_code == 400
        assert "rest day" in response.json()["error"]

        response = auth_client.post("/api/attendance/today", json={**body, "is_exception": True})
        assert response.status_code == 400
        assert "exception_reason" in response.json()["error"]

        response = auth_client.post(
            "/api/attendance/today",
            json={**body, "is_exception": True, "exception_reason": "Private event"},
        )
        assert response.status_code == 201
        assert response.json()["worked_hours"] == 4
        assert response.json()["overtime_minutes"] == 0

    def test_absence_on_rest_day_is_fine(
        self, auth_client, establishment, current_month, make_employee, make_schedule, today
    ):
        rest_day = Weekday.ALL[today.weekday()]
        ana = make_employee(establishment, schedule=make_schedule(establishment, rest_days=(rest_day,)))
        response = auth_client.post(
            "/api/attendance/today", json={"employee_id": ana.id, "status": "REST_DAY"}
        )
        assert response.status_code == 201

    def test_update_to_absence_clears_minutes(
        self, auth_client, establishment, current_month, make_employee, make_schedule
    ):
        ana = make_employee(establishment, schedule=make_schedule(establishment, rest_days=()))
        auth_client.post(
            "/api/attendance/today",
            json={"employee_id": ana.id, "status": "PRESENT", "start_time": "09:30", "end_time": "17:00"},
        )

        response = auth_client.patch(
            "/api/attendance/today", json={"employee_id": ana.id, "status": "SICK", "notes": "Flu"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SICK"
        assert data["worked_hours"] is None
        assert data["late_minutes"] == 0
        assert data["notes"] == "Flu"

    def test_update_recomputes_times(
        self, auth_client, establishment, current_month, make_employee, make_schedule
    ):
        ana = make_employee(establishment, schedule=make_schedule(establishment, rest_days=()))
        auth_client.post(
            "/api/attendance/today",
            json={"employee_id": ana.id, "status": "PRESENT", "start_time": "09:30", "end_time": "17:00"},
        )
        data = auth_client.patch(
            "/api/attendance/today", json={"employee_id": ana.id, "start_time": "09:00"}
        ).json()
        assert data["late_minutes"] == 0
        assert data["worked_hours"] == 8

    def test_update_without_record(self, auth_client, establishment, current_month, make_employee):
        ana = make_employee(establishment)
        response = auth_client.patch("/api/attendance/today", json={"employee_id": ana.id, "status": "ABSENT"})
        assert response.status_code == 404

    def test_update_after_close_is_forbidden(
        self, auth_client, db_session, establishment, current_month, make_employee
    ):
        ana = make_employee(establishment)
        auth_client.post("/api/attendance/today", json={"employee_id": ana.id, "status": "ABSENT"})
        current_month.status = "CLOSED"
        db_session.commit()

        response = auth_client.patch("/api/attendance/today", json={"employee_id": ana.id, "status": "SICK"})
        assert response.status_code == 403


class TestMonthlyReport:
    def _record(self, db_session, month, employee, day, status, worked=None, late=0, overtime=0, exception=False):
        db_session.add(
            Attendance(
                establishment_id=employee.establishment_id,
                attendance_month_id=month.id,
                employee_id=employee.id,
                work_date=day,
                status=status,
                worked_minutes=worked,
                late_minutes=late,
                overtime_minutes=overtime,
                is_exception=exception,
                exception_reason="Cover" if exception else None,
            )
        )
        db_session.commit()

    def test_invalid_month(self, auth_client):
        assert auth_client.get("/api/attendance/month/2026/13").status_code == 400

    def test_month_never_opened(self, auth_client):
        assert auth_client.get("/api/attendance/month/2026/3").status_code == 404

    def test_statistics(self, auth_client, db_session, establishment, make_employee, make_month):
        month = make_month(establishment, 2026, 3)
        ana = make_employee(establishment, first_name="Ana", last_name="Lopez")
        ben = make_employee(establishment, first_name="Ben", last_name="Adams")
        make_employee(establishment, first_name="Old", last_name="Timer", status="INACTIVE")

        first = date(2026, 3, 2)
        self._record(db_session, month, ana, first, "PRESENT", worked=480, late=5, overtime=30)
        self._record(db_session, month, ana, first + timedelta(days=1), "PRESENT", worked=450, exception=True)
        self._record(db_session, month, ana, first + timedelta(days=2), "SICK")
        self._record(db_session, month, ben, first, "ABSENT")

        response = auth_client.get("/api/attendance/month/2026/3")
        assert response.status_code == 200
        data = response.json()

        assert data["month"]["status"] == "OPEN"
        assert [(a["employee_name"], a["status"]) for a in data["attendances"]] == [
            ("Ben Adams", "ABSENT"),
            ("Ana Lopez", "PRESENT"),
            ("Ana Lopez", "PRESENT"),
            ("Ana Lopez", "SICK"),
        ]

        stats = {row["employee"]["first_name"]: row["stats"] for row in data["employee_stats"]}
        assert set(stats) == {"Ana", "Ben"}
        assert stats["Ana"]["total_days"] == 3
        assert stats["Ana"]["days_present"] == 2
        assert stats["Ana"]["days_sick"] == 1
        assert stats["Ana"]["total_worked_hours"] == 15.5
        assert stats["Ana"]["total_late_minutes"] == 5
        assert stats["Ana"]["total_overtime_minutes"] == 30
        assert stats["Ana"]["exceptions_count"] == 1
        assert stats["Ben"]["days_absent"] == 1

        assert data["global_stats"] == {
            "total_employees": 2,
            "total_attendances": 4,
            "total_present": 2,
            "total_absent": 1,
            "total_worked_hours": 15.5,
            "total_exceptions": 1,
        }
