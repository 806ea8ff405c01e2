"""
Tests API : calendrier, emploi du temps, rapports, demandes, réconciliation.
"""

import uuid
from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from app.dependencies import (
    get_calendar_service,
    get_reconciliation_service,
    get_report_service,
    get_request_service,
    get_timetable_service,
)
from app.exceptions import ConflictError, NotFoundError
from app.main import app
from app.schemas.calendar import CalendarStatus, HolidayResponse
from app.schemas.reconciliation import AbsenceSweepResult, ExpirySweepResult
from app.schemas.report import StudentAttendanceSummary, StudentOverallSummary
from app.schemas.request import AttendanceRequestResponse
from app.schemas.timetable import DaySchedule
from app.services.calendar_service import CalendarService
from app.services.reconciliation_service import ReconciliationService
from app.services.report_service import ReportService
from app.services.request_service import RequestService
from app.services.timetable_service import TimetableService

ACTOR_ID = uuid.uuid4()
HEADERS = {"X-User-Id": str(ACTOR_ID)}


def override(dependency, spec):
    mock = MagicMock(spec=spec)
    app.dependency_overrides[dependency] = lambda: mock
    return mock


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# --- Calendrier ---

class TestCalendar:
    def test_resolution(self, client):
        service = override(get_calendar_service, CalendarService)
        service.resolve.return_value = CalendarStatus(
            date=date(2026, 3, 7), is_holiday=False, is_working_day=True,
            reason="Working Saturday", mapped_day="monday",
        )

        response = client.get("/api/v1/calendar/2026-03-07")

        assert response.status_code == 200
        assert response.json()["mapped_day"] == "monday"
        service.resolve.assert_called_once_with(date(2026, 3, 7))

    def test_creation_regle(self, client):
        service = override(get_calendar_service, CalendarService)
        service.create_holiday.return_value = HolidayResponse(
            id=uuid.uuid4(), name="Pongal", start_date=date(2026, 1, 14), end_date=date(2026, 1, 16),
            type="SPECIAL", mapped_day=None, created_by=ACTOR_ID, created_at=datetime(2026, 1, 1),
        )

        response = client.post(
            "/api/v1/holidays",
            json={"name": "Pongal", "start_date": "2026-01-14", "end_date": "2026-01-16", "type": "SPECIAL"},
            headers=HEADERS,
        )

        assert response.status_code == 201
        assert service.create_holiday.call_args.args[1] == ACTOR_ID

    def test_samedi_travaille_sans_jour(self, client):
        override(get_calendar_service, CalendarService)

        response = client.post(
            "/api/v1/holidays",
            json={"name": "Rattrapage", "start_date": "2026-03-07", "end_date": "2026-03-07",
                  "type": "SATURDAY_WORKING"},
            headers=HEADERS,
        )

        assert response.status_code == 422

    def test_liste(self, client):
        service = override(get_calendar_service, CalendarService)
        service.list_holidays.return_value = []

        assert client.get("/api/v1/holidays").json() == []


# --- Emploi du temps ---

def test_creneaux_du_jour(client):
    service = override(get_timetable_service, TimetableService)
    class_id = uuid.uuid4()
    service.get_day_schedule.return_value = DaySchedule(
        class_id=class_id, date=date(2026, 3, 8), is_holiday=True, followed_day=None, slots=[],
    )

    response = client.get(f"/api/v1/classes/{class_id}/schedule", params={"day": "2026-03-08"})

    assert response.status_code == 200
    assert response.json()["is_holiday"] is True


# --- Rapports ---

class TestReports:
    def test_rapport_de_classe(self, client):
        service = override(get_report_service, ReportService)
        class_id, student_id = uuid.uuid4(), uuid.uuid4()
        service.summarize.return_value = [StudentAttendanceSummary(
            student_id=student_id, name="Élève 1", roll_number="CSE202100001",
            total_classes=10, present=8, absent=2, percentage=80,
        )]

        response = client.get("/api/v1/reports/attendance", params={
            "class_id": str(class_id), "start_date": "2026-03-01", "end_date": "2026-03-31",
        })

        assert response.status_code == 200
        assert response.json()[0]["percentage"] == 80
        service.summarize.assert_called_once_with(class_id, date(2026, 3, 1), date(2026, 3, 31))

    def test_periode_inversee(self, client):
        service = override(get_report_service, ReportService)

        response = client.get("/api/v1/reports/attendance", params={
            "class_id": str(uuid.uuid4()), "start_date": "2026-03-31", "end_date": "2026-03-01",
        })

        assert response.status_code == 400
        service.summarize.assert_not_called()

    def test_synthese_eleve_introuvable(self, client):
        service = override(get_report_service, ReportService)
        service.student_summary.side_effect = NotFoundError("student not found")

        response = client.get(f"/api/v1/reports/students/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_synthese_eleve(self, client):
        service = override(get_report_service, ReportService)
        student_id = uuid.uuid4()
        service.student_summary.return_value = StudentOverallSummary(
            student_id=student_id, total=4, present=3, absent=1, percentage=75,
        )

        response = client.get(f"/api/v1/reports/students/{student_id}")

        assert response.json()["percentage"] == 75


# --- Demandes ---

def request_response(status="PENDING"):
    return AttendanceRequestResponse(
        id=uuid.uuid4(), student_id=ACTOR_ID, type="MANUAL_ATTENDANCE", date=date(2026, 3, 2),
        period=2, reason="Téléphone déchargé pendant le cours", friend_roll_number=None,
        status=status, reviewed_by=None, review_note=None, reviewed_at=None,
        created_at=datetime(2026, 3, 2, 9, 0),
    )


class TestRequests:
    def test_soumission(self, client):
        service = override(get_request_service, RequestService)
        service.submit_request.return_value = request_response()

        response = client.post("/api/v1/requests", json={
            "type": "MANUAL_ATTENDANCE", "date": "2026-03-02", "period": 2,
            "reason": "Téléphone déchargé pendant le cours",
        }, headers=HEADERS)

        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"

    def test_filtres_transmis(self, client):
        service = override(get_request_service, RequestService)
        service.list_requests.return_value = []

        client.get("/api/v1/requests", params={"status": "PENDING", "type": "FRIEND_ATTENDANCE"})

        service.list_requests.assert_called_once_with(status="PENDING", request_type="FRIEND_ATTENDANCE")

    def test_revue_deja_faite_409(self, client):
        service = override(get_request_service, RequestService)
        service.review_request.side_effect = ConflictError("already reviewed")

        response = client.put(
            f"/api/v1/requests/{uuid.uuid4()}/review", json={"status": "APPROVED"}, headers=HEADERS,
        )

        assert response.status_code == 409
        assert response.json()["reason"] == "already reviewed"

    def test_statut_de_revue_invalide(self, client):
        override(get_request_service, RequestService)

        response = client.put(
            f"/api/v1/requests/{uuid.uuid4()}/review", json={"status": "PENDING"}, headers=HEADERS,
        )

        assert response.status_code == 422


# --- Réconciliation ---

class TestReconciliation:
    def test_balayage_des_absences(self, client):
        service = override(get_reconciliation_service, ReconciliationService)
        service.run_daily_absence_sweep.return_value = AbsenceSweepResult(
            date=date(2026, 3, 2), total_students=3, marked_absent=3,
        )

        response = client.post("/api/v1/reconciliation/absence-sweep", params={"day": "2026-03-02"})

        assert response.status_code == 200
        assert response.json()["marked_absent"] == 3
        service.run_daily_absence_sweep.assert_called_once_with(date(2026, 3, 2))

    def test_sessions_expirees(self, client):
        service = override(get_reconciliation_service, ReconciliationService)
        service.run_session_expiry_sweep.return_value = ExpirySweepResult(deactivated=2)

        response = client.post("/api/v1/reconciliation/session-expiry")

        assert response.json() == {"deactivated": 2}
