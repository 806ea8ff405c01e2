"""
Tests du service de marquage des présences.
Scénarios : session de 15 min (09:00 → 09:15), double marquage, jeton invalide,
présence campus avant/après 11h, géorepérage, justification d'absence.
"""

import uuid
from datetime import date, datetime, time, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from app.exceptions import ConflictError, ExpiredError, ForbiddenError, NotFoundError
from app.models.attendance import Attendance
from app.models.session import AttendanceSession, SessionPresentStudent
from app.schemas.attendance import Location
from app.services.attendance_service import AttendanceService
from app.services.audit_service import AuditRecorder
from app.services.calendar_service import CalendarService
from app.services.geofence import GeofenceValidator
from app.services.session_service import SessionService

CAMPUS = Location(latitude=13.0827, longitude=80.2707)
NORTH_400M = Location(latitude=13.0827 + 0.0036, longitude=80.2707)
NORTH_600M = Location(latitude=13.0827 + 0.0054, longitude=80.2707)


@pytest.fixture
def geofence():
    return GeofenceValidator(13.0827, 80.2707, 500.0)


@pytest.fixture
def service(db, clock, geofence):
    return AttendanceService(db, clock, geofence)


@pytest.fixture
def sessions(db, clock, notifier):
    return SessionService(db, CalendarService(db), clock, notifier)


@pytest.fixture
def open_session(sessions, school_class, teacher):
    """Session BLE ouverte à 09:00 pour la période 3."""
    return sessions.create_session(school_class.id, teacher.id, 3, "BLE")


# --- Présence en cours ---

class TestMarkClassAttendance:
    def test_marquage_dans_la_fenetre(self, service, open_session, make_student, clock, db):
        student = make_student()
        clock.current = datetime(2026, 3, 2, 9, 5)

        result = service.mark_class_attendance(open_session.id, student.id, open_session.token, "device-1")

        assert result.type == "CLASS"
        assert result.status == "PRESENT"
        assert result.period == 3
        assert result.mode == "BLE"
        assert result.created_at == datetime(2026, 3, 2, 9, 5)
        assert result.device_id == "device-1"
        present = db.execute(select(SessionPresentStudent.student_id)).scalars().all()
        assert present == [student.id]

    def test_second_marquage_refuse(self, service, open_session, make_student, clock, db):
        student = make_student()
        clock.current = datetime(2026, 3, 2, 9, 5)
        service.mark_class_attendance(open_session.id, student.id, open_session.token)
        clock.current = datetime(2026, 3, 2, 9, 6)

        with pytest.raises(ConflictError) as exc_info:
            service.mark_class_attendance(open_session.id, student.id, open_session.token)

        assert exc_info.value.reason == "already marked"
        rows = db.execute(select(Attendance).where(Attendance.student_id == student.id)).scalars().all()
        assert len(rows) == 1

    def test_session_expiree(self, service, open_session, make_student, clock):
        student = make_student()
        clock.current = datetime(2026, 3, 2, 9, 15)

        with pytest.raises(ExpiredError) as exc_info:
            service.mark_class_attendance(open_session.id, student.id, open_session.token)

        assert exc_info.value.reason == "session expired"

    def test_session_desactivee(self, service, open_session, make_student, clock, db):
        db.get(AttendanceSession, open_session.id).is_active = False
        db.commit()

        with pytest.raises(ExpiredError):
            service.mark_class_attendance(open_session.id, make_student().id, open_session.token)

    def test_jeton_invalide(self, service, open_session, make_student, db):
        with pytest.raises(ForbiddenError) as exc_info:
            service.mark_class_attendance(open_session.id, make_student().id, "0" * 64)

        assert exc_info.value.reason == "token mismatch"
        assert db.execute(select(Attendance)).scalars().all() == []

    def test_expiration_verifiee_avant_le_jeton(self, service, open_session, make_student, clock):
        clock.current = datetime(2026, 3, 2, 9, 30)

        with pytest.raises(ExpiredError):
            service.mark_class_attendance(open_session.id, make_student().id, "mauvais-jeton")

    def test_session_introuvable(self, service, make_student):
        with pytest.raises(NotFoundError) as exc_info:
            service.mark_class_attendance(uuid.uuid4(), make_student().id, "x")

        assert exc_info.value.reason == "session not found"

    def test_eleve_inconnu_avec_cles_etrangeres(self, service, open_session, foreign_keys, db):
        with pytest.raises(NotFoundError) as exc_info:
            service.mark_class_attendance(open_session.id, uuid.uuid4(), open_session.token)

        assert exc_info.value.reason == "student not found"
        assert db.execute(select(Attendance)).scalars().all() == []

    def test_localisation_enregistree(self, service, open_session, make_student):
        result = service.mark_class_attendance(
            open_session.id, make_student().id, open_session.token, location=CAMPUS,
        )
        assert result.latitude == pytest.approx(13.0827)
        assert result.longitude == pytest.approx(80.2707)

    def test_plusieurs_eleves(self, service, open_session, make_student, sessions, clock):
        s1, s2 = make_student(), make_student()
        clock.current = datetime(2026, 3, 2, 9, 2)
        service.mark_class_attendance(open_session.id, s1.id, open_session.token)
        clock.current = datetime(2026, 3, 2, 9, 4)
        service.mark_class_attendance(open_session.id, s2.id, open_session.token)

        assert sessions.get_session(open_session.id).present_students == [s1.id, s2.id]

    def test_audit_du_marquage(self, db, clock, geofence, open_session, make_student):
        audit = MagicMock(spec=AuditRecorder)
        service = AttendanceService(db, clock, geofence, audit=audit)
        student = make_student()

        service.mark_class_attendance(open_session.id, student.id, open_session.token)

        audit.append.assert_called_once()
        assert audit.append.call_args.args[:3] == (student.id, "STUDENT", "MARK_ATTENDANCE")


class TestMarkByCode:
    def test_code_valide(self, service, sessions, school_class, teacher, make_student):
        session = sessions.create_session(school_class.id, teacher.id, 2, "INTERNET")

        result = service.mark_by_code(session.code, make_student().id)

        assert result.period == 2
        assert result.mode == "INTERNET"

    def test_code_inconnu(self, service, make_student):
        with pytest.raises(NotFoundError):
            service.mark_by_code("ZZZZZZ", make_student().id)

    def test_code_expire(self, service, sessions, school_class, teacher, make_student, clock):
        session = sessions.create_session(school_class.id, teacher.id, 2, "INTERNET")
        clock.current += timedelta(minutes=16)

        with pytest.raises(ExpiredError):
            service.mark_by_code(session.code, make_student().id)


# --- Présence campus ---

class TestMarkCampusAttendance:
    def test_avant_cutoff_dans_le_perimetre(self, service, make_student, clock):
        student = make_student()
        clock.current = datetime(2026, 3, 2, 10, 59)

        result = service.mark_campus_attendance(student.id, NORTH_400M, "device-1")

        assert result.type == "CAMPUS"
        assert result.status == "PRESENT"
        assert result.mode == "GPS"
        assert result.period is None

    def test_apres_cutoff(self, service, make_student, clock, db):
        student = make_student()
        clock.current = datetime(2026, 3, 2, 11, 1)

        with pytest.raises(ForbiddenError) as exc_info:
            service.mark_campus_attendance(student.id, NORTH_400M)

        assert exc_info.value.reason == "cutoff passed"
        assert db.execute(select(Attendance)).scalars().all() == []

    def test_cutoff_exact_refuse(self, service, make_student, clock):
        clock.current = datetime(2026, 3, 2, 11, 0)

        with pytest.raises(ForbiddenError):
            service.mark_campus_attendance(make_student().id, CAMPUS)

    def test_hors_campus(self, service, make_student):
        with pytest.raises(ForbiddenError) as exc_info:
            service.mark_campus_attendance(make_student().id, NORTH_600M)

        assert exc_info.value.reason == "outside campus"

    def test_idempotent(self, service, make_student, clock, db):
        student = make_student()
        first = service.mark_campus_attendance(student.id, CAMPUS)
        clock.current = datetime(2026, 3, 2, 10, 0)

        second = service.mark_campus_attendance(student.id, NORTH_400M)

        assert second.id == first.id
        assert len(db.execute(select(Attendance)).scalars().all()) == 1

    def test_enregistrement_existant_renvoye_apres_cutoff(self, service, make_student, clock):
        student = make_student()
        first = service.mark_campus_attendance(student.id, CAMPUS)
        clock.current = datetime(2026, 3, 2, 15, 0)

        assert service.mark_campus_attendance(student.id, NORTH_600M).id == first.id

    def test_absence_du_balayage_renvoyee(self, service, make_student, clock, db):
        student = make_student()
        db.add(Attendance(
            student_id=student.id, class_id=student.class_id, date=date(2026, 3, 2),
            type="CAMPUS", status="ABSENT", created_at=clock.current,
        ))
        db.commit()

        assert service.mark_campus_attendance(student.id, CAMPUS).status == "ABSENT"

    def test_eleve_introuvable(self, service):
        with pytest.raises(NotFoundError):
            service.mark_campus_attendance(uuid.uuid4(), CAMPUS)

    def test_cutoff_configurable(self, db, clock, geofence, make_student):
        service = AttendanceService(db, clock, geofence, campus_cutoff=time(9, 0))

        with pytest.raises(ForbiddenError):
            service.mark_campus_attendance(make_student().id, CAMPUS)


# --- État du jour et justification ---

class TestDayStatus:
    def test_etat_complet(self, service, open_session, make_student):
        student = make_student()
        service.mark_campus_attendance(student.id, CAMPUS)
        service.mark_class_attendance(open_session.id, student.id, open_session.token)

        status = service.get_day_status(student.id)

        assert status.date == date(2026, 3, 2)
        assert status.campus.status == "PRESENT"
        assert [c.period for c in status.classes] == [3]
        assert [s.id for s in status.live_sessions] == [open_session.id]

    def test_etat_vide(self, service, make_student):
        status = service.get_day_status(make_student().id)

        assert status.campus is None
        assert status.classes == []
        assert status.live_sessions == []

    def test_eleve_introuvable(self, service):
        with pytest.raises(NotFoundError):
            service.get_day_status(uuid.uuid4())


class TestAbsenceReason:
    def test_justification_des_absences(self, service, make_student, clock, db):
        student = make_student()
        db.add(Attendance(
            student_id=student.id, class_id=student.class_id, date=date(2026, 3, 2),
            type="CAMPUS", status="ABSENT", created_at=clock.current,
        ))
        db.commit()

        result = service.submit_absence_reason(student.id, date(2026, 3, 2), "Rendez-vous médical")

        assert result.updated_count == 1
        row = db.execute(select(Attendance)).scalar_one()
        assert row.reason == "Rendez-vous médical"
        assert row.status == "ABSENT"

    def test_presences_non_modifiees(self, service, make_student):
        student = make_student()
        service.mark_campus_attendance(student.id, CAMPUS)

        result = service.submit_absence_reason(student.id, date(2026, 3, 2), "Rendez-vous médical")

        assert result.updated_count == 0
