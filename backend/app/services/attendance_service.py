"""
Service métier pour le marquage des présences.

Présence en cours (mark_class_attendance), ordre de validation :
  1. La session existe                          → sinon NotFoundError
  2. Session active et expires_at > maintenant  → sinon ExpiredError
  3. Jeton identique (comparaison à temps constant) → sinon ForbiddenError("token mismatch")
  4. Pas de présence (élève, jour, CLASS, période) → sinon ConflictError("already marked")
L'étape 4 est tranchée par la contrainte unique au COMMIT, pas par un SELECT préalable.
Un élève inconnu n'est détecté qu'après l'échec de l'insertion (NotFoundError).

Présence campus (mark_campus_attendance) : idempotente, l'événement du jour
existant est renvoyé tel quel. Sinon : avant le cutoff (11h) et dans le périmètre.
"""

import hmac
import logging
import uuid
from datetime import date, time
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.clock import Clock
from app.exceptions import ConflictError, ExpiredError, ForbiddenError, NotFoundError
from app.models.attendance import Attendance
from app.models.session import AttendanceSession, SessionPresentStudent
from app.models.student import Student
from app.schemas.attendance import AbsenceReasonResult, AttendanceResponse, Location, StudentDayStatus
from app.schemas.session import LiveSession
from app.services.audit_service import AuditRecorder
from app.services.geofence import GeofenceValidator

logger = logging.getLogger(__name__)


class AttendanceService:

    def __init__(
        self,
        db: Session,
        clock: Clock,
        geofence: GeofenceValidator,
        campus_cutoff: time = time(11, 0),
        audit: Optional[AuditRecorder] = None,
    ):
        self.db = db
        self.clock = clock
        self.geofence = geofence
        self.campus_cutoff = campus_cutoff
        self.audit = audit

    # --- Présence en cours ---

    def mark_class_attendance(
        self,
        session_id: uuid.UUID,
        student_id: uuid.UUID,
        token: str,
        device_id: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> AttendanceResponse:
        session = self.db.get(AttendanceSession, session_id)
        if session is None:
            raise NotFoundError("session not found", f"Session {session_id} introuvable.")
        return self._mark_with_session(session, student_id, token, device_id, location)

    def mark_by_code(
        self,
        code: str,
        student_id: uuid.UUID,
        device_id: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> AttendanceResponse:
        """Mode INTERNET : le code court désigne la session active qui le porte."""
        session = self.db.execute(
            select(AttendanceSession).where(
                AttendanceSession.code == code,
                AttendanceSession.is_active.is_(True),
            )
        ).scalar()
        if session is None:
            raise NotFoundError("session not found", f"Aucune session active pour le code {code}.")
        return self._mark_with_session(session, student_id, session.token, device_id, location)

    def _mark_with_session(
        self,
        session: AttendanceSession,
        student_id: uuid.UUID,
        token: str,
        device_id: Optional[str],
        location: Optional[Location],
    ) -> AttendanceResponse:
        now = self.clock.now()
        if not session.is_active or session.expires_at <= now:
            raise ExpiredError("session expired", "La session de présence est expirée.")

        if not hmac.compare_digest(session.token.encode(), token.encode()):
            raise ForbiddenError("token mismatch", "Jeton de session invalide.")

        attendance = Attendance(
            student_id=student_id,
            class_id=session.class_id,
            date=now.date(),
            type="CLASS",
            period=session.period,
            status="PRESENT",
            mode=session.mode,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            device_id=device_id,
            marked_by=session.teacher_id,
            created_at=now,
        )
        # Même transaction : l'élève n'apparaît dans la session que si l'événement est créé
        self.db.add(attendance)
        self.db.add(SessionPresentStudent(session_id=session.id, student_id=student_id, added_at=now))
        session_id, period = session.id, session.period
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # Violation de clé étrangère : l'appelant n'est pas un élève connu
            if self.db.get(Student, student_id) is None:
                raise NotFoundError("student not found", f"Élève {student_id} introuvable.")
            raise ConflictError("already marked", f"Présence déjà enregistrée pour la période {period}.")
        self.db.refresh(attendance)

        logger.info("Présence cours : élève %s, session %s, période %d", student_id, session_id, period)
        if self.audit is not None:
            self.audit.append(
                student_id, "STUDENT", "MARK_ATTENDANCE",
                {"session_id": session_id, "period": period, "device_id": device_id},
            )
        return AttendanceResponse.model_validate(attendance)

    # --- Présence campus ---

    def mark_campus_attendance(
        self,
        student_id: uuid.UUID,
        location: Location,
        device_id: Optional[str] = None,
    ) -> AttendanceResponse:
        now = self.clock.now()
        today = now.date()

        existing = self._campus_event(student_id, today)
        if existing is not None:
            return AttendanceResponse.model_validate(existing)

        if now.time() >= self.campus_cutoff:
            raise ForbiddenError(
                "cutoff passed",
                f"La présence campus est fermée après {self.campus_cutoff.strftime('%H:%M')}.",
            )

        if not self.geofence.is_within_campus(location.latitude, location.longitude):
            raise ForbiddenError("outside campus", "Position hors du périmètre du campus.")

        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("student not found", f"Élève {student_id} introuvable.")

        attendance = Attendance(
            student_id=student_id,
            class_id=student.class_id,
            date=today,
            type="CAMPUS",
            status="PRESENT",
            mode="GPS",
            latitude=location.latitude,
            longitude=location.longitude,
            device_id=device_id,
            created_at=now,
        )
        self.db.add(attendance)
        try:
            self.db.commit()
        except IntegrityError:
            # Requête concurrente du même élève : on renvoie l'enregistrement gagnant
            self.db.rollback()
            existing = self._campus_event(student_id, today)
            if existing is None:
                raise
            return AttendanceResponse.model_validate(existing)
        self.db.refresh(attendance)

        logger.info("Présence campus : élève %s à %s", student_id, now.strftime("%H:%M"))
        return AttendanceResponse.model_validate(attendance)

    # --- Consultation et justification ---

    def get_day_status(self, student_id: uuid.UUID) -> StudentDayStatus:
        """Présence campus du jour, cours déjà marqués et sessions ouvertes de la classe."""
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("student not found", f"Élève {student_id} introuvable.")

        now = self.clock.now()
        today = now.date()

        campus = self._campus_event(student_id, today)
        classes = self.db.execute(
            select(Attendance)
            .where(
                Attendance.student_id == student_id,
                Attendance.date == today,
                Attendance.type == "CLASS",
            )
            .order_by(Attendance.period)
        ).scalars().all()
        sessions = self.db.execute(
            select(AttendanceSession)
            .where(
                AttendanceSession.class_id == student.class_id,
                AttendanceSession.date == today,
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expires_at > now,
            )
            .order_by(AttendanceSession.period)
        ).scalars().all()

        return StudentDayStatus(
            date=today,
            campus=AttendanceResponse.model_validate(campus) if campus else None,
            classes=[AttendanceResponse.model_validate(a) for a in classes],
            live_sessions=[LiveSession.model_validate(s) for s in sessions],
        )

    def submit_absence_reason(self, student_id: uuid.UUID, day: date, reason: str) -> AbsenceReasonResult:
        """
        Renseigne la justification de toutes les absences de l'élève à cette date.
        Seule modification autorisée sur un événement existant.
        """
        result = self.db.execute(
            update(Attendance)
            .where(
                Attendance.student_id == student_id,
                Attendance.date == day,
                Attendance.status == "ABSENT",
            )
            .values(reason=reason)
        )
        self.db.commit()

        logger.info("Justification d'absence : élève %s, %s, %d événement(s)", student_id, day, result.rowcount)
        return AbsenceReasonResult(date=day, updated_count=result.rowcount)

    def _campus_event(self, student_id: uuid.UUID, day: date) -> Optional[Attendance]:
        return self.db.execute(
            select(Attendance).where(
                Attendance.student_id == student_id,
                Attendance.date == day,
                Attendance.type == "CAMPUS",
            )
        ).scalar()
