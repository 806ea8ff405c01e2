"""
Balayages de réconciliation, déclenchés par le scheduler (hors requêtes).

DailyAbsenceSweep :
  1. Jour férié → aucune action
  2. Pour chaque élève actif sans présence CAMPUS du jour :
     a. INSERT d'un événement ABSENT CAMPUS + COMMIT (un élève = une transaction)
     b. Violation d'unicité (une présence campus existe déjà) → déjà traité, pas une erreur ;
        toute autre violation de contrainte est une erreur de l'élève
     c. Autre erreur → journalisée, l'élève suivant est traité
     d. Notification best-effort à l'élève
  Une erreur du CalendarService interrompt uniquement ce passage ; le suivant
  est déclenché normalement par le scheduler.

SessionExpirySweep : is_active → False pour les sessions actives dont expires_at < maintenant.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.clock import Clock
from app.models.attendance import Attendance
from app.models.session import AttendanceSession
from app.models.student import Student
from app.schemas.reconciliation import AbsenceSweepResult, ExpirySweepResult
from app.services.calendar_service import CalendarService
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ReconciliationService:

    def __init__(
        self,
        db: Session,
        calendar: CalendarService,
        clock: Clock,
        notifier: NotificationService,
    ):
        self.db = db
        self.calendar = calendar
        self.clock = clock
        self.notifier = notifier

    def run_daily_absence_sweep(self, day: Optional[date] = None) -> AbsenceSweepResult:
        now = self.clock.now()
        day = day or now.date()

        status = self.calendar.resolve(day)
        if status.is_holiday:
            logger.info("Balayage des absences ignoré le %s : %s", day, status.reason)
            return AbsenceSweepResult(date=day, skipped=True, skip_reason=status.reason)

        students = self.db.execute(
            select(Student.id, Student.class_id)
            .where(Student.is_active.is_(True))
            .order_by(Student.roll_number)
        ).all()

        already_present = set(
            self.db.execute(
                select(Attendance.student_id).where(
                    Attendance.date == day,
                    Attendance.type == "CAMPUS",
                )
            ).scalars().all()
        )

        result = AbsenceSweepResult(date=day, total_students=len(students))

        for student_id, class_id in students:
            if student_id in already_present:
                result.already_marked += 1
                continue

            try:
                self.db.add(Attendance(
                    student_id=student_id,
                    class_id=class_id,
                    date=day,
                    type="CAMPUS",
                    status="ABSENT",
                    created_at=now,
                ))
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                if self._has_campus_event(student_id, day):
                    result.already_marked += 1
                    logger.debug("Absence déjà enregistrée pour %s le %s", student_id, day)
                else:
                    error_msg = f"Élève {student_id} : {exc}"
                    result.errors.append(error_msg)
                    logger.error("Balayage des absences : %s", error_msg)
                continue
            except SQLAlchemyError as exc:
                self.db.rollback()
                error_msg = f"Élève {student_id} : {exc}"
                result.errors.append(error_msg)
                logger.error("Balayage des absences : %s", error_msg)
                continue

            result.marked_absent += 1

            try:
                self.notifier.notify(
                    student_id,
                    "Marqué absent",
                    "Vous avez été marqué absent aujourd'hui. Merci de soumettre une justification.",
                )
            except Exception as exc:
                error_msg = f"Notification élève {student_id} : {exc}"
                result.errors.append(error_msg)
                logger.error("Balayage des absences : %s", error_msg)

        logger.info(
            "Balayage des absences %s : %d élèves, %d absents, %d déjà marqués, %d erreurs",
            day, result.total_students, result.marked_absent, result.already_marked, len(result.errors),
        )
        return result

    def _has_campus_event(self, student_id, day: date) -> bool:
        return self.db.execute(
            select(Attendance.id).where(
                Attendance.student_id == student_id,
                Attendance.date == day,
                Attendance.type == "CAMPUS",
            )
        ).first() is not None

    def run_session_expiry_sweep(self) -> ExpirySweepResult:
        now = self.clock.now()
        result = self.db.execute(
            update(AttendanceSession)
            .where(
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expires_at < now,
            )
            .values(is_active=False)
        )
        self.db.commit()

        logger.info("Sessions expirées désactivées : %d", result.rowcount)
        return ExpirySweepResult(deactivated=result.rowcount)
