"""
Service métier pour les demandes de présence des élèves.

- Soumission : statut PENDING, notification des enseignants de la classe (emploi du temps)
  et des coordinateurs (CC)
- Revue : une seule fois (PENDING → APPROVED | REJECTED)
- Une demande MANUAL_ATTENDANCE approuvée crée un événement PRESENT, mode MANUAL :
  CLASS si une période est indiquée, CAMPUS sinon. L'unicité des présences s'applique.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.clock import Clock
from app.exceptions import ConflictError, NotFoundError
from app.models.attendance import Attendance
from app.models.request import AttendanceRequest
from app.models.school_class import TimetableEntry
from app.models.student import Student
from app.models.teacher import Teacher
from app.schemas.request import (
    AttendanceRequestCreate,
    AttendanceRequestResponse,
    AttendanceRequestReview,
)
from app.services.audit_service import AuditRecorder
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class RequestService:

    def __init__(
        self,
        db: Session,
        clock: Clock,
        notifier: NotificationService,
        audit: Optional[AuditRecorder] = None,
    ):
        self.db = db
        self.clock = clock
        self.notifier = notifier
        self.audit = audit

    def submit_request(self, student_id: uuid.UUID, data: AttendanceRequestCreate) -> AttendanceRequestResponse:
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("student not found", f"Élève {student_id} introuvable.")

        request = AttendanceRequest(
            student_id=student_id,
            type=data.type,
            date=data.date,
            period=data.period,
            reason=data.reason,
            friend_roll_number=data.friend_roll_number,
            status="PENDING",
            created_at=self.clock.now(),
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)

        teacher_ids = self.db.execute(
            select(Teacher.id)
            .outerjoin(TimetableEntry, TimetableEntry.teacher_id == Teacher.id)
            .where(or_(Teacher.role == "CC", TimetableEntry.class_id == student.class_id))
            .distinct()
        ).scalars().all()
        for teacher_id in teacher_ids:
            self.notifier.notify(
                teacher_id,
                "Nouvelle demande de présence",
                f"{student.name} a soumis une demande de présence.",
            )

        logger.info("Demande %s soumise par l'élève %s (%s)", request.id, student_id, request.type)
        if self.audit is not None:
            self.audit.append(student_id, "STUDENT", "SUBMIT_REQUEST", {"request_id": request.id, "type": request.type})
        return AttendanceRequestResponse.model_validate(request)

    def list_requests(
        self,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
    ) -> list[AttendanceRequestResponse]:
        """Demandes filtrées, de la plus récente à la plus ancienne."""
        query = select(AttendanceRequest)
        if status:
            query = query.where(AttendanceRequest.status == status)
        if request_type:
            query = query.where(AttendanceRequest.type == request_type)
        requests = self.db.execute(
            query.order_by(AttendanceRequest.created_at.desc())
        ).scalars().all()
        return [AttendanceRequestResponse.model_validate(r) for r in requests]

    def review_request(
        self,
        request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        data: AttendanceRequestReview,
    ) -> AttendanceRequestResponse:
        """
        Approuve ou rejette une demande en attente.

        Lève NotFoundError si la demande ou le relecteur est introuvable, ConflictError si elle a déjà
        été revue ou si la présence correspondante existe déjà.
        """
        request = self.db.get(AttendanceRequest, request_id)
        if request is None:
            raise NotFoundError("request not found", f"Demande {request_id} introuvable.")
        if request.status != "PENDING":
            raise ConflictError("already reviewed", f"La demande est déjà {request.status}.")

        now = self.clock.now()
        request.status = data.status
        request.review_note = data.review_note
        request.reviewed_by = reviewer_id
        request.reviewed_at = now

        if data.status == "APPROVED" and request.type == "MANUAL_ATTENDANCE":
            student = self.db.get(Student, request.student_id)
            if student is None:
                self.db.rollback()
                raise NotFoundError("student not found", f"Élève {request.student_id} introuvable.")
            self.db.add(Attendance(
                student_id=student.id,
                class_id=student.class_id,
                date=request.date,
                type="CLASS" if request.period else "CAMPUS",
                period=request.period,
                status="PRESENT",
                mode="MANUAL",
                marked_by=reviewer_id,
                reason=request.reason,
                created_at=now,
            ))

        student_id = request.student_id
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.db.get(Teacher, reviewer_id) is None:
                raise NotFoundError("teacher not found", f"Enseignant {reviewer_id} introuvable.")
            raise ConflictError("already marked", "Une présence existe déjà pour cette date et cette période.")
        self.db.refresh(request)

        self.notifier.notify(
            student_id,
            f"Demande {data.status}",
            f"Votre demande de présence a été {'approuvée' if data.status == 'APPROVED' else 'rejetée'}.",
        )
        logger.info("Demande %s revue par %s : %s", request_id, reviewer_id, data.status)
        if self.audit is not None:
            self.audit.append(reviewer_id, "TEACHER", "REVIEW_REQUEST", {"request_id": request_id, "status": data.status})
        return AttendanceRequestResponse.model_validate(request)
