"""
Router pour le marquage des présences par les élèves (cours, campus).
L'identité de l'élève et de son appareil arrivent par les en-têtes X-User-Id / X-Device-Id.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_actor_id, get_attendance_service, get_device_id
from app.schemas.attendance import (
    AbsenceReasonResult,
    AbsenceReasonSubmit,
    AttendanceResponse,
    CampusMarkRequest,
    ClassMarkRequest,
    CodeMarkRequest,
    StudentDayStatus,
)
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


@router.post("/mark", response_model=AttendanceResponse, status_code=201,
             summary="Marquer sa présence en cours")
def mark_class_attendance(
    data: ClassMarkRequest,
    student_id: uuid.UUID = Depends(get_actor_id),
    device_id: Optional[str] = Depends(get_device_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    """
    Enregistre la présence de l'élève avec le jeton de la session.

    404 session introuvable, 410 session expirée, 403 jeton invalide, 409 déjà marqué.
    """
    return service.mark_class_attendance(data.session_id, student_id, data.token, device_id, data.location)


@router.post("/mark-code", response_model=AttendanceResponse, status_code=201,
             summary="Marquer sa présence avec le code court (mode INTERNET)")
def mark_by_code(
    data: CodeMarkRequest,
    student_id: uuid.UUID = Depends(get_actor_id),
    device_id: Optional[str] = Depends(get_device_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.mark_by_code(data.code, student_id, device_id, data.location)


@router.post("/campus", response_model=AttendanceResponse,
             summary="Marquer sa présence sur le campus (GPS)")
def mark_campus_attendance(
    data: CampusMarkRequest,
    student_id: uuid.UUID = Depends(get_actor_id),
    device_id: Optional[str] = Depends(get_device_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    """
    Idempotent : si la présence campus du jour existe, elle est renvoyée.
    403 après l'heure limite ou hors du périmètre du campus.
    """
    return service.mark_campus_attendance(student_id, data.location, device_id)


@router.get("/status", response_model=StudentDayStatus, summary="État du jour de l'élève")
def get_status(
    student_id: uuid.UUID = Depends(get_actor_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_day_status(student_id)


@router.post("/absence-reason", response_model=AbsenceReasonResult,
             summary="Justifier une absence")
def submit_absence_reason(
    data: AbsenceReasonSubmit,
    student_id: uuid.UUID = Depends(get_actor_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Renseigne le motif sur toutes les absences de l'élève à la date donnée."""
    return service.submit_absence_reason(student_id, data.date, data.reason)
