"""
Router pour les rapports de présence.
"""

import datetime as dt
import uuid

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_report_service
from app.schemas.report import StudentAttendanceSummary, StudentOverallSummary
from app.services.report_service import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Rapports"])


@router.get("/attendance", response_model=list[StudentAttendanceSummary],
            summary="Rapport de présence d'une classe")
def class_report(
    class_id: uuid.UUID,
    start_date: dt.date,
    end_date: dt.date,
    service: ReportService = Depends(get_report_service),
):
    """Statistiques par élève sur les présences en cours de la période (bornes incluses)."""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="La date de fin doit suivre la date de début.")
    return service.summarize(class_id, start_date, end_date)


@router.get("/students/{student_id}", response_model=StudentOverallSummary,
            summary="Synthèse de présence d'un élève")
def student_report(student_id: uuid.UUID, service: ReportService = Depends(get_report_service)):
    return service.student_summary(student_id)
