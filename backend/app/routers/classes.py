"""
Router pour l'emploi du temps des classes (lecture).
"""

import datetime as dt
import uuid

from fastapi import APIRouter, Depends

from app.dependencies import get_timetable_service
from app.schemas.timetable import ClassTimetable, DaySchedule
from app.services.timetable_service import TimetableService

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])


@router.get("/{class_id}/timetable", response_model=ClassTimetable, summary="Emploi du temps de la classe")
def get_timetable(class_id: uuid.UUID, service: TimetableService = Depends(get_timetable_service)):
    return service.get_timetable(class_id)


@router.get("/{class_id}/schedule", response_model=DaySchedule, summary="Créneaux d'une date")
def get_day_schedule(
    class_id: uuid.UUID,
    day: dt.date,
    service: TimetableService = Depends(get_timetable_service),
):
    """Aucun créneau un jour férié ; un samedi travaillé suit le jour indiqué par la règle."""
    return service.get_day_schedule(class_id, day)
