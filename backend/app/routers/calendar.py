"""
Router pour le calendrier : résolution d'une date, déclaration des jours fériés.
"""

import datetime as dt
import uuid

from fastapi import APIRouter, Depends

from app.dependencies import get_actor_id, get_calendar_service
from app.schemas.calendar import CalendarStatus, HolidayCreate, HolidayResponse
from app.services.calendar_service import CalendarService

router = APIRouter(prefix="/api/v1", tags=["Calendrier"])


@router.get("/calendar/{day}", response_model=CalendarStatus, summary="Statut calendaire d'une date")
def resolve_day(day: dt.date, service: CalendarService = Depends(get_calendar_service)):
    return service.resolve(day)


@router.post("/holidays", response_model=HolidayResponse, status_code=201,
             summary="Déclarer un jour férié ou un samedi travaillé")
def create_holiday(
    data: HolidayCreate,
    created_by: uuid.UUID = Depends(get_actor_id),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.create_holiday(data, created_by)


@router.get("/holidays", response_model=list[HolidayResponse], summary="Liste des règles calendaires")
def list_holidays(service: CalendarService = Depends(get_calendar_service)):
    return service.list_holidays()
