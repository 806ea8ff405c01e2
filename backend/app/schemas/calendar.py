"""
Schémas Pydantic pour le calendrier (jours fériés, samedis travaillés).
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

VALID_HOLIDAY_TYPES = {"SPECIAL", "SATURDAY_WORKING"}
VALID_MAPPED_DAYS = {"monday", "tuesday", "wednesday", "thursday", "friday"}


class CalendarStatus(BaseModel):
    """Résultat de la résolution calendaire d'une date."""

    date: dt.date
    is_holiday: bool
    is_working_day: bool
    reason: Optional[str] = None
    mapped_day: Optional[str] = None


class HolidayCreate(BaseModel):
    """Déclaration d'un jour férié ou d'un samedi travaillé."""

    name: str
    start_date: dt.date
    end_date: dt.date
    type: str
    mapped_day: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in VALID_HOLIDAY_TYPES:
            raise ValueError(f"Type invalide. Valeurs acceptées : {VALID_HOLIDAY_TYPES}")
        return v

    @field_validator("mapped_day")
    @classmethod
    def valid_mapped_day(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.lower()
        if v not in VALID_MAPPED_DAYS:
            raise ValueError(f"Jour invalide. Valeurs acceptées : {VALID_MAPPED_DAYS}")
        return v

    @model_validator(mode="after")
    def coherent_range(self) -> "HolidayCreate":
        if self.end_date < self.start_date:
            raise ValueError("La date de fin doit être postérieure ou égale à la date de début.")
        if self.type == "SATURDAY_WORKING" and self.mapped_day is None:
            raise ValueError("Un samedi travaillé doit indiquer le jour d'emploi du temps à suivre.")
        return self


class HolidayResponse(BaseModel):
    id: uuid.UUID
    name: str
    start_date: dt.date
    end_date: dt.date
    type: str
    mapped_day: Optional[str]
    created_by: Optional[uuid.UUID]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
