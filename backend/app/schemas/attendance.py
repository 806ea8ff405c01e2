"""
Schémas Pydantic pour le marquage des présences (cours et campus).
"""

import math
import uuid
import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.session import LiveSession


class Location(BaseModel):
    """Coordonnées GPS validées avant tout calcul de géorepérage."""

    latitude: float
    longitude: float

    @field_validator("latitude")
    @classmethod
    def valid_latitude(cls, v: float) -> float:
        if not math.isfinite(v) or not -90.0 <= v <= 90.0:
            raise ValueError("Latitude invalide : attendue entre -90 et 90.")
        return v

    @field_validator("longitude")
    @classmethod
    def valid_longitude(cls, v: float) -> float:
        if not math.isfinite(v) or not -180.0 <= v <= 180.0:
            raise ValueError("Longitude invalide : attendue entre -180 et 180.")
        return v


class ClassMarkRequest(BaseModel):
    """Marquage de présence en cours avec le jeton de la session."""

    session_id: uuid.UUID
    token: str
    location: Optional[Location] = None

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le jeton ne peut pas être vide.")
        return v.strip()


class CodeMarkRequest(BaseModel):
    """Marquage en mode INTERNET avec le code court affiché par l'enseignant."""

    code: str
    location: Optional[Location] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Le code ne peut pas être vide.")
        return v


class CampusMarkRequest(BaseModel):
    """Présence campus : localisation obligatoire."""

    location: Location


class AbsenceReasonSubmit(BaseModel):
    """Justification d'absence pour une date donnée."""

    date: dt.date
    reason: str

    @field_validator("reason")
    @classmethod
    def valid_reason(cls, v: str) -> str:
        v = v.strip()
        if not 10 <= len(v) <= 500:
            raise ValueError("La justification doit contenir entre 10 et 500 caractères.")
        return v


class AbsenceReasonResult(BaseModel):
    date: dt.date
    updated_count: int


class AttendanceResponse(BaseModel):
    """Événement de présence tel que stocké."""

    id: uuid.UUID
    student_id: uuid.UUID
    class_id: uuid.UUID
    date: dt.date
    type: str
    period: Optional[int]
    status: str
    mode: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    device_id: Optional[str]
    marked_by: Optional[uuid.UUID]
    reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentDayStatus(BaseModel):
    """État du jour pour un élève : campus, cours déjà marqués, sessions ouvertes."""

    date: dt.date
    campus: Optional[AttendanceResponse]
    classes: List[AttendanceResponse]
    live_sessions: List[LiveSession]
