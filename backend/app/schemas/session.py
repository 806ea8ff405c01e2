"""
Schémas Pydantic pour les sessions de présence.
Endpoint : POST /api/v1/attendance/sessions
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

VALID_SESSION_MODES = {"BLE", "WIFI", "INTERNET"}
MIN_PERIOD = 1
MAX_PERIOD = 8


class SessionCreate(BaseModel):
    """Ouverture d'une session par un enseignant pour une classe et une période."""

    class_id: uuid.UUID
    period: int
    mode: str

    @field_validator("period")
    @classmethod
    def valid_period(cls, v: int) -> int:
        if not MIN_PERIOD <= v <= MAX_PERIOD:
            raise ValueError(f"Période invalide : attendue entre {MIN_PERIOD} et {MAX_PERIOD}.")
        return v

    @field_validator("mode")
    @classmethod
    def valid_mode(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_SESSION_MODES:
            raise ValueError(f"Mode invalide. Valeurs acceptées : {VALID_SESSION_MODES}")
        return v


class SessionResponse(BaseModel):
    """Session complète, renvoyée à l'enseignant (contient le jeton)."""

    id: uuid.UUID
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    date: dt.date
    period: int
    mode: str
    token: str
    code: Optional[str]
    ssid: Optional[str]
    is_active: bool
    created_at: datetime
    expires_at: datetime
    present_students: List[uuid.UUID] = []

    model_config = {"from_attributes": True}


class LiveSession(BaseModel):
    """Vue élève d'une session ouverte : jamais de jeton."""

    id: uuid.UUID
    period: int
    mode: str
    code: Optional[str]
    ssid: Optional[str]
    expires_at: datetime

    model_config = {"from_attributes": True}
