"""
Schémas Pydantic pour les demandes de présence (manuelle, camarade).
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from app.schemas.session import MAX_PERIOD, MIN_PERIOD

VALID_REQUEST_TYPES = {"MANUAL_ATTENDANCE", "FRIEND_ATTENDANCE"}
VALID_REVIEW_STATUSES = {"APPROVED", "REJECTED"}


class AttendanceRequestCreate(BaseModel):
    type: str
    date: dt.date
    reason: str
    period: Optional[int] = None
    friend_roll_number: Optional[str] = None

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in VALID_REQUEST_TYPES:
            raise ValueError(f"Type invalide. Valeurs acceptées : {VALID_REQUEST_TYPES}")
        return v

    @field_validator("reason")
    @classmethod
    def valid_reason(cls, v: str) -> str:
        v = v.strip()
        if not 10 <= len(v) <= 500:
            raise ValueError("Le motif doit contenir entre 10 et 500 caractères.")
        return v

    @field_validator("period")
    @classmethod
    def valid_period(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not MIN_PERIOD <= v <= MAX_PERIOD:
            raise ValueError(f"Période invalide : attendue entre {MIN_PERIOD} et {MAX_PERIOD}.")
        return v

    @model_validator(mode="after")
    def friend_roll_number_required(self) -> "AttendanceRequestCreate":
        if self.friend_roll_number is not None and len(self.friend_roll_number) != 12:
            raise ValueError("Le matricule doit contenir 12 caractères.")
        if self.type == "FRIEND_ATTENDANCE" and not self.friend_roll_number:
            raise ValueError("Le matricule du camarade est obligatoire.")
        return self


class AttendanceRequestReview(BaseModel):
    status: str
    review_note: Optional[str] = None

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_REVIEW_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_REVIEW_STATUSES}")
        return v


class AttendanceRequestResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    type: str
    date: dt.date
    period: Optional[int]
    reason: str
    friend_roll_number: Optional[str]
    status: str
    reviewed_by: Optional[uuid.UUID]
    review_note: Optional[str]
    reviewed_at: Optional[datetime]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
