"""
Schémas Pydantic pour l'emploi du temps d'une classe.
"""

import uuid
import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel


class TimetableSlot(BaseModel):
    period: int
    teacher_id: Optional[uuid.UUID]
    subject: Optional[str]

    model_config = {"from_attributes": True}


class ClassTimetable(BaseModel):
    """Emploi du temps : jour de la semaine → créneaux triés par période."""

    class_id: uuid.UUID
    days: Dict[str, List[TimetableSlot]]


class DaySchedule(BaseModel):
    """Créneaux applicables à une date (vide si jour férié)."""

    class_id: uuid.UUID
    date: dt.date
    is_holiday: bool
    followed_day: Optional[str]
    slots: List[TimetableSlot]
