"""
Schémas Pydantic pour les rapports des balayages planifiés.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel


class AbsenceSweepResult(BaseModel):
    """Rapport du balayage quotidien des absences campus."""

    date: dt.date
    skipped: bool = False
    skip_reason: Optional[str] = None
    total_students: int = 0
    marked_absent: int = 0
    already_marked: int = 0
    errors: List[str] = []


class ExpirySweepResult(BaseModel):
    """Rapport du balayage horaire des sessions expirées."""

    deactivated: int
