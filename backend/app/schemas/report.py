"""
Schémas Pydantic pour les rapports de présence.
"""

import uuid
from pydantic import BaseModel


class StudentAttendanceSummary(BaseModel):
    """Ligne du rapport de classe : statistiques d'un élève sur la période."""

    student_id: uuid.UUID
    name: str
    roll_number: str
    total_classes: int
    present: int
    absent: int
    percentage: int


class StudentOverallSummary(BaseModel):
    """Synthèse de toutes les présences d'un élève (campus + cours)."""

    student_id: uuid.UUID
    total: int
    present: int
    absent: int
    percentage: int
