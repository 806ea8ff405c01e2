"""
Modèle SQLAlchemy pour les demandes de présence soumises par les élèves.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, Uuid, func

from app.database import Base


class AttendanceRequest(Base):
    """Demande de présence manuelle ou pour un camarade, revue par un enseignant."""
    __tablename__ = "attendance_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(20), nullable=False)               # MANUAL_ATTENDANCE, FRIEND_ATTENDANCE
    date = Column(Date, nullable=False)
    period = Column(Integer, nullable=True)
    reason = Column(Text, nullable=False)
    friend_roll_number = Column(String(12), nullable=True)

    status = Column(String(10), nullable=False, default="PENDING")  # PENDING, APPROVED, REJECTED
    reviewed_by = Column(Uuid, ForeignKey("teachers.id"), nullable=True)
    review_note = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
