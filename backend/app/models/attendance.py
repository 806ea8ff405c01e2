"""
Modèle SQLAlchemy pour les présences (événements immuables).

Un événement par (student_id, date, type, period). Les lignes CAMPUS ont
period NULL : un UNIQUE classique laisse passer deux NULL, d'où l'index
partiel supplémentaire sur (student_id, date, type) WHERE period IS NULL.
Seul `reason` est modifiable après création (justification d'absence).
"""

import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid, text

from app.database import Base


class Attendance(Base):
    """Présence campus (GPS) ou de cours (session BLE/WIFI/INTERNET, manuelle)."""
    __tablename__ = "attendances"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False)
    type = Column(String(10), nullable=False)               # CAMPUS, CLASS
    period = Column(Integer, nullable=True)                 # CLASS uniquement
    status = Column(String(10), nullable=False)             # PRESENT, ABSENT, LATE
    mode = Column(String(10), nullable=True)                # GPS, BLE, WIFI, INTERNET, MANUAL

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    device_id = Column(String(255), nullable=True)
    marked_by = Column(Uuid, ForeignKey("teachers.id"), nullable=True)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("student_id", "date", "type", "period", name="uq_attendances_student_day_type_period"),
        Index(
            "uq_attendances_student_day_type_no_period",
            "student_id", "date", "type",
            unique=True,
            postgresql_where=text("period IS NULL"),
            sqlite_where=text("period IS NULL"),
        ),
    )
