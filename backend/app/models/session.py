"""
Modèles SQLAlchemy pour les sessions de présence.

Une session est une fenêtre de 15 minutes pour une classe, une période et un jour.
Unicité garantie par la base :
- token unique sur toutes les sessions
- une seule session active par (class_id, date, period), index partiel
- un code INTERNET unique parmi les sessions actives, index partiel
"""

import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Uuid, text

from app.database import Base


class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id"), nullable=False)
    date = Column(Date, nullable=False)
    period = Column(Integer, nullable=False)           # 1 à 8
    mode = Column(String(10), nullable=False)          # BLE, WIFI, INTERNET

    token = Column(String(64), unique=True, nullable=False)
    code = Column(String(6), nullable=True)            # Mode INTERNET uniquement
    ssid = Column(String(32), nullable=True)           # Mode WIFI uniquement

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)      # Horloge injectée, pas server_default
    expires_at = Column(DateTime, nullable=False)      # Toujours created_at + 15 min

    __table_args__ = (
        Index(
            "uq_attendance_sessions_active_period",
            "class_id", "date", "period",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
        Index(
            "uq_attendance_sessions_active_code",
            "code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )


class SessionPresentStudent(Base):
    """Élèves présents d'une session (ensemble croissant, jamais réduit)."""
    __tablename__ = "session_present_students"

    session_id = Column(Uuid, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    added_at = Column(DateTime, nullable=False)
