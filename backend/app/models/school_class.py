"""
Modèles SQLAlchemy pour les classes et leur emploi du temps.
Nommé school_class pour éviter le conflit avec le mot-clé Python 'class'.

L'emploi du temps est une table de créneaux indexée par jour de la semaine
(Weekday) puis par période, plutôt qu'une colonne par jour.
"""

import enum
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func

from app.database import Base


class Weekday(str, enum.Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @classmethod
    def from_date(cls, day) -> "Weekday | None":
        """Jour de la semaine d'une date, None pour un dimanche."""
        index = day.weekday()
        if index == 6:
            return None
        return list(cls)[index]


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    section = Column(String(10), nullable=False)
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class TimetableEntry(Base):
    """Créneau de l'emploi du temps : (classe, jour, période) → enseignant + matière."""
    __tablename__ = "timetable_entries"
    __table_args__ = (
        UniqueConstraint("class_id", "weekday", "period", name="uq_timetable_class_weekday_period"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    weekday = Column(String(10), nullable=False)    # Valeurs de Weekday
    period = Column(Integer, nullable=False)        # 1 à 8
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    subject = Column(String(150), nullable=True)
