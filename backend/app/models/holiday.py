"""
Modèle SQLAlchemy pour les exceptions de calendrier.
SPECIAL = jour(s) férié(s) ; SATURDAY_WORKING = samedi travaillé suivant l'emploi du temps de mapped_day.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)                 # Inclusif
    type = Column(String(20), nullable=False)               # SPECIAL, SATURDAY_WORKING
    mapped_day = Column(String(10), nullable=True)          # monday..friday (SATURDAY_WORKING)
    created_by = Column(Uuid, ForeignKey("teachers.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
