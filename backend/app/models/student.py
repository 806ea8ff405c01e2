"""
Modèle SQLAlchemy pour la table students.
Le device_id est lié au premier appareil utilisé (fixé par la couche d'identité).
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    roll_number = Column(String(12), unique=True, nullable=False)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    device_id = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
