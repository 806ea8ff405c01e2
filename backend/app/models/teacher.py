"""
Modèle SQLAlchemy pour les enseignants.
Les identifiants de connexion sont gérés par la couche d'authentification externe.
"""

import uuid
from sqlalchemy import Column, DateTime, String, Uuid, func

from app.database import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(150), nullable=False)
    role = Column(String(10), nullable=False, default="STAFF")  # CC, STAFF
    created_at = Column(DateTime, server_default=func.now())
