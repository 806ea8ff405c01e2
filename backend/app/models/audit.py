"""
Modèle SQLAlchemy pour le journal d'audit (écriture seule).
"""

import uuid
from sqlalchemy import JSON, Column, DateTime, String, Uuid, func

from app.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_id = Column(Uuid, nullable=True)
    actor_type = Column(String(10), nullable=False)   # TEACHER, STUDENT, SYSTEM
    action = Column(String(50), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
