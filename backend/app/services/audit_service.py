"""
Journal d'audit en écriture seule.
L'écriture se fait en arrière-plan : un échec est journalisé, jamais propagé.
"""

import logging
import uuid
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import sessionmaker

from app.models.audit import AuditLog
from app.services.notification_service import BackgroundDispatcher

logger = logging.getLogger(__name__)


class AuditRecorder:

    def __init__(self, session_factory: sessionmaker, dispatcher: BackgroundDispatcher):
        self.session_factory = session_factory
        self.dispatcher = dispatcher

    def append(
        self,
        actor_id: Optional[uuid.UUID],
        actor_type: str,
        action: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.dispatcher.submit(self._write, actor_id, actor_type, action, jsonable_encoder(details or {}))

    def _write(self, actor_id, actor_type: str, action: str, details: dict) -> None:
        db = self.session_factory()
        try:
            db.add(AuditLog(actor_id=actor_id, actor_type=actor_type, action=action, details=details))
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.error("Écriture audit %s en échec : %s", action, exc)
        finally:
            db.close()
