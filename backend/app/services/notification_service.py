"""
Notifications « fire-and-forget » hors du chemin critique.

- BackgroundDispatcher : pool de threads ; submit() ne lève jamais vers l'appelant,
  les erreurs des tâches sont journalisées. À l'arrêt : drain=True attend les tâches
  en file, drain=False annule celles qui n'ont pas démarré.
- EmailNotificationGateway : send(target_id, title, body) → email de l'élève ou de
  l'enseignant ; destinataire sans email ignoré.
- NotificationService : notify(), notify_class() (diffusion à la classe) et notify_all()
  (élèves actifs et enseignants). Un échec par destinataire est journalisé sans
  interrompre les autres.
"""

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from app.models.student import Student
from app.models.teacher import Teacher
from app.services.email_service import send_notification_email

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """Exécuteur des effets de bord asynchrones (notifications, audit)."""

    def __init__(self, max_workers: int = 4, name: str = "background"):
        self.max_workers = max_workers
        self.name = name
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix=self.name,
                )
                logger.info("Dispatcher %s démarré (%d workers).", self.name, self.max_workers)

    def submit(self, fn: Callable, *args, **kwargs) -> Optional[Future]:
        """Planifie fn(*args, **kwargs). Retourne None si le dispatcher est arrêté."""
        with self._lock:
            if self._executor is None:
                logger.warning("Dispatcher %s arrêté : tâche %s ignorée.", self.name, getattr(fn, "__name__", fn))
                return None
            return self._executor.submit(self._run, fn, args, kwargs)

    def shutdown(self, drain: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=drain, cancel_futures=not drain)
            logger.info("Dispatcher %s arrêté (drain=%s).", self.name, drain)

    @staticmethod
    def _run(fn: Callable, args: tuple, kwargs: dict) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as exc:
            logger.error("Tâche en arrière-plan %s en échec : %s", getattr(fn, "__name__", fn), exc)


class NotificationGateway:
    """Interface de livraison : une notification vers un destinataire."""

    def send(self, target_id: uuid.UUID, title: str, body: str) -> None:
        raise NotImplementedError


class EmailNotificationGateway(NotificationGateway):
    """Livraison par email, destinataire résolu parmi les élèves puis les enseignants."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def send(self, target_id: uuid.UUID, title: str, body: str) -> None:
        db = self.session_factory()
        try:
            email = db.execute(select(Student.email).where(Student.id == target_id)).scalar()
            if email is None:
                email = db.execute(select(Teacher.email).where(Teacher.id == target_id)).scalar()
        finally:
            db.close()

        if not email:
            logger.debug("Pas d'email pour %s, notification ignorée.", target_id)
            return

        send_notification_email(email, title, body)


class NotificationService:
    """Point d'entrée des services métier pour notifier sans bloquer."""

    def __init__(
        self,
        gateway: NotificationGateway,
        dispatcher: BackgroundDispatcher,
        session_factory: sessionmaker,
        enabled: bool = True,
    ):
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.session_factory = session_factory
        self.enabled = enabled

    def notify(self, target_id: uuid.UUID, title: str, body: str) -> None:
        if not self.enabled:
            return
        self.dispatcher.submit(self.gateway.send, target_id, title, body)

    def notify_class(self, class_id: uuid.UUID, title: str, body: str) -> None:
        """Diffuse à tous les élèves actifs de la classe (en arrière-plan)."""
        if not self.enabled:
            return
        self.dispatcher.submit(self._fan_out, class_id, title, body)

    def notify_all(self, title: str, body: str) -> None:
        """Diffuse à tous les élèves actifs et à tous les enseignants (en arrière-plan)."""
        if not self.enabled:
            return
        self.dispatcher.submit(self._fan_out_all, title, body)

    def _fan_out(self, class_id: uuid.UUID, title: str, body: str) -> None:
        db: Session = self.session_factory()
        try:
            student_ids = db.execute(
                select(Student.id).where(Student.class_id == class_id, Student.is_active.is_(True))
            ).scalars().all()
        finally:
            db.close()

        self._deliver(student_ids, title, body, f"classe {class_id}")

    def _fan_out_all(self, title: str, body: str) -> None:
        db: Session = self.session_factory()
        try:
            recipient_ids = list(db.execute(
                select(Student.id).where(Student.is_active.is_(True))
            ).scalars().all())
            recipient_ids += db.execute(select(Teacher.id)).scalars().all()
        finally:
            db.close()

        self._deliver(recipient_ids, title, body, "campus")

    def _deliver(self, recipient_ids: list, title: str, body: str, audience: str) -> None:
        """Un échec par destinataire est journalisé, les suivants sont servis."""
        failed = 0
        for recipient_id in recipient_ids:
            try:
                self.gateway.send(recipient_id, title, body)
            except Exception as exc:
                failed += 1
                logger.error("Notification %s en échec : %s", recipient_id, exc)

        logger.info(
            "Diffusion %s « %s » : %d destinataires, %d échecs",
            audience, title, len(recipient_ids), failed,
        )
