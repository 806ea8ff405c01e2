"""
Service métier pour les sessions de présence (ouverture par l'enseignant).

Flux de create_session :
  1. Refuser si la date du jour est fériée (CalendarService)
  2. Désactiver les sessions expirées du même créneau (classe, date, période)
  3. Générer le jeton (256 bits), le code court (INTERNET) ou le SSID (WIFI)
  4. INSERT + COMMIT : l'index unique partiel sur (class_id, date, period) WHERE is_active
     tranche les ouvertures concurrentes, pas une lecture préalable
  5. Diffuser la notification à la classe en arrière-plan (best-effort)
"""

import io
import logging
import secrets
import string
import uuid
from datetime import date, timedelta
from typing import Optional

import qrcode
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.clock import Clock
from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.school_class import SchoolClass
from app.models.session import AttendanceSession, SessionPresentStudent
from app.models.teacher import Teacher
from app.schemas.session import LiveSession, SessionResponse
from app.services.audit_service import AuditRecorder
from app.services.calendar_service import CalendarService
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(minutes=15)
TOKEN_BYTES = 32
CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_uppercase + string.digits
SSID_PREFIX = "SmartAttend_"
MAX_CREATE_ATTEMPTS = 5


def generate_token() -> str:
    """Jeton opaque de 256 bits, encodé en hexadécimal (64 caractères)."""
    return secrets.token_hex(TOKEN_BYTES)


def generate_code() -> str:
    """Code court saisissable (6 caractères majuscules/chiffres) pour le mode INTERNET."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def derive_ssid(token: str) -> str:
    """Nom de réseau diffusé en mode WIFI, dérivé du jeton."""
    return SSID_PREFIX + token[:8]


def generate_qr_image(token: str) -> bytes:
    """Génère une image PNG du QR code encodant le jeton de session."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(token)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class SessionService:

    def __init__(
        self,
        db: Session,
        calendar: CalendarService,
        clock: Clock,
        notifier: NotificationService,
        audit: Optional[AuditRecorder] = None,
    ):
        self.db = db
        self.calendar = calendar
        self.clock = clock
        self.notifier = notifier
        self.audit = audit

    def create_session(
        self,
        class_id: uuid.UUID,
        teacher_id: uuid.UUID,
        period: int,
        mode: str,
    ) -> SessionResponse:
        """
        Ouvre une session de 15 minutes pour (classe, aujourd'hui, période).

        Lève ForbiddenError("holiday") un jour férié, ConflictError("session active")
        si une session active existe déjà pour ce créneau.
        Lève NotFoundError si la classe ou l'enseignant n'existe pas (détecté à l'insertion).
        """
        now = self.clock.now()
        today = now.date()

        status = self.calendar.resolve(today)
        if status.is_holiday:
            raise ForbiddenError("holiday", f"Impossible d'ouvrir une session : jour férié ({status.reason}).")

        session = None
        for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
            # Une session expirée mais pas encore balayée ne bloque pas le créneau
            self.db.execute(
                update(AttendanceSession)
                .where(
                    AttendanceSession.class_id == class_id,
                    AttendanceSession.date == today,
                    AttendanceSession.period == period,
                    AttendanceSession.is_active.is_(True),
                    AttendanceSession.expires_at <= now,
                )
                .values(is_active=False)
            )

            token = generate_token()
            candidate = AttendanceSession(
                class_id=class_id,
                teacher_id=teacher_id,
                date=today,
                period=period,
                mode=mode,
                token=token,
                code=generate_code() if mode == "INTERNET" else None,
                ssid=derive_ssid(token) if mode == "WIFI" else None,
                is_active=True,
                created_at=now,
                expires_at=now + SESSION_TTL,
            )
            self.db.add(candidate)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if self._has_active_session(class_id, today, period):
                    raise ConflictError(
                        "session active",
                        f"Une session est déjà active pour la période {period}.",
                    )
                self._check_references(class_id, teacher_id)
                logger.warning(
                    "Collision de jeton/code à l'ouverture (classe %s, période %d), essai %d/%d",
                    class_id, period, attempt, MAX_CREATE_ATTEMPTS,
                )
                continue
            session = candidate
            break

        if session is None:
            raise ConflictError("credential collision", "Impossible de générer un identifiant de session unique.")

        self.db.refresh(session)
        logger.info(
            "Session ouverte : %s (classe %s, période %d, mode %s, expire %s)",
            session.id, class_id, period, mode, session.expires_at,
        )

        try:
            self.notifier.notify_class(
                class_id,
                "Session de présence ouverte",
                f"La présence de la période {period} est ouverte. Mode : {mode}",
            )
        except Exception as exc:
            logger.error("Diffusion de l'ouverture de session %s en échec : %s", session.id, exc)
        if self.audit is not None:
            self.audit.append(
                teacher_id, "TEACHER", "START_ATTENDANCE",
                {"session_id": session.id, "class_id": class_id, "period": period, "mode": mode},
            )

        return self._to_response(session)

    def get_session(self, session_id: uuid.UUID) -> SessionResponse:
        session = self.db.get(AttendanceSession, session_id)
        if session is None:
            raise NotFoundError("session not found", f"Session {session_id} introuvable.")
        return self._to_response(session)

    def get_session_qr(self, session_id: uuid.UUID) -> bytes:
        """QR code du jeton, à projeter en classe."""
        session = self.db.get(AttendanceSession, session_id)
        if session is None:
            raise NotFoundError("session not found", f"Session {session_id} introuvable.")
        return generate_qr_image(session.token)

    def live_sessions(self, class_id: uuid.UUID) -> list[LiveSession]:
        """Sessions ouvertes et non expirées d'une classe, aujourd'hui."""
        now = self.clock.now()
        sessions = self.db.execute(
            select(AttendanceSession)
            .where(
                AttendanceSession.class_id == class_id,
                AttendanceSession.date == now.date(),
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expires_at > now,
            )
            .order_by(AttendanceSession.period)
        ).scalars().all()
        return [LiveSession.model_validate(s) for s in sessions]

    def _check_references(self, class_id: uuid.UUID, teacher_id: uuid.UUID) -> None:
        """Sur violation de contrainte : distingue une clé étrangère invalide d'une collision."""
        if self.db.get(SchoolClass, class_id) is None:
            raise NotFoundError("class not found", f"Classe {class_id} introuvable.")
        if self.db.get(Teacher, teacher_id) is None:
            raise NotFoundError("teacher not found", f"Enseignant {teacher_id} introuvable.")

    def _has_active_session(self, class_id: uuid.UUID, day: date, period: int) -> bool:
        return self.db.execute(
            select(AttendanceSession.id).where(
                AttendanceSession.class_id == class_id,
                AttendanceSession.date == day,
                AttendanceSession.period == period,
                AttendanceSession.is_active.is_(True),
            )
        ).first() is not None

    def _to_response(self, session: AttendanceSession) -> SessionResponse:
        """Construit la réponse avec la liste des élèves présents."""
        present = self.db.execute(
            select(SessionPresentStudent.student_id)
            .where(SessionPresentStudent.session_id == session.id)
            .order_by(SessionPresentStudent.added_at)
        ).scalars().all()

        return SessionResponse(
            id=session.id,
            class_id=session.class_id,
            teacher_id=session.teacher_id,
            date=session.date,
            period=session.period,
            mode=session.mode,
            token=session.token,
            code=session.code,
            ssid=session.ssid,
            is_active=session.is_active,
            created_at=session.created_at,
            expires_at=session.expires_at,
            present_students=list(present),
        )
