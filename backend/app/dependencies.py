"""
Construction des services injectés dans les routers et le scheduler.

Les objets partagés (horloge, dispatcher, notifications, audit, géorepérage) sont
des singletons de module ; les services métier sont construits par requête
autour de la session BDD. Les tests remplacent ces fonctions via
app.dependency_overrides.
"""

import uuid
from datetime import time
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.clock import Clock
from app.config import settings
from app.database import SessionLocal, get_db
from app.services.attendance_service import AttendanceService
from app.services.audit_service import AuditRecorder
from app.services.calendar_service import CalendarService
from app.services.geofence import GeofenceValidator
from app.services.notification_service import (
    BackgroundDispatcher,
    EmailNotificationGateway,
    NotificationService,
)
from app.services.reconciliation_service import ReconciliationService
from app.services.report_service import ReportService
from app.services.request_service import RequestService
from app.services.session_service import SessionService
from app.services.timetable_service import TimetableService

clock = Clock(settings.TIMEZONE)

dispatcher = BackgroundDispatcher(max_workers=settings.NOTIFY_MAX_WORKERS, name="smartattend-bg")

notifier = NotificationService(
    gateway=EmailNotificationGateway(SessionLocal),
    dispatcher=dispatcher,
    session_factory=SessionLocal,
    enabled=settings.NOTIFICATIONS_ENABLED,
)

audit = AuditRecorder(SessionLocal, dispatcher)

geofence = GeofenceValidator(
    center_latitude=settings.CAMPUS_LATITUDE,
    center_longitude=settings.CAMPUS_LONGITUDE,
    radius_meters=settings.CAMPUS_RADIUS_METERS,
)

campus_cutoff = time(settings.CAMPUS_CUTOFF_HOUR, settings.CAMPUS_CUTOFF_MINUTE)


# --- Identité fournie par la couche d'authentification externe (prise telle quelle) ---

def get_actor_id(x_user_id: uuid.UUID = Header(..., alias="X-User-Id")) -> uuid.UUID:
    return x_user_id


def get_device_id(x_device_id: Optional[str] = Header(None, alias="X-Device-Id")) -> Optional[str]:
    return x_device_id


# --- Services ---

def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    return CalendarService(db, audit, notifier)


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    return SessionService(db, CalendarService(db), clock, notifier, audit)


def get_attendance_service(db: Session = Depends(get_db)) -> AttendanceService:
    return AttendanceService(db, clock, geofence, campus_cutoff, audit)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


def get_request_service(db: Session = Depends(get_db)) -> RequestService:
    return RequestService(db, clock, notifier, audit)


def get_timetable_service(db: Session = Depends(get_db)) -> TimetableService:
    return TimetableService(db, CalendarService(db))


def build_reconciliation_service(db: Session) -> ReconciliationService:
    return ReconciliationService(db, CalendarService(db), clock, notifier)


def get_reconciliation_service(db: Session = Depends(get_db)) -> ReconciliationService:
    return build_reconciliation_service(db)
