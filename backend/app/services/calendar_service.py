"""
Résolution calendaire : jour férié ou jour travaillé pour une date donnée.

Ordre de résolution (la première règle qui s'applique l'emporte) :
1. Dimanche → férié ("Sunday")
2. Règle déclarée couvrant la date :
   a. SPECIAL → férié (raison = nom de la règle)
   b. SATURDAY_WORKING un samedi → travaillé, mapped_day transmis
3. Samedi sans règle → férié ("Saturday")
4. Sinon → jour travaillé

Si plusieurs règles se chevauchent, une règle SPECIAL prime toujours sur un
SATURDAY_WORKING.
"""

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.holiday import Holiday
from app.schemas.calendar import CalendarStatus, HolidayCreate, HolidayResponse
from app.services.audit_service import AuditRecorder
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

SUNDAY = 6
SATURDAY = 5


def holiday_message(holiday: Holiday) -> str:
    """Message diffusé à la déclaration d'une règle."""
    if holiday.type == "SATURDAY_WORKING":
        return f"Samedi travaillé : {holiday.start_date.strftime('%d/%m/%Y')}"
    return f"Jour férié déclaré : {holiday.name}"


class CalendarService:
    """Résolveur de calendrier adossé à la table holidays."""

    def __init__(
        self,
        db: Session,
        audit: Optional[AuditRecorder] = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.db = db
        self.audit = audit
        self.notifier = notifier

    def resolve(self, day: date) -> CalendarStatus:
        weekday = day.weekday()

        if weekday == SUNDAY:
            return CalendarStatus(date=day, is_holiday=True, is_working_day=False, reason="Sunday")

        rules = self.db.execute(
            select(Holiday)
            .where(Holiday.start_date <= day, Holiday.end_date >= day)
            .order_by(Holiday.start_date)
        ).scalars().all()

        special = next((r for r in rules if r.type == "SPECIAL"), None)
        if special is not None:
            return CalendarStatus(date=day, is_holiday=True, is_working_day=False, reason=special.name)

        if weekday == SATURDAY:
            working = next((r for r in rules if r.type == "SATURDAY_WORKING"), None)
            if working is not None:
                return CalendarStatus(
                    date=day,
                    is_holiday=False,
                    is_working_day=True,
                    reason="Working Saturday",
                    mapped_day=working.mapped_day,
                )
            return CalendarStatus(date=day, is_holiday=True, is_working_day=False, reason="Saturday")

        return CalendarStatus(date=day, is_holiday=False, is_working_day=True)

    def is_holiday(self, day: date) -> bool:
        return self.resolve(day).is_holiday

    def create_holiday(self, data: HolidayCreate, created_by: Optional[uuid.UUID] = None) -> HolidayResponse:
        """Déclare un jour férié ou un samedi travaillé (acteur administratif)."""
        holiday = Holiday(
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
            type=data.type,
            mapped_day=data.mapped_day if data.type == "SATURDAY_WORKING" else None,
            created_by=created_by,
        )
        self.db.add(holiday)
        try:
            self.db.commit()
        except IntegrityError:
            # Pas de contrainte d'unicité sur holidays : seule la clé étrangère created_by peut échouer
            self.db.rollback()
            raise NotFoundError("teacher not found", f"Enseignant {created_by} introuvable.")
        self.db.refresh(holiday)

        logger.info(
            "Règle calendrier créée : %s (%s, %s → %s)",
            holiday.name, holiday.type, holiday.start_date, holiday.end_date,
        )
        if self.audit is not None:
            self.audit.append(
                created_by, "TEACHER", "CREATE_HOLIDAY",
                {"holiday_id": holiday.id, "type": holiday.type, "start_date": holiday.start_date},
            )
        if self.notifier is not None:
            try:
                self.notifier.notify_all("Mise à jour du calendrier", holiday_message(holiday))
            except Exception as exc:
                logger.error("Diffusion de la règle %s en échec : %s", holiday.id, exc)
        return HolidayResponse.model_validate(holiday)

    def list_holidays(self) -> list[HolidayResponse]:
        """Toutes les règles, de la plus récente à la plus ancienne."""
        holidays = self.db.execute(
            select(Holiday).order_by(Holiday.start_date.desc())
        ).scalars().all()
        return [HolidayResponse.model_validate(h) for h in holidays]
