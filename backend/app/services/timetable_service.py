"""
Lecture de l'emploi du temps d'une classe.
Un samedi travaillé suit l'emploi du temps du jour indiqué par la règle (mapped_day).
"""

import uuid
from collections import defaultdict
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.school_class import TimetableEntry, Weekday
from app.schemas.timetable import ClassTimetable, DaySchedule, TimetableSlot
from app.services.calendar_service import CalendarService


class TimetableService:

    def __init__(self, db: Session, calendar: CalendarService):
        self.db = db
        self.calendar = calendar

    def get_timetable(self, class_id: uuid.UUID) -> ClassTimetable:
        entries = self.db.execute(
            select(TimetableEntry)
            .where(TimetableEntry.class_id == class_id)
            .order_by(TimetableEntry.period)
        ).scalars().all()

        days: dict[str, list[TimetableSlot]] = defaultdict(list)
        for entry in entries:
            days[entry.weekday].append(TimetableSlot.model_validate(entry))

        # Tous les jours présents, dans l'ordre de la semaine
        return ClassTimetable(
            class_id=class_id,
            days={day.value: days.get(day.value, []) for day in Weekday},
        )

    def get_day_schedule(self, class_id: uuid.UUID, day: date) -> DaySchedule:
        status = self.calendar.resolve(day)
        if status.is_holiday:
            return DaySchedule(class_id=class_id, date=day, is_holiday=True, followed_day=None, slots=[])

        followed = Weekday(status.mapped_day) if status.mapped_day else Weekday.from_date(day)
        entries = self.db.execute(
            select(TimetableEntry)
            .where(TimetableEntry.class_id == class_id, TimetableEntry.weekday == followed.value)
            .order_by(TimetableEntry.period)
        ).scalars().all()

        return DaySchedule(
            class_id=class_id,
            date=day,
            is_holiday=False,
            followed_day=followed.value,
            slots=[TimetableSlot.model_validate(e) for e in entries],
        )
