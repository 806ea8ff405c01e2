"""
Agrégation des présences pour les rapports (lecture seule).

Rapport de classe : uniquement les événements CLASS de la période, par élève.
absent = total - présent ; pourcentage arrondi au plus proche (0.5 vers le haut),
0 si aucun cours.
"""

import math
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.attendance import Attendance
from app.models.student import Student
from app.schemas.report import StudentAttendanceSummary, StudentOverallSummary


def attendance_percentage(present: int, total: int) -> int:
    if total == 0:
        return 0
    return math.floor(present * 100 / total + 0.5)


class ReportService:

    def __init__(self, db: Session):
        self.db = db

    def summarize(self, class_id: uuid.UUID, start_date: date, end_date: date) -> list[StudentAttendanceSummary]:
        """Une ligne par élève de la classe, triée par matricule."""
        students = self.db.execute(
            select(Student).where(Student.class_id == class_id).order_by(Student.roll_number)
        ).scalars().all()

        rows = self.db.execute(
            select(Attendance.student_id, Attendance.status).where(
                Attendance.class_id == class_id,
                Attendance.type == "CLASS",
                Attendance.date >= start_date,
                Attendance.date <= end_date,
            )
        ).all()

        totals = {s.id: 0 for s in students}
        presents = {s.id: 0 for s in students}
        for student_id, status in rows:
            if student_id not in totals:
                continue
            totals[student_id] += 1
            if status == "PRESENT":
                presents[student_id] += 1

        return [
            StudentAttendanceSummary(
                student_id=s.id,
                name=s.name,
                roll_number=s.roll_number,
                total_classes=totals[s.id],
                present=presents[s.id],
                absent=totals[s.id] - presents[s.id],
                percentage=attendance_percentage(presents[s.id], totals[s.id]),
            )
            for s in students
        ]

    def student_summary(self, student_id: uuid.UUID) -> StudentOverallSummary:
        """Synthèse de tous les événements de l'élève, campus et cours confondus."""
        if self.db.get(Student, student_id) is None:
            raise NotFoundError("student not found", f"Élève {student_id} introuvable.")

        statuses = self.db.execute(
            select(Attendance.status).where(Attendance.student_id == student_id)
        ).scalars().all()

        total = len(statuses)
        present = sum(1 for s in statuses if s == "PRESENT")
        absent = sum(1 for s in statuses if s == "ABSENT")
        return StudentOverallSummary(
            student_id=student_id,
            total=total,
            present=present,
            absent=absent,
            percentage=attendance_percentage(present, total),
        )
