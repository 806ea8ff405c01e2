# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme attendance_sessions.teacher_id → teachers.id échouent
# avec NoReferencedTableError si teacher.py n'est pas chargé avant session.py.

from app.models.teacher import Teacher  # noqa: F401  doit précéder session et attendance
from app.models.school_class import SchoolClass, TimetableEntry, Weekday  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.session import AttendanceSession, SessionPresentStudent  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
from app.models.holiday import Holiday  # noqa: F401
from app.models.request import AttendanceRequest  # noqa: F401
from app.models.audit import AuditLog  # noqa: F401
