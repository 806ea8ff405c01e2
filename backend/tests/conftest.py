"""
Configuration partagée pour tous les tests.

- client : override de get_db pour éviter toute connexion réelle à PostgreSQL
- db : base SQLite en mémoire avec le schéma complet, pour que les contraintes
  d'unicité (session active, présence unique) soient réellement exercées
- clock : horloge figée, avançable via clock.current

Le scheduler et les notifications sont coupés avant l'import de l'application.
"""

import os
import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import app.models  # noqa: F401
from app.clock import Clock
from app.database import Base, get_db
from app.main import app
from app.models.school_class import SchoolClass
from app.models.student import Student
from app.models.teacher import Teacher
from app.services.notification_service import NotificationService


class FixedClock(Clock):
    """Horloge de test : renvoie toujours `current`."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """Session SQLite en mémoire, schéma créé depuis Base.metadata."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def foreign_keys(db):
    """Applique les clés étrangères sur SQLite, comme PostgreSQL en production."""
    db.execute(text("PRAGMA foreign_keys=ON"))
    db.commit()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 9, 0))


@pytest.fixture
def notifier():
    return MagicMock(spec=NotificationService)


@pytest.fixture
def teacher(db):
    t = Teacher(id=uuid.uuid4(), email="prof@campus.edu", name="Prof Martin", role="STAFF")
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def school_class(db):
    c = SchoolClass(id=uuid.uuid4(), name="CSE2021", section="A", year=3)
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def make_student(db, school_class):
    """Fabrique d'élèves actifs rattachés à school_class."""
    counter = {"n": 0}

    def _make(name=None, is_active=True, class_id=None):
        counter["n"] += 1
        student = Student(
            id=uuid.uuid4(),
            roll_number=f"CSE2021{counter['n']:05d}",
            name=name or f"Élève {counter['n']}",
            class_id=class_id or school_class.id,
            is_active=is_active,
        )
        db.add(student)
        db.commit()
        return student

    return _make
