"""
Connexion à la base de données (PostgreSQL en production).
Les contraintes d'unicité (session active, présence unique) sont portées par le schéma :
les services insèrent puis traduisent l'IntegrityError, sans lecture préalable.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings

# SQLite (développement local) : la connexion est partagée avec les threads du dispatcher
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session par requête et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
