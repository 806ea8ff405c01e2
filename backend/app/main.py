"""
Point d'entrée principal de l'API SmartAttend.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401  enregistre tous les modèles dans Base.metadata avant les routers
from app.config import settings
from app.dependencies import dispatcher
from app.exceptions import AttendanceError
from app.routers import attendance, calendar, classes, reconciliation, reports, requests, sessions
from app.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)
logging.getLogger("app").setLevel(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : démarre le dispatcher de notifications puis le scheduler, arrêt en ordre inverse."""
    dispatcher.start()
    start_scheduler()
    yield
    stop_scheduler()
    dispatcher.shutdown(drain=settings.NOTIFY_DRAIN_ON_SHUTDOWN)


app = FastAPI(
    title="SmartAttend API",
    description="API de présence : sessions de cours, présence campus géolocalisée, réconciliation planifiée",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-User-Id", "X-Device-Id"],
)


app.include_router(sessions.router)
app.include_router(attendance.router)
app.include_router(calendar.router)
app.include_router(classes.router)
app.include_router(reports.router)
app.include_router(requests.router)
app.include_router(reconciliation.router)


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError) -> JSONResponse:
    """Traduit les erreurs métier (introuvable, expirée, interdite, conflit) en réponse HTTP."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "reason": exc.reason},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "SmartAttend API", "version": "0.1.0"}
