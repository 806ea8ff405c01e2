"""
Router pour les sessions de présence (ouverture par l'enseignant).
"""

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.dependencies import get_actor_id, get_session_service
from app.schemas.session import SessionCreate, SessionResponse
from app.services.session_service import SessionService

router = APIRouter(prefix="/api/v1/attendance/sessions", tags=["Sessions de présence"])


@router.post(
    "",
    response_model=SessionResponse,
    status_code=201,
    summary="Ouvrir une session de présence",
)
def start_session(
    data: SessionCreate,
    teacher_id: uuid.UUID = Depends(get_actor_id),
    service: SessionService = Depends(get_session_service),
):
    """
    Ouvre une session de 15 minutes pour une classe et une période, aujourd'hui.

    Retourne 403 un jour férié, 409 si une session est déjà active pour ce créneau.
    Les élèves de la classe sont notifiés en arrière-plan.
    """
    return service.create_session(data.class_id, teacher_id, data.period, data.mode)


@router.get("/{session_id}", response_model=SessionResponse, summary="Détail d'une session")
def get_session(session_id: uuid.UUID, service: SessionService = Depends(get_session_service)):
    """Session avec la liste des élèves présents. 404 si introuvable."""
    return service.get_session(session_id)


@router.get("/{session_id}/qr", summary="QR code du jeton de session")
def get_session_qr(session_id: uuid.UUID, service: SessionService = Depends(get_session_service)):
    """Image PNG du QR code encodant le jeton, à projeter en classe."""
    return Response(content=service.get_session_qr(session_id), media_type="image/png")
