"""
Router pour les demandes de présence (soumission élève, revue enseignant).
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_actor_id, get_request_service
from app.schemas.request import (
    AttendanceRequestCreate,
    AttendanceRequestResponse,
    AttendanceRequestReview,
)
from app.services.request_service import RequestService

router = APIRouter(prefix="/api/v1/requests", tags=["Demandes"])


@router.post("", response_model=AttendanceRequestResponse, status_code=201,
             summary="Soumettre une demande de présence")
def submit_request(
    data: AttendanceRequestCreate,
    student_id: uuid.UUID = Depends(get_actor_id),
    service: RequestService = Depends(get_request_service),
):
    return service.submit_request(student_id, data)


@router.get("", response_model=list[AttendanceRequestResponse], summary="Lister les demandes")
def list_requests(
    status: Optional[str] = None,
    type: Optional[str] = None,
    service: RequestService = Depends(get_request_service),
):
    return service.list_requests(status=status, request_type=type)


@router.put("/{request_id}/review", response_model=AttendanceRequestResponse,
            summary="Approuver ou rejeter une demande")
def review_request(
    request_id: uuid.UUID,
    data: AttendanceRequestReview,
    reviewer_id: uuid.UUID = Depends(get_actor_id),
    service: RequestService = Depends(get_request_service),
):
    """409 si la demande a déjà été revue ou si la présence existe déjà."""
    return service.review_request(request_id, reviewer_id, data)
