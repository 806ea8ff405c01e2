"""
Router d'exploitation : déclenchement manuel des balayages planifiés.
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_reconciliation_service
from app.schemas.reconciliation import AbsenceSweepResult, ExpirySweepResult
from app.services.reconciliation_service import ReconciliationService

router = APIRouter(prefix="/api/v1/reconciliation", tags=["Réconciliation"])


@router.post("/absence-sweep", response_model=AbsenceSweepResult,
             summary="Lancer le balayage des absences campus")
def run_absence_sweep(
    day: Optional[dt.date] = None,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """
    Même traitement que la tâche de 11h. Relançable sans créer de doublons :
    les élèves déjà marqués sont comptés dans already_marked.
    """
    return service.run_daily_absence_sweep(day)


@router.post("/session-expiry", response_model=ExpirySweepResult,
             summary="Désactiver les sessions expirées")
def run_session_expiry(service: ReconciliationService = Depends(get_reconciliation_service)):
    return service.run_session_expiry_sweep()
