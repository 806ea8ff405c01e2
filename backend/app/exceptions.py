"""
Erreurs métier du moteur de présence.

Chaque erreur porte un code `reason` stable (ex. "token mismatch") et un message
lisible. La traduction HTTP est faite par le handler enregistré dans main.py.
"""

from typing import Optional


class AttendanceError(ValueError):
    status_code = 400

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or reason)


class NotFoundError(AttendanceError):
    """Session, élève ou demande introuvable."""
    status_code = 404


class ExpiredError(AttendanceError):
    """Session hors de sa fenêtre de validité."""
    status_code = 410


class ForbiddenError(AttendanceError):
    """Jour férié, cutoff dépassé, hors campus ou jeton invalide."""
    status_code = 403


class ConflictError(AttendanceError):
    """Session déjà active ou présence déjà enregistrée."""
    status_code = 409
