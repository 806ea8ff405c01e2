"""
Planificateur APScheduler pour les balayages de réconciliation.

- daily_absence_sweep : du lundi au samedi à l'heure configurée (11h par défaut),
  marque ABSENT les élèves actifs sans présence campus (sauf jour férié)
- session_expiry_sweep : toutes les heures, désactive les sessions expirées

Chaque exécution ouvre sa propre session BDD. Une erreur interrompt uniquement
l'exécution en cours ; la suivante a lieu au prochain déclenchement.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone=settings.TIMEZONE)


def _run_daily_absence_sweep() -> None:
    """
    Tâche planifiée : balayage quotidien des absences campus.
    Import local pour éviter les imports circulaires.
    """
    from app.dependencies import build_reconciliation_service

    db = SessionLocal()
    try:
        result = build_reconciliation_service(db).run_daily_absence_sweep()
        if result.skipped:
            logger.info("Balayage des absences %s ignoré : %s", result.date, result.skip_reason)
        else:
            logger.info(
                "Balayage des absences %s : %d absents, %d déjà marqués, %d erreurs",
                result.date, result.marked_absent, result.already_marked, len(result.errors),
            )
    except Exception as exc:
        logger.error("Erreur lors du balayage des absences : %s", exc)
    finally:
        db.close()


def _run_session_expiry_sweep() -> None:
    """Tâche planifiée : désactivation des sessions expirées."""
    from app.dependencies import build_reconciliation_service

    db = SessionLocal()
    try:
        result = build_reconciliation_service(db).run_session_expiry_sweep()
        logger.info("Sessions expirées désactivées : %d", result.deactivated)
    except Exception as exc:
        logger.error("Erreur lors du nettoyage des sessions expirées : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler désactivé (SCHEDULER_ENABLED=false).")
        return

    scheduler.add_job(
        _run_daily_absence_sweep,
        trigger="cron",
        day_of_week="mon-sat",
        hour=settings.ABSENCE_SWEEP_HOUR,
        minute=settings.ABSENCE_SWEEP_MINUTE,
        id="daily_absence_sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.add_job(
        _run_session_expiry_sweep,
        trigger="cron",
        minute=0,
        id="session_expiry_sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré : absences à %02d:%02d (lun-sam), sessions expirées toutes les heures.",
        settings.ABSENCE_SWEEP_HOUR, settings.ABSENCE_SWEEP_MINUTE,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
