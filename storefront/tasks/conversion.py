# storefront/tasks/conversion.py
from celery.exceptions import SoftTimeLimitExceeded
from celery.signals import worker_process_init, worker_process_shutdown

from storefront.celery_worker import celery_app
from storefront.services.experiment_service import ExperimentService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# klient Optimizely procesu workera, zyje od worker_process_init do worker_process_shutdown
_experiments: ExperimentService | None = None


def set_worker_experiments(experiments: ExperimentService | None) -> None:
    global _experiments
    _experiments = experiments


@worker_process_init.connect
def init_worker_experiments(**kwargs):
    set_worker_experiments(ExperimentService.from_settings())
    logger.info("Worker: ExperimentService gotowy")


@worker_process_shutdown.connect
def close_worker_experiments(**kwargs):
    if _experiments is not None:
        _experiments.close()
    set_worker_experiments(None)


@celery_app.task(name="storefront.tasks.conversion.track_conversion_task")
def track_conversion_task(user_email: str, country: str) -> bool:
    """
    Celery task - wysyla konwersje "order_placed" do Optimizely.
    Best effort: blad tylko logujemy, zamowienie juz istnieje.
    """
    if _experiments is None:
        logger.warning(f"[CONVERSION] Brak ExperimentService w workerze, pomijam {user_email}")
        return False

    try:
        ok = _experiments.track_conversion(user_email, country)
    except SoftTimeLimitExceeded:
        logger.warning(f"[CONVERSION] Timeout sledzenia konwersji dla {user_email}")
        return False

    logger.info(f"[CONVERSION] User {user_email}: tracked={ok}")
    return ok
