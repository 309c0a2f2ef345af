# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CONVERSION_TASK_TIMEOUT_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = ("storefront.tasks.conversion",)

celery_app.conf.update(
    timezone="UTC",
    task_ignore_result=True,
    # publikacja z requestu checkoutu nie moze dlugo czekac na brokera
    broker_connection_timeout=2,
    task_soft_time_limit=CONVERSION_TASK_TIMEOUT_SECONDS,
    task_time_limit=CONVERSION_TASK_TIMEOUT_SECONDS + 5,
)
