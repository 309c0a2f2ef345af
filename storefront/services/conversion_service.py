# storefront/services/conversion_service.py
from storefront.tasks.conversion import track_conversion_task
from storefront.utils.logging import get_logger
from storefront.utils.settings import CONVERSION_TASK_TIMEOUT_SECONDS

logger = get_logger(__name__)


class ConversionService:
    """
    Wysyla sledzenie konwersji po zamowieniu.
    Używa Celery do asynchronicznego przetwarzania, checkout nigdy na to nie czeka.
    """

    def __init__(self, task=track_conversion_task, expires: int = CONVERSION_TASK_TIMEOUT_SECONDS):
        self.task = task
        self.expires = expires

    def track_order_conversion(self, user_email: str, country: str) -> bool:
        """Zwraca True gdy task trafil do kolejki. Blad brokera jest tylko logowany."""
        logger.info(f"[orders] dispatch conversion tracking: email={user_email}, country={country}")
        try:
            # expires: stary event po awarii workera nie ma juz sensu
            self.task.apply_async(
                args=[user_email, country],
                expires=self.expires,
                retry=False,
            )
        except Exception as e:
            logger.error(f"[orders] conversion tracking dispatch failed: {e}")
            return False
        return True
