# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production")
IS_DEVELOPMENT = APP_ENV == "development"

PORT = int(os.getenv("PORT", 3000))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./store.db")

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
# "redis" dla wielu procesow, "local" dla jednego procesu
LOCK_BACKEND = os.getenv("LOCK_BACKEND", "redis")
CHECKOUT_LOCK_TTL_SECONDS = int(os.getenv("CHECKOUT_LOCK_TTL_SECONDS", 30))
CHECKOUT_LOCK_WAIT_SECONDS = float(os.getenv("CHECKOUT_LOCK_WAIT_SECONDS", 10))

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
CONVERSION_TASK_TIMEOUT_SECONDS = int(os.getenv("CONVERSION_TASK_TIMEOUT_SECONDS", 10))

DEFAULT_COUNTRY = "KR"

# w development uzywamy kluczy z sufiksem _DEV
OPTIMIZELY_SDK_KEY = os.getenv(
    "OPTIMIZELY_SDK_KEY_DEV" if IS_DEVELOPMENT else "OPTIMIZELY_SDK_KEY"
)
OPTIMIZELY_DATAFILE_URL = os.getenv(
    "OPTIMIZELY_DATAFILE_URL_DEV" if IS_DEVELOPMENT else "OPTIMIZELY_DATAFILE_URL"
)
OPTIMIZELY_DATAFILE_UPDATE_INTERVAL = int(os.getenv("OPTIMIZELY_DATAFILE_UPDATE_INTERVAL", 5 * 60))
HEADER_COLOR_FLAG_KEY = os.getenv("HEADER_COLOR_FLAG_KEY", "test1")
# "forwarding" wysyla kazdy impression z decide() synchronicznie do logx.optimizely.com,
# przy niedostepnym backendzie login czeka ~1s na decyzje. Tylko do debugowania eventow.
OPTIMIZELY_EVENT_PROCESSOR = os.getenv("OPTIMIZELY_EVENT_PROCESSOR", "batch")
OPTIMIZELY_EVENT_BATCH_SIZE = int(os.getenv("OPTIMIZELY_EVENT_BATCH_SIZE", 10))
# milisekundy
OPTIMIZELY_EVENT_FLUSH_INTERVAL = int(os.getenv("OPTIMIZELY_EVENT_FLUSH_INTERVAL", 1000))


def cors_origins() -> list[str]:
    if not CORS_ORIGIN:
        return ["*"]
    return [o.strip() for o in CORS_ORIGIN.split(",") if o.strip()]
