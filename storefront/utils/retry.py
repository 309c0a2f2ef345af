# storefront/utils/retry.py
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_random,
)
import redis

from storefront.domain.errors import LockNotAcquired


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_retry(max_wait_seconds: float):
    #czekamy az inny checkout tego samego usera zwolni locka
    return retry(
        reraise=True,
        stop=stop_after_delay(max_wait_seconds),
        wait=wait_random(min=0.02, max=0.1),
        retry=retry_if_exception_type(LockNotAcquired),
    )
