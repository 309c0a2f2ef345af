import threading
import time
import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from storefront.domain.errors import LockNotAcquired
from storefront.utils.logging import get_logger
from storefront.utils.retry import lock_retry, redis_retry
from storefront.utils.settings import LOCK_BACKEND, REDIS_URL

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec get + porownanie + del wszystko naraz


def checkout_lock_key(user_email: str) -> str:
    return f"checkout:{user_email}:lock"


class BaseLockService:
    """
    Wspolny kontrakt lockow:
    -acquire(key, token, ttl) nieblokujaco, True jesli lock nasz
    -release(key, token) zwalnia tylko wlasny lock
    -hold(...) context manager ktory czeka na locka (tenacity)
    """

    def acquire(self, key: str, token: str, ttl: int) -> bool:
        raise NotImplementedError

    def release(self, key: str, token: str) -> bool:
        raise NotImplementedError

    @contextmanager
    def hold(self, key: str, ttl: int, wait_seconds: float):
        token = uuid.uuid4().hex

        @lock_retry(wait_seconds)
        def _acquire():
            if not self.acquire(key, token, ttl):
                raise LockNotAcquired(key)

        _acquire()
        try:
            yield token
        finally:
            try:
                self.release(key, token)
            except RedisError as e:
                # lock i tak wygasnie po ttl
                logger.warning(f"Nie udalo sie zwolnic locka {key}: {e}")


class LockService(BaseLockService):
    """
    -lock per klucz w redisie (SET NX EX)
    -zwalnianie locka
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, token: str, ttl: int) -> bool:
        logger.debug(f"Acquire lock {key}")
        #SET checkout:a@b.c:lock "<token>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True, #not eXists, jesli klucz jest to nic nie rob i None
                ex=ttl, #wygasa sam, proces ktory padl nie zablokuje usera na zawsze
            )
        )

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        logger.debug(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)


class LocalLockService(BaseLockService):
    """Ta sama semantyka co LockService, ale w pamieci procesu (jeden proces / testy)."""

    def __init__(self):
        self._guard = threading.Lock()
        self._held: dict[str, tuple[str, float]] = {}

    def acquire(self, key: str, token: str, ttl: int) -> bool:
        now = time.monotonic()
        with self._guard:
            current = self._held.get(key)
            if current and current[1] > now:
                return False
            self._held[key] = (token, now + ttl)
            return True

    def release(self, key: str, token: str) -> bool:
        with self._guard:
            current = self._held.get(key)
            if not current or current[0] != token:
                return False
            del self._held[key]
            return True


def build_lock_service(backend: str = LOCK_BACKEND) -> BaseLockService:
    if backend == "local":
        logger.info("Lock checkoutu w pamieci procesu (LOCK_BACKEND=local)")
        return LocalLockService()
    return LockService()
