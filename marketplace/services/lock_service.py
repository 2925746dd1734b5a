# marketplace/services/lock_service.py
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator

import redis

from marketplace.domain.errors import CartBusy
from marketplace.utils.retry import LockNotAcquired, lock_wait, redis_retry
from marketplace.utils.settings import (
    CART_LOCK_TTL_SECONDS,
    CART_LOCK_WAIT_SECONDS,
    REDIS_URL,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec nie skasujemy locka ktory po wygasnieciu TTL przejal inny request


class RedisCartLock:
    """
    Lock na koszyk wspoldzielony miedzy procesami:
    -SET NX EX z losowym tokenem
    -czekanie na zajety koszyk (tenacity)
    -zwalnianie tylko wlasnego locka (lua)
    """

    def __init__(
        self,
        url: str | None = None,
        ttl: int = CART_LOCK_TTL_SECONDS,
        wait_seconds: float = CART_LOCK_WAIT_SECONDS,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait_seconds = wait_seconds

    @staticmethod
    def key(cart_id: int) -> str:
        return f"cart:{cart_id}:lock"

    @redis_retry()
    def _try_acquire(self, key: str, token: str) -> bool:
        #SET cart:1:lock "token" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    def _acquire_once(self, key: str, token: str) -> None:
        if not self._try_acquire(key, token):
            raise LockNotAcquired(key)

    @redis_retry()
    def _release(self, key: str, token: str) -> bool:
        return bool(self.redis.eval(_RELEASE_LUA, 1, key, token))

    @contextmanager
    def hold(self, cart_id: int) -> Iterator[None]:
        key = self.key(cart_id)
        token = uuid.uuid4().hex
        try:
            lock_wait(self.wait_seconds)(self._acquire_once)(key, token)
        except LockNotAcquired:
            logger.warning(f"Cart {cart_id} still locked after {self.wait_seconds}s")
            raise CartBusy(cart_id)

        try:
            yield
        finally:
            self._release_quietly(key, token)

    def _release_quietly(self, key: str, token: str) -> None:
        # praca pod lockiem jest juz zapisana, nieudane zwolnienie konczy sie z TTL
        try:
            released = self._release(key, token)
        except redis.RedisError as e:
            logger.error(f"Lock {key} not released, expires in {self.ttl}s: {e}")
            return
        if not released:
            logger.warning(f"Lock {key} expired before release")


class LocalCartLock:
    """Lock na koszyk w obrebie jednego procesu (REDIS_URL nieustawiony)."""

    def __init__(self, wait_seconds: float = CART_LOCK_WAIT_SECONDS):
        self.wait_seconds = wait_seconds
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        # ilu trzyma albo czeka na lock danego koszyka
        self._users: Dict[int, int] = {}

    def _enter(self, cart_id: int) -> threading.Lock:
        with self._guard:
            self._users[cart_id] = self._users.get(cart_id, 0) + 1
            return self._locks.setdefault(cart_id, threading.Lock())

    def _leave(self, cart_id: int) -> None:
        with self._guard:
            self._users[cart_id] -= 1
            if not self._users[cart_id]:
                del self._users[cart_id]
                del self._locks[cart_id]

    @contextmanager
    def hold(self, cart_id: int) -> Iterator[None]:
        lock = self._enter(cart_id)
        try:
            if not lock.acquire(timeout=self.wait_seconds):
                logger.warning(f"Cart {cart_id} still locked after {self.wait_seconds}s")
                raise CartBusy(cart_id)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._leave(cart_id)


def build_lock_service(url: str | None = None) -> RedisCartLock | LocalCartLock:
    url = REDIS_URL if url is None else url
    if url:
        logger.info("Using Redis cart locks")
        return RedisCartLock(url)
    logger.info("REDIS_URL not set, using in-process cart locks")
    return LocalCartLock()
