import uuid
from contextlib import contextmanager

import redis

from storefront.exceptions import CartBusyError
from storefront.utils.retry import lock_wait, redis_retry
from storefront.utils.settings import CART_LOCK_TTL_SECONDS, CART_LOCK_WAIT_SECONDS, REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete: only the token holder may release the key
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Per-user cart lock in Redis.

    - SET key token NX EX ttl to acquire
    - Lua compare-and-delete to release
    - every cart mutation and checkout for one user runs under the same key
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int = CART_LOCK_TTL_SECONDS,
        wait_seconds: float = CART_LOCK_WAIT_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait_seconds = wait_seconds

    @staticmethod
    def cart_key(user_id: int) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def try_acquire(self, key: str, token: str) -> bool:
        #SET cart:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    def acquire(self, key: str, token: str) -> bool:
        """Wait up to wait_seconds for the key, False if still held by someone else."""
        return lock_wait(self.wait_seconds)(self.try_acquire)(key, token)

    @contextmanager
    def user_lock(self, user_id: int):
        key = self.cart_key(user_id)
        token = uuid.uuid4().hex

        if not self.acquire(key, token):
            logger.warning(f"Cart lock {key} still busy after {self.wait_seconds}s")
            raise CartBusyError(user_id)

        logger.debug(f"Acquired {key}")
        try:
            yield token
        finally:
            if not self.release(key, token):
                # TTL ran out while we were still working
                logger.warning(f"Cart lock {key} expired before release")
