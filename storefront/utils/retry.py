# storefront/utils/retry.py
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)
import redis

from storefront.exceptions import DuplicateKeyError
from storefront.utils.settings import CART_LOCK_WAIT_SECONDS, ORDER_NUMBER_MAX_ATTEMPTS


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_wait(wait_seconds: float | None = None, poll_interval: float = 0.05):
    """Poll a lock acquisition until it returns True or the wait budget runs out.

    The decorated call returns False when the budget is exhausted.
    """
    return retry(
        stop=stop_after_delay(CART_LOCK_WAIT_SECONDS if wait_seconds is None else wait_seconds),
        wait=wait_fixed(poll_interval),
        retry=retry_if_result(lambda acquired: not acquired),
        retry_error_callback=lambda retry_state: False,
    )


def order_number_retry(attempts: int | None = None):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or ORDER_NUMBER_MAX_ATTEMPTS),
        retry=retry_if_exception_type(DuplicateKeyError),
    )
