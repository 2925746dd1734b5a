# marketplace/utils/retry.py
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)
import requests
import redis


class LockNotAcquired(Exception):
    pass


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_wait(max_wait: float, poll: float = 0.05):
    #czekamy na zajety koszyk max_wait sekund, potem LockNotAcquired leci dalej
    return retry(
        reraise=True,
        stop=stop_after_delay(max_wait),
        wait=wait_fixed(poll),
        retry=retry_if_exception_type(LockNotAcquired),
    )
