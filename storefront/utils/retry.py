# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis

from storefront.domain.exceptions import ConflictError
from storefront.utils.settings import CART_LOCK_ATTEMPTS


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_retry(attempts: int = CART_LOCK_ATTEMPTS):
    #ponawiamy tylko gdy lock zajety, bledy domenowe leca dalej
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(ConflictError),
    )
