import redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

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
#wiec zwalniamy tylko wlasny lock (token), nigdy cudzy

class LockService:
    """
    -lock na pare (user, produkt logiczny) na czas modyfikacji koszyka
    -wszystkie wersje jezykowe produktu maja ten sam klucz
    -zwalnianie locka atomowo przez lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def cart_lock_key(user_id: int, logical_product_id: int) -> str:
        return f"cart:{user_id}:product:{logical_product_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: int, logical_product_id: int, token: str, ttl: int) -> bool:
        key = self.cart_lock_key(user_id, logical_product_id)
        logger.info(f"Acquire lock {key}")
        #SET cart:1:product:7:lock "<token>" NX EX 10
        return bool(self.redis.set(
            name=key,
            value=token,
            nx=True, #tylko jesli klucz nie istnieje
            ex=ttl, #wygasa sam, nawet jak proces padnie przed release
        ))

    @redis_retry()
    def release_cart_lock(self, user_id: int, logical_product_id: int, token: str) -> bool:
        key = self.cart_lock_key(user_id, logical_product_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
