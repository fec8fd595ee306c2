# storefront/services/cart_service.py
import uuid
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.exceptions import ConflictError, NotFoundError, StorefrontError
from storefront.domain.schemas import CartEntryOut, CartLineOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService
from storefront.services.reconciler import CartReconciler, MasterProduct
from storefront.utils.retry import lock_retry
from storefront.utils.settings import CART_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka.
    commands (add, remove, clear) modyfikuja stan pod lockiem na produkt logiczny
    query (my cart, summary) tylko odczyt
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.reconciler = CartReconciler(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_my_cart(self, user_id: int) -> Dict[str, Any] | None:
        self._require_user(user_id)

        lines = self.repo.find_cart_lines(user_id, with_product=True)
        if not lines:
            return None

        return {
            "user_id": user_id,
            "products": [CartEntryOut.model_validate(l) for l in lines],
            "total_items_in_cart": sum(l.quantity for l in lines),
        }

    def get_summary(self, user_id: int) -> Dict[str, Any]:
        self._require_user(user_id)

        lines = self.repo.find_cart_lines(user_id, with_product=True)
        subtotal = sum(
            (self._unit_price(l.product) * l.quantity for l in lines),
            Decimal("0.00"),
        )

        return {
            "user_id": user_id,
            "line_count": len(lines),
            "total_items_in_cart": sum(l.quantity for l in lines),
            "subtotal": subtotal,
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        """
        Zmiana ilosci produktu w koszyku o quantity (moze byc ujemna).
        Zwraca linie (None gdy usunieta) + laczny zapas wszystkich wersji jezykowych.
        """
        self._require_user(user_id)
        master = self.reconciler.resolve_master_product(product_id)

        logger.info(f"Cart change for user {user_id}: product {product_id} delta {quantity}")

        def _apply():
            #stan produktu czytamy jeszcze raz, juz pod lockiem
            fresh = self.reconciler.resolve_master_product(product_id)
            return fresh, self.reconciler.apply_quantity_delta(user_id, product_id, quantity, master=fresh)

        master, line = self._locked(user_id, master)(_apply)
        return self._result(user_id, master, line)

    def remove_item(self, user_id: int, product_id: int, decrement: bool = False) -> Dict[str, Any]:
        """
        decrement=True i ilosc > 1: zmniejsz o 1, w przeciwnym razie usun cala linie.
        """
        self._require_user(user_id)
        master = self.reconciler.resolve_master_product(product_id)

        def _remove():
            existing = self.repo.get_cart_line(user_id, product_id)
            if not existing:
                raise NotFoundError("Product not found in cart for this user.", code="line_not_found")
            delta = -1 if decrement and existing.quantity > 1 else -existing.quantity
            return self.reconciler.apply_quantity_delta(user_id, product_id, delta, master=master)

        line = self._locked(user_id, master)(_remove)
        return self._result(user_id, master, line)

    def clear_cart(self, user_id: int) -> int:
        self._require_user(user_id)

        deleted = self.repo.delete_user_lines(user_id)
        self.repo.commit()

        logger.info(f"Cleared {deleted} cart lines of user {user_id}")
        return deleted

    #pomocnicze
    def _locked(self, user_id: int, master: MasterProduct):
        """
        Zwraca funkcje, ktora wykonuje operacje pod lockiem (user, produkt logiczny)
        i commituje. Blad = rollback, lock zawsze zwalniany.
        """
        token = uuid.uuid4().hex

        @lock_retry()
        def acquire():
            if not self.lock_service.acquire_cart_lock(
                user_id=user_id,
                logical_product_id=master.logical_id,
                token=token,
                ttl=CART_LOCK_TTL_SECONDS,
            ):
                raise ConflictError(
                    "Cart is being modified by another request, try again.",
                    code="cart_locked",
                )

        def run(operation):
            acquire()
            try:
                result = operation()
                self.repo.commit()
                return result
            except Exception as e:
                if not isinstance(e, StorefrontError):
                    logger.error(f"Cart change failed for user {user_id}: {e}")
                self.repo.rollback()
                raise
            finally:
                #blad zwalniania nie zmienia wyniku operacji, lock i tak wygasnie po TTL
                try:
                    self.lock_service.release_cart_lock(user_id, master.logical_id, token)
                except Exception:
                    logger.exception(f"Failed to release cart lock for user {user_id}, product {master.logical_id}")

        return run

    def _result(self, user_id: int, master: MasterProduct, line) -> Dict[str, Any]:
        combined = self.reconciler.combined_for(user_id, master)
        return {
            "line": CartLineOut.model_validate(line) if line is not None else None,
            "combined_stock_available": master.total_stock - combined.total_quantity_in_cart,
            "total_quantity_in_cart_all_variants": combined.total_quantity_in_cart,
            "is_combined_product": master.is_combined,
        }

    def _require_user(self, user_id: int) -> None:
        if not self.users.exists(user_id):
            raise NotFoundError("User not found.", code="user_not_found", context={"user_id": user_id})

    @staticmethod
    def _unit_price(product) -> Decimal:
        price = product.offer_price if product.offer_price is not None else product.price
        return Decimal(str(price))
