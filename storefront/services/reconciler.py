# storefront/services/reconciler.py
"""
Laczenie zapasu i ilosci w koszyku dla wszystkich wersji jezykowych produktu.

Produkt moze miec kopie w innych jezykach (localizations). Dla koszyka
traktujemy je jako jeden produkt logiczny:
- zapas = suma stock wszystkich kopii
- dostepny/aktywny = przynajmniej jedna kopia ma is_active i in_stock
- uzytkownik nie moze miec w koszyku (lacznie, po wszystkich kopiach)
  wiecej niz wynosi laczny zapas

Produkt bez lokalizacji to ten sam algorytm dla N=1.
"""
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.product import ProductModel
from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class VariantSnapshot:
    id: int
    locale: str
    stock: int
    in_stock: bool
    is_active: bool

    @property
    def available(self) -> bool:
        return self.is_active and self.in_stock

    @classmethod
    def from_model(cls, product: ProductModel) -> "VariantSnapshot":
        return cls(
            id=product.id,
            locale=product.locale,
            stock=product.stock or 0,
            in_stock=bool(product.in_stock),
            is_active=bool(product.is_active),
        )


@dataclass(frozen=True)
class MasterProductView:
    product_id: int
    is_active: bool
    in_stock: bool
    variants: Tuple[VariantSnapshot, ...]


@dataclass(frozen=True)
class MasterProduct:
    view: MasterProductView
    all_variant_ids: Tuple[int, ...]
    total_stock: int

    @property
    def is_combined(self) -> bool:
        return len(self.all_variant_ids) > 1

    @property
    def logical_id(self) -> int:
        #ten sam klucz dla kazdej kopii jezykowej
        return min(self.all_variant_ids)

    @property
    def can_add(self) -> bool:
        return self.view.is_active and self.view.in_stock and self.total_stock >= 1


@dataclass
class CombinedCart:
    cart_lines: List[CartLineModel] = field(default_factory=list)
    total_quantity_in_cart: int = 0

    def quantity_for(self, product_id: int) -> int:
        return sum(l.quantity for l in self.cart_lines if l.product_id == product_id)


def build_master_view(product: VariantSnapshot, siblings: Sequence[VariantSnapshot]) -> MasterProduct:
    variants = [product] + [s for s in siblings if s.id != product.id]

    total_stock = sum(v.stock or 0 for v in variants)
    available = any(v.available for v in variants)

    view = MasterProductView(
        product_id=product.id,
        is_active=available,
        in_stock=available,
        variants=tuple(variants),
    )
    return MasterProduct(
        view=view,
        all_variant_ids=tuple(v.id for v in variants),
        total_stock=total_stock,
    )


class CartReconciler:
    """
    Walidacja i zapis zmian ilosci w koszyku wzgledem lacznego zapasu.

    Najpierw wszystkie odczyty i walidacje, potem dokladnie jeden zapis
    (create/update/delete). Commit robi wywolujacy.
    """

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)

    def resolve_master_product(self, product_id: int) -> MasterProduct:
        product = self.products.find_product(product_id, populate_localizations=True)

        if not product:
            raise NotFoundError("Product not found.", code="product_not_found", context={"product_id": product_id})

        siblings = [VariantSnapshot.from_model(p) for p in product.localizations]
        return build_master_view(VariantSnapshot.from_model(product), siblings)

    def get_combined_cart_quantity(self, user_id: int, product_id: int) -> CombinedCart:
        master = self.resolve_master_product(product_id)
        return self.combined_for(user_id, master)

    def combined_for(self, user_id: int, master: MasterProduct) -> CombinedCart:
        lines = self.carts.find_cart_lines(user_id, product_ids=master.all_variant_ids)
        return CombinedCart(
            cart_lines=lines,
            total_quantity_in_cart=sum(l.quantity or 0 for l in lines),
        )

    def apply_quantity_delta(
        self,
        user_id: int,
        product_id: int,
        delta: int,
        master: MasterProduct | None = None,
    ) -> CartLineModel | None:
        if delta == 0:
            raise ValidationError("Quantity must not be zero.", code="zero_quantity")

        if master is None:
            master = self.resolve_master_product(product_id)

        existing = self.carts.get_cart_line(user_id, product_id)
        current = existing.quantity if existing else 0
        combined = self.combined_for(user_id, master)

        if delta < 0:
            return self._decrement(existing, current, delta)

        if not master.can_add:
            logger.warning(f"Product {product_id} rejected for user {user_id}: not available")
            raise ValidationError(
                "Product is not available.",
                code="product_unavailable",
                context={"product_id": product_id},
            )

        combined_after = combined.total_quantity_in_cart + delta
        if combined_after > master.total_stock:
            headroom = master.total_stock - (combined.total_quantity_in_cart - current)
            logger.warning(
                f"Product {product_id} rejected for user {user_id}: "
                f"requested {combined_after} of {master.total_stock} in stock"
            )
            raise ValidationError(
                f"Insufficient stock. You can have at most {max(headroom, 0)} of this product in your cart.",
                code="insufficient_stock",
                context={
                    "available": max(headroom, 0),
                    "total_stock": master.total_stock,
                    "in_cart": combined.total_quantity_in_cart,
                },
            )

        if existing is None:
            logger.info(f"Adding product {product_id} x{delta} to cart of user {user_id}")
            return self.carts.create_cart_line(user_id, product_id, delta)

        logger.info(
            f"Product {product_id} already in cart of user {user_id}, "
            f"quantity {current} -> {current + delta}"
        )
        self._update(existing, current + delta)
        return existing

    def _decrement(self, existing: CartLineModel | None, current: int, delta: int) -> CartLineModel | None:
        if existing is None:
            raise NotFoundError("Product not found in cart for this user.", code="line_not_found")

        remaining = current + delta
        if remaining < 0:
            raise ValidationError(
                f"Cannot remove {-delta} items, only {current} in cart.",
                code="negative_quantity",
                context={"in_cart": current},
            )

        if remaining == 0:
            logger.info(f"Removing cart line {existing.id}")
            self.carts.delete_cart_line(existing.id)
            return None

        self._update(existing, remaining)
        return existing

    def _update(self, line: CartLineModel, quantity: int) -> None:
        rowcount = self.carts.update_cart_line(line, quantity)
        if rowcount == 0:
            raise ConflictError(
                "Cart was modified by another request.",
                code="version_conflict",
                context={"line_id": line.id},
            )
