# storefront/services/product_service.py
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.exceptions import NotFoundError
from storefront.domain.schemas import ProductCreate
from storefront.repos.product_repo import ProductRepo
from storefront.services.reconciler import CartReconciler
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.reconciler = CartReconciler(db)

    def create_product(self, payload: ProductCreate) -> Dict[str, Any]:
        """
        Tworzy produkt. Z localization_of staje sie wersja jezykowa
        wskazanego produktu i wszystkich jego dotychczasowych kopii.
        """
        target = None
        if payload.localization_of is not None:
            target = self.repo.find_product(payload.localization_of)
            if not target:
                raise NotFoundError(
                    "Product to localize not found.",
                    code="product_not_found",
                    context={"product_id": payload.localization_of},
                )

        product = self.repo.create_product(
            ProductModel(
                name=payload.name,
                locale=payload.locale,
                category=payload.category,
                stock=payload.stock,
                in_stock=payload.in_stock,
                is_active=payload.is_active,
                price=payload.price,
                offer_price=payload.offer_price,
            )
        )

        if target is not None:
            self.repo.link_localizations(product, [target, *target.localizations])

        self.repo.commit()
        logger.info(f"Created product {product.id} ({product.locale})")

        return self.get_product(product.id)

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self.repo.find_product(product_id)
        if not product:
            raise NotFoundError("Product not found.", code="product_not_found", context={"product_id": product_id})

        return {
            "id": product.id,
            "name": product.name,
            "locale": product.locale,
            "category": product.category,
            "stock": product.stock,
            "in_stock": product.in_stock,
            "is_active": product.is_active,
            "price": product.price,
            "offer_price": product.offer_price,
            "localizations": [p.id for p in product.localizations],
        }

    def get_stock_view(self, product_id: int, user_id: int | None = None) -> Dict[str, Any]:
        """
        Laczny zapas produktu; z user_id odejmujemy to, co uzytkownik ma juz w koszyku.
        """
        master = self.reconciler.resolve_master_product(product_id)

        in_cart = 0
        per_variant: Dict[int, int] = {}
        if user_id is not None:
            combined = self.reconciler.combined_for(user_id, master)
            in_cart = combined.total_quantity_in_cart
            per_variant = {v: combined.quantity_for(v) for v in master.all_variant_ids}

        return {
            "product_id": product_id,
            "is_active": master.view.is_active,
            "in_stock": master.view.in_stock,
            "is_combined_product": master.is_combined,
            "combined_stock_total": master.total_stock,
            "combined_stock_available": master.total_stock - in_cart,
            "variants": [
                {
                    "id": v.id,
                    "locale": v.locale,
                    "stock": v.stock,
                    "available_stock": v.stock - per_variant.get(v.id, 0),
                    "in_stock": v.in_stock,
                    "is_active": v.is_active,
                }
                for v in master.view.variants
            ],
        }
