# storefront/data/seed.py
from decimal import Decimal

from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#produkt logiczny = lista wersji jezykowych
DEMO_CATALOG = [
    [
        {"name": "Aviator Classic", "locale": "en", "category": "eyewear", "stock": 2, "price": "129.00", "offer_price": "99.00"},
        {"name": "أفياتور كلاسيك", "locale": "ar", "category": "eyewear", "stock": 3, "price": "129.00", "offer_price": "99.00"},
    ],
    [
        {"name": "Daily Soft Lenses 30-pack", "locale": "en", "category": "contact-lens", "stock": 40, "price": "35.00"},
    ],
    [
        {"name": "Microfiber Cleaning Cloth", "locale": "en", "category": "accessory", "stock": 0, "price": "4.50", "in_stock": False},
        {"name": "قطعة تنظيف", "locale": "ar", "category": "accessory", "stock": 10, "price": "4.50"},
    ],
]


def seed(session_factory):
    db = session_factory()
    try:
        # tylko gdy baza pusta
        if db.query(ProductModel).first():
            return

        repo = ProductRepo(db)
        db.add(UserModel(id=1, name="Demo User", email="demo@example.com"))

        for group in DEMO_CATALOG:
            created = [
                repo.create_product(
                    ProductModel(
                        name=item["name"],
                        locale=item["locale"],
                        category=item["category"],
                        stock=item["stock"],
                        in_stock=item.get("in_stock", True),
                        is_active=True,
                        price=Decimal(item["price"]),
                        offer_price=Decimal(item["offer_price"]) if "offer_price" in item else None,
                    )
                )
                for item in group
            ]
            for product in created:
                repo.link_localizations(product, created)

        db.commit()
        logger.info("Seeded demo catalog")
    finally:
        db.close()
