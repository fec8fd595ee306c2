# storefront/repos/product_repo.py
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_product(self, product_id: int, populate_localizations: bool = True) -> ProductModel | None:
        stmt = select(ProductModel).where(ProductModel.id == product_id)
        if populate_localizations:
            stmt = stmt.options(selectinload(ProductModel.localizations))
        #zawsze swiezy stan z bazy, nawet jesli obiekt jest juz w sesji
        return self.db.execute(stmt.execution_options(populate_existing=True)).scalar_one_or_none()

    def find_products(self, product_ids: Iterable[int]) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.id.in_(list(product_ids)))
                .order_by(ProductModel.id)
            ).scalars().all()
        )

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def link_localizations(self, product: ProductModel, siblings: Iterable[ProductModel]) -> None:
        #kazda para w obie strony, produkt nigdy nie jest swoja lokalizacja
        for sibling in siblings:
            if sibling.id == product.id:
                continue
            if sibling not in product.localizations:
                product.localizations.append(sibling)
            if product not in sibling.localizations:
                sibling.localizations.append(product)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()
