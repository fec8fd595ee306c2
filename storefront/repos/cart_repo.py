# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.exceptions import ConflictError


class CartRepo:
    """
    Dostep do linii koszyka.
    Zapisy robia tylko flush, commit/rollback wywoluje serwis.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_cart_line(self, user_id: int, product_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            ).execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def find_cart_lines(
        self,
        user_id: int,
        product_ids: Iterable[int] | None = None,
        with_product: bool = False,
    ) -> List[CartLineModel]:
        stmt = select(CartLineModel).where(CartLineModel.user_id == user_id)

        if product_ids is not None:
            stmt = stmt.where(CartLineModel.product_id.in_(list(product_ids)))

        if with_product:
            stmt = stmt.options(selectinload(CartLineModel.product))

        stmt = stmt.order_by(CartLineModel.id).execution_options(populate_existing=True)
        return list(self.db.execute(stmt).scalars().all())

    def create_cart_line(self, user_id: int, product_id: int, quantity: int) -> CartLineModel:
        line = CartLineModel(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            version=1,
        )
        self.db.add(line)
        try:
            self.db.flush()
        except IntegrityError as e:
            #u_user_product: inny request dodal ta sama wersje produktu pierwszy
            raise ConflictError(
                "Cart was modified by another request.",
                code="duplicate_line",
                context={"user_id": user_id, "product_id": product_id},
            ) from e
        return line

    def update_cart_line(self, line: CartLineModel, quantity: int) -> int:
        # Optimistic locking na kolumnie version
        # update cart_lines set quantity=.., version=2 where id=1 and version=1
        result = self.db.execute(
            update(CartLineModel)
            .where(
                CartLineModel.id == line.id,
                CartLineModel.version == line.version,
            )
            .values(
                quantity=quantity,
                version=line.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            self.db.refresh(line)
        return result.rowcount

    def delete_cart_line(self, line_id: int) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(CartLineModel.id == line_id)
        )
        return result.rowcount

    def delete_user_lines(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(CartLineModel.user_id == user_id)
        )
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
