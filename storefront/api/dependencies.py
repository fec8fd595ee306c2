# storefront/api/dependencies.py
from fastapi import Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService


def get_lock_service() -> LockService:
    return LockService()


def get_cart_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
