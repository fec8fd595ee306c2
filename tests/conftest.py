import os

#przed importem aplikacji: baza w pamieci, krotkie ponawianie locka
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CART_LOCK_ATTEMPTS"] = "2"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.dependencies import get_lock_service
from storefront.data.database import Base, get_db
from storefront.data.models import ProductModel, UserModel
from storefront.main import app
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService


class InMemoryLockService:
    """Lock bez Redisa: ta sama semantyka SET NX i zwalniania po tokenie."""

    def __init__(self):
        self.locks: dict[str, str] = {}
        self.acquired: list[str] = []
        self.released: list[str] = []

    def acquire_cart_lock(self, user_id: int, logical_product_id: int, token: str, ttl: int) -> bool:
        key = LockService.cart_lock_key(user_id, logical_product_id)
        if key in self.locks:
            return False
        self.locks[key] = token
        self.acquired.append(key)
        return True

    def release_cart_lock(self, user_id: int, logical_product_id: int, token: str) -> bool:
        key = LockService.cart_lock_key(user_id, logical_product_id)
        if self.locks.get(key) != token:
            return False
        del self.locks[key]
        self.released.append(key)
        return True


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def user(db_session):
    u = UserModel(id=1, name="Jan Kowalski", email="jan@example.com")
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def make_product(db_session):
    repo = ProductRepo(db_session)

    def _make(stock=5, locale="en", is_active=True, in_stock=True, price="100.00",
              offer_price=None, localization_of=None, name="Round Frame"):
        product = repo.create_product(
            ProductModel(
                name=name,
                locale=locale,
                category="eyewear",
                stock=stock,
                in_stock=in_stock,
                is_active=is_active,
                price=Decimal(price),
                offer_price=Decimal(offer_price) if offer_price is not None else None,
            )
        )
        if localization_of is not None:
            repo.link_localizations(product, [localization_of, *localization_of.localizations])
        db_session.commit()
        return product

    return _make


@pytest.fixture
def client(session_factory, lock_service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    yield TestClient(app)
    app.dependency_overrides = {}
