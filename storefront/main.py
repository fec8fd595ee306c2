# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from storefront.api import create_app
from storefront.data.database import Base, engine, SessionLocal
from storefront.utils.logging import get_logger
from storefront.utils.settings import SEED_DEMO_DATA
import uvicorn

logger = get_logger(__name__)

# IMPORT WSZYSTKICH MODELI PRZED CREATE_ALL
from storefront.data.models import UserModel, ProductModel, CartLineModel  # noqa: F401


def init_db(bind=engine) -> None:
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if SEED_DEMO_DATA:
        from storefront.data.seed import seed
        seed(SessionLocal)
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
