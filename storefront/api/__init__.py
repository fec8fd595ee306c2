# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.errors import register_error_handlers
from storefront.api.routers import cart, health, products, users

def create_app(lifespan=None):
    app = FastAPI(title="Storefront Cart Service", version="1.0.0", lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    return app
