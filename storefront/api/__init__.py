# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.errors import register_exception_handlers
from storefront.api.routers import carts, health, orders


def mount_api(app: FastAPI) -> FastAPI:
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    return app
