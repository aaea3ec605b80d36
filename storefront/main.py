# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api import mount_api
from storefront.data.database import Base, engine, init_db
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    try:
        init_db(engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info(f"Tables ready: {sorted(Base.metadata.tables.keys())}")
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Storefront Cart & Checkout",
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
    )
    return mount_api(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
