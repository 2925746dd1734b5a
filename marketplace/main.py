# marketplace/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from marketplace.api import ROUTERS
from marketplace.api.errors import register_error_handlers
from marketplace.data.database import Base, engine
from marketplace.utils.logging import get_logger

# import wszystkich modeli przed create_all
import marketplace.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db():
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Orders",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
