import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studx.config import get_settings
from studx.database.connection import close_mongo_connection, connect_to_mongo, mongo_db_dependency
from studx.routers.messages import router as messages_router
from studx.utils.errors import register_exception_handlers


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):

    await connect_to_mongo()
    try:
        yield
    finally:
        await close_mongo_connection()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="StudX Messaging", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(messages_router, prefix=settings.api_prefix)

    @app.get("/")
    async def root(db=Depends(mongo_db_dependency)):

        collections = await db.list_collection_names()
        return {"message": "StudX Backend Running", "collections": collections}

    return app


app = create_app()
