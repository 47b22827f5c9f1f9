import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger.api.deps import STORAGE_ERROR_DETAIL
from ledger.api.v1.api import build_api_router
from ledger.core.auth import NotAuthenticatedError
from ledger.core.config import Settings, get_settings
from ledger.core.logging import setup_logging
from ledger.db.mongo import MongoDatabase
from ledger.repositories.base import StoreError
from ledger.repositories.local_store import LocalLedgerStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    if settings.STORAGE_BACKEND == "mongo":
        app.state.mongo = MongoDatabase(settings)
        await app.state.mongo.connect()
    else:
        logger.info("Using local ledger file: %s", Path(settings.LOCAL_STORE_PATH).resolve())

    yield

    mongo: Optional[MongoDatabase] = getattr(app.state, "mongo", None)
    if mongo is not None:
        await mongo.close()


async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Not authenticated"},
        headers={"WWW-Authenticate": "Bearer"}
    )


async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": STORAGE_ERROR_DETAIL}
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan
    )
    app.state.settings = settings
    if settings.STORAGE_BACKEND == "local":
        app.state.local_store = LocalLedgerStore(settings.LOCAL_STORE_PATH)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(NotAuthenticatedError, not_authenticated_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}", "storage": settings.STORAGE_BACKEND}

    app.include_router(
        build_api_router(include_auth=settings.STORAGE_BACKEND == "mongo"),
        prefix=settings.API_V1_STR
    )
    return app


app = create_app()
