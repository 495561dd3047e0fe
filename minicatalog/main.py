"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from minicatalog.api.health import router as health_router
from minicatalog.api.minis import router as minis_router
from minicatalog.api.reference import router as reference_router
from minicatalog.api.tags import router as tags_router
from minicatalog.config import settings
from minicatalog.core.errors import (
    CatalogError,
    ConflictError,
    ImageProcessingError,
    NotFoundError,
    ValidationError,
)
from minicatalog.core.logging import get_logger, setup_logging
from minicatalog.db.database import SessionLocal, engine as db_engine
from minicatalog.db.models import Base
from minicatalog.db.seed import seed_lookups
from minicatalog.services.image_service import ImageService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)

# subclasses first: DependentDataError is a ConflictError
ERROR_STATUS: tuple[tuple[type[CatalogError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ImageProcessingError, 422),
)


def status_for(error: CatalogError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)

    db = SessionLocal()
    try:
        seed_lookups(db)
    finally:
        db.close()
    logger.info("Database ready.")

    ImageService(settings).ensure_directories()

    yield

    logger.info("Shutting down...")


app = FastAPI(title="Mini Catalog", lifespan=lifespan)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "%s %s -> %d %s", request.method, request.url.path, status_code, exc.message
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "message": exc.message,
            "code": exc.code,
            "field": getattr(exc, "field", None),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Database error", "code": "INTERNAL_ERROR", "field": None},
    )


app.include_router(health_router)
app.include_router(minis_router)
app.include_router(tags_router)
app.include_router(reference_router)
