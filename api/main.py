import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import Settings, load_settings
from core.errors import (
    CatalogError,
    CorruptStore,
    InvalidRequest,
    NotFound,
    StorageIOError,
    StoreUnavailable,
)
from images import ingest
from images import router as images_router
from items import repository as items_repository
from items import router as items_router

logger = logging.getLogger(__name__)

# Checked in order; subclasses before CatalogError.
_STATUS_BY_ERROR: list[tuple[type[CatalogError], int]] = [
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CorruptStore, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StorageIOError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: CatalogError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger().setLevel(level)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One store per process; each operation scopes its own I/O.
        ingest.ensure_image_dir(settings.images_dir)
        app.state.catalog = await items_repository.open_store(settings)
        logger.info("app_startup backend=%s store=%r", settings.backend, app.state.catalog)
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings

    # Allow the frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.front_url],
        allow_methods=["GET", "PUT", "POST", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.error("request_failed path=%s error=%s: %s", request.url.path, type(exc).__name__, exc)
        else:
            logger.info("request_rejected path=%s error=%s: %s", request.url.path, type(exc).__name__, exc)
        return JSONResponse({"message": str(exc)}, status_code=code)

    app.include_router(items_router.router, tags=["items"])
    app.include_router(images_router.router, tags=["images"])
    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
