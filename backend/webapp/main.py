"""Main FastAPI application."""
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from webapp.api import health, users, products, images
from webapp.config import settings
from webapp.database import Database
from webapp.services.notifications import NotificationPublisher
from webapp.services.storage import StorageService
from webapp.utils.clock import utc_now
from webapp.utils.exceptions import AppException, InvalidCredentialsError
from webapp.utils.logger import logger
from webapp.workers.redis_config import redis_settings


def build_storage() -> Optional[StorageService]:
    """Create the storage client, or None when storage isn't configured."""
    if not settings.supabase_url or not settings.supabase_secret_key:
        logger.warning("Supabase storage is not configured; image endpoints will fail")
        return None
    return StorageService(settings.supabase_url, settings.supabase_secret_key, settings.storage_bucket)


def create_app(
    database: Optional[Database] = None,
    storage: Optional[StorageService] = None,
    publisher: Optional[NotificationPublisher] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the application.

    Collaborators not passed in are constructed once at startup from
    settings and released at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = []
        if app.state.database is None:
            app.state.database = Database(settings.database_url, settings.environment)
            owned.append(app.state.database)
        if app.state.storage is None:
            app.state.storage = build_storage()
            if app.state.storage is not None:
                owned.append(app.state.storage)
        if app.state.publisher is None:
            app.state.publisher = NotificationPublisher(redis_settings)
            owned.append(app.state.publisher)

        # In production, use migrations
        app.state.database.create_all()
        logger.info("Application startup complete")

        yield

        for resource in owned:
            if isinstance(resource, Database):
                resource.dispose()
            else:
                await resource.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Webapp API",
        description="Users, products and product images",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.storage = storage
    app.state.publisher = publisher
    app.state.clock = clock

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.0f}ms")
        return response

    @app.exception_handler(AppException)
    async def handle_app_exception(request: Request, exc: AppException):
        """Render application exceptions with their status code."""
        headers = {"WWW-Authenticate": "Basic"} if isinstance(exc, InvalidCredentialsError) else None
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(request: Request, exc: RequestValidationError):
        """Malformed requests are 400s, not 422s."""
        logger.warning(f"{request.method} {request.url.path} - Validation failed")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors(), custom_encoder={Exception: str})},
        )

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(images.router)

    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        include_in_schema=False,
    )
    async def not_found(path: str) -> Response:
        """Anything unrouted is a bare 404."""
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    return app


app = create_app()
