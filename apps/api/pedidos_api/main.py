"""Pedidos API - Main FastAPI application."""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from pedidos_api.errors import PedidosError
from pedidos_api.middleware.correlation import CorrelationIDMiddleware
from pedidos_api.notifications.service import NotificationDispatcher, build_dispatcher
from pedidos_api.orders.service import OrderService
from pedidos_api.orders.store import OrderStore
from pedidos_api.routes import orders, uploads
from pedidos_api.settings import Settings, get_settings
from pedidos_api.storage.service import StorageService
from pedidos_api.uploads.validator import UploadValidator

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s", "module": "%(name)s"}',
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Servidor corriendo en puerto {settings.port}")
    if not settings.smtp_configured:
        logger.warning("SMTP credentials missing, approval emails disabled")
    yield
    logger.info(f"Shutting down with {app.state.order_service.store.count()} orders in memory")


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": True, "message": message, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and framework errors to JSON responses."""

    @app.exception_handler(PedidosError)
    async def pedidos_error_handler(request: Request, exc: PedidosError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
            return _error(exc.status_code, "Error interno del servidor")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, "Datos inválidos")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            # Wrong method on a known path is just another unknown route
            return _error(status.HTTP_404_NOT_FOUND, "Ruta no encontrada", path=request.url.path)
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = exc.detail if exc.detail != "Not Found" else "Ruta no encontrada"
            return _error(exc.status_code, message, path=request.url.path)
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno del servidor")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[OrderStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> FastAPI:
    """Build the application with its own store, storage and dispatcher."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Pedidos API",
        description="Order intake with payment-proof uploads",
        version=VERSION,
        lifespan=lifespan,
    )

    storage = StorageService(settings.upload_dir)
    if store is None:
        store = OrderStore(storage)
    elif store.storage is None:
        store.storage = storage

    app.state.settings = settings
    app.state.storage = storage
    app.state.started_at = time.monotonic()
    app.state.order_service = OrderService(
        store=store,
        validator=UploadValidator(storage, max_bytes=settings.max_upload_bytes),
        dispatcher=dispatcher or build_dispatcher(settings),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(CorrelationIDMiddleware)

    register_exception_handlers(app)

    # Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(orders.router)
    app.include_router(uploads.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint (basic liveness)."""
        return {
            "status": "online",
            "pedidos": app.state.order_service.store.count(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
        }

    @app.get("/ready")
    async def readiness_check():
        """Readiness check endpoint."""
        checks = {
            "uploads_dir": app.state.storage.is_writable(),
            # Notification is best-effort, so SMTP is reported but not required
            "smtp": settings.smtp_configured,
        }
        ready = checks["uploads_dir"]
        return JSONResponse(
            content={"status": "ready" if ready else "not_ready", "checks": checks},
            status_code=200 if ready else 503,
        )

    return app


app = create_app()
