"""FastAPI entrypoint and HTTP routes."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError

from stylehub.api.routes import accounts, ai, analytics, garments, occasions
from stylehub.config.settings import get_settings
from stylehub.db.session import init_db
from stylehub.monitoring.logging import configure_logging
from stylehub.services.errors import StyleHubError, UpstreamError

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI, *, expose_details: bool) -> None:
    @app.exception_handler(StyleHubError)
    async def handle_stylehub_error(request: Request, exc: StyleHubError) -> JSONResponse:
        body: dict[str, object] = {"error": exc.message}
        if isinstance(exc, UpstreamError):
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
            if expose_details and exc.detail:
                body["detail"] = exc.detail
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        return await handle_stylehub_error(request, UpstreamError("Database error.", detail=str(exc)))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = sorted({".".join(str(part) for part in error["loc"][1:]) or "body" for error in exc.errors()})
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid or missing fields: {', '.join(fields)}", "fields": fields},
        )


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    settings = get_settings()
    configure_logging()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await init_db()
        yield

    app = FastAPI(
        title="StyleHub API",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    _register_error_handlers(app, expose_details=not settings.is_production)

    for router in (
        accounts.router,
        occasions.router,
        garments.partner_router,
        garments.styler_router,
        analytics.router,
        ai.router,
    ):
        app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    return app


app = create_app()
