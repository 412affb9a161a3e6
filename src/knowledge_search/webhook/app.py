"""FastAPI mock of the search webhook for local development."""

from __future__ import annotations

from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from knowledge_search.config import Settings, get_settings
from knowledge_search.metrics.observability import bind_correlation_id, clear_correlation_id, configure_logging, get_logger
from knowledge_search.samples import sample_payload
from knowledge_search.schemas import SearchRequestBody

WEBHOOK_PATH = "/webhook/ai-search"


def create_app(*, settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    configure_logging(settings.log_level)
    logger = get_logger("webhook")
    app = FastAPI(title="Knowledge Search mock webhook", version="0.1.0")

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "correlation_id": correlation_id},
        )

    @app.post(WEBHOOK_PATH)
    async def search(body: SearchRequestBody) -> dict:
        logger.info("webhook.search", query=body.query, submitted_at=body.timestamp)
        return sample_payload(body.query)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "environment": settings.environment}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


__all__ = ["WEBHOOK_PATH", "create_app"]
