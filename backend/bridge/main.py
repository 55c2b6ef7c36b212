from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.bridge.api.routes import router
from backend.bridge.dependencies import (
    get_dispatcher,
    get_settings,
    get_telemetry,
    reset_cached_dependencies,
)
from backend.bridge.logging_config import configure_application_logging


def health_check() -> dict[str, str]:
    provider_state = "available" if get_dispatcher().provider_available else "unavailable"
    return {"status": "ok", "provider": provider_state}


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_application_logging(get_settings())
    # Provider initialisation happens once, before the first method call arrives.
    get_dispatcher()
    try:
        yield
    finally:
        reset_cached_dependencies()


def create_app() -> FastAPI:
    app = FastAPI(title="NewsTube Extractor Bridge", version="0.1.0", lifespan=app_lifespan)

    async def request_context_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        telemetry = get_telemetry()
        incoming_request_id = request.headers.get("X-Request-ID")
        request_id = (
            incoming_request_id.strip()
            if isinstance(incoming_request_id, str) and incoming_request_id.strip()
            else str(uuid4())
        )
        context_tokens = bind_contextvars(
            http_request_id=request_id,
            http_method=request.method,
            http_path=request.url.path,
        )
        try:
            with telemetry.span(
                "http.request",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
            ) as finish_attributes:
                response = await call_next(request)
                finish_attributes["status_code"] = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            reset_contextvars(**context_tokens)

    app.middleware("http")(request_context_middleware)
    app.include_router(router)
    app.add_api_route(
        "/health",
        health_check,
        methods=["GET"],
        tags=["system"],
        operation_id="health_check",
    )
    return app


app = create_app()
