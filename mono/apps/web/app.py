"""FastAPI application wiring for the virtual-host service."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from mono.apps.web.routing import NOT_FOUND, build_router
from mono.apps.web.sites import SITE_HANDLERS, not_found
from mono.core.error_handler import setup_global_exception_handler
from mono.core.logging import configure_logging, log_settings
from mono.core.metrics import observe_http
from mono.core.settings import Settings, get_settings
from mono.domain.countdown import CountdownMetrics

request_logger = logging.getLogger("mono.requests")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_global_exception_handler()
    logger.info("Serving on %s", app.state.settings.bind_address)
    try:
        yield
    finally:
        app.state.countdown.clear()
        logger.info("Application shut down complete")


def create_app(
    settings: Optional[Settings] = None,
    *,
    countdown: Optional[CountdownMetrics] = None,
) -> FastAPI:
    # Raises ConfigError before anything can be served.
    settings = settings or get_settings()
    configure_logging(settings)
    log_settings(settings)

    app = FastAPI(
        title="mono",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.countdown = countdown or CountdownMetrics.from_settings(settings)
    app.state.router = build_router(settings)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        host = request.headers.get("host")
        try:
            response = await call_next(request)
        except Exception:
            duration = (time.perf_counter() - start) * 1000
            request_logger.exception(
                "HTTP %s %s failed",
                request.method,
                request.url.path,
                extra={"host": host, "path": request.url.path, "method": request.method, "duration_ms": duration},
            )
            raise
        duration = (time.perf_counter() - start) * 1000
        site = getattr(request.state, "site", "none")
        request_logger.info(
            "HTTP %s %s%s -> %s (%.1f ms)",
            request.method,
            host or "-",
            request.url.path,
            response.status_code,
            duration,
            extra={"site": site},
        )
        observe_http(
            site=site,
            method=request.method,
            status_code=response.status_code,
            duration_seconds=duration / 1000,
        )
        return response

    @app.api_route("/{path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    async def dispatch(request: Request) -> Response:
        outcome = request.app.state.router.route(request.headers.get("host"), request.url.path)
        if outcome is NOT_FOUND:
            request.state.site = "not_found"
            return not_found(request)
        request.state.site = outcome.value
        return await SITE_HANDLERS[outcome](request)

    return app


app = create_app()

__all__ = ["app", "create_app", "lifespan"]
