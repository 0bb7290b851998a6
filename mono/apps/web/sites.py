"""Per-site request handlers.

Each handler receives the Starlette request and renders one site. They read
shared state (settings, countdown metrics) from ``request.app.state``.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response

from mono.apps.web.routing import SiteId
from mono.core.metrics import render_latest
from mono.domain.countdown import CountdownMetrics

logger = logging.getLogger(__name__)

INDEX_PAGE = "ugh_index.html"
FAVICON_FILE = "favicon.gif"

SiteHandler = Callable[[Request], Awaitable[Response]]


def _wants_html(request: Request) -> bool:
    accept = request.headers.get("accept")
    return bool(accept) and "text/html" in accept.lower()


async def countdown(request: Request) -> Response:
    metrics: CountdownMetrics = request.app.state.countdown
    if request.url.path == "/dates/end":
        return JSONResponse(metrics.get_snapshot().as_dict())

    if _wants_html(request):
        page = request.app.state.settings.static_dir / INDEX_PAGE
        if page.is_file():
            return FileResponse(page, media_type="text/html")
        logger.error("countdown page missing", extra={"path": str(page)})

    return PlainTextResponse(metrics.remaining().as_text())


async def git_redirect(request: Request) -> Response:
    settings = request.app.state.settings
    tail = request.url.path.lstrip("/")
    target = f"{settings.git_redirect_base}{tail}"
    if request.url.query:
        target = f"{target}?{request.url.query}"
    logger.info("git redirect", extra={"host": request.headers.get("host"), "path": tail})
    return RedirectResponse(url=target, status_code=302)


async def ip_echo(request: Request) -> Response:
    header = request.app.state.settings.client_ip_header
    ip = request.headers.get(header) or "unknown"
    return PlainTextResponse(f"{ip}\n")


async def status(request: Request) -> Response:
    return JSONResponse({"version": request.app.state.settings.version, "ok": "ok"})


async def favicon(request: Request) -> Response:
    icon = request.app.state.settings.static_dir / FAVICON_FILE
    if not icon.is_file():
        return not_found(request)
    return FileResponse(icon)


async def prometheus_metrics(request: Request) -> Response:
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type)


def not_found(request: Request) -> Response:
    return PlainTextResponse("not found\n", status_code=404)


SITE_HANDLERS: dict[SiteId, SiteHandler] = {
    SiteId.COUNTDOWN: countdown,
    SiteId.GIT: git_redirect,
    SiteId.IP: ip_echo,
    SiteId.STATUS: status,
    SiteId.FAVICON: favicon,
    SiteId.METRICS: prometheus_metrics,
}


__all__ = ["SITE_HANDLERS", "SiteHandler", "not_found"]
