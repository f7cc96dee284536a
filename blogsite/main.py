"""
MindMeld360 Blog

Server-rendered blog index and post pages with SEO metadata.
"""

import logging
import logging.config
import time
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from blogsite.config import get_settings, get_site_config
from blogsite.errors import BlogNotFoundError
from blogsite.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from blogsite.rendering import render
from blogsite.routers import blog
from blogsite.services.blob_storage import check_storage_connectivity

settings = get_settings()

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": "blogsite.middleware.RequestIDLogFilter"},
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_id"],
            },
        },
        "root": {
            "level": "DEBUG" if settings.debug else "INFO",
            "handlers": ["console"],
        },
    }
)

logger = logging.getLogger(__name__)

# Health check cache: (result_dict, timestamp)
_health_cache: tuple[dict[str, Any], float] | None = None
_HEALTH_CACHE_TTL = 30  # seconds

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    config = get_site_config()
    logger.info("Starting %s (%s)", config.title, get_settings().environment)
    yield


app = FastAPI(
    title="MindMeld360 Blog",
    description="Blog index and post pages with Open Graph and JSON-LD metadata",
    version=VERSION,
    lifespan=lifespan,
)

# Security headers, then request ID (added last — outermost middleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(blog.router)


@app.exception_handler(BlogNotFoundError)
async def blog_not_found_handler(request: Request, exc: BlogNotFoundError) -> Response:
    """Branded 404 page carrying the site attributes and the requested slug."""
    return render(
        request,
        "blog/not-found.html",
        get_site_config(),
        status_code=404,
        slug=exc.slug,
    )


def _check_config() -> str:
    """Verify required configuration is loaded. Returns 'ok' or 'fail'."""
    s = get_settings()
    if s.blog_title and s.azure_storage_account and s.azure_blog_container:
        return "ok"
    return "fail"


def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    global _health_cache
    now = time.time()
    if _health_cache is not None:
        cached_result, cached_at = _health_cache
        if now - cached_at < _HEALTH_CACHE_TTL:
            return cached_result

    config_status = _check_config()
    storage_status = "ok" if check_storage_connectivity() else "fail"

    checks = {"config": config_status, "storage": storage_status}
    failed = [k for k, v in checks.items() if v != "ok"]

    if failed:
        overall = "degraded"
        logger.warning("Health check degraded — failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": "mindmeld360-blog",
        "version": VERSION,
        "checks": checks,
    }
    _health_cache = (result, now)
    return result


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check verifying service dependencies."""
    result = _run_health_checks()
    return JSONResponse(content=result)
