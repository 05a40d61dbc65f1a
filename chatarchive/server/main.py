"""
Main FastAPI application creation and configuration.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import get_settings
from ..config.settings import configure_logging
from ..utils.logging import (
    log_event,
    new_correlation_id,
    set_correlation_id,
    set_operation_context,
)
from ..utils.result import internal_error
from .api.dependencies import get_server, set_server_instance
from .api.responses import failure_response
from .api.router import get_api_router
from .application_server import ApplicationServer

# Global server instance
server = ApplicationServer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    configure_logging(level=get_settings().log_level)
    await server.initialize()
    set_server_instance(server)
    yield
    # Shutdown
    await server.cleanup()


async def request_logging_middleware(request: Request, call_next):
    """Tag each request with a correlation id and log its outcome."""
    request_id = request.headers.get("x-request-id")
    if request_id:
        set_correlation_id(request_id)
    else:
        request_id = new_correlation_id()
    set_operation_context(method=request.method, path=request.url.path)

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        log_event(
            "request_completed",
            {
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": round((time.perf_counter() - start) * 1000.0, 2),
            },
            level=logging.ERROR,
        )
        raise

    status_code = response.status_code
    log_event(
        "request_completed",
        {
            "method": request.method,
            "path": request.url.path,
            "status": status_code,
            "latency_ms": round((time.perf_counter() - start) * 1000.0, 2),
        },
        level=logging.WARNING if status_code >= 500 else logging.INFO,
    )

    response.headers["X-Request-ID"] = request_id
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed ids, bodies and query parameters are client errors (400)."""
    return JSONResponse(
        status_code=400,
        content={
            "ok": False,
            "error": "invalid request",
            "error_type": "ValidationError",
            "context": {"errors": jsonable_encoder(exc.errors())},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the error body shape for router-level errors (404, 405, 503)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "error": exc.detail,
            "error_type": "HTTPError",
        },
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything a route did not turn into a Result is a 500 with no details."""
    log_event(
        "unhandled_exception",
        {
            "method": request.method,
            "path": request.url.path,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        level=logging.ERROR,
    )
    return failure_response(internal_error("internal_error"))


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Chat Archive API",
        description="Two-store chat message and attachment persistence",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.middleware("http")(request_logging_middleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint; pings both stores."""
        app_server = get_server()
        container = app_server.service_container
        stores = await container.health_check() if container is not None else {}
        scheduler = app_server.background_tasks
        healthy = container is not None and all(stores.values())
        return {
            "ok": True,
            "status": "healthy" if healthy else "degraded",
            "version": __version__,
            "stores_ready": container is not None,
            "stores": stores,
            "retention": scheduler.get_status() if scheduler is not None else None,
        }

    # Include all API routes
    app.include_router(get_api_router())

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chatarchive.server.main:create_app",
        host=settings.host,
        port=settings.port,
        reload=True,
        factory=True,
    )
