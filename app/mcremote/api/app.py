"""FastAPI application factory.

Wires the configuration, resolver, repository and access gate into a
FastAPI application, and maps the error taxonomy onto JSON responses of
the form ``{"error": CODE, "message": text}``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio.to_thread
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mcremote import __version__
from mcremote.api.routes import PUBLIC_PATHS, public_router, router
from mcremote.api.schemas import ErrorResponse
from mcremote.core.config import AgentConfig
from mcremote.core.errors import RemoteError, UnauthorizedError
from mcremote.files.repository import FileRepository
from mcremote.security.gate import API_KEY_HEADER, AccessGate
from mcremote.security.resolver import PathResolver

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    """Build a JSON failure response."""
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def _handle_remote_error(request: Request, exc: RemoteError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, "NOT_FOUND", f"No route found for: {request.url.path}")
    if exc.status_code == 405:
        # Protected paths authenticate before reporting a wrong method
        if request.url.path not in PUBLIC_PATHS:
            gate: AccessGate = request.app.state.gate
            try:
                gate.authenticate(request.headers.get(API_KEY_HEADER))
            except UnauthorizedError as e:
                return error_response(e.status_code, e.code, e.message)
        return error_response(405, "METHOD_NOT_ALLOWED", f"Method {request.method} is not allowed")
    return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


async def _handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
    return error_response(400, "BAD_REQUEST", "Malformed request parameters")


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "INTERNAL_ERROR", "Unexpected server error")


def create_app(config: AgentConfig) -> FastAPI:
    """Create the HTTP application for an agent configuration.

    Args:
        config: Loaded agent configuration. Its root path must exist.

    Returns:
        Configured FastAPI application.

    Raises:
        ConfigError: If the configured root is not an existing directory.
    """
    resolver = PathResolver.from_config(config)
    repository = FileRepository.from_config(config, resolver)
    gate = AccessGate.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Bound the worker pool that runs the blocking handlers
        limiter = anyio.to_thread.current_default_thread_limiter()
        limiter.total_tokens = config.workers
        logger.info("Serving %s with %d workers", resolver.root, config.workers)
        yield
        logger.info("Server stopped")

    app = FastAPI(
        title="mcremote",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.resolver = resolver
    app.state.repository = repository
    app.state.gate = gate

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[API_KEY_HEADER, "Content-Type"],
    )

    app.add_exception_handler(RemoteError, _handle_remote_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)

    app.include_router(public_router)
    app.include_router(router)
    return app
