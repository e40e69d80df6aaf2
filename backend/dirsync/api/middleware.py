"""Middleware and exception handlers for the FastAPI application."""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from dirsync.core.config import settings
from dirsync.core.exceptions import (
    DirSyncException,
    InvalidStateError,
    NotFoundException,
)
from dirsync.core.logging import logger


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response, with an ``X-Request-ID`` header.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log handled requests with their duration and status code."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.with_context(request_id=getattr(request.state, "request_id", None)).info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions and turn them into a 500 response."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        response_content = {
            "detail": f"Internal Server Error: {exc.__class__.__name__}: {str(exc)}"
        }
        if settings.DEBUG:
            response_content["trace"] = traceback.format_exc()
        return JSONResponse(status_code=500, content=response_content)


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def invalid_state_exception_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """Exception handler for InvalidStateError.

    Returns:
    -------
        JSONResponse: A 400 Bad Request status response that details the error message.

    """
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def dirsync_exception_handler(request: Request, exc: DirSyncException) -> JSONResponse:
    """Fallback handler for DirSyncException subclasses without a dedicated handler."""
    return JSONResponse(status_code=500, content={"detail": str(exc)})
