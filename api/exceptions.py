"""
Exception handling for the Image Render Flow API.

Maps domain exceptions from core.exceptions to HTTP responses and provides
the safe_endpoint decorator used by every router.
"""

import logging
from functools import wraps

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.exceptions import BatchCancelled, DecodeFailure, EncodeFailure, RenderException

logger = logging.getLogger(__name__)

STATUS_CODES = {
    DecodeFailure: 422,
    EncodeFailure: 500,
    BatchCancelled: 409,
}


def status_code_for(exc: RenderException) -> int:
    for exc_class, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_class):
            return status_code
    return 500


def error_content(exc: RenderException) -> dict:
    content = {"error": exc.message, "kind": exc.kind}
    if exc.index is not None:
        content["index"] = exc.index
    return content


def safe_endpoint(func):
    """
    Wrap an async endpoint so unexpected errors become logged 500 responses.

    HTTPException and domain RenderException pass through unchanged; the
    registered handlers turn the latter into structured error responses.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (HTTPException, RenderException):
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return wrapper


async def render_exception_handler(request: Request, exc: RenderException) -> JSONResponse:
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{exc.kind} failure on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=error_content(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on the app."""
    app.add_exception_handler(RenderException, render_exception_handler)
