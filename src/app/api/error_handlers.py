# app/api/error_handlers.py
"""
FastAPI exception handlers: every error raised while handling a request ends here.

Routes, the user store and the repositories never catch errors to build
responses themselves. They raise (or let the driver raise) and these handlers
send the error through `classify()` and render the JSON error envelope:

    {"success": false, "error": "...", ["stack", "code", "detail" in development]}

Unmatched routes (unknown path, or a method the path does not serve) become
`404 Route not found - <path>` and go through the same classifier, which leaves
them untouched.

Unexpected errors are caught by `UnhandledErrorMiddleware`, the innermost
middleware, so their 500 response still passes through CORS, request-id,
access-log and security-header middleware.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions.base import ApiError
from app.exceptions.classifier import ErrorCategory, ErrorOutcome, build_error_body, classify

logger = logging.getLogger(__name__)

# Client-side problems are expected traffic: INFO. Backend trouble: WARNING/ERROR.
_CATEGORY_LOG_LEVEL = {
    ErrorCategory.VALIDATION: logging.INFO,
    ErrorCategory.NOT_FOUND: logging.INFO,
    ErrorCategory.BACKEND_CONSTRAINT_VIOLATION: logging.INFO,
    ErrorCategory.BACKEND_UNAVAILABLE: logging.ERROR,
    ErrorCategory.BACKEND_INTERNAL: logging.ERROR,
}


# (status, detail) of the router's own "no route for this request" errors
_UNMATCHED_ROUTE = ((404, "Not Found"), (405, "Method Not Allowed"))


def _original_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _log_outcome(request: Request, exc: Exception, outcome: ErrorOutcome) -> None:
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": outcome.status_code,
        "error_kind": outcome.kind.value,
        "backend_code": outcome.debug.code,
    }
    level = _CATEGORY_LOG_LEVEL.get(outcome.category)
    if level is None:
        # Unclassified: a 4xx passthrough is the route's own decision, a 5xx is a bug
        level = logging.ERROR if outcome.status_code >= 500 else logging.INFO

    if level >= logging.ERROR:
        logger.error("Request failed: %s", outcome.message, extra=extra, exc_info=exc)
    else:
        logger.log(level, "Request rejected: %s", outcome.message, extra=extra)


def _render(request: Request, exc: Exception) -> JSONResponse:
    outcome = classify(exc)
    _log_outcome(request, exc, outcome)
    body = build_error_body(outcome, expose_debug=request.app.state.settings.EXPOSE_ERROR_DETAILS)
    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return JSONResponse(status_code=outcome.status_code, content=body, headers=headers)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _render(request, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _render(request, exc)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    return _render(request, exc)


async def connection_error_handler(request: Request, exc: OSError) -> JSONResponse:
    return _render(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Starlette raises HTTPException(404) when no path matches and HTTPException(405)
    when the path exists but not for this method; both become the route-not-found
    error before classification.
    """
    if (exc.status_code, exc.detail) in _UNMATCHED_ROUTE:
        exc = StarletteHTTPException(status_code=404, detail=f"Route not found - {_original_url(request)}")
    return _render(request, exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return _render(request, exc)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Render errors no exception handler claimed.

    Starlette runs the `Exception` handler outside every user middleware; catching
    here instead keeps the 500 inside the middleware stack.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return _render(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Most specific first. The `Exception` handler only sees errors raised by the
    middleware themselves; route errors are caught by UnhandledErrorMiddleware.
    """
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(OSError, connection_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
