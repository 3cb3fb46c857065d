"""
Error classifier: the single place where an error becomes an HTTP status and a message.

`classify(error)` is a pure function. It inspects the error shape once (backend code,
detail text, message, error kind) and returns an immutable `ErrorOutcome`.

Rule order matters. The rules are listed from the most generic backend signal to the
most specific application signal, and when several rules match, the *last* one in the
list wins (e.g. a `22P02` whose message says "invalid input syntax" is reported as an
invalid id, and any not-found error is reported as 404 regardless of its code).

| rule                                 | status | category                     |
| ------------------------------------ | ------ | ---------------------------- |
| ECONNREFUSED / ENOTFOUND             | 503    | backend_unavailable          |
| 23505 unique violation               | 400    | backend_constraint_violation |
| 23502 not-null violation             | 400    | backend_constraint_violation |
| 23503 foreign key violation          | 400    | backend_constraint_violation |
| 23514 check violation                | 400    | backend_constraint_violation |
| 42601 syntax error                   | 500    | backend_internal             |
| 42P01 / 42703 undefined table/column | 500    | backend_internal             |
| 22P02 invalid text representation    | 400    | validation                   |
| "invalid input syntax" in message    | 400    | validation                   |
| validation error with sub-errors     | 400    | validation                   |
| P2025 / NoResultFound                | 404    | not_found                    |
| anything else                        | passthrough or 500 | unclassified     |
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from .base import ValidationError
from .codes import (
    RECORD_NOT_FOUND_CODE,
    ConnectionErrorCodes,
    PostgresErrorCodes,
    extract_column,
    extract_error_code,
    extract_error_detail,
    extract_raw_error_code,
    extract_unique_field,
)


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    BACKEND_CONSTRAINT_VIOLATION = "backend_constraint_violation"
    BACKEND_INTERNAL = "backend_internal"
    UNCLASSIFIED = "unclassified"


class ErrorKind(str, Enum):
    BACKEND_UNAVAILABLE = "backend_unavailable"
    UNIQUE_VIOLATION = "unique_violation"
    NOT_NULL_VIOLATION = "not_null_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    CHECK_VIOLATION = "check_violation"
    INVALID_QUERY = "invalid_query"
    MISSING_SCHEMA_OBJECT = "missing_schema_object"
    INVALID_DATA_FORMAT = "invalid_data_format"
    INVALID_ID = "invalid_id"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNCLASSIFIED = "unclassified"

    @property
    def category(self) -> ErrorCategory:
        return _KIND_CATEGORY[self]


_KIND_CATEGORY = {
    ErrorKind.BACKEND_UNAVAILABLE: ErrorCategory.BACKEND_UNAVAILABLE,
    ErrorKind.UNIQUE_VIOLATION: ErrorCategory.BACKEND_CONSTRAINT_VIOLATION,
    ErrorKind.NOT_NULL_VIOLATION: ErrorCategory.BACKEND_CONSTRAINT_VIOLATION,
    ErrorKind.FOREIGN_KEY_VIOLATION: ErrorCategory.BACKEND_CONSTRAINT_VIOLATION,
    ErrorKind.CHECK_VIOLATION: ErrorCategory.BACKEND_CONSTRAINT_VIOLATION,
    ErrorKind.INVALID_QUERY: ErrorCategory.BACKEND_INTERNAL,
    ErrorKind.MISSING_SCHEMA_OBJECT: ErrorCategory.BACKEND_INTERNAL,
    ErrorKind.INVALID_DATA_FORMAT: ErrorCategory.VALIDATION,
    ErrorKind.INVALID_ID: ErrorCategory.VALIDATION,
    ErrorKind.VALIDATION: ErrorCategory.VALIDATION,
    ErrorKind.NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorKind.UNCLASSIFIED: ErrorCategory.UNCLASSIFIED,
}


@dataclass(frozen=True)
class DebugDetail:
    stack: str
    code: str | None
    detail: str | None


@dataclass(frozen=True)
class ErrorOutcome:
    kind: ErrorKind
    status_code: int
    message: str
    debug: DebugDetail

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category


# Messages are part of the public API: clients match on them.
MSG_CONNECTION = "Database connection error"
MSG_FOREIGN_KEY = "Reference to a resource that does not exist"
MSG_CHECK = "Data does not satisfy validation constraints"
MSG_INVALID_QUERY = "Internal server error - invalid SQL query"
MSG_MISSING_SCHEMA_OBJECT = "Internal server error - database resource not found"
MSG_INVALID_DATA_FORMAT = "Invalid data format"
MSG_INVALID_ID = "Provided id is not valid"
MSG_NOT_FOUND = "Resource not found"


@dataclass(frozen=True)
class _ErrorShape:
    """Everything the rules look at, extracted once from the raised error."""

    error: BaseException
    code: str | None
    detail: str | None
    message: str


def error_message(error: BaseException) -> str:
    """The error's own message, as the client would see it when no rule matches."""
    if isinstance(error, StarletteHTTPException):
        return str(error.detail)
    if isinstance(error, DBAPIError) and error.orig is not None:
        # the driver message, without SQLAlchemy's "[SQL: ...]" appendix
        return str(error.orig)
    message = getattr(error, "message", None)
    if isinstance(message, str):
        return message
    return str(error)


def _validation_messages(error: BaseException) -> list[str] | None:
    if isinstance(error, ValidationError):
        return list(error.errors)
    if isinstance(error, RequestValidationError):
        messages = []
        for item in error.errors():
            loc = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
            msg = item.get("msg", "invalid value")
            messages.append(f"{loc}: {msg}" if loc else msg)
        return messages
    return None


# -----------------------
# Rules: each returns (kind, status, message) when it matches, None otherwise
# -----------------------

Rule = Callable[[_ErrorShape], "tuple[ErrorKind, int, str] | None"]


def _connection_rule(shape: _ErrorShape):
    if shape.code in (ConnectionErrorCodes.CONNECTION_REFUSED, ConnectionErrorCodes.HOST_NOT_FOUND):
        return ErrorKind.BACKEND_UNAVAILABLE, 503, MSG_CONNECTION
    return None


def _unique_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.UNIQUE_VIOLATION:
        field = extract_unique_field(shape.detail, shape.error) or "field"
        return ErrorKind.UNIQUE_VIOLATION, 400, f"{field} already exists, must be unique"
    return None


def _not_null_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.NOT_NULL_VIOLATION:
        column = extract_column(shape.error) or "required field"
        return ErrorKind.NOT_NULL_VIOLATION, 400, f"field '{column}' is required"
    return None


def _foreign_key_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.FOREIGN_KEY_VIOLATION:
        return ErrorKind.FOREIGN_KEY_VIOLATION, 400, MSG_FOREIGN_KEY
    return None


def _check_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.CHECK_VIOLATION:
        return ErrorKind.CHECK_VIOLATION, 400, MSG_CHECK
    return None


def _syntax_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.SYNTAX_ERROR:
        return ErrorKind.INVALID_QUERY, 500, MSG_INVALID_QUERY
    return None


def _undefined_object_rule(shape: _ErrorShape):
    if shape.code in (PostgresErrorCodes.UNDEFINED_TABLE, PostgresErrorCodes.UNDEFINED_COLUMN):
        return ErrorKind.MISSING_SCHEMA_OBJECT, 500, MSG_MISSING_SCHEMA_OBJECT
    return None


def _invalid_text_rule(shape: _ErrorShape):
    if shape.code == PostgresErrorCodes.INVALID_TEXT_REPRESENTATION:
        return ErrorKind.INVALID_DATA_FORMAT, 400, MSG_INVALID_DATA_FORMAT
    return None


def _invalid_input_syntax_rule(shape: _ErrorShape):
    if "invalid input syntax" in shape.message:
        return ErrorKind.INVALID_ID, 400, MSG_INVALID_ID
    return None


def _validation_rule(shape: _ErrorShape):
    messages = _validation_messages(shape.error)
    if messages is None:
        return None
    return ErrorKind.VALIDATION, 400, ", ".join(messages) if messages else shape.message


def _not_found_rule(shape: _ErrorShape):
    if isinstance(shape.error, NoResultFound) or shape.code == RECORD_NOT_FOUND_CODE:
        return ErrorKind.NOT_FOUND, 404, MSG_NOT_FOUND
    return None


# Listed in precedence order: the last matching rule wins.
RULES: tuple[Rule, ...] = (
    _connection_rule,
    _unique_rule,
    _not_null_rule,
    _foreign_key_rule,
    _check_rule,
    _syntax_rule,
    _undefined_object_rule,
    _invalid_text_rule,
    _invalid_input_syntax_rule,
    _validation_rule,
    _not_found_rule,
)


def _passthrough_status(error: BaseException, current_status: int | None) -> int:
    status = current_status if current_status is not None else getattr(error, "status_code", None)
    if not isinstance(status, int) or status == 200:
        return 500
    return status


def classify(error: BaseException, current_status: int | None = None) -> ErrorOutcome:
    """
    Map a raised error to an `ErrorOutcome`.

    Args:
        error: whatever was raised while handling the request.
        current_status: status already chosen for the in-flight response, if any.
            Defaults to the error's own `status_code` attribute (ApiError, HTTPException).

    Returns:
        ErrorOutcome with kind, status code, client message and debug detail. Debug
        detail is always computed; whether it reaches the client is the caller's call.
    """
    is_http_error = isinstance(error, StarletteHTTPException)
    shape = _ErrorShape(
        error=error,
        code=None if is_http_error else extract_error_code(error),
        detail=None if is_http_error else extract_error_detail(error),
        message=error_message(error),
    )
    debug = DebugDetail(
        stack="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        # the raw driver code, even when no rule knows it
        code=None if is_http_error else (extract_raw_error_code(error) or shape.code),
        detail=shape.detail,
    )

    for rule in reversed(RULES):
        matched = rule(shape)
        if matched is not None:
            kind, status_code, message = matched
            return ErrorOutcome(kind=kind, status_code=status_code, message=message, debug=debug)

    return ErrorOutcome(
        kind=ErrorKind.UNCLASSIFIED,
        status_code=_passthrough_status(error, current_status),
        message=shape.message,
        debug=debug,
    )


def build_error_body(outcome: ErrorOutcome, *, expose_debug: bool) -> dict:
    """
    Shape the JSON error envelope:
        {"success": false, "error": "...", ["stack", "code", "detail"]}
    Debug fields are only added when `expose_debug` is true (development).
    """
    body: dict = {"success": False, "error": outcome.message}
    if expose_debug:
        body["stack"] = outcome.debug.stack
        body["code"] = outcome.debug.code
        body["detail"] = outcome.debug.detail
    return body


__all__ = [
    "ErrorCategory",
    "ErrorKind",
    "DebugDetail",
    "ErrorOutcome",
    "classify",
    "build_error_body",
    "error_message",
]
