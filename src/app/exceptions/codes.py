"""
Backend error code extraction.

Database drivers report failures in different shapes:
  - psycopg2 exposes `pgcode` and `diag.message_detail`
  - psycopg 3 exposes `sqlstate` and `diag.message_detail` / `diag.column_name`
  - asyncpg exposes `sqlstate`, `detail` and `column_name`
  - SQLAlchemy wraps all of them in a DBAPIError and keeps the driver error on `.orig`
  - SQLite only reports text ("UNIQUE constraint failed: productos.nombre")
  - connection failures surface as plain OSErrors (ConnectionRefusedError, socket.gaierror)

The helpers below walk an error and the errors it wraps and return the pieces the
classifier needs: a canonical code, the structured detail text and a column name.
"""

import logging
import re
import socket
import sqlite3
from enum import Enum
from typing import Iterator

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"
    SYNTAX_ERROR = "42601"
    UNDEFINED_TABLE = "42P01"
    UNDEFINED_COLUMN = "42703"
    INVALID_TEXT_REPRESENTATION = "22P02"


class ConnectionErrorCodes(str, Enum):
    CONNECTION_REFUSED = "ECONNREFUSED"
    HOST_NOT_FOUND = "ENOTFOUND"


# ORM-level "record to update/delete does not exist"
RECORD_NOT_FOUND_CODE = "P2025"

KNOWN_CODES: frozenset[str] = frozenset(
    [c.value for c in PostgresErrorCodes]
    + [c.value for c in ConnectionErrorCodes]
    + [RECORD_NOT_FOUND_CODE]
)


# =================================================================================================================
# Error chain
# =================================================================================================================

def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """
    Yield `error` followed by every error it wraps (`.orig` for SQLAlchemy, `__cause__`
    for `raise ... from ...`). Each error is yielded at most once.
    """
    seen: set[int] = set()
    pending: list[BaseException] = [error]
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        for wrapped in (getattr(current, "orig", None), current.__cause__):
            if isinstance(wrapped, BaseException):
                pending.append(wrapped)


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _code_from_integrity_message(msg: str) -> str | None:
    """
    Map the text of an integrity error to the equivalent Postgres code
    (fallback for SQLite, MySQL, etc).
    """
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return PostgresErrorCodes.UNIQUE_VIOLATION.value

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return PostgresErrorCodes.NOT_NULL_VIOLATION.value

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value

    if _match_any(normalized, ["check constraint", "check failed"]):
        return PostgresErrorCodes.CHECK_VIOLATION.value

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    return None


def _code_from_connection_message(msg: str) -> str | None:
    """psycopg reports refused connections and DNS failures as OperationalError text only."""
    normalized = msg.lower()

    if "connection refused" in normalized:
        return ConnectionErrorCodes.CONNECTION_REFUSED.value

    if _match_any(normalized, ["could not translate host name", "name or service not known", "nodename nor servname"]):
        return ConnectionErrorCodes.HOST_NOT_FOUND.value

    return None


# =================================================================================================================
# Public helpers
# =================================================================================================================

def extract_error_code(error: BaseException) -> str | None:
    """
    Return the first recognized backend code found on `error` or anything it wraps.

    Unrecognized codes are ignored: SQLAlchemy, for instance, sets a `code`
    attribute of its own (a documentation anchor) that means nothing to the classifier.
    """
    chain = list(iter_error_chain(error))

    for current in chain:
        if isinstance(current, ConnectionRefusedError):
            return ConnectionErrorCodes.CONNECTION_REFUSED.value
        if isinstance(current, socket.gaierror):
            return ConnectionErrorCodes.HOST_NOT_FOUND.value
        for attr in ("pgcode", "sqlstate", "code"):
            value = getattr(current, attr, None)
            if isinstance(value, str) and value in KNOWN_CODES:
                return value

    # Text-only drivers: only trust the message of an integrity or connection error
    for current in chain:
        if isinstance(current, (IntegrityError, sqlite3.IntegrityError)):
            code = _code_from_integrity_message(str(getattr(current, "orig", None) or current))
            if code:
                logger.debug("Integrity error classified from message", extra={"code": code})
                return code
        if isinstance(current, (OperationalError, InterfaceError)):
            code = _code_from_connection_message(str(current.orig or current))
            if code:
                return code

    return None


def extract_raw_error_code(error: BaseException) -> str | None:
    """
    Return the first driver-reported code in the chain, recognized or not.

    Used for debug output only. SQLAlchemy's own `code` (a documentation anchor)
    is skipped.
    """
    for current in iter_error_chain(error):
        attrs = ("pgcode", "sqlstate") if isinstance(current, SQLAlchemyError) else ("pgcode", "sqlstate", "code")
        for attr in attrs:
            value = getattr(current, attr, None)
            if isinstance(value, str) and value:
                return value
    return None


def extract_error_detail(error: BaseException) -> str | None:
    """Return the structured detail text reported by the backend, if any."""
    for current in iter_error_chain(error):
        diag = getattr(current, "diag", None)
        detail = getattr(diag, "message_detail", None) if diag is not None else None
        if isinstance(detail, str) and detail:
            return detail
        detail = getattr(current, "detail", None)
        if isinstance(detail, str) and detail:
            return detail
    return None


def extract_column(error: BaseException) -> str | None:
    """
    Return the column involved in a not-null violation.

    Driver attributes are preferred; the message is parsed as a fallback:
      - 'null value in column "nombre" of relation "productos" violates not-null constraint'
      - 'NOT NULL constraint failed: productos.nombre'
    """
    chain = list(iter_error_chain(error))

    for current in chain:
        diag = getattr(current, "diag", None)
        for value in (
            getattr(diag, "column_name", None) if diag is not None else None,
            getattr(current, "column_name", None),
            getattr(current, "column", None),
        ):
            if isinstance(value, str) and value:
                return value

    for current in chain:
        msg = str(current)
        m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
        if m:
            return m.group("col")
        m = re.search(r"NOT NULL constraint failed: (?P<col>[\w.]+)", msg, flags=re.IGNORECASE)
        if m:
            return m.group("col").split(".")[-1]

    return None


def extract_unique_field(detail: str | None, error: BaseException | None = None) -> str | None:
    """
    Return the field(s) named in a unique violation.

    Postgres reports `Key (email)=(x@y.com) already exists.`; SQLite reports
    `UNIQUE constraint failed: productos.nombre`.
    """
    if detail:
        m = re.search(r"Key \((.+?)\)", detail)
        if m:
            return m.group(1)

    if error is not None:
        for current in iter_error_chain(error):
            m = re.search(r"UNIQUE constraint failed: (?P<cols>[\w., ]+)", str(current), flags=re.IGNORECASE)
            if m:
                cols = [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols").strip())]
                return ", ".join(cols)

    return None


__all__ = [
    "PostgresErrorCodes",
    "ConnectionErrorCodes",
    "RECORD_NOT_FOUND_CODE",
    "KNOWN_CODES",
    "iter_error_chain",
    "extract_error_code",
    "extract_raw_error_code",
    "extract_error_detail",
    "extract_column",
    "extract_unique_field",
]
