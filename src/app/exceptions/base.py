"""
Application-level exceptions raised by the store, repositories and routes.

These are the errors *we* raise. Errors raised by the database driver or the ORM
are never wrapped into these classes: they propagate untouched to the error
classifier (see classifier.py), which is the only place where status codes are
decided.
"""

from typing import Iterable


class ApiError(Exception):
    """
    Base exception for errors raised by application code.

    - message: human-friendly message (safe to show to clients)
    - status_code: HTTP status the raiser wants for this error. The classifier
      passes it through unless a more specific rule matches.
    - fields: optional list of field names related to the error (e.g., ['email'])
    """

    def __init__(self, message: str, *, status_code: int | None = None,
                 fields: Iterable[str] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.fields = list(fields) if fields else None

    def __str__(self) -> str:
        if self.fields:
            return f"{self.message} (fields: {', '.join(self.fields)})"
        return self.message


class ValidationError(ApiError):
    """
    Client supplied data failed one or more field rules.

    Every violated rule is collected in `errors`; the message is all of them
    joined with ", " so a client sees every problem in one response.
    """

    def __init__(self, errors: Iterable[str], *, fields: Iterable[str] | None = None):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors), status_code=400, fields=fields)


__all__ = [
    "ApiError",
    "ValidationError",
]
