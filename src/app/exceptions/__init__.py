# app/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py          # App-level errors we raise (ApiError, ValidationError)
# │   ├── codes.py         # Backend / driver error code, detail and column extraction
# │   └── classifier.py    # classify(error) -> ErrorOutcome, the only place status codes are decided

from .base import ApiError, ValidationError
from .classifier import ErrorCategory, ErrorKind, ErrorOutcome, classify, build_error_body

__all__ = [
    "ApiError",
    "ValidationError",
    "ErrorCategory",
    "ErrorKind",
    "ErrorOutcome",
    "classify",
    "build_error_body",
]
