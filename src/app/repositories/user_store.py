"""
In-memory store for User records.

The store is the only owner of the user list. It assigns ids, validates every
record it is asked to hold, enforces e-mail uniqueness and performs the CRUD
operations. Every check-then-write sequence (uniqueness check + insert, lookup +
replace, lookup + remove) runs under the store's lock, so two concurrent requests
can never both pass the uniqueness check for the same e-mail.
"""

import logging
import re
import threading
from datetime import datetime, timezone
from typing import Any, ContextManager, Iterable, Mapping

from app.exceptions.base import ValidationError
from app.models.user import User

logger = logging.getLogger(__name__)

# local@domain.tld: no whitespace, one "@", at least one dot in the domain part
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MIN_LENGTH = 2
AGE_MIN = 0
AGE_MAX = 120

MSG_NAME = "name must be at least 2 characters"
MSG_EMAIL = "invalid email"
MSG_AGE = f"age must be between {AGE_MIN} and {AGE_MAX}"
MSG_DUPLICATE_EMAIL = "email is already registered"

# Fields callers can never set: assigned by the store and immutable afterwards
_PROTECTED_FIELDS = {"id", "created_at", "createdAt"}


def parse_id(raw: Any) -> int | None:
    """
    Parse a user id coming from a path parameter.

    Only plain integers are accepted ("12", 12). Anything else ("abc", "1.5",
    "12abc", True, None) yields None, which callers treat as "no such user".
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if re.fullmatch(r"[+-]?\d+", text):
            return int(text)
    return None


def validate_user_fields(data: Mapping[str, Any]) -> list[str]:
    """
    Return every rule violated by `data` (empty list when valid).

    All rules are checked so the caller can report every problem at once.
    """
    errors = []

    name = data.get("name")
    if not isinstance(name, str) or len(name.strip()) < NAME_MIN_LENGTH:
        errors.append(MSG_NAME)

    email = data.get("email")
    if not isinstance(email, str) or not EMAIL_RE.match(email):
        errors.append(MSG_EMAIL)

    age = data.get("age")
    if isinstance(age, bool) or not isinstance(age, int) or not AGE_MIN <= age <= AGE_MAX:
        errors.append(MSG_AGE)

    return errors


class UserStore:
    """
    In-memory repository for User records.

    Args:
        seed: records to start with (kept in the given order). The id counter
            starts after the highest seeded id.
        lock: mutual-exclusion guard held around check-then-write sequences.
            Defaults to a `threading.RLock`; inject another context manager to
            share a lock or to observe locking in tests.
    """

    def __init__(self, seed: Iterable[User] | None = None, lock: ContextManager | None = None):
        self._users: list[User] = list(seed or [])
        self._lock = lock if lock is not None else threading.RLock()
        self._next_id = max((u.id for u in self._users), default=0) + 1

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    def find_all(self) -> list[User]:
        """Return all live records in insertion order."""
        return list(self._users)

    def find_by_id(self, user_id: Any) -> User | None:
        """Return the record with this id, or None (also for non-integer ids)."""
        index = self._index_of(user_id)
        return None if index is None else self._users[index]

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    def create(self, data: Mapping[str, Any]) -> User:
        """
        Validate `data` and append a new record.

        `id` and `createdAt` in `data` are ignored: both are assigned here.

        Raises:
            ValidationError: a field rule is violated, or the e-mail is already registered.
        """
        candidate = {k: v for k, v in data.items() if k not in _PROTECTED_FIELDS}

        errors = validate_user_fields(candidate)
        if errors:
            logger.info("store.create.invalid", extra={"operation": "create", "violations": errors})
            raise ValidationError(errors)

        with self._lock:
            if self._email_taken(candidate["email"]):
                logger.info("store.create.duplicate_email", extra={"operation": "create"})
                raise ValidationError([MSG_DUPLICATE_EMAIL], fields=["email"])

            user = User(
                id=self._next_id,
                name=candidate["name"],
                email=candidate["email"],
                age=candidate["age"],
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self._users.append(user)

        logger.info("store.create.success", extra={"operation": "create", "id": user.id})
        return user

    def update(self, user_id: Any, changes: Mapping[str, Any]) -> User | None:
        """
        Merge `changes` over the stored record and re-validate the result.

        Fields missing from `changes` are kept; `id` and `createdAt` are always kept.
        The stored record is only replaced when the merged record is valid, and it
        keeps its position in the list.

        Returns:
            The updated record, or None when no record has this id.

        Raises:
            ValidationError: the merged record violates a rule or its e-mail belongs
                to another record. The stored record is left untouched.
        """
        with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None

            current = self._users[index]
            merged = current.model_dump()
            merged.update({k: v for k, v in changes.items() if k not in _PROTECTED_FIELDS})

            errors = validate_user_fields(merged)
            if errors:
                logger.info("store.update.invalid", extra={"operation": "update", "id": current.id, "violations": errors})
                raise ValidationError(errors)

            if self._email_taken(merged["email"], exclude_id=current.id):
                logger.info("store.update.duplicate_email", extra={"operation": "update", "id": current.id})
                raise ValidationError([MSG_DUPLICATE_EMAIL], fields=["email"])

            updated = User(
                id=current.id,
                name=merged["name"],
                email=merged["email"],
                age=merged["age"],
                created_at=current.created_at,
            )
            self._users[index] = updated

        logger.info("store.update.success", extra={"operation": "update", "id": updated.id})
        return updated

    def delete(self, user_id: Any) -> User | None:
        """Remove and return the record with this id, or None when absent."""
        with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None
            removed = self._users.pop(index)

        logger.info("store.delete.success", extra={"operation": "delete", "id": removed.id})
        return removed

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    def _index_of(self, user_id: Any) -> int | None:
        parsed = parse_id(user_id)
        if parsed is None:
            return None
        for index, user in enumerate(self._users):
            if user.id == parsed:
                return index
        return None

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        return any(u.email == email for u in self._users if u.id != exclude_id)


def default_seed() -> list[User]:
    """The sample users the API starts with."""
    now = datetime.now(timezone.utc)
    return [
        User(id=1, name="Juan Pérez", email="juan@email.com", age=25, created_at=now),
        User(id=2, name="María García", email="maria@email.com", age=30, created_at=now),
        User(id=3, name="Carlos López", email="carlos@email.com", age=28, created_at=now),
    ]


__all__ = [
    "UserStore",
    "default_seed",
    "parse_id",
    "validate_user_fields",
]
