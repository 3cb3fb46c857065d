import sqlite3
from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions.codes import (
    KNOWN_CODES,
    extract_column,
    extract_error_code,
    extract_error_detail,
    extract_raw_error_code,
    extract_unique_field,
    iter_error_chain,
)


class PsycopgLikeError(Exception):
    """Shape of a psycopg error: `sqlstate` plus a `diag` object."""

    def __init__(self, message, *, sqlstate=None, message_detail=None, column_name=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(message_detail=message_detail, column_name=column_name)


class Psycopg2LikeError(Exception):
    def __init__(self, message, *, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def wrapped(orig: Exception, error_cls=IntegrityError):
    return error_cls("INSERT INTO productos DEFAULT VALUES", {}, orig)


class TestIterErrorChain:
    def test_follows_orig_and_cause(self):
        driver = PsycopgLikeError("boom")
        sa_error = wrapped(driver)
        try:
            raise RuntimeError("outer") from sa_error
        except RuntimeError as exc:
            chain = list(iter_error_chain(exc))

        assert chain[0].args == ("outer",)
        assert sa_error in chain
        assert driver in chain

    def test_each_error_yielded_once(self):
        error = ValueError("loop")
        error.__cause__ = error
        assert list(iter_error_chain(error)) == [error]


class TestExtractErrorCode:
    def test_sqlstate_on_wrapped_driver_error(self):
        assert extract_error_code(wrapped(PsycopgLikeError("dup", sqlstate="23505"))) == "23505"

    def test_pgcode(self):
        assert extract_error_code(Psycopg2LikeError("fk", pgcode="23503")) == "23503"

    def test_sqlalchemy_documentation_code_is_not_a_backend_code(self):
        """
        Behavior:
          - SQLAlchemy errors carry a `code` attribute (a docs anchor like "gkpj").
          - It is not in KNOWN_CODES and must not be reported.
        """
        error = wrapped(Exception("something odd"), OperationalError)
        assert error.code not in KNOWN_CODES
        assert extract_error_code(error) is None

    def test_sqlite_messages_map_to_postgres_codes(self):
        cases = {
            "UNIQUE constraint failed: productos.nombre": "23505",
            "NOT NULL constraint failed: productos.precio": "23502",
            "FOREIGN KEY constraint failed": "23503",
            "CHECK constraint failed: ck_productos_stock_non_negative": "23514",
        }
        for message, code in cases.items():
            assert extract_error_code(wrapped(sqlite3.IntegrityError(message))) == code, message

    def test_bare_sqlite_integrity_error(self):
        assert extract_error_code(sqlite3.IntegrityError("UNIQUE constraint failed: t.a")) == "23505"

    def test_unknown_integrity_message(self):
        assert extract_error_code(wrapped(sqlite3.IntegrityError("something else entirely"))) is None

    def test_message_heuristics_only_apply_to_integrity_errors(self):
        assert extract_error_code(ValueError("UNIQUE constraint failed: t.a")) is None

    def test_host_not_found_reported_as_text(self):
        orig = Exception('could not translate host name "db" to address: Name or service not known')
        assert extract_error_code(wrapped(orig, OperationalError)) == "ENOTFOUND"


class TestExtractRawErrorCode:
    def test_unrecognized_driver_code_is_returned(self):
        assert extract_raw_error_code(wrapped(PsycopgLikeError("serialization", sqlstate="40001"))) == "40001"

    def test_sqlalchemy_documentation_code_is_skipped(self):
        assert extract_raw_error_code(wrapped(Exception("odd"), OperationalError)) is None

    def test_first_code_in_the_chain_wins(self):
        outer = Psycopg2LikeError("outer", pgcode="23505")
        outer.__cause__ = Psycopg2LikeError("inner", pgcode="40001")
        assert extract_raw_error_code(outer) == "23505"


class TestExtractDetailAndFields:
    def test_detail_from_diag(self):
        error = wrapped(PsycopgLikeError("dup", sqlstate="23505", message_detail="Key (nombre)=(Mouse) already exists."))
        assert extract_error_detail(error) == "Key (nombre)=(Mouse) already exists."

    def test_no_detail(self):
        assert extract_error_detail(ValueError("x")) is None

    def test_column_from_diag(self):
        error = wrapped(PsycopgLikeError("null value", sqlstate="23502", column_name="descripcion"))
        assert extract_column(error) == "descripcion"

    def test_column_unknown(self):
        assert extract_column(ValueError("x")) is None

    def test_unique_field_from_postgres_detail(self):
        assert extract_unique_field("Key (email)=(a@b.com) already exists.") == "email"

    def test_composite_unique_field_from_postgres_detail(self):
        assert extract_unique_field("Key (nombre, stock)=(Mouse, 1) already exists.") == "nombre, stock"

    def test_composite_unique_field_from_sqlite_message(self):
        error = sqlite3.IntegrityError("UNIQUE constraint failed: productos.nombre, productos.stock")
        assert extract_unique_field(None, error) == "nombre, stock"

    def test_unique_field_unknown(self):
        assert extract_unique_field("no key here", ValueError("nothing")) is None
