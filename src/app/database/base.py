"""
Declarative base for the SQLAlchemy models backing the `productos` resource.

Constraint names follow a fixed convention so that the names reported by the
database in integrity errors (e.g. `ck_productos_precio_non_negative`) are
predictable across SQLite and Postgres.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s",
        }
    )
