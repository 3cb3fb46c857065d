from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from app.database.base import Base


class Producto(Base):
    """
    SQLAlchemy model for Producto.

    Constraints live in the database: violations surface as backend
    error codes (23505, 23502, 23514) that the error classifier turns into 400s.
    """
    __tablename__ = "productos"
    __table_args__ = (
        CheckConstraint("precio >= 0", name="precio_non_negative"),
        CheckConstraint("stock >= 0", name="stock_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Product name (must be unique and non-null)
    nombre: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )

    precio: Mapped[float] = mapped_column(
        Float,
        nullable=False
    )

    descripcion: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    stock: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Producto(id={self.id!r}, nombre={self.nombre!r}, precio={self.precio!r})>"
