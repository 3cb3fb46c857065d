"""
Request bodies and the success envelope shared by every endpoint.

Every successful response has the same shape:
    {"success": true, "data": ..., "count": n (lists only), "message": "..." (deletes only)}
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int | None = None
    message: str | None = None
    data: T


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserCreate(BaseModel):
    # Optional at the schema level so a missing field becomes our own 400
    # ("Please provide name, email and age") instead of a generic type error.
    name: str | None = None
    email: str | None = None
    age: StrictInt | None = None  # strict: JSON true is not an age


class UserUpdate(BaseModel):
    """Partial update: only the fields present in the body are applied."""

    name: str | None = None
    email: str | None = None
    age: StrictInt | None = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    age: int
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )


# ---------------------------------------------------------------------------
# Productos
# ---------------------------------------------------------------------------

class ProductoCreate(BaseModel):
    nombre: str | None = None
    precio: float | None = None
    descripcion: str | None = None
    stock: int | None = None


class ProductoUpdate(BaseModel):
    nombre: str | None = None
    precio: float | None = None
    descripcion: str | None = None
    stock: int | None = None


class ProductoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str
    precio: float
    descripcion: str
    stock: int
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
