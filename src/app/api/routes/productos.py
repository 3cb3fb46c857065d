"""
/api/productos: backed by ProductoRepository (SQLAlchemy).

`router` (list, get by id) is always mounted. `write_router` (create, update,
delete) is only mounted when ENABLE_PRODUCTO_WRITES is true.

Database errors (duplicate nombre, negative precio, connection refused...) are
not caught here: they reach the error handlers untouched.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import ProductoCreate, ProductoRead, ProductoUpdate, SuccessResponse
from app.core.dependencies import get_producto_repository
from app.database.session import get_db_session
from app.exceptions.base import ApiError, ValidationError
from app.repositories.producto_repository import ProductoRepository

router = APIRouter(prefix="/api/productos", tags=["productos"])
write_router = APIRouter(prefix="/api/productos", tags=["productos"])

MSG_PRODUCT_NOT_FOUND = "Product not found"
MSG_MISSING_FIELDS = "Please provide nombre, precio and descripcion"


@router.get("", response_model=SuccessResponse[list[ProductoRead]], response_model_exclude_none=True)
async def list_productos(repo: ProductoRepository = Depends(get_producto_repository)):
    productos = await repo.get_all()
    return SuccessResponse(count=len(productos), data=[ProductoRead.model_validate(p) for p in productos])


@router.get("/{producto_id}", response_model=SuccessResponse[ProductoRead], response_model_exclude_none=True)
async def get_producto(producto_id: int, repo: ProductoRepository = Depends(get_producto_repository)):
    producto = await repo.get_by_id(producto_id)
    if producto is None:
        raise ApiError(MSG_PRODUCT_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    return SuccessResponse(data=ProductoRead.model_validate(producto))


@write_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[ProductoRead],
    response_model_exclude_none=True,
)
async def create_producto(
    payload: ProductoCreate,
    repo: ProductoRepository = Depends(get_producto_repository),
    db: AsyncSession = Depends(get_db_session),
):
    if not payload.nombre or payload.precio is None or not payload.descripcion:
        raise ValidationError([MSG_MISSING_FIELDS])
    producto = await repo.create_producto(
        nombre=payload.nombre,
        precio=payload.precio,
        descripcion=payload.descripcion,
        stock=payload.stock,
    )
    await db.commit()
    return SuccessResponse(data=ProductoRead.model_validate(producto))


@write_router.put("/{producto_id}", response_model=SuccessResponse[ProductoRead], response_model_exclude_none=True)
async def update_producto(
    producto_id: int,
    payload: ProductoUpdate,
    repo: ProductoRepository = Depends(get_producto_repository),
    db: AsyncSession = Depends(get_db_session),
):
    producto = await repo.update(producto_id, **payload.model_dump(exclude_unset=True))
    if producto is None:
        raise ApiError(MSG_PRODUCT_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    await db.commit()
    return SuccessResponse(data=ProductoRead.model_validate(producto))


@write_router.delete("/{producto_id}", response_model=SuccessResponse[ProductoRead], response_model_exclude_none=True)
async def delete_producto(
    producto_id: int,
    repo: ProductoRepository = Depends(get_producto_repository),
    db: AsyncSession = Depends(get_db_session),
):
    producto = await repo.delete(producto_id)
    if producto is None:
        raise ApiError(MSG_PRODUCT_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    await db.commit()
    return SuccessResponse(message="Product deleted successfully", data=ProductoRead.model_validate(producto))
