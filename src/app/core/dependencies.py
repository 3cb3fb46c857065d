from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.session import get_db_session
from app.repositories.producto_repository import ProductoRepository
from app.repositories.user_store import UserStore


def get_user_store(request: Request) -> UserStore:
    # One store per application, created by the app factory
    return request.app.state.user_store


async def get_producto_repository(db: AsyncSession = Depends(get_db_session)) -> ProductoRepository:
    return ProductoRepository(db)
