"""
Centralized access to the application's models.

    from app.models import User, Producto

`User` is the in-memory record managed by `UserStore`; `Producto` is the
SQLAlchemy model persisted by `ProductoRepository`. Importing this package also
registers `Producto` on `Base.metadata`.
"""

from .user import User
from .producto import Producto

__all__ = [
    "User",
    "Producto",
]
