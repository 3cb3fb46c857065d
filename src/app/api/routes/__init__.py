from . import health, productos, users

__all__ = ["health", "productos", "users"]
