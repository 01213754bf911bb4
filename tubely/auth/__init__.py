"""Authentication utilities."""

__all__ = [
    "AuthResult",
    "JWTManager",
    "TokenData",
    "get_current_user",
]

from .jwt import JWTManager, TokenData
from .local import AuthResult
from .middleware import get_current_user
