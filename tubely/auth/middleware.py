"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tubely.core import di
from tubely.errors import Unauthenticated
from tubely.model import User
from tubely.storage import Session

from . import jwt as jwt_auth
from . import local as local_auth

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


@di.inject
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> User:
    """Dependency to get the current authenticated user.

    Raises:
        Unauthenticated: no bearer token, an invalid or expired token, or a
            token naming a user who no longer exists
    """
    if credentials is None:
        raise Unauthenticated()

    token_data = jwt_auth.decode_token(credentials.credentials)
    if token_data is None:
        raise Unauthenticated("invalid or expired token")

    with session.begin():
        user = local_auth.get_user(token_data.user_id, session=session)
    if user is None:
        raise Unauthenticated("user not found")
    return user
