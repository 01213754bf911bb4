"""Local email/password authentication against the users table."""

from __future__ import annotations

import typing as t

import pydantic as p

from tubely.core import di
from tubely.model import User, UserID
from tubely.storage import Session
from tubely.storage import user as user_storage


class AuthResult(t.NamedTuple):
    """Result of an authentication attempt."""

    success: bool
    user: User | None = None
    error: str | None = None


def authenticate(
    email: str, password: p.Secret[str], session: Session = di.Provide["storage.persistent.session"]
) -> AuthResult:
    user = user_storage.get(email=email, session=session)
    if user is None or not user_storage.verify_password(user, password):
        return AuthResult(success=False, error="Invalid email or password")
    return AuthResult(success=True, user=user)


def register(
    email: str, password: p.Secret[str], session: Session = di.Provide["storage.persistent.session"]
) -> AuthResult:
    """Register a new user.

    A concurrent registration of the same email can still surface as an
    ``IntegrityError`` when the transaction is flushed.
    """
    if user_storage.get(email=email, session=session) is not None:
        return AuthResult(success=False, error="Email already registered")
    user = user_storage.create(email=email, password=password, session=session)
    return AuthResult(success=True, user=user)


def get_user(user_id: UserID, session: Session = di.Provide["storage.persistent.session"]) -> User | None:
    return user_storage.get(user_id=user_id, session=session)
