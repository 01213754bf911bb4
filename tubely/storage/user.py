from __future__ import annotations

import bcrypt
import pydantic as p
import sqlalchemy as sqla

from tubely.core import di
from tubely.model import User, UserID

from . import Session
from .table import users


def hash_password(password: p.Secret[str]) -> str:
    return bcrypt.hashpw(password.get_secret_value().encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        stmt = sqla.select(users.__table__).where(users.email == email)

    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row is not None else None


def create(
    *,
    email: str,
    password: p.Secret[str],
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Create a new user; the password is stored as a bcrypt hash."""
    user = users(user_id=UserID(), email=email, password_hash=hash_password(password))
    session.add(user)
    session.flush()
    return get(user_id=user.user_id, session=session)  # type: ignore[return-value]


def update(
    user_id: UserID,
    *,
    password: p.Secret[str],
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Replace a user's password.

    Raises:
        KeyError: If user_id does not correspond to a user
    """
    stmt = sqla.update(users).where(users.user_id == user_id).values(password_hash=hash_password(password))
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"User {user_id} not found")
    session.flush()
    return get(user_id=user_id, session=session)  # type: ignore[return-value]


def verify_password(user: User, password: p.Secret[str]) -> bool:
    if user.password_hash is None:
        return False
    return bcrypt.checkpw(password.get_secret_value().encode("utf-8"), user.password_hash.encode("utf-8"))
