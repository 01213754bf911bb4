"""Registration and login routes."""

from __future__ import annotations

import datetime

import pydantic as p
import sqlalchemy.exc
from fastapi import APIRouter, Depends, status

from tubely.auth import jwt
from tubely.auth import local as local_auth
from tubely.core import di
from tubely.errors import Conflict, Unauthenticated
from tubely.storage import Session

from ..view.auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/users", operation_id="register", status_code=status.HTTP_201_CREATED)
@di.inject
def register(
    request: RegisterRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> UserResponse:
    """Register a new user."""
    try:
        with session.begin():
            result = local_auth.register(request.email, p.Secret(request.password), session=session)
    except sqlalchemy.exc.IntegrityError:
        raise Conflict("email already registered") from None

    if not result.success or result.user is None:
        raise Conflict(result.error)
    return UserResponse(**result.user.model_dump())


@router.post("/login", operation_id="login")
@di.inject
def login(
    request: LoginRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    expire_minutes: int = Depends(di.Provide["config.web.tubely.auth.access_token_expire_minutes"]),
) -> LoginResponse:
    """Exchange an email and password for an access token."""
    with session.begin():
        result = local_auth.authenticate(request.email, p.Secret(request.password), session=session)

    if not result.success or result.user is None:
        raise Unauthenticated(result.error or "invalid credentials")

    expires_delta = datetime.timedelta(minutes=expire_minutes)
    expires_at = datetime.datetime.now(datetime.UTC) + expires_delta
    access_token = jwt.create_access_token(result.user.user_id, expires_delta=expires_delta)

    return LoginResponse(
        user=UserResponse(**result.user.model_dump()),
        token=TokenResponse(access_token=access_token, expires_at=expires_at),
    )
