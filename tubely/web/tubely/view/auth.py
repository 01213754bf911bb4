"""View models for authentication endpoints."""

from __future__ import annotations

import datetime

from pydantic import EmailStr

from tubely.model import BaseModel, UserID


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime.datetime


class UserResponse(BaseModel):
    user_id: UserID
    email: EmailStr
    create_time: datetime.datetime


class LoginResponse(BaseModel):
    """Response for successful login."""

    user: UserResponse
    token: TokenResponse
