"""JWT token management for session authentication."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import jwt
import pydantic as p

from tubely.core import di
from tubely.model import UserID


class TokenData(t.NamedTuple):
    """Decoded token data."""

    user_id: UserID
    expires_at: datetime.datetime
    issued_at: datetime.datetime


class JWTManager(object):
    """Manages JWT token creation and validation."""

    _secret_key: p.Secret[str]
    _algorithm: t.Literal["HS256"]
    _access_token_expire_minutes: t.Annotated[int, ant.Gt(1)]

    def __init__(
        self,
        secret_key: p.Secret[str],
        algorithm: t.Literal["HS256"] = "HS256",
        access_token_expire_minutes: t.Annotated[int, ant.Gt(1)] = 60,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    @property
    def secret_key(self) -> str:
        return self._secret_key.get_secret_value()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self._access_token_expire_minutes

    def create_access_token(self, user_id: UserID, expires_delta: datetime.timedelta | None = None) -> str:
        """Create a new access token whose subject is the user's ID.

        Args:
            user_id: The user's ID
            expires_delta: Custom expiration time (default: access_token_expire_minutes)

        Returns:
            Encoded JWT token string
        """
        now = datetime.datetime.now(datetime.UTC)
        if expires_delta is None:
            expires_delta = datetime.timedelta(minutes=self._access_token_expire_minutes)

        payload: dict[str, t.Any] = {
            "sub": str(user_id),
            "exp": int((now + expires_delta).timestamp()),
            "iat": int(now.timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenData | None:
        """Decode and validate a token.

        Returns:
            TokenData if valid, None if invalid, expired or naming a malformed user ID
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self._algorithm], options={"require": ["sub"]})
            return TokenData(
                user_id=UserID(payload["sub"]),
                expires_at=datetime.datetime.fromtimestamp(payload["exp"], tz=datetime.UTC),
                issued_at=datetime.datetime.fromtimestamp(payload["iat"], tz=datetime.UTC),
            )
        except (jwt.InvalidTokenError, KeyError, ValueError):
            return None


@di.inject
def create_access_token(
    user_id: UserID,
    expires_delta: datetime.timedelta | None = None,
    manager: JWTManager = di.Provide["auth.jwt_manager"],
) -> str:
    return manager.create_access_token(user_id, expires_delta)


@di.inject
def decode_token(token: str, manager: JWTManager = di.Provide["auth.jwt_manager"]) -> TokenData | None:
    return manager.decode_token(token)
