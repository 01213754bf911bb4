from pydantic import EmailStr

from .base import WithTimestamps
from .id import UserID


class User(WithTimestamps):
    user_id: UserID
    email: EmailStr
    password_hash: str | None = None
