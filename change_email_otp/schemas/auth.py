"""Caller identity resolved from the bearer token."""

from pydantic import BaseModel


class SessionUser(BaseModel):
    id: str
    email: str | None = None


class AuthSession(BaseModel):
    """The authenticated caller; only `user.id` is relied upon."""

    user: SessionUser
