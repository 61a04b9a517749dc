"""Value objects shared by the authenticators and the HTTP layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from database.models import Session, User


class UserProjection(BaseModel):
    id: str
    username: str

    @classmethod
    def from_user(cls, user: User) -> "UserProjection":
        return cls(**user.projection())


class LoginResult(BaseModel):
    session_id: str
    user: UserProjection
    expires_at: datetime

    @classmethod
    def build(cls, session: Session, user: User) -> "LoginResult":
        return cls(
            session_id=session.session_id,
            user=UserProjection.from_user(user),
            expires_at=session.expires_at,
        )


class RegisteredUser(BaseModel):
    """A freshly created user, without the password hash."""

    id: str
    username: str
    full_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "RegisteredUser":
        return cls(id=str(user.id), username=user.username, full_name=user.full_name)


class FederatedProfile(BaseModel):
    """Verified identity returned by an external provider."""

    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    subject: str
