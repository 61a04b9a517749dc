"""
Credential store — persistence of users and their sessions.

Every operation runs in its own short-lived ``AsyncSession`` with a
single commit, so an abandoned request never leaves half-written rows.
Username uniqueness is enforced by the ``users.username`` unique
constraint; a losing concurrent insert surfaces as ``Conflict``.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import Conflict, UpstreamFailure
from database.models import Session, User
from database.session import WRITE_OPTION

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


class CredentialStore:
    """Users keyed by unique ``username``; sessions keyed by ``session_id``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str, *, write: bool = False) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                if write:
                    await session.connection(execution_options={WRITE_OPTION: True})
                yield session
            except IntegrityError:
                await session.rollback()
                raise
            except (SQLAlchemyError, OSError) as exc:
                await session.rollback()
                logger.exception("Credential store %s failed", operation)
                raise UpstreamFailure() from exc

    # ── Users ──────────────────────────────────────────────────────────

    async def find_user_by_username(self, username: str) -> Optional[User]:
        async with self._session("find_user_by_username") as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    async def get_user(self, user_id: str | uuid.UUID) -> Optional[User]:
        async with self._session("get_user") as session:
            return await session.get(User, _to_uuid(user_id))

    async def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        full_name: Optional[str] = None,
        profile_picture: Optional[str] = None,
        federated_provider_id: Optional[str] = None,
    ) -> User:
        """Insert a user, raising ``Conflict`` if the username is taken."""
        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            full_name=full_name,
            profile_picture=profile_picture,
            federated_provider_id=federated_provider_id,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self._session("create_user", write=True) as session:
                session.add(user)
                await session.commit()
        except IntegrityError as exc:
            logger.info("Username already taken: %s", username)
            raise Conflict() from exc
        return user

    # ── Sessions ───────────────────────────────────────────────────────

    async def create_session(
        self,
        user_id: str | uuid.UUID,
        ttl: timedelta,
        *,
        session_id: str,
        issued_at: datetime,
    ) -> Session:
        record = Session(
            session_id=session_id,
            user_id=_to_uuid(user_id),
            created_at=issued_at,
            expires_at=issued_at + ttl,
        )
        try:
            async with self._session("create_session", write=True) as session:
                session.add(record)
                await session.commit()
        except IntegrityError as exc:
            # Token collision or dangling user reference; both are infrastructure faults.
            logger.error("Session insert rejected for user %s", user_id)
            raise UpstreamFailure() from exc
        return record

    async def find_session(self, session_id: str) -> Optional[Session]:
        """Return the session row as stored; callers interpret ``expires_at``."""
        async with self._session("find_session") as session:
            return await session.get(Session, session_id)

    async def purge_expired_sessions(self, now: Optional[datetime] = None) -> int:
        """Delete sessions whose ``expires_at`` has passed. Returns rows removed."""
        now = now or datetime.now(timezone.utc)
        async with self._session("purge_expired_sessions", write=True) as session:
            result = await session.execute(delete(Session).where(Session.expires_at <= now))
            await session.commit()
            removed = result.rowcount or 0
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed
