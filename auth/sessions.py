"""
Session issuer — the one place sessions are minted.

Both the local authenticator and the federated adapter route through
``SessionIssuer.issue`` so token strength and expiry policy stay uniform.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from database.models import Session
from database.store import CredentialStore

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


class SessionIssuer:
    def __init__(
        self,
        store: CredentialStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    async def issue(self, user_id: str | uuid.UUID, ttl: timedelta) -> Session:
        """Persist a fresh session expiring ``ttl`` after issuance."""
        issued_at = self._clock()
        token = new_session_token()
        record = await self._store.create_session(
            user_id, ttl, session_id=token, issued_at=issued_at,
        )
        logger.info(
            "Issued session %s… for user %s (expires %s)",
            token[:6], user_id, record.expires_at.isoformat(),
        )
        return record

    async def resolve(self, session_id: Optional[str]) -> Optional[Session]:
        """Return the session if it exists and has not expired."""
        if not session_id:
            return None
        record = await self._store.find_session(session_id)
        if record is None or not record.is_valid(self._clock()):
            return None
        return record
