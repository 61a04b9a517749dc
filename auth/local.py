"""
Local (username + password) registration and login.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from auth.errors import InvalidCredentials, InvalidInput, WeakPassword
from auth.models import LoginResult, RegisteredUser
from auth.password import hash_password_async, verify_password_async
from auth.password_policy import validate_password
from auth.sessions import SessionIssuer
from config.settings import Settings
from database.store import CredentialStore

logger = logging.getLogger(__name__)


class LocalAuthenticator:
    def __init__(self, store: CredentialStore, issuer: SessionIssuer, settings: Settings) -> None:
        self._store = store
        self._issuer = issuer
        self._settings = settings

    async def register(
        self,
        username: Optional[str],
        password: Optional[str],
        *,
        full_name: Optional[str] = None,
    ) -> RegisteredUser:
        """
        Create a local account.

        Raises ``InvalidInput`` for missing fields, ``WeakPassword`` when the
        policy rejects the password and ``Conflict`` for a taken username.
        """
        if not username or not password:
            raise InvalidInput()

        verdict = validate_password(password)
        if not verdict.is_valid:
            raise WeakPassword(verdict.errors)

        password_hash = await hash_password_async(password, self._settings.bcrypt_rounds)
        # No pre-check: the unique constraint decides who wins a race.
        user = await self._store.create_user(
            username=username,
            password_hash=password_hash,
            full_name=full_name or None,
        )
        logger.info("Registered user %s (%s)", user.username, user.id)
        return RegisteredUser.from_user(user)

    async def login(
        self,
        username: Optional[str],
        password: Optional[str],
        remember_me: bool = False,
    ) -> LoginResult:
        """Verify credentials and issue a session (30 days with remember-me, else 1 day)."""
        if not username or not password:
            raise InvalidCredentials()

        user = await self._store.find_user_by_username(username)
        if user is None or not await verify_password_async(password, user.password_hash):
            raise InvalidCredentials()

        ttl = timedelta(days=self._settings.login_ttl_days(remember_me))
        session = await self._issuer.issue(user.id, ttl)
        logger.info("Login: %s (%s) remember_me=%s", user.username, user.id, remember_me)
        return LoginResult.build(session, user)
