"""
Federated identity adapter.

Maps a verified provider identity onto the local ``User``/``Session``
model so the rest of the system sees one kind of login.  Provider
accounts are keyed by email in ``users.username``.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from auth.errors import AuthError, Conflict, UpstreamFailure
from auth.models import FederatedProfile, LoginResult
from auth.password import unusable_password
from auth.sessions import SessionIssuer
from config.settings import Settings
from database.models import User
from database.store import CredentialStore

logger = logging.getLogger(__name__)


class FederatedIdentityAdapter:
    def __init__(self, store: CredentialStore, issuer: SessionIssuer, settings: Settings) -> None:
        self._store = store
        self._issuer = issuer
        self._settings = settings

    async def _find_or_create_user(self, profile: FederatedProfile) -> User:
        user = await self._store.find_user_by_username(profile.email)
        if user is not None:
            return user
        try:
            user = await self._store.create_user(
                username=profile.email,
                password_hash=unusable_password(),
                full_name=profile.name,
                profile_picture=profile.picture,
                federated_provider_id=profile.subject,
            )
        except Conflict:
            # A concurrent first sign-in created the row; use it.
            user = await self._store.find_user_by_username(profile.email)
            if user is None:
                raise UpstreamFailure()
            return user
        logger.info("Created user %s from federated identity", user.username)
        return user

    async def reconcile(self, profile: FederatedProfile) -> LoginResult:
        """
        Find or create the user for ``profile`` and mint a session for it.

        Any store failure is raised as ``UpstreamFailure`` so the callback
        fails closed.
        """
        try:
            user = await self._find_or_create_user(profile)
            ttl = timedelta(days=self._settings.federated_session_ttl_days)
            session = await self._issuer.issue(user.id, ttl)
        except AuthError:
            raise
        except Exception as exc:
            logger.exception("Federated reconciliation failed for %s", profile.email)
            raise UpstreamFailure() from exc
        logger.info("Federated login: %s (%s)", user.username, user.id)
        return LoginResult.build(session, user)
