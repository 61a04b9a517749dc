"""
Tests for the session issuer.
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.sessions import SessionIssuer
from database.models import as_utc


class _Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class TestSessionIssuer:
    @pytest.mark.asyncio
    async def test_expiry_is_ttl_after_issuance(self, store):
        user = await store.create_user(username="alice1234", password_hash="h")
        clock = _Clock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))
        issuer = SessionIssuer(store, clock=clock)

        session = await issuer.issue(user.id, timedelta(days=30))
        assert session.expires_at - session.created_at == timedelta(days=30)
        assert session.created_at == clock.now

        stored = await store.find_session(session.session_id)
        assert as_utc(stored.expires_at) == clock.now + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_tokens_are_unique_and_opaque(self, store, issuer):
        user = await store.create_user(username="alice1234", password_hash="h")
        tokens = {(await issuer.issue(user.id, timedelta(days=1))).session_id for _ in range(20)}
        assert len(tokens) == 20
        assert all(len(t) >= 43 for t in tokens)
        assert not any(str(user.id) in t for t in tokens)

    @pytest.mark.asyncio
    async def test_resolve_enforces_expiry(self, store):
        user = await store.create_user(username="alice1234", password_hash="h")
        clock = _Clock(datetime(2026, 3, 1, tzinfo=timezone.utc))
        issuer = SessionIssuer(store, clock=clock)
        session = await issuer.issue(user.id, timedelta(days=1))

        clock.now += timedelta(hours=23, minutes=59)
        assert (await issuer.resolve(session.session_id)) is not None

        clock.now += timedelta(minutes=1)
        assert await issuer.resolve(session.session_id) is None

    @pytest.mark.asyncio
    async def test_resolve_unknown_or_empty(self, issuer):
        assert await issuer.resolve("does-not-exist") is None
        assert await issuer.resolve(None) is None
        assert await issuer.resolve("") is None
