"""
Shared fixtures: an isolated SQLite database per test, low bcrypt cost,
and a scripted identity provider standing in for Google.
"""

from __future__ import annotations

from typing import List, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth.federated import FederatedIdentityAdapter
from auth.local import LocalAuthenticator
from auth.models import FederatedProfile
from auth.sessions import SessionIssuer
from config.settings import Settings
from connectors.base import BaseIdentityProvider
from database.session import build_engine, build_session_factory, init_models
from database.store import CredentialStore


class FakeIdentityProvider(BaseIdentityProvider):
    """Returns a fixed profile (or raises) instead of calling Google."""

    def __init__(self, profile: Optional[FederatedProfile] = None, error: Optional[Exception] = None) -> None:
        self.profile = profile
        self.error = error
        self.codes: List[str] = []

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def display_name(self) -> str:
        return "Google"

    @property
    def scopes(self) -> List[str]:
        return ["openid", "email", "profile"]

    def get_auth_url(self, state: str) -> str:
        return f"https://idp.example/authorize?state={state}"

    async def fetch_profile(self, code: str) -> FederatedProfile:
        self.codes.append(code)
        if self.error is not None:
            raise self.error
        return self.profile


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        bcrypt_rounds=4,
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        oauth_state_secret="test-state-secret",
    )


@pytest.fixture
def ada_profile() -> FederatedProfile:
    return FederatedProfile(
        email="ada@example.com",
        name="Ada Lovelace",
        picture="https://img.example/ada.png",
        subject="google-sub-1",
    )


@pytest.fixture
def fake_idp(ada_profile) -> FakeIdentityProvider:
    return FakeIdentityProvider(ada_profile)


@pytest_asyncio.fixture
async def store(settings):
    engine = build_engine(settings.database_url)
    await init_models(engine)
    yield CredentialStore(build_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def issuer(store) -> SessionIssuer:
    return SessionIssuer(store)


@pytest.fixture
def local_auth(store, issuer, settings) -> LocalAuthenticator:
    return LocalAuthenticator(store, issuer, settings)


@pytest.fixture
def federated(store, issuer, settings) -> FederatedIdentityAdapter:
    return FederatedIdentityAdapter(store, issuer, settings)


@pytest.fixture
def app(settings, fake_idp):
    from main import create_app

    return create_app(settings, providers=[fake_idp])


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
