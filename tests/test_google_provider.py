"""
Tests for the Google identity provider against a mocked HTTP transport.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from connectors.base import ProviderError
from connectors.google import GoogleIdentityProvider, profile_from_userinfo
from connectors.registry import IdentityProviderRegistry


def _transport(token_status=200, userinfo=None):
    userinfo = userinfo if userinfo is not None else {
        "sub": "google-sub-1",
        "email": "ada@example.com",
        "email_verified": True,
        "name": "Ada Lovelace",
        "picture": "https://img.example/ada.png",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/token":
            assert b"code=auth-code" in request.content
            return httpx.Response(token_status, json={"access_token": "at-1"})
        assert request.headers["Authorization"] == "Bearer at-1"
        return httpx.Response(200, json=userinfo)

    return httpx.MockTransport(handler)


class TestGoogleIdentityProvider:
    def test_auth_url(self, settings):
        provider = GoogleIdentityProvider(settings)
        query = parse_qs(urlparse(provider.get_auth_url("state-1")).query)

        assert query["client_id"] == ["test-client-id"]
        assert query["state"] == ["state-1"]
        assert query["scope"] == ["openid email profile"]
        assert query["redirect_uri"] == ["http://localhost:8000/api/v1/auth/google/callback"]

    @pytest.mark.asyncio
    async def test_fetch_profile(self, settings):
        provider = GoogleIdentityProvider(settings, transport=_transport())
        profile = await provider.fetch_profile("auth-code")

        assert profile.email == "ada@example.com"
        assert profile.subject == "google-sub-1"
        assert profile.name == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_token_exchange_failure(self, settings):
        provider = GoogleIdentityProvider(settings, transport=_transport(token_status=400))
        with pytest.raises(ProviderError):
            await provider.fetch_profile("auth-code")

    @pytest.mark.asyncio
    async def test_unverified_email_rejected(self, settings):
        info = {"sub": "s", "email": "ada@example.com", "email_verified": False}
        provider = GoogleIdentityProvider(settings, transport=_transport(userinfo=info))
        with pytest.raises(ProviderError):
            await provider.fetch_profile("auth-code")

    def test_profile_requires_email_and_subject(self):
        with pytest.raises(ProviderError):
            profile_from_userinfo({"sub": "s"})
        with pytest.raises(ProviderError):
            profile_from_userinfo({"email": "ada@example.com"})


class TestRegistry:
    def test_unconfigured_provider_is_listed_but_unusable(self, settings):
        settings.google_client_id = ""
        registry = IdentityProviderRegistry([GoogleIdentityProvider(settings)])
        assert registry.get("google") is None
        assert registry.list_providers()[0]["configured"] is False
