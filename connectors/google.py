"""
GoogleIdentityProvider — OAuth2 web flow for "Sign in with Google".
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from auth.models import FederatedProfile
from config.settings import Settings
from connectors.base import BaseIdentityProvider, ProviderError

logger = logging.getLogger(__name__)

# Google OAuth2 endpoints
_GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
_GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleIdentityProvider(BaseIdentityProvider):
    """OAuth2 sign-in with a Google account."""

    def __init__(
        self,
        settings: Settings,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def display_name(self) -> str:
        return "Google"

    @property
    def scopes(self) -> List[str]:
        return ["openid", "email", "profile"]

    def is_configured(self) -> bool:
        return bool(self._settings.google_client_id and self._settings.google_client_secret)

    def _redirect_uri(self) -> str:
        return f"{self._settings.oauth_redirect_base}/api/v1/auth/google/callback"

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self._settings.google_client_id,
            "redirect_uri": self._redirect_uri(),
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "prompt": "select_account",
            "state": state,
        }
        return f"{_GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> FederatedProfile:
        """Exchange the auth code, then read the signed-in user's profile."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                # 1. Exchange code for tokens
                token_resp = await client.post(
                    _GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self._settings.google_client_id,
                        "client_secret": self._settings.google_client_secret,
                        "redirect_uri": self._redirect_uri(),
                        "grant_type": "authorization_code",
                    },
                )
                token_resp.raise_for_status()
                access_token = token_resp.json()["access_token"]

                # 2. Fetch the OpenID profile
                headers = {"Authorization": f"Bearer {access_token}"}
                user_resp = await client.get(_GOOGLE_USERINFO_URL, headers=headers)
                user_resp.raise_for_status()
                info = user_resp.json()
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            raise ProviderError(f"Google token exchange failed: {exc.__class__.__name__}") from exc

        return profile_from_userinfo(info)


def profile_from_userinfo(info: dict) -> FederatedProfile:
    """Validate an OpenID Connect userinfo document."""
    email = (info.get("email") or "").strip()
    subject = str(info.get("sub") or info.get("id") or "").strip()
    if not email or not subject:
        raise ProviderError("Profile is missing email or subject")
    if info.get("email_verified") is False:
        raise ProviderError("Email not verified")
    return FederatedProfile(
        email=email,
        name=info.get("name"),
        picture=info.get("picture"),
        subject=subject,
    )
