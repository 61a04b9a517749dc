"""
BaseIdentityProvider — abstract interface for federated sign-in providers.

Every provider subclasses this and implements the OAuth2 authorization
URL and the code → verified profile exchange.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from auth.models import FederatedProfile


class ProviderError(Exception):
    """The provider rejected the exchange or returned an unusable profile."""


class BaseIdentityProvider(ABC):
    """Abstract base for all identity providers."""

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug used in URLs: 'google'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable: 'Google'."""
        ...

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """OAuth scopes requested at sign-in."""
        ...

    # ── OAuth flow ──────────────────────────────────────────────────────

    @abstractmethod
    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Opaque, signed state string checked again on callback.
        """
        ...

    @abstractmethod
    async def fetch_profile(self, code: str) -> FederatedProfile:
        """
        Exchange the authorization code and return the verified profile.

        Raises
        ------
        ProviderError
            When the exchange fails or the identity is not verified.
        """
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """Return True if client credentials are present."""
        return True
