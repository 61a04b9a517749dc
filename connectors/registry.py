"""
IdentityProviderRegistry — the federated providers this deployment offers.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from config.settings import Settings
from connectors.base import BaseIdentityProvider
from connectors.google import GoogleIdentityProvider

logger = logging.getLogger(__name__)


def default_providers(settings: Settings) -> List[BaseIdentityProvider]:
    return [GoogleIdentityProvider(settings)]


class IdentityProviderRegistry:
    """Providers by slug; only configured ones can be used for sign-in."""

    def __init__(self, providers: Iterable[BaseIdentityProvider]) -> None:
        self._all = list(providers)
        self._configured: Dict[str, BaseIdentityProvider] = {}
        for provider in self._all:
            if provider.is_configured():
                self._configured[provider.provider_name] = provider
                logger.info(
                    "Identity provider registered: %s (%s)",
                    provider.display_name,
                    provider.provider_name,
                )
            else:
                logger.warning(
                    "Identity provider %s skipped — not configured (missing client_id/secret)",
                    provider.provider_name,
                )

    def get(self, provider: str) -> Optional[BaseIdentityProvider]:
        return self._configured.get(provider)

    def list_providers(self) -> List[Dict[str, object]]:
        """Return info about all known providers."""
        return [
            {
                "provider": p.provider_name,
                "display_name": p.display_name,
                "configured": p.is_configured(),
            }
            for p in self._all
        ]
