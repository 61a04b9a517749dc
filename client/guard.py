"""
Client session guard.

A three-state machine run once per page load::

    UNKNOWN ──▶ AUTHENTICATED ──(logout)──▶ UNAUTHENTICATED
       └──────────────────────────────────▶ UNAUTHENTICATED

While the federated identity check is pending the guard stays UNKNOWN
and only the loading view renders.  A present federated identity wins
and is written back as ordinary evidence.  The guard is a UX gate, not a
security boundary: the API still checks session expiry.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from client.evidence import SessionEvidence, SessionEvidenceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

FederatedProbe = Callable[[], Awaitable[Optional[SessionEvidence]]]


class GuardState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionGuard:
    def __init__(
        self,
        evidence: SessionEvidenceStore,
        *,
        navigate: Callable[[str], None],
        federated_probe: Optional[FederatedProbe] = None,
        federated_signout: Optional[Callable[[], Awaitable[None]]] = None,
        sign_in_path: str = "/login",
        wait_timeout: float = 5.0,
    ) -> None:
        self._evidence_store = evidence
        self._navigate = navigate
        self._probe = federated_probe
        self._signout = federated_signout
        self._sign_in_path = sign_in_path
        self._wait_timeout = wait_timeout
        self._state = GuardState.UNKNOWN
        self._evidence: Optional[SessionEvidence] = None

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def evidence(self) -> Optional[SessionEvidence]:
        return self._evidence

    @property
    def display_name(self) -> str:
        return (self._evidence and self._evidence.username) or "User"

    async def _resolve_federated(self) -> Optional[SessionEvidence]:
        if self._probe is None:
            return None
        try:
            return await asyncio.wait_for(self._probe(), timeout=self._wait_timeout)
        except asyncio.TimeoutError:
            logger.warning("Federated identity check timed out after %.1fs", self._wait_timeout)
        except Exception:
            logger.warning("Federated identity check failed", exc_info=True)
        return None

    async def mount(self) -> GuardState:
        """Decide the state for this page load. Later calls are no-ops."""
        if self._state is not GuardState.UNKNOWN:
            return self._state

        federated = await self._resolve_federated()
        if federated is not None:
            self._evidence_store.set(federated, remember=True)
            self._evidence = federated
        else:
            self._evidence = self._evidence_store.get()

        if self._evidence is None:
            self._state = GuardState.UNAUTHENTICATED
            self._navigate(self._sign_in_path)
        else:
            self._state = GuardState.AUTHENTICATED
        return self._state

    def render(
        self,
        protected: Callable[[SessionEvidence], T],
        loading: Callable[[], T],
    ) -> Optional[T]:
        """Loading output while UNKNOWN, the protected view once AUTHENTICATED, else nothing."""
        if self._state is GuardState.UNKNOWN:
            return loading()
        if self._state is GuardState.AUTHENTICATED and self._evidence is not None:
            return protected(self._evidence)
        return None

    async def logout(self) -> None:
        """
        Clear local evidence, ask the federated layer to sign out, redirect.

        Server-side session rows are not revoked; they expire naturally.
        """
        self._evidence_store.clear()
        self._evidence = None
        if self._signout is not None:
            try:
                await self._signout()
            except Exception:
                logger.warning("Federated sign-out failed", exc_info=True)
        self._state = GuardState.UNAUTHENTICATED
        self._navigate(self._sign_in_path)
