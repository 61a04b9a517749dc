"""
HTTP client for the auth API, used by the client tier.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from client.evidence import SessionEvidence, SessionEvidenceStore

logger = logging.getLogger(__name__)

_PREFIX = "/api/v1/auth"


class AuthApiError(Exception):
    def __init__(self, status_code: int, error: str, details: Optional[List[str]] = None) -> None:
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error
        self.details = details or []


class AuthApiClient:
    """Calls the auth endpoints and keeps session evidence up to date."""

    def __init__(
        self,
        evidence: SessionEvidenceStore,
        *,
        base_url: str = "http://localhost:8000",
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._evidence = evidence
        self._base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            raise AuthApiError(
                resp.status_code,
                str(body.get("error") or resp.reason_phrase),
                body.get("details"),
            )
        return body

    async def register(self, username: str, password: str, full_name: Optional[str] = None) -> str:
        payload: Dict[str, Any] = {"username": username, "password": password}
        if full_name:
            payload["fullName"] = full_name
        resp = await self._http.post(f"{_PREFIX}/register", json=payload)
        return self._raise_for_error(resp).get("message", "")

    async def login(self, username: str, password: str, remember_me: bool = False) -> SessionEvidence:
        resp = await self._http.post(
            f"{_PREFIX}/login",
            json={"username": username, "password": password, "rememberMe": remember_me},
        )
        evidence = SessionEvidence.from_api(self._raise_for_error(resp))
        self._evidence.set(evidence, remember=remember_me)
        return evidence

    async def federated_session(self) -> Optional[SessionEvidence]:
        """The federated identity, if the provider session cookie is valid."""
        resp = await self._http.get(f"{_PREFIX}/federated/session")
        body = self._raise_for_error(resp)
        if not body.get("authenticated"):
            return None
        return SessionEvidence.from_api(body)

    async def federated_signout(self) -> None:
        resp = await self._http.post(f"{_PREFIX}/federated/signout")
        self._raise_for_error(resp)

    async def me(self, evidence: Optional[SessionEvidence] = None) -> Dict[str, Any]:
        evidence = evidence or self._evidence.get()
        headers = {"Authorization": f"Bearer {evidence.session_id}"} if evidence else {}
        resp = await self._http.get(f"{_PREFIX}/me", headers=headers)
        return self._raise_for_error(resp)

    def authorize_url(self, provider: str = "google") -> str:
        return f"{self._base_url}{_PREFIX}/{provider}/authorize"
