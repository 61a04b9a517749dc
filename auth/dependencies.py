"""
FastAPI dependencies for authentication.

``AuthServices`` bundles the store, issuer and authenticators built for
one application instance; routes receive it via ``get_services`` and
protected routes use ``get_current_session``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from auth.errors import InvalidCredentials
from auth.federated import FederatedIdentityAdapter
from auth.local import LocalAuthenticator
from auth.sessions import SessionIssuer
from config.settings import Settings
from connectors.base import BaseIdentityProvider
from connectors.registry import IdentityProviderRegistry, default_providers
from database.models import Session
from database.session import build_engine, build_session_factory
from database.store import CredentialStore


@dataclass
class AuthServices:
    settings: Settings
    store: CredentialStore
    issuer: SessionIssuer
    local: LocalAuthenticator
    federated: FederatedIdentityAdapter
    providers: IdentityProviderRegistry
    engine: Optional[AsyncEngine] = None


def build_services(
    settings: Settings,
    *,
    store: Optional[CredentialStore] = None,
    providers: Optional[Iterable[BaseIdentityProvider]] = None,
) -> AuthServices:
    engine = None
    if store is None:
        engine = build_engine(settings.database_url, echo=settings.debug)
        store = CredentialStore(build_session_factory(engine))
    issuer = SessionIssuer(store)
    return AuthServices(
        settings=settings,
        store=store,
        issuer=issuer,
        local=LocalAuthenticator(store, issuer, settings),
        federated=FederatedIdentityAdapter(store, issuer, settings),
        providers=IdentityProviderRegistry(
            providers if providers is not None else default_providers(settings)
        ),
        engine=engine,
    )


def get_services(request: Request) -> AuthServices:
    return request.app.state.auth


def _session_id_from_headers(authorization: Optional[str], x_session_id: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return (x_session_id or "").strip() or None


async def get_current_session(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
    services: AuthServices = Depends(get_services),
) -> Session:
    """
    Resolve the caller's session id and enforce expiry.

    Raises ``InvalidCredentials`` (401) for missing, unknown or expired sessions.
    """
    session = await services.issuer.resolve(_session_id_from_headers(authorization, x_session_id))
    if session is None:
        raise InvalidCredentials("Invalid or expired session")
    return session
