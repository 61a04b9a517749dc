"""
Federated sign-in routes — provider list, authorize redirect, OAuth
callback, and the federated-session endpoints the client guard polls.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from auth.dependencies import AuthServices, get_services
from auth.errors import AuthError, FederationDenied
from auth.models import LoginResult
from auth.signing import SignatureError, create_state, sign_payload, verify_payload, verify_state
from config.settings import Settings
from connectors.base import ProviderError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["federated"])


# ── Cookie helpers ─────────────────────────────────────────────────────


def _cookie_kwargs(settings: Settings) -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }


def _set_federated_cookie(response, settings: Settings, result: LoginResult) -> None:
    ttl = settings.federated_session_ttl_days * 86400
    value = sign_payload(
        {"sid": result.session_id, "user": result.user.model_dump()},
        settings.oauth_state_secret,
        ttl,
    )
    response.set_cookie(settings.federated_cookie_name, value, max_age=ttl, **_cookie_kwargs(settings))


def _raise_for_provider_error(error: Optional[str]) -> None:
    """Turn the ``error`` query parameter of a provider redirect into an exception."""
    if not error:
        return
    if error == "access_denied":
        raise FederationDenied()
    raise ProviderError(error)


def _sign_in_redirect(settings: Settings, error: str) -> RedirectResponse:
    url = f"{settings.sign_in_path}?{urlencode({'error': error})}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


# ── Routes ─────────────────────────────────────────────────────────────


@router.get("/providers")
async def list_providers(services: AuthServices = Depends(get_services)) -> List[Dict[str, object]]:
    """Federated providers and whether each is configured (drives the sign-in buttons)."""
    return services.providers.list_providers()


@router.get("/{provider}/authorize")
async def authorize(
    provider: str,
    services: AuthServices = Depends(get_services),
) -> RedirectResponse:
    """Redirect the browser to the provider's consent screen."""
    idp = services.providers.get(provider)
    if idp is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Provider '{provider}' not found or not configured",
        )
    settings = services.settings
    state = create_state(provider, settings.oauth_state_secret, settings.oauth_state_ttl_seconds)
    return RedirectResponse(idp.get_auth_url(state), status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    services: AuthServices = Depends(get_services),
) -> RedirectResponse:
    """
    Provider redirect target.

    On success the user is reconciled into the local store, a session is
    minted, and a signed federated-session cookie is set.  Every failure
    sends the browser back to sign-in without evidence.
    """
    settings = services.settings

    try:
        _raise_for_provider_error(error)
    except FederationDenied as exc:
        logger.info("Federated sign-in at %s ended: %s", provider, exc.message)
        return _sign_in_redirect(settings, "access_denied")
    except ProviderError as exc:
        logger.warning("Federated sign-in error from %s: %s", provider, exc)
        return _sign_in_redirect(settings, "federation_failed")

    idp = services.providers.get(provider)
    if idp is None or not code or not state:
        logger.warning("Rejected callback for provider=%s (missing provider, code or state)", provider)
        return _sign_in_redirect(settings, "federation_failed")

    # 1. Verify state
    try:
        verify_state(state, provider, settings.oauth_state_secret)
    except SignatureError as exc:
        logger.warning("Invalid OAuth state for %s: %s", provider, exc)
        return _sign_in_redirect(settings, "federation_failed")

    # 2. Exchange code for a verified profile
    try:
        profile = await idp.fetch_profile(code)
    except ProviderError as exc:
        logger.error("OAuth callback failed for %s: %s", provider, exc)
        return _sign_in_redirect(settings, "federation_failed")

    # 3. Reconcile into the local user/session model
    try:
        result = await services.federated.reconcile(profile)
    except AuthError:
        return _sign_in_redirect(settings, "federation_failed")

    response = RedirectResponse(settings.post_login_path, status_code=status.HTTP_302_FOUND)
    _set_federated_cookie(response, settings, result)
    return response


@router.get("/federated/session")
async def federated_session(
    request: Request,
    services: AuthServices = Depends(get_services),
) -> Dict[str, Any]:
    """Current federated identity, normalized to the local evidence shape."""
    settings = services.settings
    raw = request.cookies.get(settings.federated_cookie_name)
    if not raw:
        return {"authenticated": False}
    try:
        payload = verify_payload(raw, settings.oauth_state_secret)
    except SignatureError:
        return {"authenticated": False}

    session = await services.issuer.resolve(payload.get("sid"))
    user = payload.get("user")
    if session is None or not isinstance(user, dict):
        return {"authenticated": False}
    return {"authenticated": True, "sessionId": session.session_id, "user": user}


@router.post("/federated/signout")
async def federated_signout(services: AuthServices = Depends(get_services)) -> JSONResponse:
    """Forget the federated identity. The server-side session row is left to expire."""
    settings = services.settings
    response = JSONResponse({"success": True})
    response.delete_cookie(settings.federated_cookie_name, **_cookie_kwargs(settings))
    return response
