"""
Auth API routes — register, login, current user.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from auth.dependencies import AuthServices, get_current_session, get_services
from auth.errors import InvalidCredentials, InvalidInput, UpstreamFailure
from database.models import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = Field(None, alias="fullName")


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    password: Optional[str] = None
    remember_me: bool = Field(False, alias="rememberMe")


def _decode_body(raw: bytes) -> Dict[str, Any]:
    """Decode a JSON object body. An empty body reads as ``{}``; anything else raises ``ValueError``."""
    if not raw:
        return {}
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("request body is not a JSON object")
    return data


async def _read_json(request: Request) -> Dict[str, Any]:
    try:
        return _decode_body(await request.body())
    except ValueError:
        return {}


async def _register_request(request: Request, accept_query: bool) -> RegisterRequest:
    """Merge credentials from the query string (when allowed) and the JSON body."""
    body = await _read_json(request)
    if accept_query:
        query = request.query_params
        if query.get("username") or query.get("password"):
            logger.warning("Registration credentials supplied in the query string")
        for key in ("username", "password"):
            if query.get(key):
                body[key] = query[key]
    try:
        return RegisterRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidInput() from exc


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    services: AuthServices = Depends(get_services),
) -> Dict[str, Any]:
    """Register a new local user."""
    req = await _register_request(request, services.settings.accept_query_credentials)
    await services.local.register(req.username, req.password, full_name=req.full_name)
    return {"message": "User created successfully"}


@router.post("/login")
async def login(
    request: Request,
    services: AuthServices = Depends(get_services),
) -> Dict[str, Any]:
    """
    Login with username + password.

    Only 200, 401 and 500 leave this route: an unreadable body is a server
    error here, not a validation error.
    """
    try:
        req = LoginRequest.model_validate(_decode_body(await request.body()))
        result = await services.local.login(req.username, req.password, req.remember_me)
    except InvalidCredentials:
        raise
    except Exception as exc:
        logger.exception("Login failed unexpectedly")
        raise UpstreamFailure("Internal Server Error") from exc

    return {
        "success": True,
        "sessionId": result.session_id,
        "user": result.user.model_dump(),
    }


@router.get("/me")
async def me(
    session: Session = Depends(get_current_session),
    services: AuthServices = Depends(get_services),
) -> Dict[str, Any]:
    """Profile of the user owning a valid, unexpired session."""
    user = await services.store.get_user(session.user_id)
    if user is None:
        raise InvalidCredentials("Invalid or expired session")
    return {
        "id": str(user.id),
        "username": user.username,
        "fullName": user.full_name,
        "profilePicture": user.profile_picture,
        "expiresAt": session.expires_at.isoformat(),
    }
