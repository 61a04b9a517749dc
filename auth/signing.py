"""
HMAC-signed payloads for the OAuth ``state`` parameter and the
federated-session cookie.

Tokens are urlsafe-base64 JSON payloads followed by an HMAC-SHA256
signature.  Every payload carries an ``exp`` timestamp.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Dict


class SignatureError(ValueError):
    pass


def _sign(secret: str, raw: bytes) -> str:
    return hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()


def sign_payload(payload: Dict[str, Any], secret: str, ttl_seconds: int) -> str:
    """Serialize ``payload`` with an expiry and sign it."""
    body = dict(payload, exp=int(time.time()) + ttl_seconds)
    raw = json.dumps(body, separators=(",", ":"), sort_keys=True).encode()
    encoded = urlsafe_b64encode(raw).decode().rstrip("=")
    return encoded + "." + _sign(secret, raw)


def verify_payload(token: str, secret: str) -> Dict[str, Any]:
    """
    Verify a token produced by ``sign_payload`` and return its payload.

    Raises ``SignatureError`` on malformed, forged or expired tokens.
    """
    try:
        encoded, sig = token.split(".", 1)
        raw = urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except (ValueError, TypeError) as exc:
        raise SignatureError("bad format") from exc
    try:
        matches = hmac.compare_digest(sig, _sign(secret, raw))
    except TypeError as exc:  # non-ASCII signature
        raise SignatureError("bad signature") from exc
    if not matches:
        raise SignatureError("bad signature")
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise SignatureError("bad payload") from exc
    if not isinstance(payload, dict):
        raise SignatureError("bad payload")
    if payload.get("exp", 0) < time.time():
        raise SignatureError("expired")
    return payload


def create_state(provider: str, secret: str, ttl_seconds: int) -> str:
    """Opaque OAuth state bound to ``provider`` with a random nonce."""
    return sign_payload({"provider": provider, "nonce": secrets.token_urlsafe(16)}, secret, ttl_seconds)


def verify_state(state: str, provider: str, secret: str) -> None:
    payload = verify_payload(state, secret)
    if payload.get("provider") != provider:
        raise SignatureError("state issued for another provider")
