"""
Authentication error taxonomy.

Each error carries the HTTP status and the message that is safe to show
to a client.  Validation errors are precise; credential errors are
deliberately vague; infrastructure errors never expose internals.
"""

from __future__ import annotations

from typing import List, Optional


class AuthError(Exception):
    status_code: int = 400
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"error": self.message}


class InvalidInput(AuthError):
    status_code = 400
    default_message = "Username and password are required"


class WeakPassword(AuthError):
    status_code = 400
    default_message = "Password does not meet security requirements"

    def __init__(self, details: List[str], message: Optional[str] = None) -> None:
        super().__init__(message)
        self.details = list(details)

    def to_body(self) -> dict:
        return {"error": self.message, "details": self.details}


class Conflict(AuthError):
    status_code = 409
    default_message = "Username already exists"


class InvalidCredentials(AuthError):
    status_code = 401
    default_message = "Invalid username or password"


class UpstreamFailure(AuthError):
    status_code = 500
    default_message = "Internal server error"


class FederationDenied(AuthError):
    """The user declined consent at the identity provider.

    Never rendered as an error body; the callback sends the browser back
    to the sign-in page instead.
    """

    status_code = 401
    default_message = "Sign-in was cancelled"
