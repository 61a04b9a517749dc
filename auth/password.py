"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting and a
configurable work factor.  The async wrappers push the CPU-bound work
onto a worker thread so request handling is never blocked.
"""

from __future__ import annotations

import asyncio
import secrets

import bcrypt

# bcrypt only ever looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72

# Prefix for placeholders that can never match a bcrypt hash.
UNUSABLE_PASSWORD_PREFIX = "!"


def _encode(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    if not password_hash or password_hash.startswith(UNUSABLE_PASSWORD_PREFIX):
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        return False


def unusable_password() -> str:
    """A random secret for accounts that only sign in through a provider."""
    return UNUSABLE_PASSWORD_PREFIX + secrets.token_hex(32)


async def hash_password_async(password: str, rounds: int = 12) -> str:
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)
