"""
Client-held session evidence.

Evidence is the session id plus a ``{username, id}`` projection of the
user, written to durable storage when "remember me" was requested and to
volatile (browsing-session) storage otherwise.  It is only used to
decide what to render; the API re-validates the session on every call.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "sessionId"
USER_KEY = "user"


class EvidenceStorage(ABC):
    """Minimal key/value storage area (think ``localStorage``)."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(EvidenceStorage):
    """Volatile storage; gone when the browsing session ends."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(EvidenceStorage):
    """Durable storage backed by a JSON file; survives restarts."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable evidence file %s; treating as empty", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, items: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(items), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)


@dataclass(frozen=True)
class SessionEvidence:
    session_id: str
    user: Optional[Dict[str, Any]] = field(default=None)

    @property
    def username(self) -> Optional[str]:
        return (self.user or {}).get("username")

    @classmethod
    def from_api(cls, body: Dict[str, Any]) -> "SessionEvidence":
        """Build from a login / federated-session response body."""
        user = body.get("user") or {}
        return cls(
            session_id=body["sessionId"],
            user={"username": user.get("username"), "id": user.get("id")},
        )


class SessionEvidenceStore:
    """
    Reads and writes evidence across a durable and a volatile area.

    The storage choice is made once, by the ``remember`` flag passed to
    ``set``; reads check durable first, then volatile.
    """

    def __init__(self, durable: EvidenceStorage, volatile: EvidenceStorage) -> None:
        self._durable = durable
        self._volatile = volatile

    def _read(self, storage: EvidenceStorage) -> Optional[SessionEvidence]:
        session_id = storage.get_item(SESSION_ID_KEY)
        if not session_id:
            return None
        raw_user = storage.get_item(USER_KEY)
        user = None
        if raw_user:
            try:
                parsed = json.loads(raw_user)
                user = parsed if isinstance(parsed, dict) else None
            except ValueError:
                logger.warning("Stored user is not valid JSON; ignoring profile")
        return SessionEvidence(session_id=session_id, user=user)

    def get(self) -> Optional[SessionEvidence]:
        return self._read(self._durable) or self._read(self._volatile)

    def set(self, evidence: SessionEvidence, *, remember: bool) -> None:
        target, other = (self._durable, self._volatile) if remember else (self._volatile, self._durable)
        self._clear(other)
        target.set_item(SESSION_ID_KEY, evidence.session_id)
        target.set_item(USER_KEY, json.dumps(evidence.user or {}))

    @staticmethod
    def _clear(storage: EvidenceStorage) -> None:
        storage.remove_item(SESSION_ID_KEY)
        storage.remove_item(USER_KEY)

    def clear(self) -> None:
        self._clear(self._durable)
        self._clear(self._volatile)
