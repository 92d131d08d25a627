"""Session credential store populated at connection handshake."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TypeAlias
from uuid import uuid4

from n8n_mcp.core.credentials import extract_api_key_from_headers

logger = logging.getLogger(__name__)

Clock: TypeAlias = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _SessionEntry:
    credential: str
    created_at: datetime
    last_used_at: datetime


class SessionCredentialStore:
    """Map session ids to the credential supplied when the session was opened.

    Entries never expire unless `ttl_seconds` is set, in which case a session
    that has not been read for that long is treated as absent.
    """

    def __init__(self, *, ttl_seconds: int | None = None, clock: Clock | None = None) -> None:
        self._entries: dict[str, _SessionEntry] = {}
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._clock = clock or _utcnow

    def store(self, credential: str) -> str:
        if not credential:
            msg = "credential must be a non-empty string"
            raise ValueError(msg)
        session_id = uuid4().hex
        now = self._clock()
        self._entries[session_id] = _SessionEntry(
            credential=credential, created_at=now, last_used_at=now
        )
        logger.info("Stored credentials for session %s", session_id)
        return session_id

    def get(self, session_id: str | None) -> str | None:
        """Return the stored credential, or `None` for unknown or expired sessions.

        Without a TTL this is a plain read. With one, a hit restarts the idle
        timer; expired entries stay in place until `purge_expired` or `drop`.
        """
        if session_id is None:
            return None
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if self._ttl is None:
            return entry.credential
        now = self._clock()
        if self._expired(entry, now):
            return None
        entry.last_used_at = now
        return entry.credential

    def drop(self, session_id: str) -> bool:
        removed = self._entries.pop(session_id, None) is not None
        if removed:
            logger.info("Dropped session %s", session_id)
        return removed

    def purge_expired(self) -> int:
        """Remove expired sessions and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for session_id in expired:
            self.drop(session_id)
        return len(expired)

    def __contains__(self, session_id: object) -> bool:
        return isinstance(session_id, str) and self.get(session_id) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: _SessionEntry, now: datetime) -> bool:
        return self._ttl is not None and now - entry.last_used_at > self._ttl


def store_client_credentials(
    headers: Mapping[str, str], store: SessionCredentialStore
) -> str | None:
    """Open a session for a handshake that carries a credential.

    Returns `None` when the headers hold no credential; no session is created.
    """
    credential = extract_api_key_from_headers(headers)
    if credential is None:
        return None
    return store.store(credential)
