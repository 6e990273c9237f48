"""Concurrency-safe storage for verification sessions."""

import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol

from pylon_emulator.domain.verifications import (
    VerificationOutcome,
    VerificationSession,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_ID_PREFIX = "ver_local_"
MAX_ID_ATTEMPTS = 16


class VerificationError(Exception):
    """Base error for verification lifecycle failures."""

    def __init__(self, session_id: str, message: str) -> None:
        super().__init__(message)
        self.session_id = session_id


class VerificationNotFound(VerificationError):
    """Raised when a session id is unknown."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id, f"Verification {session_id} not found")


class AlreadyResolved(VerificationError):
    """Raised when a session has already left the pending state."""

    def __init__(self, session_id: str, status: VerificationStatus) -> None:
        super().__init__(session_id, f"Verification {session_id} is already {status}")
        self.status = status


class SessionStore(Protocol):
    """Storage interface for verification sessions."""

    async def create(self, min_age: int, callback_url: str) -> VerificationSession:
        """Insert a new pending session and return it."""

    async def get(self, session_id: str) -> VerificationSession | None:
        """Return a session by id, if present."""

    async def mark_resolved(
        self, session_id: str, outcome: VerificationOutcome
    ) -> VerificationSession:
        """Move a pending session to its terminal state and return it."""

    async def list_sessions(self) -> list[VerificationSession]:
        """Return all sessions in creation order."""


def random_verification_id(prefix: str = DEFAULT_ID_PREFIX) -> str:
    """Return a prefixed 8-character uppercase random identifier."""
    return f"{prefix}{secrets.token_hex(4).upper()}"


class InMemorySessionStore(SessionStore):
    """Process-lifetime session store guarded by a single lock."""

    def __init__(
        self,
        id_factory: Callable[[], str] = random_verification_id,
        max_id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self._id_factory = id_factory
        self._max_id_attempts = max_id_attempts
        self._sessions: dict[str, VerificationSession] = {}
        self._lock = asyncio.Lock()

    async def create(self, min_age: int, callback_url: str) -> VerificationSession:
        """Allocate a fresh id under the lock and insert a pending session."""
        async with self._lock:
            session_id = self._allocate_id()
            session = VerificationSession(
                id=session_id,
                min_age=min_age,
                callback_url=callback_url,
                status=VerificationStatus.PENDING,
                created_at=datetime.now(tz=UTC),
            )
            self._sessions[session_id] = session
        return session

    async def get(self, session_id: str) -> VerificationSession | None:
        return self._sessions.get(session_id)

    async def mark_resolved(
        self, session_id: str, outcome: VerificationOutcome
    ) -> VerificationSession:
        """Apply the pending -> terminal transition exactly once."""
        async with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise VerificationNotFound(session_id)
            if current.status.is_terminal:
                raise AlreadyResolved(session_id, current.status)
            resolved = replace(
                current,
                status=outcome.status,
                result=None if outcome.error is not None else outcome.verified,
                error=outcome.error,
                resolved_at=datetime.now(tz=UTC),
            )
            self._sessions[session_id] = resolved
        return resolved

    async def list_sessions(self) -> list[VerificationSession]:
        async with self._lock:
            return list(self._sessions.values())

    def _allocate_id(self) -> str:
        for _ in range(self._max_id_attempts):
            candidate = self._id_factory()
            if candidate not in self._sessions:
                return candidate
            logger.warning(
                "Verification id collision, retrying", extra={"session_id": candidate}
            )
        raise RuntimeError(
            f"Could not allocate a unique verification id "
            f"after {self._max_id_attempts} attempts"
        )
