"""Credential presentation capability consumed by the verification lifecycle."""

from typing import Protocol

from pylon_emulator.domain.credentials import Presentation


class CredentialError(Exception):
    """The credential backend could not complete an operation."""


class PresentationRejected(CredentialError):
    """The presentation was evaluated and found unacceptable.

    Unlike other credential errors this resolves the session as failed: the
    wallet call answers 200 and the webhook reports not_verified, while an
    operational ``CredentialError`` answers 500 and leaves the session pending.
    """


class CredentialVerifier(Protocol):
    """Interface for creating and verifying age presentations."""

    async def create_presentation(
        self, session_id: str, consent: bool
    ) -> Presentation:
        """Synthesize a presentation reflecting the subject's consent decision."""

    async def verify_presentation(
        self, presentation: Presentation, min_age: int, issuer: str
    ) -> bool:
        """Check the presentation against the issuer and evaluate the predicate."""
