"""Verification lifecycle: request, consent, resolution, notification."""

import logging
from dataclasses import dataclass

from pylon_emulator.config import wallet_url
from pylon_emulator.domain.verifications import (
    VerificationOutcome,
    VerificationSession,
    VerificationStatus,
    VerificationTicket,
)
from pylon_emulator.services.credentials import (
    CredentialError,
    CredentialVerifier,
    PresentationRejected,
)
from pylon_emulator.services.sessions import (
    AlreadyResolved,
    SessionStore,
    VerificationError,
    VerificationNotFound,
)
from pylon_emulator.services.webhooks import WebhookDispatcher, build_webhook_payload

logger = logging.getLogger(__name__)


class CollaboratorFailure(VerificationError):
    """The credential backend failed before a verdict was reached."""


@dataclass
class VerificationService:
    """State machine driving a session from pending to a terminal state.

    A session moves from ``pending`` to ``completed`` (the age predicate was
    evaluated) or ``failed`` (the presentation was rejected). The store's
    ``mark_resolved`` is the only place that transition happens, so of two
    concurrent resolutions exactly one wins and only the winner enqueues a
    webhook. Operational errors from the credential backend abort before any
    mutation and leave the session pending.
    """

    store: SessionStore
    verifier: CredentialVerifier
    dispatcher: WebhookDispatcher
    trusted_issuer: str
    public_base_url: str

    async def request_verification(
        self, min_age: int, callback_url: str
    ) -> VerificationTicket:
        """Create a pending session and return where the wallet should go."""
        session = await self.store.create(min_age=min_age, callback_url=callback_url)
        logger.info(
            "Verification requested",
            extra={
                "session_id": session.id,
                "min_age": min_age,
                "callback_url": callback_url,
            },
        )
        return VerificationTicket(
            verification_id=session.id,
            status=session.status,
            wallet_url=wallet_url(self.public_base_url, session.id),
        )

    async def get_verification(self, session_id: str) -> VerificationSession:
        """Return a session or raise VerificationNotFound."""
        session = await self.store.get(session_id)
        if session is None:
            raise VerificationNotFound(session_id)
        return session

    async def resolve(self, session_id: str, consent: bool) -> VerificationSession:
        """Resolve a session from a wallet consent decision."""
        session = await self.get_verification(session_id)
        if session.status is not VerificationStatus.PENDING:
            raise AlreadyResolved(session_id, session.status)

        try:
            presentation = await self.verifier.create_presentation(session_id, consent)
        except CredentialError as exc:
            logger.exception(
                "Presentation creation failed", extra={"session_id": session_id}
            )
            raise CollaboratorFailure(session_id, str(exc)) from exc

        try:
            verified = await self.verifier.verify_presentation(
                presentation, session.min_age, self.trusted_issuer
            )
        except PresentationRejected as exc:
            logger.warning(
                "Presentation rejected: %s", exc, extra={"session_id": session_id}
            )
            outcome = VerificationOutcome(
                verified=False, presentation=presentation, error=str(exc)
            )
        except CredentialError as exc:
            logger.exception(
                "Presentation verification failed", extra={"session_id": session_id}
            )
            raise CollaboratorFailure(session_id, str(exc)) from exc
        else:
            outcome = VerificationOutcome(verified=verified, presentation=presentation)

        resolved = await self.store.mark_resolved(session_id, outcome)
        logger.info(
            "Verification %s",
            resolved.status,
            extra={"session_id": session_id, "result": resolved.result},
        )
        self.dispatcher.dispatch(
            resolved.callback_url, build_webhook_payload(resolved, presentation)
        )
        return resolved
