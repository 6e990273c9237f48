"""Webhook payloads and fire-and-forget delivery to relying parties."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from pylon_emulator.adapters.webhook_client import WebhookClient
from pylon_emulator.domain.credentials import Presentation
from pylon_emulator.domain.verifications import VerificationSession, VerificationStatus

logger = logging.getLogger(__name__)


class DeliveryFailure(Exception):
    """A webhook could not be delivered to the relying party."""


class WebhookEvidence(BaseModel):
    """Provenance of the presentation behind a result."""

    model_config = ConfigDict(populate_by_name=True)

    issuer: str
    credential_type: str = Field(alias="credentialType")
    proof_hash: str = Field(alias="proofHash")
    issued_at: str = Field(alias="issuedAt")


class WebhookAudit(BaseModel):
    """Audit trail identifiers."""

    model_config = ConfigDict(populate_by_name=True)

    trace_id: str = Field(alias="traceId")


class WebhookPayload(BaseModel):
    """Outcome notification posted to the relying party's callback URL."""

    model_config = ConfigDict(populate_by_name=True)

    verification_id: str = Field(alias="verificationId")
    type: Literal["age"] = "age"
    result: Literal["verified", "not_verified"]
    attributes: dict[str, bool]
    evidence: WebhookEvidence
    audit: WebhookAudit

    def to_json(self) -> dict[str, object]:
        """Return the wire representation with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


def build_webhook_payload(
    session: VerificationSession, presentation: Presentation
) -> WebhookPayload:
    """Build the fixed-schema payload for a resolved session."""
    verified = session.status is VerificationStatus.COMPLETED and bool(session.result)
    return WebhookPayload(
        verification_id=session.id,
        result="verified" if verified else "not_verified",
        attributes={f"ageOver{session.min_age}": verified},
        evidence=WebhookEvidence(
            issuer=presentation.issuer,
            credential_type=presentation.credential_type,
            proof_hash=presentation.proof_hash,
            issued_at=presentation.issued_at.isoformat().replace("+00:00", "Z"),
        ),
        audit=WebhookAudit(trace_id=f"trace_{session.id}"),
    )


@dataclass
class WebhookDispatcher:
    """Delivers webhooks on detached tasks, at most once per session."""

    client: WebhookClient
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _dispatched: set[str] = field(default_factory=set, init=False)

    def dispatch(self, callback_url: str, payload: WebhookPayload) -> bool:
        """Schedule delivery without waiting for it; return False if skipped."""
        session_id = payload.verification_id
        if session_id in self._dispatched:
            logger.warning(
                "Webhook already dispatched, skipping",
                extra={"session_id": session_id},
            )
            return False
        self._dispatched.add(session_id)
        task = asyncio.get_running_loop().create_task(
            self._deliver_in_background(callback_url, payload)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def deliver(self, callback_url: str, payload: WebhookPayload) -> int:
        """POST the payload once and return the relying party's status code."""
        try:
            return await self.client.post_json(callback_url, payload.to_json())
        except httpx.HTTPError as exc:
            raise DeliveryFailure(f"{type(exc).__name__}: {exc}") from exc

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Drain outstanding deliveries and release the HTTP client."""
        await self.drain()
        await self.client.close()

    async def _deliver_in_background(
        self, callback_url: str, payload: WebhookPayload
    ) -> None:
        extra = {"session_id": payload.verification_id, "callback_url": callback_url}
        logger.info("Firing webhook to %s", callback_url, extra=extra)
        try:
            status_code = await self.deliver(callback_url, payload)
        except DeliveryFailure as exc:
            logger.warning("Webhook delivery failed: %s", exc, extra=extra)
            return
        except Exception:
            logger.exception("Unexpected error delivering webhook", extra=extra)
            return
        logger.info("Webhook delivered with status %s", status_code, extra=extra)
