"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from pylon_emulator.adapters.local_credential_verifier import LocalCredentialVerifier
from pylon_emulator.adapters.webhook_client import HttpxWebhookClient
from pylon_emulator.config import Settings
from pylon_emulator.services.sessions import (
    InMemorySessionStore,
    SessionStore,
    random_verification_id,
)
from pylon_emulator.services.verifications import VerificationService
from pylon_emulator.services.webhooks import WebhookDispatcher


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    webhook_dispatcher: WebhookDispatcher
    verification_service: VerificationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_store = InMemorySessionStore(
        id_factory=partial(
            random_verification_id, resolved_settings.verification_id_prefix
        )
    )
    credential_verifier = LocalCredentialVerifier.create(
        issuer=resolved_settings.trusted_issuer,
        subject_age=resolved_settings.subject_age,
        credential_type=resolved_settings.credential_type,
    )
    webhook_dispatcher = WebhookDispatcher(
        HttpxWebhookClient.create(
            timeout_seconds=resolved_settings.webhook_timeout_seconds
        )
    )
    verification_service = VerificationService(
        store=session_store,
        verifier=credential_verifier,
        dispatcher=webhook_dispatcher,
        trusted_issuer=resolved_settings.trusted_issuer,
        public_base_url=resolved_settings.public_base_url,
    )

    async def close_resources() -> None:
        await webhook_dispatcher.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        webhook_dispatcher=webhook_dispatcher,
        verification_service=verification_service,
        close_resources=close_resources,
    )
