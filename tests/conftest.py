"""Shared test fixtures."""

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from pylon_emulator.adapters.webhook_client import WebhookClient
from pylon_emulator.config import Settings
from pylon_emulator.containers import AppContainer
from pylon_emulator.domain.credentials import Presentation
from pylon_emulator.services.credentials import CredentialError, CredentialVerifier
from pylon_emulator.services.sessions import InMemorySessionStore
from pylon_emulator.services.verifications import VerificationService
from pylon_emulator.services.webhooks import WebhookDispatcher

TRUSTED_ISSUER = "https://pylonid.eu/pid-issuer"


def make_presentation(
    session_id: str = "ver_local_TEST0001",
    issuer: str = TRUSTED_ISSUER,
    age: int | None = 30,
) -> Presentation:
    subject: dict[str, object] = {"id": f"urn:pylon:subject:{session_id}"}
    if age is not None:
        subject["ageInYears"] = age
    return Presentation(
        session_id=session_id,
        issuer=issuer,
        credential_type="SD-JWT VC",
        issued_at=datetime(2025, 1, 15, 14, 30, tzinfo=UTC),
        credential={"issuer": issuer, "credentialSubject": subject},
        proof_value="c2lnbmF0dXJl",
    )


class SequentialIds:
    """Id factory returning a fixed sequence of identifiers."""

    def __init__(self, *ids: str) -> None:
        self._ids: Iterator[str] = iter(ids)

    def __call__(self) -> str:
        return next(self._ids)


@dataclass
class FakeCredentialVerifier(CredentialVerifier):
    """Deterministic credential backend with injectable failures."""

    subject_age: int = 30
    create_error: CredentialError | None = None
    verify_error: CredentialError | None = None
    created: list[tuple[str, bool]] = field(default_factory=list)
    verified: list[tuple[str, int, str]] = field(default_factory=list)

    async def create_presentation(
        self, session_id: str, consent: bool
    ) -> Presentation:
        await asyncio.sleep(0)
        self.created.append((session_id, consent))
        if self.create_error is not None:
            raise self.create_error
        return make_presentation(session_id, age=self.subject_age if consent else None)

    async def verify_presentation(
        self, presentation: Presentation, min_age: int, issuer: str
    ) -> bool:
        await asyncio.sleep(0)
        self.verified.append((presentation.session_id, min_age, issuer))
        if self.verify_error is not None:
            raise self.verify_error
        age = presentation.credential["credentialSubject"].get("ageInYears")
        return isinstance(age, int) and age >= min_age


@dataclass
class RecordingWebhookClient(WebhookClient):
    """Webhook client that records posts instead of sending them."""

    status_code: int = 200
    error: Exception | None = None
    posts: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    closed: bool = False

    async def post_json(self, url: str, payload: dict[str, object]) -> int:
        await asyncio.sleep(0)
        self.posts.append((url, payload))
        if self.error is not None:
            raise self.error
        return self.status_code

    async def close(self) -> None:
        self.closed = True


def build_service(
    verifier: FakeCredentialVerifier | None = None,
    webhook_client: RecordingWebhookClient | None = None,
    store: InMemorySessionStore | None = None,
) -> VerificationService:
    return VerificationService(
        store=store or InMemorySessionStore(),
        verifier=verifier or FakeCredentialVerifier(),
        dispatcher=WebhookDispatcher(webhook_client or RecordingWebhookClient()),
        trusted_issuer=TRUSTED_ISSUER,
        public_base_url="http://localhost:7777",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        public_base_url="http://localhost:7777",
        trusted_issuer=TRUSTED_ISSUER,
        environment="test",
    )


@pytest.fixture
def credential_verifier() -> FakeCredentialVerifier:
    return FakeCredentialVerifier()


@pytest.fixture
def webhook_client() -> RecordingWebhookClient:
    return RecordingWebhookClient()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(
        id_factory=SequentialIds("ver_local_ABCD1234", "ver_local_EFGH5678")
    )


@pytest.fixture
def container(
    settings: Settings,
    session_store: InMemorySessionStore,
    credential_verifier: FakeCredentialVerifier,
    webhook_client: RecordingWebhookClient,
) -> AppContainer:
    dispatcher = WebhookDispatcher(webhook_client)
    verification_service = VerificationService(
        store=session_store,
        verifier=credential_verifier,
        dispatcher=dispatcher,
        trusted_issuer=settings.trusted_issuer,
        public_base_url=settings.public_base_url,
    )

    async def close_resources() -> None:
        await dispatcher.close()

    return AppContainer(
        settings=settings,
        session_store=session_store,
        webhook_dispatcher=dispatcher,
        verification_service=verification_service,
        close_resources=close_resources,
    )
