"""Domain models for age verification sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pylon_emulator.domain.credentials import Presentation


class VerificationStatus(StrEnum):
    """Lifecycle states of a verification session."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not VerificationStatus.PENDING


@dataclass(frozen=True)
class VerificationSession:
    """Represents one relying-party request for age verification."""

    id: str
    min_age: int
    callback_url: str
    status: VerificationStatus
    created_at: datetime
    result: bool | None = None
    error: str | None = None
    resolved_at: datetime | None = None


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of evaluating a presentation for a session."""

    verified: bool
    presentation: Presentation
    error: str | None = None

    @property
    def status(self) -> VerificationStatus:
        if self.error is not None:
            return VerificationStatus.FAILED
        return VerificationStatus.COMPLETED


@dataclass(frozen=True)
class VerificationTicket:
    """Returned to the relying party when a verification is requested."""

    verification_id: str
    status: VerificationStatus
    wallet_url: str
