"""Domain models for verifiable presentations."""

import hashlib
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Presentation:
    """A signed presentation of a subject's credential."""

    session_id: str
    issuer: str
    credential_type: str
    issued_at: datetime
    credential: dict[str, object]
    proof_value: str

    @property
    def proof_hash(self) -> str:
        """Digest of the proof, safe to hand to relying parties."""
        digest = hashlib.sha256(self.proof_value.encode("utf-8")).hexdigest()
        return f"sha256:{digest}"
