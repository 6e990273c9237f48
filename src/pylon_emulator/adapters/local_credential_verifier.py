"""Local test issuer and verifier for emulated age presentations."""

import base64
import json
from dataclasses import dataclass
from datetime import UTC, datetime

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from pylon_emulator.domain.credentials import Presentation
from pylon_emulator.services.credentials import (
    CredentialVerifier,
    PresentationRejected,
)

CREDENTIAL_CONTEXT = "https://www.w3.org/2018/credentials/v1"
CREDENTIAL_TYPES = ["VerifiableCredential", "AgeVerificationCredential"]


@dataclass
class LocalCredentialVerifier(CredentialVerifier):
    """Signs presentations with an in-process P-256 key and verifies them."""

    issuer: str
    subject_age: int
    credential_type: str
    private_key: ec.EllipticCurvePrivateKey

    @classmethod
    def create(
        cls, issuer: str, subject_age: int, credential_type: str
    ) -> "LocalCredentialVerifier":
        """Create a verifier with a freshly generated issuer key."""
        return cls(
            issuer=issuer,
            subject_age=subject_age,
            credential_type=credential_type,
            private_key=ec.generate_private_key(ec.SECP256R1()),
        )

    async def create_presentation(
        self, session_id: str, consent: bool
    ) -> Presentation:
        """Issue a credential and disclose the subject's age only with consent."""
        issued_at = datetime.now(tz=UTC).replace(microsecond=0)
        subject: dict[str, object] = {"id": f"urn:pylon:subject:{session_id}"}
        if consent:
            subject["ageInYears"] = self.subject_age
        credential: dict[str, object] = {
            "@context": [CREDENTIAL_CONTEXT],
            "type": list(CREDENTIAL_TYPES),
            "issuer": self.issuer,
            "issuanceDate": issued_at.isoformat().replace("+00:00", "Z"),
            "credentialSubject": subject,
        }
        signature = self.private_key.sign(
            _canonicalize(credential), ec.ECDSA(hashes.SHA256())
        )
        return Presentation(
            session_id=session_id,
            issuer=self.issuer,
            credential_type=self.credential_type,
            issued_at=issued_at,
            credential=credential,
            proof_value=_base64url_encode(signature),
        )

    async def verify_presentation(
        self, presentation: Presentation, min_age: int, issuer: str
    ) -> bool:
        """Check structure, issuer and signature, then evaluate the age predicate."""
        credential = presentation.credential
        subject = credential.get("credentialSubject")
        types = credential.get("type")
        if not isinstance(subject, dict) or not isinstance(types, list):
            raise PresentationRejected("malformed credential")
        if "VerifiableCredential" not in types:
            raise PresentationRejected("malformed credential")
        if credential.get("issuer") != issuer or presentation.issuer != issuer:
            raise PresentationRejected("issuer mismatch")
        try:
            signature = _base64url_decode(presentation.proof_value)
            self.private_key.public_key().verify(
                signature, _canonicalize(credential), ec.ECDSA(hashes.SHA256())
            )
        except (InvalidSignature, ValueError) as exc:
            raise PresentationRejected("signature invalid") from exc
        age = subject.get("ageInYears")
        if isinstance(age, bool) or not isinstance(age, int):
            return False
        return age >= min_age


def _canonicalize(data: dict[str, object]) -> bytes:
    """Serialize JSON deterministically for signing."""
    return json.dumps(
        data, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _base64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)
