"""Pydantic models for the emulator's HTTP API."""

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from pylon_emulator.domain.verifications import VerificationStatus

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class AgePolicy(BaseModel):
    """Age predicate requested by the relying party."""

    model_config = ConfigDict(populate_by_name=True)

    min_age: int = Field(alias="minAge", gt=0)


class VerifyAgeRequest(BaseModel):
    """Body of an age verification request."""

    model_config = ConfigDict(populate_by_name=True)

    policy: AgePolicy
    callback_url: str = Field(alias="callbackUrl")

    @field_validator("callback_url")
    @classmethod
    def require_http_url(cls, value: str) -> str:
        """Accept absolute http(s) URLs and keep them exactly as sent."""
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError("callbackUrl must be an absolute http(s) URL") from exc
        return value


class VerifyAgeResponse(BaseModel):
    """Ticket returned for a new verification."""

    model_config = ConfigDict(populate_by_name=True)

    verification_id: str = Field(alias="verificationId")
    status: VerificationStatus
    wallet_url: str = Field(alias="walletUrl")


class VerificationStatusResponse(BaseModel):
    """Current state of a verification."""

    model_config = ConfigDict(populate_by_name=True)

    verification_id: str = Field(alias="verificationId")
    status: VerificationStatus
    min_age: int = Field(alias="minAge")
    callback_url: str = Field(alias="callbackUrl")
    result: bool | None = None
    error: str | None = None


class ResolutionResponse(BaseModel):
    """Acknowledgement of a wallet consent decision."""

    model_config = ConfigDict(populate_by_name=True)

    verification_id: str = Field(alias="verificationId")
    status: VerificationStatus
