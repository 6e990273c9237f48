"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    service_name: str = "pylon-emulator"
    service_version: str = "0.1.0"
    host: str = "127.0.0.1"
    port: int = 7777
    public_base_url: str = "http://localhost:7777"
    trusted_issuer: str = "https://pylonid.eu/pid-issuer"
    credential_type: str = "SD-JWT VC"
    subject_age: int = 30
    verification_id_prefix: str = "ver_local_"
    webhook_timeout_seconds: float = 10.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def wallet_url(base_url: str, verification_id: str) -> str:
    """Build the wallet scan URL for a verification."""
    return f"{base_url.rstrip('/')}/scan/{verification_id}"
