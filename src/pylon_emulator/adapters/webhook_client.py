"""Outbound webhook HTTP client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class WebhookClient(Protocol):
    """Interface for posting webhook notifications."""

    async def post_json(self, url: str, payload: dict[str, object]) -> int:
        """POST a JSON payload and return the response status code."""

    async def close(self) -> None:
        """Release any underlying resources."""


@dataclass
class HttpxWebhookClient(WebhookClient):
    """Webhook client implemented with httpx."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, timeout_seconds: float = 10.0) -> "HttpxWebhookClient":
        """Create a webhook client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout_seconds=timeout_seconds)

    async def post_json(self, url: str, payload: dict[str, object]) -> int:
        """POST the payload, raising for transport errors and non-2xx replies."""
        response = await self.http_client.post(
            url, json=payload, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response.status_code

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
