"""Backend client for the user's session snapshot."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from stock_control.adapters.backend_http import TokenProvider, request_json


class SessionClient(Protocol):
    """Interface for reading the current session from the backend."""

    async def fetch_current(self) -> dict[str, object]:
        """Return the raw current-session body."""


@dataclass
class HttpxSessionClient(SessionClient):
    """HTTPX-backed session client."""

    base_url: str
    token_provider: TokenProvider
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(
        cls, base_url: str, token_provider: TokenProvider, timeout: float = 10
    ) -> "HttpxSessionClient":
        """Create a session client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_provider=token_provider,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def fetch_current(self) -> dict[str, object]:
        """Fetch the session with the selected region and warehouse."""
        return await request_json(
            self.http_client,
            "GET",
            f"{self.base_url}/api/user/session/current",
            token_provider=self.token_provider,
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
