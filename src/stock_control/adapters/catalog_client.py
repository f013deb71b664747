"""Backend client for the reference data shown on the product detail step."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from stock_control.adapters.backend_http import TokenProvider, request_json


class CatalogClient(Protocol):
    """Interface for reading lookup lists from the backend."""

    async def list_stock_units(self) -> dict[str, object]:
        """Return the raw stock unit list body."""


@dataclass
class HttpxCatalogClient(CatalogClient):
    """HTTPX-backed catalog client."""

    base_url: str
    token_provider: TokenProvider
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(
        cls, base_url: str, token_provider: TokenProvider, timeout: float = 10
    ) -> "HttpxCatalogClient":
        """Create a catalog client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_provider=token_provider,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def list_stock_units(self) -> dict[str, object]:
        """Fetch every stock unit configured for the account."""
        return await request_json(
            self.http_client,
            "GET",
            f"{self.base_url}/api/user/settings/stokbirimi/all",
            token_provider=self.token_provider,
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
