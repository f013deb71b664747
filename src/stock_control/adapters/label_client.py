"""Backend client for label allocation."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from stock_control.adapters.backend_http import TokenProvider, request_json
from stock_control.domain.labels import LabelKind

_LABEL_PATHS = {
    LabelKind.SHELF: "/api/user/main/raf/generate-labels",
    LabelKind.PRODUCT: "/api/user/main/urun/generate-labels",
}


class LabelClient(Protocol):
    """Interface for the remote label service."""

    async def generate_label_batch(self, kind: LabelKind, count: int) -> dict[str, object]:
        """Allocate labels and return the raw response body."""


@dataclass
class HttpxLabelClient(LabelClient):
    """HTTPX-backed label client."""

    base_url: str
    token_provider: TokenProvider
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, base_url: str, token_provider: TokenProvider, timeout: float = 15
    ) -> "HttpxLabelClient":
        """Create a label client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_provider=token_provider,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def generate_label_batch(self, kind: LabelKind, count: int) -> dict[str, object]:
        """Request standard-size labels of the given kind."""
        params: dict[str, object] = {"adet": count, "boyut": "STANDART"}
        if kind is LabelKind.PRODUCT:
            params["herBatchteAdet"] = count
        return await request_json(
            self.http_client,
            "POST",
            f"{self.base_url}{_LABEL_PATHS[kind]}",
            token_provider=self.token_provider,
            timeout=self.timeout,
            params=params,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
