"""Backend client for shelves, products and product photos."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

from stock_control.adapters.backend_http import TokenProvider, request_json
from stock_control.domain.capture import RecordCreateRequest


class InventoryClient(Protocol):
    """Interface for the remote inventory operations used by registration."""

    async def create_shelf(self, identifier: str, warehouse_id: int) -> int | None:
        """Create (or confirm) a shelf and return its backend id, if reported."""

    async def create_record(self, request: RecordCreateRequest) -> dict[str, object]:
        """Create a product and return the raw response body."""

    async def upload_attachment(self, record_id: int, file_path: str) -> None:
        """Upload one photo for a created product."""


@dataclass
class HttpxInventoryClient(InventoryClient):
    """HTTPX-backed inventory client."""

    base_url: str
    token_provider: TokenProvider
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, base_url: str, token_provider: TokenProvider, timeout: float = 15
    ) -> "HttpxInventoryClient":
        """Create an inventory client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_provider=token_provider,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def create_shelf(self, identifier: str, warehouse_id: int) -> int | None:
        """Create a shelf via the mobile shelf endpoint."""
        payload = await request_json(
            self.http_client,
            "POST",
            f"{self.base_url}/api/user/main/raf/create-mobile",
            token_provider=self.token_provider,
            timeout=self.timeout,
            json={
                "rafSeriNo": identifier,
                "depoId": warehouse_id,
                "aciklama": "Mobile terminal shelf",
            },
        )
        return _shelf_id(payload)

    async def create_record(self, request: RecordCreateRequest) -> dict[str, object]:
        """Create a product from the terminal."""
        return await request_json(
            self.http_client,
            "POST",
            f"{self.base_url}/api/user/main/urun/create",
            token_provider=self.token_provider,
            timeout=self.timeout,
            json={
                "urunSeriNo": request.product_identifier,
                "rafSeriNo": request.shelf_identifier,
                "aciklama": request.description.strip(),
                "markaId": None,
                "stokBirimiId": request.unit_id,
                "stokBirimi2Id": request.secondary_unit_id,
                "en": request.width,
                "boy": request.length,
                "yukseklik": request.height,
                "bolgeId": request.region_id,
                "depoId": request.warehouse_id,
                "rafId": request.shelf_id,
            },
        )

    async def upload_attachment(self, record_id: int, file_path: str) -> None:
        """Upload a JPEG photo as multipart form data."""
        path = Path(file_path)
        content = await asyncio.to_thread(path.read_bytes)
        await request_json(
            self.http_client,
            "POST",
            f"{self.base_url}/api/user/main/mobile/file/urun/{record_id}/upload-photo",
            token_provider=self.token_provider,
            timeout=self.timeout,
            files={"photo": (path.name, content, "image/jpeg")},
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _shelf_id(payload: dict[str, object]) -> int | None:
    """Read the shelf id from a create response; older backends omit it."""
    value = payload.get("rafId")
    data = payload.get("data")
    if value is None and isinstance(data, dict):
        value = data.get("rafId")
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None
