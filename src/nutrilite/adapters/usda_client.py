"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx


@dataclass(frozen=True)
class UpstreamResponse:
    """Raw upstream status and body text."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class UsdaClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page_size: int = 12, data_type: list[str] | None = None
    ) -> UpstreamResponse:
        """Search foods by query and return the raw response."""

    async def get_food(self, fdc_id: str) -> UpstreamResponse:
        """Fetch a food by FDC id and return the raw response."""


@dataclass
class HttpxUsdaClient(UsdaClient):
    """HTTPX-backed FDC client that never raises on HTTP status."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 12.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 12.0
    ) -> "HttpxUsdaClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(
        self, query: str, page_size: int = 12, data_type: list[str] | None = None
    ) -> UpstreamResponse:
        """Search foods by query."""
        payload: dict[str, object] = {"query": query, "pageSize": page_size}
        if isinstance(data_type, list):
            payload["dataType"] = data_type
        response = await self.http_client.post(
            f"{self.base_url}/foods/search",
            params={"api_key": self.api_key},
            json=payload,
            timeout=self.timeout_seconds,
        )
        return UpstreamResponse(status_code=response.status_code, text=response.text)

    async def get_food(self, fdc_id: str) -> UpstreamResponse:
        """Fetch a food by FDC id."""
        response = await self.http_client.get(
            f"{self.base_url}/food/{quote(fdc_id, safe='')}",
            params={"api_key": self.api_key},
            timeout=self.timeout_seconds,
        )
        return UpstreamResponse(status_code=response.status_code, text=response.text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
