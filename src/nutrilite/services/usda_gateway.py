"""Proxy gateway in front of USDA FoodData Central."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from nutrilite.adapters.usda_client import UpstreamResponse, UsdaClient

MIN_QUERY_LENGTH = 2
DEFAULT_PAGE_SIZE = 12
MAX_DETAIL_CHARS = 500

_logger = logging.getLogger(__name__)


class GatewayOutcome(str, Enum):
    """Classification of a proxied call."""

    OK = "ok"
    INVALID_REQUEST = "invalid_request"
    MISCONFIGURED = "misconfigured"
    UPSTREAM_ERROR = "upstream_error"
    BAD_UPSTREAM_RESPONSE = "bad_upstream_response"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class GatewayResult:
    """Status code and JSON body to relay to the caller."""

    outcome: GatewayOutcome
    status_code: int
    body: object


@dataclass(frozen=True)
class FoodQuery:
    """A search request as typed by the user."""

    text: str
    page_size: int = DEFAULT_PAGE_SIZE
    data_types: tuple[str, ...] | None = None


@dataclass
class UsdaGateway:
    """Relays search and detail lookups, keeping the API key server-side.

    `client` is None when no API key is configured.
    """

    client: UsdaClient | None
    timeout_seconds: float = 12.0

    async def search(
        self,
        query: object,
        page_size: object = DEFAULT_PAGE_SIZE,
        data_type: object = None,
    ) -> GatewayResult:
        """Search foods by free text."""
        cleaned = str(query or "").strip()
        if not cleaned:
            return _invalid("Missing query")
        if len(cleaned) < MIN_QUERY_LENGTH:
            return GatewayResult(GatewayOutcome.OK, 200, {"foods": []})
        client = self.client
        if client is None:
            return _misconfigured()
        size = page_size if isinstance(page_size, int) and page_size > 0 else None
        categories = (
            [str(value) for value in data_type] if isinstance(data_type, list) else None
        )
        return await self._relay(
            lambda: client.search_foods(
                cleaned, page_size=size or DEFAULT_PAGE_SIZE, data_type=categories
            ),
            action="search",
        )

    async def run_query(self, query: FoodQuery) -> GatewayResult:
        data_types = list(query.data_types) if query.data_types is not None else None
        return await self.search(
            query.text, page_size=query.page_size, data_type=data_types
        )

    async def get_food(self, fdc_id: object) -> GatewayResult:
        """Fetch full nutrient detail for one food."""
        cleaned = str(fdc_id or "").strip()
        if not cleaned:
            return _invalid("Missing fdcId")
        client = self.client
        if client is None:
            return _misconfigured()
        return await self._relay(lambda: client.get_food(cleaned), action="food lookup")

    async def _relay(
        self, func: Callable[[], Awaitable[UpstreamResponse]], *, action: str
    ) -> GatewayResult:
        try:
            response = await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except (TimeoutError, httpx.TimeoutException) as exc:
            _logger.warning("USDA %s timed out after %ss", action, self.timeout_seconds)
            return GatewayResult(
                GatewayOutcome.TIMED_OUT,
                504,
                {"error": f"USDA {action} timed out.", "details": str(exc)},
            )
        except Exception as exc:
            _logger.exception("USDA %s failed", action)
            return GatewayResult(
                GatewayOutcome.FAILED,
                500,
                {"error": f"USDA {action} failed.", "details": str(exc)},
            )
        return normalize_upstream_response(response)


def normalize_upstream_response(response: UpstreamResponse) -> GatewayResult:
    """Split an upstream reply into success, upstream error or bad body."""
    data = safe_json_parse(response.text)
    if not response.ok:
        details = data
        if details is None:
            details = response.text[:MAX_DETAIL_CHARS] or "No response body"
        return GatewayResult(
            GatewayOutcome.UPSTREAM_ERROR,
            response.status_code,
            {
                "error": "USDA API returned error",
                "status": response.status_code,
                "details": details,
            },
        )
    if data is None:
        return GatewayResult(
            GatewayOutcome.BAD_UPSTREAM_RESPONSE,
            502,
            {
                "error": "USDA API returned non-JSON response",
                "details": response.text[:MAX_DETAIL_CHARS] or "Empty response",
            },
        )
    return GatewayResult(GatewayOutcome.OK, 200, data)


def safe_json_parse(text: str | None) -> object | None:
    """Parse JSON text, returning None for empty or invalid input."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _invalid(message: str) -> GatewayResult:
    return GatewayResult(GatewayOutcome.INVALID_REQUEST, 400, {"error": message})


def _misconfigured() -> GatewayResult:
    return GatewayResult(
        GatewayOutcome.MISCONFIGURED,
        500,
        {"error": "USDA_API_KEY is not set on the server."},
    )
