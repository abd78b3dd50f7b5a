"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field

import pytest

from nutrilite.adapters.usda_client import UpstreamResponse, UsdaClient
from nutrilite.config import Settings
from nutrilite.containers import AppContainer
from nutrilite.services.chat import ChatClient, ChatService
from nutrilite.services.scheduler import SearchSessions
from nutrilite.services.storage import DayStorage, InMemoryKeyValueStore, KeyValueStore
from nutrilite.services.tracker import DayTracker
from nutrilite.services.usda_gateway import UsdaGateway

CHICKEN_FOOD = {
    "fdcId": 171077,
    "description": "Chicken, broilers or fryers, breast, meat only, cooked",
    "dataType": "SR Legacy",
    "foodNutrients": [
        {"nutrient": {"name": "Energy", "unitName": "kcal"}, "amount": 165},
        {"nutrient": {"name": "Protein", "unitName": "g"}, "amount": 31.02},
        {
            "nutrient": {"name": "Carbohydrate, by difference", "unitName": "g"},
            "amount": 0,
        },
        {"nutrient": {"name": "Total lipid (fat)", "unitName": "g"}, "amount": 3.57},
    ],
}


@dataclass
class FakeUsdaClient(UsdaClient):
    """Fake FDC client that records calls and returns canned responses."""

    search_response: UpstreamResponse = field(
        default_factory=lambda: UpstreamResponse(
            200,
            json.dumps(
                {
                    "foods": [
                        {
                            "fdcId": 171077,
                            "description": "Chicken breast, cooked",
                            "brandName": "",
                            "dataType": "SR Legacy",
                        }
                    ]
                }
            ),
        )
    )
    food_response: UpstreamResponse = field(
        default_factory=lambda: UpstreamResponse(200, json.dumps(CHICKEN_FOOD))
    )
    delay_seconds: float = 0.0
    search_calls: list[tuple[str, int, list[str] | None]] = field(default_factory=list)
    food_calls: list[str] = field(default_factory=list)

    async def search_foods(
        self, query: str, page_size: int = 12, data_type: list[str] | None = None
    ) -> UpstreamResponse:
        self.search_calls.append((query, page_size, data_type))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        return self.search_response

    async def get_food(self, fdc_id: str) -> UpstreamResponse:
        self.food_calls.append(fdc_id)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        return self.food_response


@dataclass
class FakeChatClient(ChatClient):
    """Fake chat backend returning a fixed reply."""

    reply: str = "  Try Greek yogurt with berries.  "
    error: Exception | None = None
    messages: list[str] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        message: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class BrokenKeyValueStore(KeyValueStore):
    """Store whose every operation fails, as if the backend were down."""

    def get(self, key: str) -> bytes | None:
        raise ConnectionError("store unavailable")

    def set(self, key: str, value: bytes) -> None:
        raise ConnectionError("store unavailable")

    def delete(self, key: str) -> None:
        raise ConnectionError("store unavailable")


class ReadOnlyKeyValueStore(InMemoryKeyValueStore):
    """Store that serves reads but rejects every write."""

    def set(self, key: str, value: bytes) -> None:
        raise PermissionError("store is read-only")

    def delete(self, key: str) -> None:
        raise PermissionError("store is read-only")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        usda_api_key="usda-key",
        openai_api_key="openai-key",
        timezone="UTC",
    )


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(kv_store: InMemoryKeyValueStore) -> DayStorage:
    return DayStorage(kv_store)


@pytest.fixture
def tracker(storage: DayStorage) -> DayTracker:
    return DayTracker(storage=storage)


@pytest.fixture
def usda_client() -> FakeUsdaClient:
    return FakeUsdaClient()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def container(
    settings: Settings,
    tracker: DayTracker,
    usda_client: FakeUsdaClient,
    chat_client: FakeChatClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    usda_gateway = UsdaGateway(client=usda_client, timeout_seconds=1.0)
    return AppContainer(
        settings=settings,
        usda_gateway=usda_gateway,
        chat_service=ChatService(client=chat_client, model=settings.openai_model),
        tracker=tracker,
        food_searches=SearchSessions(search=usda_gateway.run_query, quiet_seconds=0),
        close_resources=close_resources,
    )


def food(  # noqa: PLR0913
    description: str,
    kcal: float,
    *,
    grams: float = 100,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    ts: str = "2024-01-01T08:00:00+00:00",
) -> dict[str, object]:
    """Build a stored food item payload."""
    return {
        "description": description,
        "grams": grams,
        "kcal": kcal,
        "protein": protein,
        "carbs": carbs,
        "fat": fat,
        "ts": ts,
    }
