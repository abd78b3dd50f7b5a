"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrilite.adapters.openai_chat_client import OpenAIChatClient
from nutrilite.adapters.supabase_key_value_store import SupabaseKeyValueStore
from nutrilite.adapters.usda_client import HttpxUsdaClient
from nutrilite.config import Settings
from nutrilite.services.chat import ChatService
from nutrilite.services.storage import DayStorage, InMemoryKeyValueStore, KeyValueStore
from nutrilite.services.tracker import DayTracker
from nutrilite.services.scheduler import SearchSessions
from nutrilite.services.usda_gateway import FoodQuery, GatewayResult, UsdaGateway

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    usda_gateway: UsdaGateway
    chat_service: ChatService
    tracker: DayTracker
    food_searches: SearchSessions[FoodQuery, GatewayResult]
    close_resources: Callable[[], Awaitable[None]]


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Use Supabase when configured, else a process-local store."""
    if settings.supabase_url and settings.supabase_service_key:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    _logger.warning("Supabase is not configured; day logs are kept in memory")
    return InMemoryKeyValueStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()

    usda_client = (
        HttpxUsdaClient.create(
            api_key=resolved_settings.usda_api_key,
            base_url=resolved_settings.usda_base_url,
            timeout_seconds=resolved_settings.usda_timeout_seconds,
        )
        if resolved_settings.usda_api_key
        else None
    )
    usda_gateway = UsdaGateway(
        client=usda_client,
        timeout_seconds=resolved_settings.usda_timeout_seconds,
    )

    food_searches: SearchSessions[FoodQuery, GatewayResult] = SearchSessions(
        search=usda_gateway.run_query,
        quiet_seconds=resolved_settings.search_quiet_seconds,
    )

    chat_client = (
        OpenAIChatClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    chat_service = ChatService(client=chat_client, model=resolved_settings.openai_model)

    tracker = DayTracker(
        storage=DayStorage(build_key_value_store(resolved_settings)),
        timezone=resolved_settings.timezone,
        kcal_per_step=resolved_settings.kcal_per_step,
        default_goal=resolved_settings.default_goal,
        default_steps=resolved_settings.default_steps,
    )

    async def close_resources() -> None:
        if usda_client is not None:
            await usda_client.close()
        if chat_client is not None:
            await chat_client.close()

    return AppContainer(
        settings=resolved_settings,
        usda_gateway=usda_gateway,
        chat_service=chat_service,
        tracker=tracker,
        food_searches=food_searches,
        close_resources=close_resources,
    )
