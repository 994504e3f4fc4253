"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from culinary_lens.adapters.openai_image_client import OpenAIImageClient
from culinary_lens.adapters.openai_menu_client import OpenAIMenuClient
from culinary_lens.config import Settings
from culinary_lens.services.editing import EditSessionManager
from culinary_lens.services.generation import GenerationOrchestrator
from culinary_lens.services.intake import MenuIntakeService
from culinary_lens.services.registry import DishRegistry
from culinary_lens.services.styles import parse_photo_style


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    registry: DishRegistry
    intake_service: MenuIntakeService
    generation: GenerationOrchestrator
    edit_sessions: EditSessionManager
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    http_client = httpx.AsyncClient(timeout=resolved_settings.openai_timeout_seconds)
    menu_client = OpenAIMenuClient.create(
        resolved_settings.openai_api_key, http_client=http_client
    )
    image_client = OpenAIImageClient.create(
        resolved_settings.openai_api_key,
        model=resolved_settings.openai_image_model,
        size=resolved_settings.openai_image_size,
        http_client=http_client,
    )
    registry = DishRegistry()
    edit_sessions = EditSessionManager(
        client=image_client,
        registry=registry,
        variation_count=resolved_settings.variation_count,
    )
    intake_service = MenuIntakeService(
        client=menu_client,
        model=resolved_settings.openai_text_model,
        registry=registry,
        edit_sessions=edit_sessions,
    )
    generation = GenerationOrchestrator(
        client=image_client,
        registry=registry,
        style=parse_photo_style(resolved_settings.default_style),
    )

    async def close_resources() -> None:
        await http_client.aclose()

    return AppContainer(
        settings=resolved_settings,
        registry=registry,
        intake_service=intake_service,
        generation=generation,
        edit_sessions=edit_sessions,
        close_resources=close_resources,
    )
