"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from culinary_lens.config import Settings
from culinary_lens.containers import AppContainer
from culinary_lens.domain.dishes import Dish, GenerationStatus
from culinary_lens.services.editing import EditSessionManager
from culinary_lens.services.generation import (
    GenerationOrchestrator,
    ImageGenerationClient,
)
from culinary_lens.services.intake import MenuExtractionClient, MenuIntakeService
from culinary_lens.services.registry import DishRegistry

FAKE_IMAGE_B64 = "ZmFrZS1pbWFnZQ=="
FAKE_IMAGE_URL = f"data:image/png;base64,{FAKE_IMAGE_B64}"

Outcome = str | Exception


@dataclass
class FakeImageClient(ImageGenerationClient):
    """Fake image client returning scripted outcomes in call order."""

    generate_results: list[Outcome] = field(default_factory=list)
    edit_results: list[Outcome] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)
    edits: list[tuple[str, str]] = field(default_factory=list)
    gate: asyncio.Event | None = None
    active: int = 0
    max_active: int = 0

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.generate_results.pop(0) if self.generate_results else "Z2Vu"
        await self._wait()
        return _resolve(outcome)

    async def edit(self, image_base64: str, instruction: str) -> str:
        self.edits.append((image_base64, instruction))
        outcome = (
            self.edit_results.pop(0)
            if self.edit_results
            else f"ZWRpdC0{len(self.edits)}"
        )
        await self._wait()
        return _resolve(outcome)

    async def _wait(self) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.active -= 1


def _resolve(outcome: Outcome) -> str:
    if isinstance(outcome, Exception):
        raise outcome
    return outcome


@dataclass
class FakeMenuClient(MenuExtractionClient):
    """Fake menu extraction client returning a fixed payload."""

    payload: object = field(
        default_factory=lambda: {
            "dishes": [
                {
                    "name": "Truffle Arancini",
                    "description": "Crispy risotto balls with truffle oil.",
                },
                {
                    "name": "Burrata Salad",
                    "description": "Burrata with heirloom tomatoes.",
                },
            ]
        }
    )
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def extract(
        self, *, model: str, menu_text: str, schema: dict[str, object], prompt: str
    ) -> dict[str, object]:
        self.calls.append(menu_text)
        if self.error is not None:
            raise self.error
        return self.payload  # type: ignore[return-value]


def make_dish(
    dish_id: str,
    name: str = "Burrata Salad",
    description: str = "Fresh burrata.",
    image: str | None = None,
) -> Dish:
    status = GenerationStatus.READY if image else GenerationStatus.IDLE
    return Dish(
        id=dish_id,
        name=name,
        description=description,
        generated_image=image,
        status=status,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def menu_client() -> FakeMenuClient:
    return FakeMenuClient()


@pytest.fixture
def registry() -> DishRegistry:
    return DishRegistry()


@pytest.fixture
def container(
    settings: Settings,
    image_client: FakeImageClient,
    menu_client: FakeMenuClient,
    registry: DishRegistry,
) -> AppContainer:
    edit_sessions = EditSessionManager(client=image_client, registry=registry)
    intake_service = MenuIntakeService(
        client=menu_client,
        model=settings.openai_text_model,
        registry=registry,
        edit_sessions=edit_sessions,
    )
    generation = GenerationOrchestrator(client=image_client, registry=registry)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        registry=registry,
        intake_service=intake_service,
        generation=generation,
        edit_sessions=edit_sessions,
        close_resources=close_resources,
    )
