"""Tests for dish image generation orchestration."""

import asyncio

import pytest

from culinary_lens.domain.dishes import GenerationStatus
from culinary_lens.domain.errors import ErrorCategory, StyleLockedError
from culinary_lens.domain.styles import STYLE_PROMPTS, PhotoStyle
from culinary_lens.services.errors import NETWORK_MESSAGE
from culinary_lens.services.generation import GenerationOrchestrator
from culinary_lens.services.registry import DishRegistry
from tests.conftest import FAKE_IMAGE_B64, FAKE_IMAGE_URL, FakeImageClient, make_dish


def _setup(client: FakeImageClient, *dishes):
    registry = DishRegistry()
    registry.replace_all(dishes or [make_dish("1"), make_dish("2")])
    return registry, GenerationOrchestrator(client=client, registry=registry)


def test_generate_updates_only_target_dish() -> None:
    client = FakeImageClient(generate_results=[FAKE_IMAGE_B64])
    registry, orchestrator = _setup(client)
    untouched = registry.get("2")

    asyncio.run(orchestrator.generate("1"))

    dish = registry.get("1")
    assert dish.status is GenerationStatus.READY
    assert dish.generated_image == FAKE_IMAGE_URL
    assert dish.error is None
    assert registry.get("2") is untouched


def test_generate_uses_current_style_and_custom_text() -> None:
    client = FakeImageClient()
    registry, orchestrator = _setup(client, make_dish("1", name="Scallops"))
    orchestrator.set_style(PhotoStyle.BRIGHT_MODERN, "lemon wedge")

    asyncio.run(orchestrator.generate("1"))

    assert len(client.prompts) == 1
    assert "Scallops" in client.prompts[0]
    assert f"{STYLE_PROMPTS[PhotoStyle.BRIGHT_MODERN]} lemon wedge" in client.prompts[0]


def test_generate_failure_stores_classified_error() -> None:
    client = FakeImageClient(
        generate_results=[RuntimeError("Error: fetch failed (network unreachable)")]
    )
    registry, orchestrator = _setup(client)

    asyncio.run(orchestrator.generate("1"))

    dish = registry.get("1")
    assert dish.status is GenerationStatus.FAILED
    assert dish.generated_image is None
    assert dish.error is not None
    assert dish.error.category is ErrorCategory.NETWORK
    assert dish.error.message == NETWORK_MESSAGE
    assert not dish.image_is_stale


def test_failed_regeneration_keeps_prior_image_flagged_stale() -> None:
    client = FakeImageClient(generate_results=[RuntimeError("quota exceeded")])
    registry, orchestrator = _setup(client, make_dish("1", image=FAKE_IMAGE_URL))

    asyncio.run(orchestrator.generate("1"))

    dish = registry.get("1")
    assert dish.generated_image == FAKE_IMAGE_URL
    assert dish.error.category is ErrorCategory.RATE_LIMIT
    assert dish.image_is_stale


def test_empty_result_is_classified() -> None:
    client = FakeImageClient(generate_results=[""])
    registry, orchestrator = _setup(client)

    asyncio.run(orchestrator.generate("1"))

    assert registry.get("1").error.category is ErrorCategory.EMPTY_RESULT


def test_retry_clears_previous_error() -> None:
    client = FakeImageClient(generate_results=[RuntimeError("boom"), FAKE_IMAGE_B64])
    registry, orchestrator = _setup(client)

    asyncio.run(orchestrator.generate("1"))
    asyncio.run(orchestrator.generate("1"))

    dish = registry.get("1")
    assert dish.status is GenerationStatus.READY
    assert dish.error is None


def test_generating_state_keeps_previous_image_until_done() -> None:
    async def scenario() -> None:
        client = FakeImageClient(generate_results=["bmV3"], gate=asyncio.Event())
        registry, orchestrator = _setup(client, make_dish("1", image=FAKE_IMAGE_URL))

        task = asyncio.create_task(orchestrator.generate("1"))
        await asyncio.sleep(0)
        in_flight = registry.get("1")
        assert in_flight.status is GenerationStatus.GENERATING
        assert in_flight.generated_image == FAKE_IMAGE_URL
        with pytest.raises(StyleLockedError):
            orchestrator.set_style(PhotoStyle.SOCIAL_MEDIA)

        client.gate.set()
        await task
        assert registry.get("1").generated_image == "data:image/png;base64,bmV3"

    asyncio.run(scenario())


def test_completion_after_replace_all_is_dropped() -> None:
    async def scenario() -> None:
        client = FakeImageClient(gate=asyncio.Event())
        registry, orchestrator = _setup(client, make_dish("1"))

        task = asyncio.create_task(orchestrator.generate("1"))
        await asyncio.sleep(0)
        registry.replace_all([make_dish("1", name="Different dish")])
        client.gate.set()
        await task

        dish = registry.get("1")
        assert dish.name == "Different dish"
        assert dish.status is GenerationStatus.IDLE
        assert dish.generated_image is None

    asyncio.run(scenario())


def test_generate_for_missing_dish_does_nothing() -> None:
    client = FakeImageClient()
    registry, orchestrator = _setup(client)

    asyncio.run(orchestrator.generate("missing"))

    assert client.prompts == []
    assert all(dish.status is GenerationStatus.IDLE for dish in registry.snapshot())


def test_dishes_generate_concurrently() -> None:
    async def scenario() -> None:
        client = FakeImageClient(gate=asyncio.Event())
        registry, orchestrator = _setup(client)

        tasks = [
            asyncio.create_task(orchestrator.generate(dish_id)) for dish_id in ("1", "2")
        ]
        await asyncio.sleep(0)
        assert client.max_active == 2
        client.gate.set()
        await asyncio.gather(*tasks)

        assert all(dish.status is GenerationStatus.READY for dish in registry.snapshot())

    asyncio.run(scenario())


def test_begin_marks_generating_before_completion() -> None:
    client = FakeImageClient(generate_results=[FAKE_IMAGE_B64])
    registry, orchestrator = _setup(client)

    epoch = orchestrator.begin("1")

    assert epoch == registry.epoch
    assert registry.get("1").status is GenerationStatus.GENERATING
    assert client.prompts == []
    with pytest.raises(StyleLockedError):
        orchestrator.set_style(PhotoStyle.SOCIAL_MEDIA)

    asyncio.run(orchestrator.complete("1", epoch))

    assert registry.get("1").status is GenerationStatus.READY
    assert orchestrator.begin("missing") is None


def test_complete_with_stale_epoch_is_dropped() -> None:
    client = FakeImageClient()
    registry, orchestrator = _setup(client, make_dish("1"))
    epoch = orchestrator.begin("1")
    registry.replace_all([make_dish("1")])

    asyncio.run(orchestrator.complete("1", epoch))

    assert client.prompts == []
    assert registry.get("1").status is GenerationStatus.IDLE
