"""Dish image generation orchestration."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from culinary_lens.domain.dishes import Dish, GenerationStatus
from culinary_lens.domain.errors import StyleLockedError
from culinary_lens.domain.styles import PhotoStyle
from culinary_lens.services.errors import classify_error
from culinary_lens.services.images import to_png_data_url
from culinary_lens.services.registry import DishRegistry
from culinary_lens.services.styles import build_dish_prompt

_logger = logging.getLogger(__name__)


class ImageGenerationClient(Protocol):
    """Interface for text-to-image and image-to-image calls."""

    async def generate(self, prompt: str) -> str:
        """Return a base64-encoded image for the prompt."""

    async def edit(self, image_base64: str, instruction: str) -> str:
        """Return a base64-encoded edit of the given image."""


@dataclass
class GenerationOrchestrator:
    """Drives per-dish image generation against the image client."""

    client: ImageGenerationClient
    registry: DishRegistry
    style: PhotoStyle = PhotoStyle.RUSTIC_DARK
    custom_text: str = ""

    def set_style(self, style: PhotoStyle, custom_text: str | None = None) -> None:
        """Update the global style; refused while any dish is generating."""
        if self.registry.any_generating():
            raise StyleLockedError("Style cannot change while images are generating")
        self.style = style
        self.custom_text = custom_text or ""

    async def generate(self, dish_id: str) -> None:
        """Generate (or regenerate) the image for one dish."""
        epoch = self.begin(dish_id)
        if epoch is None:
            return
        await self.complete(dish_id, epoch)

    def begin(self, dish_id: str) -> int | None:
        """Mark a dish as generating and return the registry epoch for completion.

        Returns None when the dish no longer exists.
        """
        epoch = self.registry.epoch
        dish = self.registry.update_by_id(dish_id, _mark_generating, epoch=epoch)
        if dish is None:
            _logger.info("Generation skipped, dish not found: dish_id=%s", dish_id)
            return None
        return epoch

    async def complete(self, dish_id: str, epoch: int) -> None:
        """Call the image client for a dish marked by ``begin`` and store the result."""
        dish = self.registry.get(dish_id)
        if dish is None or epoch != self.registry.epoch:
            _logger.info("Generation dropped, menu replaced: dish_id=%s", dish_id)
            return

        prompt = build_dish_prompt(dish, self.style, self.custom_text)
        try:
            encoded = await self.client.generate(prompt)
            if not encoded:
                raise RuntimeError("No image generated")
        except Exception as exc:
            classified = classify_error(exc)
            _logger.warning(
                "Image generation failed: dish_id=%s category=%s error=%s",
                dish_id,
                classified.category,
                exc,
            )
            self.registry.update_by_id(
                dish_id,
                lambda current: replace(
                    current, status=GenerationStatus.FAILED, error=classified
                ),
                epoch=epoch,
            )
            return

        image = to_png_data_url(encoded)
        self.registry.update_by_id(
            dish_id,
            lambda current: replace(
                current,
                generated_image=image,
                status=GenerationStatus.READY,
                error=None,
            ),
            epoch=epoch,
        )
        _logger.info("Image generated: dish_id=%s", dish_id)


def _mark_generating(dish: Dish) -> Dish:
    return replace(dish, status=GenerationStatus.GENERATING, error=None)
