"""Domain models for dishes and their generated images."""

from dataclasses import dataclass
from enum import StrEnum

from culinary_lens.domain.errors import ClassifiedError


class GenerationStatus(StrEnum):
    """Per-dish image generation status."""

    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Dish:
    """Immutable snapshot of a dish extracted from a menu."""

    id: str
    name: str
    description: str
    generated_image: str | None = None
    status: GenerationStatus = GenerationStatus.IDLE
    error: ClassifiedError | None = None

    @property
    def has_image(self) -> bool:
        return self.generated_image is not None

    @property
    def image_is_stale(self) -> bool:
        """True when the kept image predates a failed regeneration."""
        return self.status is GenerationStatus.FAILED and self.has_image

    @property
    def download_filename(self) -> str:
        return "-".join(self.name.lower().split()) + ".png"
