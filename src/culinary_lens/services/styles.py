"""Prompt composition for styled dish photography."""

from culinary_lens.domain.dishes import Dish
from culinary_lens.domain.errors import ConfigError
from culinary_lens.domain.styles import STYLE_PROMPTS, PhotoStyle


def compose_style_prompt(style: PhotoStyle, custom_text: str | None = None) -> str:
    """Return the base template for a style with optional custom details appended."""
    try:
        template = STYLE_PROMPTS[style]
    except KeyError as exc:
        raise ConfigError(f"Unknown photo style: {style!r}") from exc
    extra = (custom_text or "").strip()
    if extra:
        return f"{template} {extra}"
    return template


def build_dish_prompt(
    dish: Dish, style: PhotoStyle, custom_text: str | None = None
) -> str:
    """Build the full image prompt for a dish."""
    style_description = compose_style_prompt(style, custom_text)
    return (
        f"Professional food photography of {dish.name}. {dish.description}.\n"
        f"Style details: {style_description}.\n"
        "Ensure the food looks delicious, appetizing, and high-end. Ultra-realistic."
    )


def parse_photo_style(raw: str | PhotoStyle) -> PhotoStyle:
    """Convert a style label into a PhotoStyle."""
    try:
        return PhotoStyle(raw)
    except ValueError as exc:
        raise ConfigError(f"Unknown photo style: {raw!r}") from exc
