"""Menu intake: turns raw menu text into dishes in the registry."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from pydantic import ValidationError

from culinary_lens.domain.dishes import Dish
from culinary_lens.domain.errors import MenuAnalysisError
from culinary_lens.domain.menu import MenuExtract
from culinary_lens.services.editing import EditSessionManager
from culinary_lens.services.registry import DishRegistry

ANALYSIS_FAILED_MESSAGE = "Failed to analyze menu. Please try again."

MENU_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "dishes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["name", "description"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["dishes"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class MenuExtractionClient(Protocol):
    """Interface for LLM text extraction."""

    async def extract(
        self, *, model: str, menu_text: str, schema: dict[str, object], prompt: str
    ) -> dict[str, object]:
        """Return structured menu extraction data."""


@dataclass
class MenuIntakeService:
    """Extracts dishes from menu text and repopulates the registry."""

    client: MenuExtractionClient
    model: str
    registry: DishRegistry
    edit_sessions: EditSessionManager | None = None

    async def analyze(self, menu_text: str) -> list[Dish]:
        """Replace the registry contents with dishes extracted from the menu."""
        if not menu_text.strip():
            raise ValueError("Menu text must not be blank")

        self.registry.replace_all([])
        if self.edit_sessions is not None:
            self.edit_sessions.close_all()

        prompt = (
            "Extract a list of dishes from the following menu text. "
            'Return a JSON object with a "dishes" array, where each item has '
            '"name" and "description". If no description is present, infer a '
            "brief one based on the name."
        )
        try:
            raw = await self.client.extract(
                model=self.model,
                menu_text=menu_text,
                schema=MENU_SCHEMA,
                prompt=prompt,
            )
        except Exception as exc:
            _logger.exception("Menu extraction failed")
            raise MenuAnalysisError(ANALYSIS_FAILED_MESSAGE) from exc

        dishes = build_dishes(raw)
        self.registry.replace_all(dishes)
        _logger.info("Menu analyzed: dishes=%s", len(dishes))
        return dishes


def build_dishes(raw: object) -> list[Dish]:
    """Convert raw extraction output into fresh dishes.

    Unparseable payloads produce no dishes. Entries without a name are dropped
    and missing descriptions become empty strings.
    """
    try:
        extract = MenuExtract.model_validate(raw)
    except ValidationError:
        _logger.warning("Failed to parse menu extraction payload")
        return []
    dishes: list[Dish] = []
    for entry in extract.dishes:
        name = entry.name.strip()
        if not name:
            continue
        dishes.append(
            Dish(
                id=str(uuid4()),
                name=name,
                description=(entry.description or "").strip(),
            )
        )
    return dishes
