"""Models for menu extraction results."""

from pydantic import BaseModel


class ExtractedDish(BaseModel):
    """Single dish entry returned by menu extraction."""

    name: str = ""
    description: str | None = None


class MenuExtract(BaseModel):
    """Structured output for menu extraction."""

    dishes: list[ExtractedDish] = []
