"""Domain models for interactive image edit sessions."""

from dataclasses import dataclass
from enum import StrEnum


class EditState(StrEnum):
    """Lifecycle states of an edit session."""

    IDLE = "idle"
    EDITING = "editing"
    GENERATING_VARIATIONS = "generating_variations"
    CLOSED = "closed"


@dataclass(frozen=True)
class EditSessionView:
    """Read-only snapshot of an edit session."""

    id: str
    dish_id: str
    state: EditState
    base_image: str
    current_image: str
    variations: tuple[str, ...]
    instruction: str
    last_error: str | None
