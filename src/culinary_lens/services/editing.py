"""Interactive edit and variation workflow for a dish image."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from uuid import uuid4

from culinary_lens.domain.dishes import Dish, GenerationStatus
from culinary_lens.domain.edits import EditSessionView, EditState
from culinary_lens.domain.errors import (
    DishImageMissingError,
    DishNotFoundError,
    EditSessionBusyError,
    EditSessionClosedError,
    EditSessionNotFoundError,
    InvalidInstructionError,
)
from culinary_lens.services.generation import ImageGenerationClient
from culinary_lens.services.images import strip_data_url_prefix, to_png_data_url
from culinary_lens.services.registry import DishRegistry

EDIT_FAILED_MESSAGE = "Failed to edit image. Please try again."
VARIATIONS_FAILED_MESSAGE = "Failed to generate variations. Please try again."
COMMIT_REFUSED_MESSAGE = (
    "Image could not be saved to the dish while it is regenerating. "
    "Select it again or close the editor to retry."
)
DEFAULT_VARIATION_COUNT = 3

_logger = logging.getLogger(__name__)

ImageCommit = Callable[[str], bool]


@dataclass
class EditSession:
    """State machine for one open edit interaction on a dish image."""

    id: str
    dish_id: str
    client: ImageGenerationClient
    commit: ImageCommit
    base_image: str
    variation_count: int = DEFAULT_VARIATION_COUNT
    current_image: str = ""
    committed_image: str = ""
    variations: list[str] = field(default_factory=list)
    instruction: str = ""
    last_error: str | None = None
    state: EditState = EditState.IDLE

    def __post_init__(self) -> None:
        if not self.current_image:
            self.current_image = self.base_image
        if not self.committed_image:
            self.committed_image = self.base_image

    @property
    def closed(self) -> bool:
        return self.state is EditState.CLOSED

    def view(self) -> EditSessionView:
        return EditSessionView(
            id=self.id,
            dish_id=self.dish_id,
            state=self.state,
            base_image=self.base_image,
            current_image=self.current_image,
            variations=tuple(self.variations),
            instruction=self.instruction,
            last_error=self.last_error,
        )

    async def apply_edit(self, instruction: str) -> None:
        """Apply one edit instruction to the current image."""
        cleaned = self._begin(instruction, EditState.EDITING)
        source = self.current_image
        try:
            edited = await self._edit_once(source, cleaned)
        except Exception:
            _logger.exception("Image edit failed: session_id=%s", self.id)
            if not self.closed:
                self.last_error = EDIT_FAILED_MESSAGE
            return
        finally:
            self._finish()

        if self.closed:
            _logger.info("Dropping edit for closed session: session_id=%s", self.id)
            return
        self.current_image = edited
        self.variations = []
        self.instruction = ""
        self._commit(edited)

    async def generate_variations(
        self, instruction: str, count: int | None = None
    ) -> None:
        """Run several independent edits of the current image and keep the successes."""
        attempts = count if count is not None else self.variation_count
        if attempts < 1:
            raise ValueError("Variation count must be at least 1")
        cleaned = self._begin(instruction, EditState.GENERATING_VARIATIONS)
        self.variations = []
        source = self.current_image
        try:
            results = await asyncio.gather(
                *(self._edit_once(source, cleaned) for _ in range(attempts)),
                return_exceptions=True,
            )
        finally:
            self._finish()

        if self.closed:
            _logger.info(
                "Dropping variations for closed session: session_id=%s", self.id
            )
            return
        successful = [result for result in results if isinstance(result, str)]
        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            _logger.warning(
                "Variation attempt failed: session_id=%s error=%s", self.id, failure
            )
        if not successful:
            self.last_error = VARIATIONS_FAILED_MESSAGE
            return
        self.variations = successful
        self.instruction = ""

    def select_variation(self, candidate: str) -> None:
        """Make a variation candidate the current image."""
        if self.closed:
            raise EditSessionClosedError(f"Edit session {self.id} is closed")
        if candidate not in self.variations:
            raise ValueError("Unknown variation candidate")
        self.current_image = candidate
        if candidate == self.committed_image:
            return
        self._commit(candidate)

    def select_variation_at(self, index: int) -> None:
        if not 0 <= index < len(self.variations):
            raise ValueError(f"Variation index out of range: {index}")
        self.select_variation(self.variations[index])

    def close(self) -> str:
        """Close the session and return its final image.

        A current image the dish refused earlier gets one more commit attempt.
        """
        if self.closed:
            return self.current_image
        if self.current_image != self.committed_image:
            self._commit(self.current_image)
        self.state = EditState.CLOSED
        return self.current_image

    def _commit(self, image: str) -> bool:
        if self.commit(image):
            self.committed_image = image
            return True
        _logger.warning("Dish refused edited image: session_id=%s", self.id)
        self.last_error = COMMIT_REFUSED_MESSAGE
        return False

    def _begin(self, instruction: str, state: EditState) -> str:
        if self.closed:
            raise EditSessionClosedError(f"Edit session {self.id} is closed")
        cleaned = instruction.strip()
        if not cleaned:
            raise InvalidInstructionError("Edit instruction must not be blank")
        if self.state is not EditState.IDLE:
            raise EditSessionBusyError(
                f"Edit session {self.id} is busy: {self.state.value}"
            )
        self.state = state
        self.instruction = instruction
        self.last_error = None
        return cleaned

    def _finish(self) -> None:
        if not self.closed:
            self.state = EditState.IDLE

    async def _edit_once(self, image: str, instruction: str) -> str:
        encoded = await self.client.edit(strip_data_url_prefix(image), instruction)
        if not encoded:
            raise RuntimeError("Failed to edit image")
        return to_png_data_url(encoded)


@dataclass
class EditSessionManager:
    """Opens, tracks and closes edit sessions for dishes in the registry."""

    client: ImageGenerationClient
    registry: DishRegistry
    variation_count: int = DEFAULT_VARIATION_COUNT
    _sessions: dict[str, EditSession] = field(default_factory=dict)

    def open(self, dish_id: str) -> EditSession:
        """Open an edit session on a dish that already has an image."""
        dish = self.registry.get(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        if dish.generated_image is None:
            raise DishImageMissingError(f"Dish {dish_id} has no image to edit")

        for existing in [
            session
            for session in self._sessions.values()
            if session.dish_id == dish_id
        ]:
            self.close(existing.id)

        epoch = self.registry.epoch

        def commit(image: str) -> bool:
            current = self.registry.get(dish_id)
            if current is None or current.status is GenerationStatus.GENERATING:
                return False
            updated = self.registry.update_by_id(
                dish_id, _with_edited_image(image), epoch=epoch
            )
            return updated is not None

        session = EditSession(
            id=str(uuid4()),
            dish_id=dish_id,
            client=self.client,
            commit=commit,
            base_image=dish.generated_image,
            variation_count=self.variation_count,
        )
        self._sessions[session.id] = session
        _logger.info(
            "Edit session opened: session_id=%s dish_id=%s", session.id, dish_id
        )
        return session

    def get(self, session_id: str) -> EditSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise EditSessionNotFoundError(session_id)
        return session

    def close(self, session_id: str) -> str:
        """Close and forget a session, returning its final image."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise EditSessionNotFoundError(session_id)
        return session.close()

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()


def _with_edited_image(image: str) -> Callable[[Dish], Dish]:
    def mutation(dish: Dish) -> Dish:
        return replace(
            dish, generated_image=image, status=GenerationStatus.READY, error=None
        )

    return mutation
