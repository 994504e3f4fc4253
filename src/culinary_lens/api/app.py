"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, Response, status

from culinary_lens.api.models import (
    AnalyzeMenuRequest,
    InstructionRequest,
    SelectVariationRequest,
    StyleRequest,
    VariationsRequest,
)
from culinary_lens.app_logging import configure_logging
from culinary_lens.containers import AppContainer
from culinary_lens.domain.dishes import Dish
from culinary_lens.domain.edits import EditSessionView
from culinary_lens.domain.errors import (
    ConfigError,
    DishImageMissingError,
    DishNotFoundError,
    EditSessionBusyError,
    EditSessionClosedError,
    EditSessionNotFoundError,
    InvalidInstructionError,
    MenuAnalysisError,
    StyleLockedError,
)
from culinary_lens.domain.styles import MENU_PLACEHOLDER, PhotoStyle
from culinary_lens.services.editing import EditSession
from culinary_lens.services.images import decode_data_url
from culinary_lens.services.styles import compose_style_prompt, parse_photo_style


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/menu/placeholder")
    async def menu_placeholder() -> dict[str, str]:
        """Return sample menu text for the input box."""
        return {"menu_text": MENU_PLACEHOLDER}

    @app.post("/menu/analyze")
    async def analyze_menu(
        body: AnalyzeMenuRequest, request: Request
    ) -> dict[str, object]:
        """Extract dishes from menu text, replacing the current dishes."""
        state_container: AppContainer = request.app.state.container
        if not body.menu_text.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Menu text must not be blank",
            )
        try:
            dishes = await state_container.intake_service.analyze(body.menu_text)
        except MenuAnalysisError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        return {"dishes": [_dish_payload(dish) for dish in dishes]}

    @app.get("/dishes")
    async def list_dishes(request: Request) -> dict[str, object]:
        """Return dishes in menu order with their generation state."""
        state_container: AppContainer = request.app.state.container
        registry = state_container.registry
        return {
            "dishes": [_dish_payload(dish) for dish in registry.snapshot()],
            "any_generating": registry.any_generating(),
        }

    @app.get("/style")
    async def get_style(request: Request) -> dict[str, str]:
        """Return the current photo style settings."""
        generation = request.app.state.container.generation
        return _style_payload(generation.style, generation.custom_text)

    @app.put("/style")
    async def set_style(body: StyleRequest, request: Request) -> dict[str, str]:
        """Change the photo style used for subsequent generations."""
        generation = request.app.state.container.generation
        try:
            generation.set_style(parse_photo_style(body.style), body.custom_text)
        except ConfigError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except StyleLockedError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return _style_payload(generation.style, generation.custom_text)

    @app.post("/dishes/{dish_id}/generate", status_code=status.HTTP_202_ACCEPTED)
    async def generate_image(
        dish_id: str, request: Request, background_tasks: BackgroundTasks
    ) -> dict[str, str]:
        """Start image generation for a dish."""
        state_container: AppContainer = request.app.state.container
        epoch = state_container.generation.begin(dish_id)
        if epoch is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        background_tasks.add_task(state_container.generation.complete, dish_id, epoch)
        logger.info("Generation scheduled: dish_id=%s", dish_id)
        return {"status": "accepted", "dish_id": dish_id}

    @app.get("/dishes/{dish_id}/download")
    async def download_image(dish_id: str, request: Request) -> Response:
        """Return the dish image as a PNG attachment."""
        dish = request.app.state.container.registry.get(dish_id)
        if dish is None or dish.generated_image is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(
            content=decode_data_url(dish.generated_image),
            media_type="image/png",
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{dish.download_filename}"'
                )
            },
        )

    @app.post("/dishes/{dish_id}/edit-sessions", status_code=status.HTTP_201_CREATED)
    async def open_edit_session(dish_id: str, request: Request) -> dict[str, object]:
        """Open an edit session on a dish image."""
        state_container: AppContainer = request.app.state.container
        try:
            session = state_container.edit_sessions.open(dish_id)
        except DishNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        except DishImageMissingError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return _session_payload(session.view())

    @app.get("/edit-sessions/{session_id}")
    async def get_edit_session(session_id: str, request: Request) -> dict[str, object]:
        """Return the state of an edit session."""
        session = _get_session(request, session_id)
        return _session_payload(session.view())

    @app.post("/edit-sessions/{session_id}/edit")
    async def apply_edit(
        session_id: str, body: InstructionRequest, request: Request
    ) -> dict[str, object]:
        """Apply a single edit to the session's current image."""
        session = _get_session(request, session_id)
        with _session_errors():
            await session.apply_edit(body.instruction)
        return _session_payload(session.view())

    @app.post("/edit-sessions/{session_id}/variations")
    async def generate_variations(
        session_id: str, body: VariationsRequest, request: Request
    ) -> dict[str, object]:
        """Generate variation candidates for the session's current image."""
        session = _get_session(request, session_id)
        with _session_errors():
            await session.generate_variations(body.instruction, body.count)
        return _session_payload(session.view())

    @app.post("/edit-sessions/{session_id}/select")
    async def select_variation(
        session_id: str, body: SelectVariationRequest, request: Request
    ) -> dict[str, object]:
        """Choose one of the variation candidates as the current image."""
        session = _get_session(request, session_id)
        with _session_errors():
            session.select_variation_at(body.index)
        return _session_payload(session.view())

    @app.delete("/edit-sessions/{session_id}")
    async def close_edit_session(session_id: str, request: Request) -> dict[str, str]:
        """Close an edit session."""
        state_container: AppContainer = request.app.state.container
        try:
            final_image = state_container.edit_sessions.close(session_id)
        except EditSessionNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return {"status": "closed", "final_image": final_image}

    return app


def _get_session(request: Request, session_id: str) -> EditSession:
    container: AppContainer = request.app.state.container
    try:
        return container.edit_sessions.get(session_id)
    except EditSessionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc


@contextmanager
def _session_errors() -> Iterator[None]:
    """Translate edit session errors into HTTP errors."""
    try:
        yield
    except InvalidInstructionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except (EditSessionBusyError, EditSessionClosedError) as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


def _dish_payload(dish: Dish) -> dict[str, object]:
    return {
        "id": dish.id,
        "name": dish.name,
        "description": dish.description,
        "generated_image": dish.generated_image,
        "status": dish.status.value,
        "error": dish.error.message if dish.error else None,
        "error_category": dish.error.category.value if dish.error else None,
        "image_is_stale": dish.image_is_stale,
    }


def _style_payload(style: PhotoStyle, custom_text: str) -> dict[str, str]:
    return {
        "style": style.value,
        "custom_text": custom_text,
        "prompt": compose_style_prompt(style, custom_text),
    }


def _session_payload(view: EditSessionView) -> dict[str, object]:
    return {
        "id": view.id,
        "dish_id": view.dish_id,
        "state": view.state.value,
        "base_image": view.base_image,
        "current_image": view.current_image,
        "variations": list(view.variations),
        "instruction": view.instruction,
        "last_error": view.last_error,
    }
