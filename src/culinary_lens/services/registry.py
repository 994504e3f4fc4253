"""In-memory registry of dishes for the current menu."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from culinary_lens.domain.dishes import Dish, GenerationStatus

_logger = logging.getLogger(__name__)

DishMutation = Callable[[Dish], Dish]


@dataclass
class DishRegistry:
    """Ordered collection of immutable dish snapshots keyed by id.

    Every update swaps exactly one snapshot, so readers only ever see whole
    dishes. The epoch advances on each ``replace_all``; callers that started
    work under an older epoch have their updates discarded.
    """

    _dishes: dict[str, Dish] = field(default_factory=dict)
    _order: list[str] = field(default_factory=list)
    _epoch: int = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    def snapshot(self) -> list[Dish]:
        """Return dishes in extraction order."""
        return [self._dishes[dish_id] for dish_id in self._order]

    def get(self, dish_id: str) -> Dish | None:
        return self._dishes.get(dish_id)

    def __len__(self) -> int:
        return len(self._order)

    def any_generating(self) -> bool:
        return any(
            dish.status is GenerationStatus.GENERATING for dish in self._dishes.values()
        )

    def replace_all(self, dishes: Iterable[Dish]) -> int:
        """Discard the current collection and return the new epoch."""
        new_dishes: dict[str, Dish] = {}
        order: list[str] = []
        for dish in dishes:
            if dish.id in new_dishes:
                raise ValueError(f"Duplicate dish id: {dish.id}")
            new_dishes[dish.id] = dish
            order.append(dish.id)
        self._dishes = new_dishes
        self._order = order
        self._epoch += 1
        return self._epoch

    def update_by_id(
        self, dish_id: str, mutation: DishMutation, *, epoch: int | None = None
    ) -> Dish | None:
        """Apply a mutation to one dish and return the new snapshot.

        Returns None without changing anything when the dish is gone or the
        given epoch is no longer current.
        """
        if epoch is not None and epoch != self._epoch:
            _logger.info(
                "Dropping stale update: dish_id=%s epoch=%s current=%s",
                dish_id,
                epoch,
                self._epoch,
            )
            return None
        current = self._dishes.get(dish_id)
        if current is None:
            return None
        updated = mutation(current)
        if updated.id != dish_id:
            raise ValueError("Dish mutations must not change the dish id")
        self._dishes[dish_id] = updated
        return updated
