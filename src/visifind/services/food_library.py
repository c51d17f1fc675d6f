"""Services for managing the reusable food library."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from visifind.domain.errors import FailureHandler, TransactionFailed
from visifind.domain.food_library import FoodItem

_logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for the food library."""

    def list_foods(self) -> list[FoodItem]:
        """Return every food in the library."""

    def create_food(self, food: FoodItem) -> int:
        """Insert a food and return its new id."""

    def update_food(self, food: FoodItem) -> None:
        """Overwrite a food by its id."""

    def delete_food(self, food_id: int) -> None:
        """Delete a food by id."""


@dataclass
class FoodLibraryService:
    """Application service for food library operations."""

    repository: FoodRepository
    foods: list[FoodItem] = field(default_factory=list)

    def load(self) -> list[FoodItem]:
        """Reload the library from storage."""
        self.foods = self.repository.list_foods()
        return list(self.foods)

    def add(self, food: FoodItem) -> int:
        """Create a food. Duplicate names are allowed."""
        food_id = self.repository.create_food(replace(food, id=None))
        self.foods = [*self.foods, replace(food, id=food_id)]
        return food_id

    def update(self, food: FoodItem) -> None:
        """Edit an existing food."""
        if food.id is None:
            raise ValueError("Cannot update a food without an id")
        self.repository.update_food(food)
        self.foods = [food if item.id == food.id else item for item in self.foods]

    def delete(self, food_id: int) -> None:
        """Remove a food. Intake records referencing it are kept."""
        self.repository.delete_food(food_id)
        self.foods = [item for item in self.foods if item.id != food_id]

    def find_by_name(self, name: str) -> FoodItem | None:
        """Return the first food whose name matches, ignoring case."""
        needle = name.lower()
        return next((item for item in self.foods if item.name.lower() == needle), None)

    def export_foods(self) -> list[FoodItem]:
        """Return the current mirror without reading storage."""
        return list(self.foods)

    def import_foods(
        self,
        foods: list[FoodItem],
        on_failure: FailureHandler[FoodItem] | None = None,
    ) -> int:
        """Add foods whose names are not in the library yet, ignoring case.

        Matching names are skipped and never overwrite existing entries.
        """
        existing = {item.name.lower() for item in self.foods}
        created = 0
        for food in foods:
            key = food.name.lower()
            if key in existing:
                continue
            try:
                self.add(food)
            except TransactionFailed as exc:
                if on_failure is None:
                    raise
                on_failure(food, exc)
                continue
            existing.add(key)
            created += 1
        _logger.info("Imported foods: created=%s", created)
        return created
