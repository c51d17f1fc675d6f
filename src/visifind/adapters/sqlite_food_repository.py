"""SQLite implementation for the food library."""

from dataclasses import dataclass

from visifind.adapters.embedded_db import StoreHandle
from visifind.domain.food_library import FoodItem
from visifind.services.food_library import FoodRepository

FOODS = "foods"


@dataclass
class SqliteFoodRepository(FoodRepository):
    """Foods stored in the ``foods`` collection of FoodLibraryDB."""

    handle: StoreHandle

    def list_foods(self) -> list[FoodItem]:
        """Return every food in the library."""
        with self.handle.transaction(FOODS) as txn:
            rows = txn.get_all(FOODS)
        return [_parse_food(row) for row in rows]

    def create_food(self, food: FoodItem) -> int:
        """Insert a food and return its id."""
        with self.handle.transaction(FOODS, mode="readwrite") as txn:
            return txn.add(FOODS, _food_payload(food))

    def update_food(self, food: FoodItem) -> None:
        """Overwrite a food by its id."""
        with self.handle.transaction(FOODS, mode="readwrite") as txn:
            txn.put(FOODS, {**_food_payload(food), "id": food.id})

    def delete_food(self, food_id: int) -> None:
        """Delete a food by id."""
        with self.handle.transaction(FOODS, mode="readwrite") as txn:
            txn.delete(FOODS, food_id)


def _food_payload(food: FoodItem) -> dict[str, object]:
    return {
        "image": food.image,
        "name": food.name,
        "category": food.category,
        "quantity": food.quantity,
        "unit": food.unit,
        "carbs": food.carbs,
        "protein": food.protein,
        "fat": food.fat,
        "calories": food.calories,
    }


def _parse_food(row: dict[str, object]) -> FoodItem:
    """Parse a stored food into a domain model."""
    return FoodItem(
        id=int(row["id"]),
        image=str(row.get("image", "")),
        name=str(row.get("name", "")),
        category=str(row.get("category", "")),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        carbs=float(row.get("carbs", 0.0)),
        protein=float(row.get("protein", 0.0)),
        fat=float(row.get("fat", 0.0)),
        calories=float(row.get("calories", 0.0)),
    )
