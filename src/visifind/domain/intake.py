"""Domain models for intake tracking."""

from dataclasses import dataclass
from typing import Literal

MealType = Literal["breakfast", "lunch", "dinner"]

MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner")


@dataclass(frozen=True)
class IntakeRecord:
    """A logged meal entry.

    Food name, image and macros are copied from the food library at logging
    time and scaled to the consumed quantity.
    """

    food_id: int | None
    food_name: str
    quantity: float
    unit: str
    carbs: float
    protein: float
    fat: float
    calories: float
    meal_type: MealType
    date: str
    food_image: str = ""
    id: int | None = None


@dataclass(frozen=True)
class DailyLimits:
    """Daily macro targets in grams."""

    carbs: float = 300
    protein: float = 60
    fat: float = 60


@dataclass(frozen=True)
class NutrientTotals:
    """Summed macros for a set of records."""

    carbs: float = 0
    protein: float = 0
    fat: float = 0
    calories: float = 0


@dataclass(frozen=True)
class DailyTotals:
    """Summed macros for one calendar day."""

    date: str
    carbs: float = 0
    protein: float = 0
    fat: float = 0
    calories: float = 0
