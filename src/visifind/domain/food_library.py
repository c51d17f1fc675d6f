"""Domain models for the reusable food library."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodItem:
    """A food definition with macros for one reference serving.

    ``quantity`` and ``unit`` describe the serving the macros apply to.
    """

    name: str
    quantity: float
    unit: str
    carbs: float
    protein: float
    fat: float
    calories: float
    image: str = ""
    category: str = ""
    id: int | None = None
