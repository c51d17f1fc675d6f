"""Intake record service with date queries and macro aggregation."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Protocol

from visifind.domain.errors import FailureHandler, TransactionFailed
from visifind.domain.food_library import FoodItem
from visifind.domain.intake import (
    MEAL_TYPES,
    DailyLimits,
    DailyTotals,
    IntakeRecord,
    MealType,
    NutrientTotals,
)
from visifind.services.settings import SettingsRepository

_logger = logging.getLogger(__name__)

DAILY_LIMITS_KEY = "dailyLimits"
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class IntakeRepository(Protocol):
    """Persistence interface for intake records."""

    def list_records(self) -> list[IntakeRecord]:
        """Return every record."""

    def list_records_by_date(self, day: str) -> list[IntakeRecord]:
        """Return records logged on ``day`` using the date index."""

    def list_records_in_range(self, start: str, end: str) -> list[IntakeRecord]:
        """Return records with ``start <= date <= end``."""

    def create_record(self, record: IntakeRecord) -> int:
        """Insert a record and return its new id."""

    def delete_record(self, record_id: int) -> None:
        """Delete a record by id."""


@dataclass
class IntakeService:
    """Application service for logged meals and daily targets.

    Aggregations read ``records`` only; load the relevant dates first.
    """

    repository: IntakeRepository
    settings_repository: SettingsRepository
    records: list[IntakeRecord] = field(default_factory=list)
    daily_limits: DailyLimits = field(default_factory=DailyLimits)

    def load_all_records(self) -> list[IntakeRecord]:
        """Load every record into the mirror."""
        self.records = self.repository.list_records()
        return list(self.records)

    def load_records_by_date(self, day: str) -> list[IntakeRecord]:
        """Load the records of one day into the mirror."""
        self.records = self.repository.list_records_by_date(day)
        return list(self.records)

    def load_records_by_date_range(self, start: str, end: str) -> list[IntakeRecord]:
        """Load the records of an inclusive date range into the mirror."""
        self.records = self.repository.list_records_in_range(start, end)
        return list(self.records)

    def add_record(self, record: IntakeRecord) -> int:
        """Log a meal and return the new record id."""
        if record.meal_type not in MEAL_TYPES:
            raise ValueError(f"Unknown meal type: {record.meal_type}")
        _check_iso_date(record.date)
        record_id = self.repository.create_record(replace(record, id=None))
        self.records = [*self.records, replace(record, id=record_id)]
        return record_id

    def delete_record(self, record_id: int) -> None:
        """Delete a logged meal."""
        self.repository.delete_record(record_id)
        self.records = [item for item in self.records if item.id != record_id]

    def records_by_meal_type(self, day: str, meal_type: MealType) -> list[IntakeRecord]:
        """Return mirrored records of one meal on one day."""
        return [
            item
            for item in self.records
            if item.date == day and item.meal_type == meal_type
        ]

    def calculate_daily_totals(self, day: str) -> NutrientTotals:
        """Sum the mirrored records of one day."""
        return _sum_records(item for item in self.records if item.date == day)

    def calculate_range_totals(self, start: str, end: str) -> NutrientTotals:
        """Sum the mirrored records of an inclusive date range."""
        return _sum_records(
            item for item in self.records if start <= item.date <= end
        )

    def get_daily_totals_for_range(self, start: str, end: str) -> list[DailyTotals]:
        """Return one row per day in ``[start, end]``, zero rows included."""
        first = date.fromisoformat(_check_iso_date(start))
        last = date.fromisoformat(_check_iso_date(end))
        rows = []
        current = first
        while current <= last:
            day = current.isoformat()
            totals = self.calculate_daily_totals(day)
            rows.append(
                DailyTotals(
                    date=day,
                    carbs=totals.carbs,
                    protein=totals.protein,
                    fat=totals.fat,
                    calories=totals.calories,
                )
            )
            current += timedelta(days=1)
        return rows

    def load_daily_limits(self) -> DailyLimits:
        """Load the daily targets, keeping defaults for missing fields."""
        stored = self.settings_repository.get_value(DAILY_LIMITS_KEY)
        if isinstance(stored, dict):
            self.daily_limits = DailyLimits(
                carbs=float(stored.get("carbs", self.daily_limits.carbs)),
                protein=float(stored.get("protein", self.daily_limits.protein)),
                fat=float(stored.get("fat", self.daily_limits.fat)),
            )
        return self.daily_limits

    def save_daily_limits(self, limits: DailyLimits) -> None:
        """Overwrite the daily targets."""
        self.settings_repository.set_value(
            DAILY_LIMITS_KEY,
            {"carbs": limits.carbs, "protein": limits.protein, "fat": limits.fat},
        )
        self.daily_limits = limits

    def export_records(self) -> list[IntakeRecord]:
        """Return the current mirror."""
        return list(self.records)

    def import_records(
        self,
        records: list[IntakeRecord],
        on_failure: FailureHandler[IntakeRecord] | None = None,
    ) -> int:
        """Append every record as new; intake history is never deduplicated."""
        created = 0
        for record in records:
            try:
                self.add_record(record)
            except TransactionFailed as exc:
                if on_failure is None:
                    raise
                on_failure(record, exc)
                continue
            created += 1
        _logger.info("Imported intake records: created=%s", created)
        return created


def build_intake_record(
    food: FoodItem, quantity: float, meal_type: MealType, day: str
) -> IntakeRecord:
    """Scale a food's reference serving to ``quantity`` and snapshot it."""
    if food.quantity <= 0:
        raise ValueError("Food reference quantity must be positive")
    factor = quantity / food.quantity
    return IntakeRecord(
        food_id=food.id,
        food_name=food.name,
        food_image=food.image,
        quantity=quantity,
        unit=food.unit,
        carbs=round(food.carbs * factor, 2),
        protein=round(food.protein * factor, 2),
        fat=round(food.fat * factor, 2),
        calories=round(food.calories * factor, 2),
        meal_type=meal_type,
        date=day,
    )


def _check_iso_date(value: str) -> str:
    if not _ISO_DATE.fullmatch(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    date.fromisoformat(value)
    return value


def _sum_records(records: Iterable[IntakeRecord]) -> NutrientTotals:
    totals = NutrientTotals()
    for record in records:
        totals = NutrientTotals(
            carbs=totals.carbs + record.carbs,
            protein=totals.protein + record.protein,
            fat=totals.fat + record.fat,
            calories=totals.calories + record.calories,
        )
    return totals
