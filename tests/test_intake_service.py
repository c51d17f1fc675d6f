"""Tests for intake record service."""

import pytest

from visifind.adapters.embedded_db import StoreHandle
from visifind.adapters.sqlite_intake_repository import SqliteIntakeRepository
from visifind.adapters.sqlite_settings_repository import SqliteSettingsRepository
from visifind.domain.intake import DailyLimits, DailyTotals, NutrientTotals
from visifind.services.intake import IntakeService, build_intake_record
from tests.conftest import make_food, make_record


def test_daily_totals_for_range_includes_empty_days(
    intake_service: IntakeService,
) -> None:
    intake_service.add_record(make_record("2024-01-02"))
    intake_service.load_records_by_date_range("2024-01-01", "2024-01-03")

    rows = intake_service.get_daily_totals_for_range("2024-01-01", "2024-01-03")

    assert rows == [
        DailyTotals(date="2024-01-01"),
        DailyTotals(date="2024-01-02", carbs=30, protein=6, fat=3.5, calories=190),
        DailyTotals(date="2024-01-03"),
    ]


def test_daily_totals_for_range_crosses_month_end(
    intake_service: IntakeService,
) -> None:
    rows = intake_service.get_daily_totals_for_range("2024-02-28", "2024-03-01")

    assert [row.date for row in rows] == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert intake_service.get_daily_totals_for_range("2024-01-03", "2024-01-01") == []


def test_load_by_date_uses_index(intake_service: IntakeService) -> None:
    intake_service.add_record(make_record("2024-01-01"))
    intake_service.add_record(make_record("2024-01-02", meal_type="lunch"))
    intake_service.add_record(make_record("2024-01-02", meal_type="dinner"))

    records = intake_service.load_records_by_date("2024-01-02")

    assert [item.meal_type for item in records] == ["lunch", "dinner"]
    assert intake_service.records == records


def test_load_by_range_is_inclusive(intake_service: IntakeService) -> None:
    for day in ("2023-12-31", "2024-01-01", "2024-01-05", "2024-01-06"):
        intake_service.add_record(make_record(day))

    records = intake_service.load_records_by_date_range("2024-01-01", "2024-01-05")

    assert [item.date for item in records] == ["2024-01-01", "2024-01-05"]


def test_totals_read_only_the_mirror(intake_service: IntakeService) -> None:
    intake_service.add_record(make_record("2024-01-01"))
    intake_service.add_record(make_record("2024-01-02"))
    intake_service.load_records_by_date("2024-01-01")

    assert intake_service.calculate_daily_totals("2024-01-02") == NutrientTotals()
    assert intake_service.calculate_range_totals(
        "2024-01-01", "2024-01-02"
    ) == NutrientTotals(carbs=30, protein=6, fat=3.5, calories=190)


def test_records_by_meal_type(intake_service: IntakeService) -> None:
    intake_service.add_record(make_record("2024-01-01", meal_type="breakfast"))
    intake_service.add_record(make_record("2024-01-01", meal_type="dinner"))
    intake_service.load_all_records()

    dinner = intake_service.records_by_meal_type("2024-01-01", "dinner")

    assert len(dinner) == 1
    assert dinner[0].meal_type == "dinner"


def test_add_record_validates_input(intake_service: IntakeService) -> None:
    with pytest.raises(ValueError):
        intake_service.add_record(make_record("2024-1-5"))
    with pytest.raises(ValueError):
        intake_service.add_record(make_record(meal_type="snack"))

    assert intake_service.load_all_records() == []


def test_delete_record(intake_service: IntakeService) -> None:
    record_id = intake_service.add_record(make_record())

    intake_service.delete_record(record_id)

    assert intake_service.records == []
    assert intake_service.load_all_records() == []


def test_daily_limits_default_and_save(
    intake_service: IntakeService, intake_record_db: StoreHandle
) -> None:
    assert intake_service.load_daily_limits() == DailyLimits(
        carbs=300, protein=60, fat=60
    )

    intake_service.save_daily_limits(DailyLimits(carbs=250, protein=90, fat=70))

    fresh = IntakeService(
        repository=SqliteIntakeRepository(intake_record_db),
        settings_repository=SqliteSettingsRepository(intake_record_db),
    )
    assert fresh.load_daily_limits() == DailyLimits(carbs=250, protein=90, fat=70)


def test_import_records_appends_duplicates(intake_service: IntakeService) -> None:
    record = make_record(id=5)

    first = intake_service.import_records([record, record])
    second = intake_service.import_records([record])

    loaded = intake_service.load_all_records()
    assert (first, second) == (2, 1)
    assert [item.id for item in loaded] == [1, 2, 3]


def test_build_intake_record_scales_macros() -> None:
    food = make_food("Oatmeal", id=3, quantity=100, carbs=60, protein=12, fat=7)

    record = build_intake_record(food, 50, "breakfast", "2024-01-02")

    assert record.food_id == 3
    assert record.food_name == "Oatmeal"
    assert record.food_image == food.image
    assert (record.carbs, record.protein, record.fat, record.calories) == (
        30,
        6,
        3.5,
        190,
    )
    assert record.id is None


def test_build_intake_record_rejects_zero_serving() -> None:
    with pytest.raises(ValueError):
        build_intake_record(make_food(quantity=0), 10, "lunch", "2024-01-02")
