"""SQLite implementation for intake records."""

from dataclasses import dataclass

from visifind.adapters.embedded_db import StoreHandle
from visifind.domain.intake import IntakeRecord
from visifind.services.intake import IntakeRepository

RECORDS = "records"


@dataclass
class SqliteIntakeRepository(IntakeRepository):
    """Records stored in the ``records`` collection of IntakeRecordDB."""

    handle: StoreHandle

    def list_records(self) -> list[IntakeRecord]:
        """Return every record."""
        with self.handle.transaction(RECORDS) as txn:
            rows = txn.get_all(RECORDS)
        return [_parse_record(row) for row in rows]

    def list_records_by_date(self, day: str) -> list[IntakeRecord]:
        """Return records of one day through the date index."""
        with self.handle.transaction(RECORDS) as txn:
            rows = txn.get_all_by_index(RECORDS, "date", day)
        return [_parse_record(row) for row in rows]

    def list_records_in_range(self, start: str, end: str) -> list[IntakeRecord]:
        """Return records within an inclusive date range.

        Scans the whole collection; ISO dates compare correctly as strings.
        """
        return [
            record for record in self.list_records() if start <= record.date <= end
        ]

    def create_record(self, record: IntakeRecord) -> int:
        """Insert a record and return its id."""
        with self.handle.transaction(RECORDS, mode="readwrite") as txn:
            return txn.add(RECORDS, _record_payload(record))

    def delete_record(self, record_id: int) -> None:
        """Delete a record by id."""
        with self.handle.transaction(RECORDS, mode="readwrite") as txn:
            txn.delete(RECORDS, record_id)


def _record_payload(record: IntakeRecord) -> dict[str, object]:
    return {
        "foodId": record.food_id,
        "foodName": record.food_name,
        "foodImage": record.food_image,
        "quantity": record.quantity,
        "unit": record.unit,
        "carbs": record.carbs,
        "protein": record.protein,
        "fat": record.fat,
        "calories": record.calories,
        "mealType": record.meal_type,
        "date": record.date,
    }


def _parse_record(row: dict[str, object]) -> IntakeRecord:
    """Parse a stored record into a domain model."""
    food_id = row.get("foodId")
    return IntakeRecord(
        id=int(row["id"]),
        food_id=int(food_id) if food_id is not None else None,
        food_name=str(row.get("foodName", "")),
        food_image=str(row.get("foodImage", "")),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        carbs=float(row.get("carbs", 0.0)),
        protein=float(row.get("protein", 0.0)),
        fat=float(row.get("fat", 0.0)),
        calories=float(row.get("calories", 0.0)),
        meal_type=row.get("mealType", "breakfast"),
        date=str(row.get("date", "")),
    )
