"""Backup and restore across every domain store."""

import json
import logging
from dataclasses import dataclass
from datetime import date

from pydantic import ValidationError

from visifind.domain.backup import (
    SNAPSHOT_ADAPTER,
    SNAPSHOT_VERSION,
    BackgroundEntry,
    BackupFile,
    BookmarkEntry,
    DailyLimitsEntry,
    FoodEntry,
    ImportFailure,
    ImportResult,
    IntakeEntry,
    IntakeSettingsEntry,
    SnapshotV1,
    SnapshotV2,
)
from visifind.domain.bookmarks import Bookmark
from visifind.domain.errors import (
    FailureHandler,
    MalformedImportDocument,
    TransactionFailed,
)
from visifind.domain.food_library import FoodItem
from visifind.domain.intake import DailyLimits, IntakeRecord
from visifind.services.background import BackgroundService
from visifind.services.bookmarks import BookmarkService
from visifind.services.food_library import FoodLibraryService
from visifind.services.intake import IntakeService

_logger = logging.getLogger(__name__)

BACKUP_FILENAME_PREFIX = "visifind-backup"


@dataclass
class BackupService:
    """Builds snapshots from every store and merges snapshots back in.

    The service only goes through the domain services, never through storage
    directly, so imports follow the same write path as user edits.
    """

    bookmark_service: BookmarkService
    background_service: BackgroundService
    food_library_service: FoodLibraryService
    intake_service: IntakeService

    def export_data(self) -> dict[str, object]:
        """Reload every store and return a version 2 snapshot."""
        bookmarks = self.bookmark_service.load()
        self.background_service.load()
        foods = self.food_library_service.load()
        records = self.intake_service.load_all_records()
        limits = self.intake_service.load_daily_limits()
        snapshot = SnapshotV2(
            version=SNAPSHOT_VERSION,
            bookmarks=[_bookmark_entry(item) for item in bookmarks],
            background_settings=BackgroundEntry.model_validate(
                self.background_service.export_settings()
            ),
            food_library=[_food_entry(item) for item in foods],
            intake_records=[_intake_entry(item) for item in records],
            intake_settings=IntakeSettingsEntry(
                daily_limits=DailyLimitsEntry(
                    carbs=limits.carbs, protein=limits.protein, fat=limits.fat
                )
            ),
        )
        return snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)

    def export_document(self, today: date | None = None) -> BackupFile:
        """Serialize a snapshot for a file-save trigger."""
        payload = self.export_data()
        content = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        day = (today or date.today()).isoformat()
        _logger.info(
            "Exported backup: bookmarks=%s foods=%s records=%s",
            len(payload["bookmarks"]),
            len(payload["foodLibrary"]),
            len(payload["intakeRecords"]),
        )
        return BackupFile(
            filename=f"{BACKUP_FILENAME_PREFIX}-{day}.json", content=content
        )

    def import_document(self, content: str | bytes) -> ImportResult:
        """Parse a backup file's text and import it."""
        try:
            document = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedImportDocument(f"Backup is not valid JSON: {exc}") from exc
        return self.import_data(document)

    def import_data(self, document: object) -> ImportResult:
        """Merge a decoded backup document into the stores.

        The whole document is validated before anything is written. Writes are
        then applied record by record; a failed record is reported in the
        result and does not stop the rest of the import.
        """
        snapshot = decode_snapshot(document)
        result = ImportResult()
        failures = _FailureCollector(result)

        self.bookmark_service.load()
        result.bookmarks = self.bookmark_service.import_bookmarks(
            [_bookmark_from_entry(entry) for entry in snapshot.bookmarks],
            on_failure=failures.handler("bookmarks"),
        )

        if isinstance(snapshot, SnapshotV2):
            self._import_v2(snapshot, result, failures)

        _logger.info(
            "Imported backup v%s: created=%s failures=%s",
            snapshot.version,
            result.total,
            len(result.failures),
        )
        return result

    def _import_v2(
        self,
        snapshot: SnapshotV2,
        result: ImportResult,
        failures: "_FailureCollector",
    ) -> None:
        if snapshot.background_settings is not None:
            changes = snapshot.background_settings.model_dump(exclude_none=True)
            if changes:
                self.background_service.load()
                self.background_service.update(**changes)

        self.food_library_service.load()
        result.foods = self.food_library_service.import_foods(
            [_food_from_entry(entry) for entry in snapshot.food_library],
            on_failure=failures.handler("foodLibrary"),
        )
        result.intake_records = self.intake_service.import_records(
            [_intake_from_entry(entry) for entry in snapshot.intake_records],
            on_failure=failures.handler("intakeRecords"),
        )

        settings = snapshot.intake_settings
        if settings is not None and settings.daily_limits is not None:
            limits = settings.daily_limits
            self.intake_service.save_daily_limits(
                DailyLimits(carbs=limits.carbs, protein=limits.protein, fat=limits.fat)
            )


@dataclass
class _FailureCollector:
    """Turns per-record storage failures into import result entries."""

    result: ImportResult

    def handler(self, section: str) -> FailureHandler[object]:
        def record_failure(item: object, exc: TransactionFailed) -> None:
            name = getattr(item, "name", None) or getattr(item, "food_name", "")
            _logger.warning("Import of %s %r failed: %s", section, name, exc)
            self.result.failures.append(
                ImportFailure(section=section, name=str(name), reason=str(exc))
            )

        return record_failure


def decode_snapshot(document: object) -> SnapshotV1 | SnapshotV2:
    """Decode a backup document into its versioned snapshot model."""
    try:
        return SNAPSHOT_ADAPTER.validate_python(document)
    except ValidationError as exc:
        raise MalformedImportDocument(f"Unrecognized backup document: {exc}") from exc


def _bookmark_entry(bookmark: Bookmark) -> BookmarkEntry:
    return BookmarkEntry(
        id=bookmark.id,
        name=bookmark.name,
        url=bookmark.url,
        custom_icon=bookmark.custom_icon,
        group=bookmark.group,
        description=bookmark.description,
    )


def _bookmark_from_entry(entry: BookmarkEntry) -> Bookmark:
    return Bookmark(
        name=entry.name,
        url=entry.url,
        custom_icon=entry.custom_icon,
        group=entry.group,
        description=entry.description,
    )


def _food_entry(food: FoodItem) -> FoodEntry:
    return FoodEntry(
        id=food.id,
        image=food.image,
        name=food.name,
        category=food.category,
        quantity=food.quantity,
        unit=food.unit,
        carbs=food.carbs,
        protein=food.protein,
        fat=food.fat,
        calories=food.calories,
    )


def _food_from_entry(entry: FoodEntry) -> FoodItem:
    return FoodItem(
        image=entry.image,
        name=entry.name,
        category=entry.category,
        quantity=entry.quantity,
        unit=entry.unit,
        carbs=entry.carbs,
        protein=entry.protein,
        fat=entry.fat,
        calories=entry.calories,
    )


def _intake_entry(record: IntakeRecord) -> IntakeEntry:
    return IntakeEntry(
        id=record.id,
        food_id=record.food_id,
        food_name=record.food_name,
        food_image=record.food_image,
        quantity=record.quantity,
        unit=record.unit,
        carbs=record.carbs,
        protein=record.protein,
        fat=record.fat,
        calories=record.calories,
        meal_type=record.meal_type,
        date=record.date,
    )


def _intake_from_entry(entry: IntakeEntry) -> IntakeRecord:
    return IntakeRecord(
        food_id=entry.food_id,
        food_name=entry.food_name,
        food_image=entry.food_image,
        quantity=entry.quantity,
        unit=entry.unit,
        carbs=entry.carbs,
        protein=entry.protein,
        fat=entry.fat,
        calories=entry.calories,
        meal_type=entry.meal_type,
        date=entry.date,
    )
