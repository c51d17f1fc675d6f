"""Schemas of the per-domain databases."""

from pathlib import Path

from visifind.adapters.embedded_db import SchemaUpgrade, StoreHandle, open_store

BOOKMARK_DB = "BookmarkDB"
BOOKMARK_DB_VERSION = 2
FOOD_LIBRARY_DB = "FoodLibraryDB"
FOOD_LIBRARY_DB_VERSION = 1
INTAKE_RECORD_DB = "IntakeRecordDB"
INTAKE_RECORD_DB_VERSION = 2


def _upgrade_bookmark_db(upgrade: SchemaUpgrade) -> None:
    if "bookmarks" not in upgrade.collection_names:
        upgrade.create_collection("bookmarks")
    if "settings" not in upgrade.collection_names:
        upgrade.create_collection("settings", auto_increment=False)


def _upgrade_food_library_db(upgrade: SchemaUpgrade) -> None:
    if "foods" not in upgrade.collection_names:
        upgrade.create_collection("foods")


def _upgrade_intake_record_db(upgrade: SchemaUpgrade) -> None:
    if "records" not in upgrade.collection_names:
        upgrade.create_collection("records")
    upgrade.create_index("records", "date")
    upgrade.create_index("records", "mealType")
    if "settings" not in upgrade.collection_names:
        upgrade.create_collection("settings", auto_increment=False)


def _db_path(data_dir: Path | str, name: str) -> Path | str:
    if str(data_dir) == ":memory:":
        return ":memory:"
    return Path(data_dir) / f"{name}.sqlite3"


def open_bookmark_db(data_dir: Path | str) -> StoreHandle:
    """Open the database holding bookmarks and page settings."""
    return open_store(
        _db_path(data_dir, BOOKMARK_DB),
        BOOKMARK_DB,
        BOOKMARK_DB_VERSION,
        _upgrade_bookmark_db,
    )


def open_food_library_db(data_dir: Path | str) -> StoreHandle:
    """Open the food library database."""
    return open_store(
        _db_path(data_dir, FOOD_LIBRARY_DB),
        FOOD_LIBRARY_DB,
        FOOD_LIBRARY_DB_VERSION,
        _upgrade_food_library_db,
    )


def open_intake_record_db(data_dir: Path | str) -> StoreHandle:
    """Open the intake record database."""
    return open_store(
        _db_path(data_dir, INTAKE_RECORD_DB),
        INTAKE_RECORD_DB,
        INTAKE_RECORD_DB_VERSION,
        _upgrade_intake_record_db,
    )
