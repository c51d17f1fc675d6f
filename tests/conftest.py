"""Shared test fixtures."""

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from visifind.adapters.databases import (
    open_bookmark_db,
    open_food_library_db,
    open_intake_record_db,
)
from visifind.adapters.embedded_db import StoreHandle
from visifind.adapters.sqlite_bookmark_repository import SqliteBookmarkRepository
from visifind.adapters.sqlite_food_repository import SqliteFoodRepository
from visifind.adapters.sqlite_intake_repository import SqliteIntakeRepository
from visifind.adapters.sqlite_settings_repository import SqliteSettingsRepository
from visifind.config import Settings
from visifind.containers import AppContainer, build_container
from visifind.domain.bookmarks import Bookmark
from visifind.domain.errors import TransactionFailed
from visifind.domain.food_library import FoodItem
from visifind.domain.intake import IntakeRecord
from visifind.services.background import BackgroundService
from visifind.services.backup import BackupService
from visifind.services.bookmarks import BookmarkRepository, BookmarkService
from visifind.services.food_library import FoodLibraryService
from visifind.services.intake import IntakeService
from visifind.services.settings import SettingsRepository


@dataclass
class InMemorySettingsRepository(SettingsRepository):
    """In-memory settings rows for tests."""

    values: dict[str, object] = field(default_factory=dict)

    def get_value(self, key: str) -> object | None:
        return self.values.get(key)

    def set_value(self, key: str, value: object) -> None:
        self.values[key] = value


@dataclass
class FailingBookmarkRepository(BookmarkRepository):
    """Bookmark repository whose writes are rejected by storage."""

    stored: list[Bookmark] = field(default_factory=list)
    fail_names: set[str] = field(default_factory=set)
    fail_all_writes: bool = False
    next_id: int = 1

    def list_bookmarks(self) -> list[Bookmark]:
        return list(self.stored)

    def create_bookmark(self, bookmark: Bookmark) -> int:
        if self.fail_all_writes or bookmark.name in self.fail_names:
            raise TransactionFailed("disk I/O error")
        bookmark_id = self.next_id
        self.next_id += 1
        return bookmark_id

    def update_bookmark(self, bookmark_id: int, bookmark: Bookmark) -> None:
        raise TransactionFailed("disk I/O error")

    def delete_bookmark(self, bookmark_id: int) -> None:
        raise TransactionFailed("disk I/O error")

    def save_order(self, bookmarks: list[Bookmark]) -> None:
        raise TransactionFailed("disk I/O error")


@dataclass
class FakeWallpaperClient:
    """Wallpaper client returning a fixed URL."""

    url: str = "https://www.bing.com/th?id=OHR.Daily_1920x1080.jpg"
    calls: int = 0

    async def fetch_wallpaper_url(self) -> str:
        self.calls += 1
        return self.url


def make_food(name: str = "Oatmeal", **overrides: object) -> FoodItem:
    values: dict[str, object] = {
        "name": name,
        "image": "data:image/png;base64,AAAA",
        "category": "grains",
        "quantity": 100,
        "unit": "g",
        "carbs": 60,
        "protein": 12,
        "fat": 7,
        "calories": 380,
    }
    values.update(overrides)
    return FoodItem(**values)  # type: ignore[arg-type]


def make_record(day: str = "2024-01-02", **overrides: object) -> IntakeRecord:
    values: dict[str, object] = {
        "food_id": 1,
        "food_name": "Oatmeal",
        "food_image": "",
        "quantity": 50,
        "unit": "g",
        "carbs": 30,
        "protein": 6,
        "fat": 3.5,
        "calories": 190,
        "meal_type": "breakfast",
        "date": day,
    }
    values.update(overrides)
    return IntakeRecord(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def bookmark_db(settings: Settings) -> Iterator[StoreHandle]:
    handle = open_bookmark_db(settings.data_dir)
    yield handle
    handle.close()


@pytest.fixture
def food_library_db(settings: Settings) -> Iterator[StoreHandle]:
    handle = open_food_library_db(settings.data_dir)
    yield handle
    handle.close()


@pytest.fixture
def intake_record_db(settings: Settings) -> Iterator[StoreHandle]:
    handle = open_intake_record_db(settings.data_dir)
    yield handle
    handle.close()


@pytest.fixture
def bookmark_service(bookmark_db: StoreHandle) -> BookmarkService:
    return BookmarkService(SqliteBookmarkRepository(bookmark_db))


@pytest.fixture
def background_service(bookmark_db: StoreHandle) -> BackgroundService:
    return BackgroundService(SqliteSettingsRepository(bookmark_db))


@pytest.fixture
def food_library_service(food_library_db: StoreHandle) -> FoodLibraryService:
    return FoodLibraryService(SqliteFoodRepository(food_library_db))


@pytest.fixture
def intake_service(intake_record_db: StoreHandle) -> IntakeService:
    return IntakeService(
        repository=SqliteIntakeRepository(intake_record_db),
        settings_repository=SqliteSettingsRepository(intake_record_db),
    )


@pytest.fixture
def backup_service(
    bookmark_service: BookmarkService,
    background_service: BackgroundService,
    food_library_service: FoodLibraryService,
    intake_service: IntakeService,
) -> BackupService:
    return BackupService(
        bookmark_service=bookmark_service,
        background_service=background_service,
        food_library_service=food_library_service,
        intake_service=intake_service,
    )


@pytest.fixture
def container(settings: Settings) -> Iterator[AppContainer]:
    app_container = build_container(settings)
    app_container.wallpaper_client = FakeWallpaperClient()
    yield app_container
    asyncio.run(app_container.close_resources())
