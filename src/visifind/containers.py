"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from visifind.adapters.bing_wallpaper_client import HttpxBingWallpaperClient
from visifind.adapters.databases import (
    open_bookmark_db,
    open_food_library_db,
    open_intake_record_db,
)
from visifind.adapters.sqlite_bookmark_repository import SqliteBookmarkRepository
from visifind.adapters.sqlite_food_repository import SqliteFoodRepository
from visifind.adapters.sqlite_intake_repository import SqliteIntakeRepository
from visifind.adapters.sqlite_settings_repository import SqliteSettingsRepository
from visifind.config import Settings
from visifind.services.background import BackgroundService, WallpaperClient
from visifind.services.backup import BackupService
from visifind.services.bookmarks import BookmarkService
from visifind.services.food_library import FoodLibraryService
from visifind.services.intake import IntakeService
from visifind.services.settings import SearchSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    bookmark_service: BookmarkService
    background_service: BackgroundService
    search_settings_service: SearchSettingsService
    food_library_service: FoodLibraryService
    intake_service: IntakeService
    backup_service: BackupService
    wallpaper_client: WallpaperClient
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Open each domain database once and wire the services to it."""
    resolved_settings = settings or Settings()
    bookmark_db = open_bookmark_db(resolved_settings.data_dir)
    food_library_db = open_food_library_db(resolved_settings.data_dir)
    intake_record_db = open_intake_record_db(resolved_settings.data_dir)

    page_settings = SqliteSettingsRepository(bookmark_db)
    bookmark_service = BookmarkService(SqliteBookmarkRepository(bookmark_db))
    background_service = BackgroundService(page_settings)
    search_settings_service = SearchSettingsService(page_settings)
    food_library_service = FoodLibraryService(SqliteFoodRepository(food_library_db))
    intake_service = IntakeService(
        repository=SqliteIntakeRepository(intake_record_db),
        settings_repository=SqliteSettingsRepository(intake_record_db),
    )
    backup_service = BackupService(
        bookmark_service=bookmark_service,
        background_service=background_service,
        food_library_service=food_library_service,
        intake_service=intake_service,
    )
    wallpaper_client = HttpxBingWallpaperClient.create(
        source=resolved_settings.bing_source,
        base_url=resolved_settings.bing_url,
        market=resolved_settings.bing_market,
        resolution=resolved_settings.bing_resolution,
    )

    async def close_resources() -> None:
        await wallpaper_client.close()
        bookmark_db.close()
        food_library_db.close()
        intake_record_db.close()

    return AppContainer(
        settings=resolved_settings,
        bookmark_service=bookmark_service,
        background_service=background_service,
        search_settings_service=search_settings_service,
        food_library_service=food_library_service,
        intake_service=intake_service,
        backup_service=backup_service,
        wallpaper_client=wallpaper_client,
        close_resources=close_resources,
    )
