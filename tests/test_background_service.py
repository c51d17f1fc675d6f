"""Tests for background settings service."""

import asyncio

import pytest

from visifind.adapters.embedded_db import StoreHandle
from visifind.adapters.sqlite_settings_repository import SqliteSettingsRepository
from visifind.domain.background import BackgroundSettings
from visifind.services.background import (
    BACKGROUND_SETTINGS_KEY,
    BackgroundService,
    compute_style,
)
from tests.conftest import FakeWallpaperClient, InMemorySettingsRepository


def test_load_without_stored_row_keeps_defaults() -> None:
    service = BackgroundService(InMemorySettingsRepository())

    assert service.load() == BackgroundSettings()


def test_load_bing_mode_uses_bing_wallpaper_url() -> None:
    repository = InMemorySettingsRepository(
        {
            BACKGROUND_SETTINGS_KEY: {
                "backgroundInputMode": "bing",
                "bingWallpaperUrl": "https://x/y.jpg",
            }
        }
    )
    service = BackgroundService(repository)

    settings = service.load()

    assert settings.effective_url == "https://x/y.jpg"
    assert service.render_style().background_image == "url(https://x/y.jpg)"


def test_load_bing_mode_ignores_stale_background_url() -> None:
    repository = InMemorySettingsRepository(
        {
            BACKGROUND_SETTINGS_KEY: {
                "backgroundUrl": "https://old/picture.png",
                "backgroundInputMode": "bing",
                "bingWallpaperUrl": "https://x/y.jpg",
            }
        }
    )
    service = BackgroundService(repository)

    settings = service.load()

    assert settings.background_url == "https://x/y.jpg"
    assert service.render_style().as_css()["backgroundImage"] == "url(https://x/y.jpg)"


def test_load_row_from_before_bing_support() -> None:
    repository = InMemorySettingsRepository(
        {
            BACKGROUND_SETTINGS_KEY: {
                "backgroundUrl": "https://img/bg.jpg",
                "backgroundInputMode": "url",
                "backgroundBlur": 4,
                "backgroundColor": "#000000",
            }
        }
    )
    service = BackgroundService(repository)

    settings = service.load()

    assert settings.background_url == "https://img/bg.jpg"
    assert settings.background_blur == 4
    assert settings.bing_wallpaper_url == ""
    assert service.render_style().as_css() == {
        "backgroundImage": "url(https://img/bg.jpg)",
        "--bg-blur": "4px",
    }


def test_load_color_mode_forces_default_color() -> None:
    repository = InMemorySettingsRepository(
        {
            BACKGROUND_SETTINGS_KEY: {
                "backgroundInputMode": "color",
                "backgroundColor": "#ff0000",
            }
        }
    )
    service = BackgroundService(repository)

    assert service.load().background_color == "#1a1a2e"


def test_load_unknown_mode_falls_back_to_color() -> None:
    repository = InMemorySettingsRepository(
        {BACKGROUND_SETTINGS_KEY: {"backgroundInputMode": "video"}}
    )
    service = BackgroundService(repository)

    assert service.load().background_input_mode == "color"


def test_switching_to_color_resets_color(bookmark_db: StoreHandle) -> None:
    service = BackgroundService(SqliteSettingsRepository(bookmark_db))
    service.update(
        background_input_mode="url",
        background_url="https://img/bg.jpg",
        background_color="#123456",
    )

    service.update(background_input_mode="color")

    assert service.settings.background_color == "#1a1a2e"
    reloaded = BackgroundService(SqliteSettingsRepository(bookmark_db)).load()
    assert reloaded.background_input_mode == "color"
    assert reloaded.background_color == "#1a1a2e"


def test_update_changes_only_given_fields() -> None:
    repository = InMemorySettingsRepository()
    service = BackgroundService(repository)
    service.update(background_input_mode="url", background_url="https://a/b.png")

    service.update(background_blur=8)

    assert service.settings.background_url == "https://a/b.png"
    assert service.settings.background_blur == 8
    assert repository.values[BACKGROUND_SETTINGS_KEY] == {
        "backgroundUrl": "https://a/b.png",
        "backgroundInputMode": "url",
        "backgroundBlur": 8,
        "backgroundColor": "#1a1a2e",
        "bingWallpaperUrl": "",
    }


def test_update_rejects_invalid_values() -> None:
    service = BackgroundService(InMemorySettingsRepository())

    with pytest.raises(ValueError):
        service.update(background_blur=-1)
    with pytest.raises(ValueError):
        service.update(background_input_mode="video")
    with pytest.raises(ValueError):
        service.update(wallpaper="nope")


def test_save_overwrites_full_row() -> None:
    repository = InMemorySettingsRepository(
        {BACKGROUND_SETTINGS_KEY: {"backgroundUrl": "stale", "extra": True}}
    )
    service = BackgroundService(repository)

    service.save()

    assert repository.values[BACKGROUND_SETTINGS_KEY] == {
        "backgroundUrl": "",
        "backgroundInputMode": "color",
        "backgroundBlur": 0,
        "backgroundColor": "#1a1a2e",
        "bingWallpaperUrl": "",
    }


def test_compute_style_per_mode() -> None:
    color = compute_style(BackgroundSettings(background_color="#222222"))
    upload = compute_style(
        BackgroundSettings(
            background_input_mode="upload",
            background_url="data:image/png;base64,AAAA",
            background_blur=2.5,
        )
    )
    empty_url = compute_style(BackgroundSettings(background_input_mode="url"))

    assert color.as_css() == {
        "backgroundColor": "#222222",
        "backgroundImage": "none",
        "--bg-blur": "0px",
    }
    assert upload.as_css() == {
        "backgroundImage": "url(data:image/png;base64,AAAA)",
        "--bg-blur": "2.5px",
    }
    assert empty_url.as_css() == {"--bg-blur": "0px"}


def test_refresh_bing_wallpaper_switches_mode() -> None:
    repository = InMemorySettingsRepository()
    service = BackgroundService(repository)
    client = FakeWallpaperClient(url="https://www.bing.com/today.jpg")

    settings = asyncio.run(service.refresh_bing_wallpaper(client))

    assert client.calls == 1
    assert settings.background_input_mode == "bing"
    assert settings.effective_url == "https://www.bing.com/today.jpg"
    stored = repository.values[BACKGROUND_SETTINGS_KEY]
    assert stored["bingWallpaperUrl"] == "https://www.bing.com/today.jpg"
