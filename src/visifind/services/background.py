"""Background settings service."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from visifind.domain.background import (
    DEFAULT_BACKGROUND_COLOR,
    INPUT_MODES,
    BackgroundSettings,
    BackgroundStyle,
)
from visifind.services.settings import SettingsRepository

_logger = logging.getLogger(__name__)

BACKGROUND_SETTINGS_KEY = "backgroundSettings"

# Stored field name -> BackgroundSettings attribute.
_FIELDS = {
    "backgroundUrl": "background_url",
    "backgroundInputMode": "background_input_mode",
    "backgroundBlur": "background_blur",
    "backgroundColor": "background_color",
    "bingWallpaperUrl": "bing_wallpaper_url",
}


class WallpaperClient(Protocol):
    """Interface for fetching the daily wallpaper URL."""

    async def fetch_wallpaper_url(self) -> str:
        """Return the URL of today's wallpaper."""


@dataclass
class BackgroundService:
    """Holds the current background settings and persists them as one row."""

    repository: SettingsRepository
    settings: BackgroundSettings = field(default_factory=BackgroundSettings)

    def load(self) -> BackgroundSettings:
        """Load stored settings field by field.

        Fields missing from the stored row (older versions did not have the
        bing fields) keep their current values.
        """
        stored = self.repository.get_value(BACKGROUND_SETTINGS_KEY)
        if not isinstance(stored, dict):
            return self.settings
        values = {
            attr: stored[name] for name, attr in _FIELDS.items() if name in stored
        }
        settings = self.settings
        if "background_input_mode" in values:
            mode = values["background_input_mode"]
            settings = replace(
                settings,
                background_input_mode=mode if mode in INPUT_MODES else "color",
            )
        for attr in ("bing_wallpaper_url", "background_blur", "background_color"):
            if attr in values:
                settings = replace(settings, **{attr: values[attr]})
        if "background_url" in values and settings.background_input_mode != "bing":
            settings = replace(settings, background_url=values["background_url"])
        if settings.background_input_mode == "bing":
            settings = replace(settings, background_url=settings.bing_wallpaper_url)
        if settings.background_input_mode == "color":
            settings = replace(settings, background_color=DEFAULT_BACKGROUND_COLOR)
        self.settings = settings
        return settings

    def save(self) -> None:
        """Persist the full current settings."""
        self.repository.set_value(BACKGROUND_SETTINGS_KEY, _to_row(self.settings))

    def update(self, **changes: object) -> BackgroundSettings:
        """Apply a partial update and save.

        Only the given fields change. Switching into color mode without a color
        resets it to the default swatch.
        """
        unknown = set(changes) - set(_FIELDS.values())
        if unknown:
            raise ValueError(f"Unknown background fields: {sorted(unknown)}")
        mode = changes.get("background_input_mode")
        if mode is not None and mode not in INPUT_MODES:
            raise ValueError(f"Unknown background mode: {mode}")
        blur = changes.get("background_blur")
        if blur is not None and float(blur) < 0:
            raise ValueError("Background blur cannot be negative")
        updated = replace(self.settings, **changes)
        if (
            mode == "color"
            and self.settings.background_input_mode != "color"
            and "background_color" not in changes
        ):
            updated = replace(updated, background_color=DEFAULT_BACKGROUND_COLOR)
        if updated.background_input_mode == "bing":
            updated = replace(updated, background_url=updated.bing_wallpaper_url)
        self.repository.set_value(BACKGROUND_SETTINGS_KEY, _to_row(updated))
        self.settings = updated
        return updated

    def export_settings(self) -> dict[str, object]:
        """Return the current settings as a stored row."""
        return _to_row(self.settings)

    def render_style(self) -> BackgroundStyle:
        """Compute the page style for the current settings."""
        return compute_style(self.settings)

    async def refresh_bing_wallpaper(
        self, client: WallpaperClient
    ) -> BackgroundSettings:
        """Fetch today's wallpaper and switch to bing mode."""
        url = await client.fetch_wallpaper_url()
        _logger.info("Fetched bing wallpaper: %s", url)
        return self.update(background_input_mode="bing", bing_wallpaper_url=url)


def compute_style(settings: BackgroundSettings) -> BackgroundStyle:
    """Return the render style for ``settings``."""
    mode = settings.background_input_mode
    url = settings.effective_url
    color = None
    image = None
    if mode == "color":
        color = settings.background_color
        image = "none"
    elif url:
        image = f"url({url})"
    blur = settings.background_blur
    return BackgroundStyle(
        background_color=color,
        background_image=image,
        blur=f"{blur:g}px" if blur else "0px",
    )


def _to_row(settings: BackgroundSettings) -> dict[str, object]:
    return {name: getattr(settings, attr) for name, attr in _FIELDS.items()}
