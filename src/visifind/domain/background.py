"""Domain models for the page background."""

from dataclasses import dataclass
from typing import Literal

InputMode = Literal["color", "upload", "url", "bing"]

INPUT_MODES: tuple[str, ...] = ("color", "upload", "url", "bing")
DEFAULT_BACKGROUND_COLOR = "#1a1a2e"


@dataclass(frozen=True)
class BackgroundSettings:
    """Persisted background configuration."""

    background_url: str = ""
    background_input_mode: InputMode = "color"
    background_blur: float = 0
    background_color: str = DEFAULT_BACKGROUND_COLOR
    bing_wallpaper_url: str = ""

    @property
    def effective_url(self) -> str:
        """Return the URL used for rendering in the current mode."""
        if self.background_input_mode == "bing":
            return self.bing_wallpaper_url
        return self.background_url


@dataclass(frozen=True)
class BackgroundStyle:
    """Render style derived from background settings."""

    background_color: str | None
    background_image: str | None
    blur: str

    def as_css(self) -> dict[str, str]:
        """Return the style as CSS property names."""
        css: dict[str, str] = {}
        if self.background_color is not None:
            css["backgroundColor"] = self.background_color
        if self.background_image is not None:
            css["backgroundImage"] = self.background_image
        css["--bg-blur"] = self.blur
        return css
