"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path("data")
    bing_source: Literal["biturl", "archive"] = "biturl"
    bing_biturl_url: str = "https://bing.biturl.top/"
    bing_archive_url: str = "https://www.bing.com/HPImageArchive.aspx"
    bing_market: str = "zh-CN"
    bing_resolution: int = 1920
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="VISIFIND_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def bing_url(self) -> str:
        """Return the endpoint for the configured wallpaper source."""
        if self.bing_source == "archive":
            return self.bing_archive_url
        return self.bing_biturl_url
