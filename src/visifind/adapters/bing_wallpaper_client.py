"""Bing daily wallpaper client."""

from dataclasses import dataclass
from typing import Literal

import httpx

BING_HOST = "https://www.bing.com"

WallpaperSource = Literal["biturl", "archive"]


@dataclass
class HttpxBingWallpaperClient:
    """HTTPX-backed wallpaper client with two endpoint variants.

    ``biturl`` asks a mirror service that answers with ``{"url": ...}``.
    ``archive`` reads Bing's own image archive and builds the URL from the
    first image's ``urlbase``.
    """

    source: WallpaperSource
    base_url: str
    market: str
    resolution: int
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls,
        source: WallpaperSource,
        base_url: str,
        market: str = "zh-CN",
        resolution: int = 1920,
    ) -> "HttpxBingWallpaperClient":
        """Create a wallpaper client with a managed httpx session."""
        return cls(
            source=source,
            base_url=base_url,
            market=market,
            resolution=resolution,
            http_client=httpx.AsyncClient(),
        )

    async def fetch_wallpaper_url(self) -> str:
        """Return the URL of today's wallpaper."""
        if self.source == "biturl":
            return await self._fetch_from_biturl()
        return await self._fetch_from_archive()

    async def _fetch_from_biturl(self) -> str:
        response = await self.http_client.get(
            self.base_url,
            params={
                "resolution": self.resolution,
                "format": "json",
                "index": 0,
                "mkt": self.market,
            },
            timeout=15,
        )
        response.raise_for_status()
        url = response.json().get("url")
        if not url:
            raise RuntimeError("Wallpaper service returned no url")
        return str(url)

    async def _fetch_from_archive(self) -> str:
        response = await self.http_client.get(
            self.base_url,
            params={"format": "js", "idx": 0, "n": 1, "mkt": self.market},
            timeout=15,
        )
        response.raise_for_status()
        images = response.json().get("images") or []
        if not images:
            raise RuntimeError("No Bing wallpaper found")
        return f"{BING_HOST}{images[0]['urlbase']}_1920x1080.jpg"

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
