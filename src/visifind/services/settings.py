"""Key/value settings rows and the search engine preference."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

SEARCH_ENGINE_KEY = "searchEngine"
DEFAULT_SEARCH_ENGINE = "baidu"

SEARCH_ENGINE_URLS: dict[str, str] = {
    "baidu": "https://www.baidu.com/s?wd=",
    "bing": "https://www.bing.com/search?q=",
    "google": "https://www.google.com/search?q=",
    "sogou": "https://www.sogou.com/web?query=",
}


class SettingsRepository(Protocol):
    """Persistence interface for singleton settings rows."""

    def get_value(self, key: str) -> object | None:
        """Return the value stored under ``key``, if any."""

    def set_value(self, key: str, value: object) -> None:
        """Overwrite the value stored under ``key``."""


@dataclass
class SearchSettingsService:
    """Service for the preferred search engine."""

    repository: SettingsRepository
    current_engine: str = DEFAULT_SEARCH_ENGINE

    def load(self) -> str:
        """Load the stored engine, keeping the default for unknown values."""
        stored = self.repository.get_value(SEARCH_ENGINE_KEY)
        if isinstance(stored, str) and stored in SEARCH_ENGINE_URLS:
            self.current_engine = stored
        return self.current_engine

    def set_engine(self, engine: str) -> None:
        """Persist the preferred engine."""
        if engine not in SEARCH_ENGINE_URLS:
            raise ValueError(f"Unknown search engine: {engine}")
        self.repository.set_value(SEARCH_ENGINE_KEY, engine)
        self.current_engine = engine

    def search_url(self, query: str) -> str | None:
        """Return the results URL for ``query``, or None for a blank query."""
        if not query.strip():
            return None
        return f"{SEARCH_ENGINE_URLS[self.current_engine]}{quote(query, safe='')}"
