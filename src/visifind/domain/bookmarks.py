"""Domain models for bookmarks."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Bookmark:
    """Represents a bookmark tile on the new-tab page."""

    name: str
    url: str
    custom_icon: str | None = None
    group: str | None = None
    description: str | None = None
    id: int | None = None
