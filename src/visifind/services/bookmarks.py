"""Bookmark service with an in-memory mirror of durable state."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from visifind.domain.bookmarks import Bookmark
from visifind.domain.errors import FailureHandler, TransactionFailed

_logger = logging.getLogger(__name__)


class BookmarkRepository(Protocol):
    """Persistence interface for bookmarks."""

    def list_bookmarks(self) -> list[Bookmark]:
        """Return every bookmark in display order."""

    def create_bookmark(self, bookmark: Bookmark) -> int:
        """Insert a bookmark and return its new id."""

    def update_bookmark(self, bookmark_id: int, bookmark: Bookmark) -> None:
        """Overwrite a bookmark's fields."""

    def delete_bookmark(self, bookmark_id: int) -> None:
        """Delete a bookmark by id."""

    def save_order(self, bookmarks: list[Bookmark]) -> None:
        """Write every bookmark back and persist their order."""


@dataclass
class BookmarkService:
    """Application service for bookmark operations.

    ``bookmarks`` mirrors durable state and is only changed after the
    repository call returns, so a failed write leaves it untouched.
    """

    repository: BookmarkRepository
    bookmarks: list[Bookmark] = field(default_factory=list)

    def load(self) -> list[Bookmark]:
        """Reload bookmarks from storage."""
        self.bookmarks = self.repository.list_bookmarks()
        return list(self.bookmarks)

    def add(self, bookmark: Bookmark) -> int:
        """Create a bookmark. Duplicate names are allowed."""
        bookmark_id = self.repository.create_bookmark(replace(bookmark, id=None))
        self.bookmarks = [*self.bookmarks, replace(bookmark, id=bookmark_id)]
        return bookmark_id

    def update(self, bookmark_id: int, bookmark: Bookmark) -> None:
        """Edit a bookmark in place."""
        updated = replace(bookmark, id=bookmark_id)
        self.repository.update_bookmark(bookmark_id, updated)
        self.bookmarks = [
            updated if item.id == bookmark_id else item for item in self.bookmarks
        ]

    def delete(self, bookmark_id: int) -> None:
        """Delete a bookmark."""
        self.repository.delete_bookmark(bookmark_id)
        self.bookmarks = [item for item in self.bookmarks if item.id != bookmark_id]

    def reorder(self, bookmarks: list[Bookmark]) -> None:
        """Persist a new display order.

        Callers pass the complete list; bookmarks left out stay in storage but
        drop out of the visible order until the next load.
        """
        persisted = [item for item in bookmarks if item.id is not None]
        self.repository.save_order(persisted)
        self.bookmarks = list(bookmarks)

    def export_bookmarks(self) -> list[Bookmark]:
        """Return the current mirror."""
        return list(self.bookmarks)

    def import_bookmarks(
        self,
        bookmarks: list[Bookmark],
        on_failure: FailureHandler[Bookmark] | None = None,
    ) -> int:
        """Add bookmarks whose names are not present yet, ignoring case.

        Incoming ids are discarded. Each insert is its own transaction. When
        ``on_failure`` is given, a failed insert is reported to it and the
        remaining bookmarks are still imported; otherwise the error propagates.
        """
        existing = {item.name.lower() for item in self.bookmarks}
        created = 0
        for bookmark in bookmarks:
            key = bookmark.name.lower()
            if key in existing:
                continue
            try:
                self.add(bookmark)
            except TransactionFailed as exc:
                if on_failure is None:
                    raise
                on_failure(bookmark, exc)
                continue
            existing.add(key)
            created += 1
        _logger.info("Imported bookmarks: created=%s", created)
        return created
