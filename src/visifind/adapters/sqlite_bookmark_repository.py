"""SQLite implementation for bookmarks."""

from dataclasses import dataclass

from visifind.adapters.embedded_db import StoreHandle
from visifind.domain.bookmarks import Bookmark
from visifind.services.bookmarks import BookmarkRepository

BOOKMARKS = "bookmarks"
SETTINGS = "settings"
BOOKMARK_ORDER_KEY = "bookmarkOrder"


@dataclass
class SqliteBookmarkRepository(BookmarkRepository):
    """Bookmarks stored in the ``bookmarks`` collection of BookmarkDB."""

    handle: StoreHandle

    def list_bookmarks(self) -> list[Bookmark]:
        """Return bookmarks in saved order, unordered ones last by id."""
        with self.handle.transaction(BOOKMARKS, SETTINGS) as txn:
            rows = txn.get_all(BOOKMARKS)
            order = txn.get(SETTINGS, BOOKMARK_ORDER_KEY)
        bookmarks = [_parse_bookmark(row) for row in rows]
        if not isinstance(order, list):
            return bookmarks
        position = {bookmark_id: index for index, bookmark_id in enumerate(order)}
        return sorted(
            bookmarks,
            key=lambda item: (position.get(item.id, len(position)), item.id or 0),
        )

    def create_bookmark(self, bookmark: Bookmark) -> int:
        """Insert a bookmark and return its id."""
        with self.handle.transaction(BOOKMARKS, mode="readwrite") as txn:
            return txn.add(BOOKMARKS, _bookmark_payload(bookmark))

    def update_bookmark(self, bookmark_id: int, bookmark: Bookmark) -> None:
        """Overwrite a bookmark's fields."""
        with self.handle.transaction(BOOKMARKS, mode="readwrite") as txn:
            txn.put(BOOKMARKS, {**_bookmark_payload(bookmark), "id": bookmark_id})

    def delete_bookmark(self, bookmark_id: int) -> None:
        """Delete a bookmark by id."""
        with self.handle.transaction(BOOKMARKS, mode="readwrite") as txn:
            txn.delete(BOOKMARKS, bookmark_id)

    def save_order(self, bookmarks: list[Bookmark]) -> None:
        """Write each bookmark back and store the id order in one transaction."""
        with self.handle.transaction(BOOKMARKS, SETTINGS, mode="readwrite") as txn:
            for bookmark in bookmarks:
                txn.put(BOOKMARKS, {**_bookmark_payload(bookmark), "id": bookmark.id})
            txn.put(
                SETTINGS,
                [bookmark.id for bookmark in bookmarks],
                key=BOOKMARK_ORDER_KEY,
            )


def _bookmark_payload(bookmark: Bookmark) -> dict[str, object]:
    payload: dict[str, object] = {"name": bookmark.name, "url": bookmark.url}
    if bookmark.custom_icon is not None:
        payload["customIcon"] = bookmark.custom_icon
    if bookmark.group is not None:
        payload["group"] = bookmark.group
    if bookmark.description is not None:
        payload["description"] = bookmark.description
    return payload


def _parse_bookmark(row: dict[str, object]) -> Bookmark:
    """Parse a stored bookmark into a domain model."""
    return Bookmark(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        url=str(row.get("url", "")),
        custom_icon=row.get("customIcon"),
        group=row.get("group"),
        description=row.get("description"),
    )
