"""SQLite implementation for singleton settings rows."""

from dataclasses import dataclass

from visifind.adapters.embedded_db import StoreHandle
from visifind.services.settings import SettingsRepository


@dataclass
class SqliteSettingsRepository(SettingsRepository):
    """Settings rows kept in a string-keyed collection."""

    handle: StoreHandle
    collection: str = "settings"

    def get_value(self, key: str) -> object | None:
        """Return the value stored under ``key``, if any."""
        with self.handle.transaction(self.collection) as txn:
            return txn.get(self.collection, key)

    def set_value(self, key: str, value: object) -> None:
        """Overwrite the value stored under ``key``."""
        with self.handle.transaction(self.collection, mode="readwrite") as txn:
            txn.put(self.collection, value, key=key)
