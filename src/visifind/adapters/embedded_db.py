"""SQLite-backed embedded key-value store with named, versioned collections.

Each domain database is a single SQLite file. Collections are tables that
hold JSON values, either under an auto-incrementing integer key or under a
caller-supplied string key. Secondary indexes are expression indexes over a
JSON field. The schema version is kept in ``PRAGMA user_version`` and upgrades
can only add collections and indexes.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from visifind.domain.errors import StorageUnavailable, TransactionFailed

_logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_INDEX_SEPARATOR = "__"

TransactionMode = Literal["readonly", "readwrite"]
Key = int | str


@dataclass(frozen=True)
class CollectionSpec:
    """Describes a collection discovered in the database."""

    name: str
    auto_increment: bool
    indexes: frozenset[str] = frozenset()


def _check_identifier(value: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Invalid collection or field name: {value!r}")
    return value


def _read_collections(conn: sqlite3.Connection) -> dict[str, CollectionSpec]:
    tables = [
        row[0]
        for row in conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%'"
        ).fetchall()
    ]
    specs: dict[str, CollectionSpec] = {}
    for table in tables:
        columns = [row[1] for row in conn.execute(f'PRAGMA table_info("{table}")')]
        index_rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ?",
            (table,),
        ).fetchall()
        prefix = f"{table}{_INDEX_SEPARATOR}"
        indexes = frozenset(
            row[0][len(prefix) :] for row in index_rows if row[0].startswith(prefix)
        )
        specs[table] = CollectionSpec(
            name=table,
            auto_increment=bool(columns) and columns[0] == "id",
            indexes=indexes,
        )
    return specs


@dataclass
class SchemaUpgrade:
    """Additive schema changes available to an upgrade callback."""

    connection: sqlite3.Connection
    old_version: int
    new_version: int
    _collections: dict[str, CollectionSpec] = field(default_factory=dict)

    @property
    def collection_names(self) -> frozenset[str]:
        """Return the names of the collections that exist so far."""
        return frozenset(self._collections)

    def create_collection(self, name: str, *, auto_increment: bool = True) -> None:
        """Create a collection, failing if it already exists."""
        _check_identifier(name)
        if name in self._collections:
            raise ValueError(f"Collection already exists: {name}")
        if auto_increment:
            ddl = (
                f'CREATE TABLE "{name}" '
                "(id INTEGER PRIMARY KEY AUTOINCREMENT, value TEXT NOT NULL)"
            )
        else:
            ddl = f'CREATE TABLE "{name}" (key TEXT PRIMARY KEY, value TEXT NOT NULL)'
        self.connection.execute(ddl)
        self._collections[name] = CollectionSpec(
            name=name, auto_increment=auto_increment
        )

    def create_index(self, collection: str, field_name: str) -> None:
        """Create a non-unique index over a JSON field of a collection."""
        _check_identifier(field_name)
        spec = self._collections.get(collection)
        if spec is None:
            raise ValueError(f"Unknown collection: {collection}")
        index_name = f"{collection}{_INDEX_SEPARATOR}{field_name}"
        self.connection.execute(
            f'CREATE INDEX IF NOT EXISTS "{index_name}" '
            f"ON \"{collection}\"(json_extract(value, '$.{field_name}'))"
        )
        self._collections[collection] = CollectionSpec(
            name=spec.name,
            auto_increment=spec.auto_increment,
            indexes=spec.indexes | {field_name},
        )


UpgradeCallback = Callable[[SchemaUpgrade], None]


class Transaction:
    """Read/write access to a fixed set of collections."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        collections: dict[str, CollectionSpec],
        mode: TransactionMode,
    ) -> None:
        self._connection = connection
        self._collections = collections
        self._mode = mode

    def get(self, collection: str, key: Key) -> dict[str, object] | None:
        """Return one value by key, or None when absent."""
        spec = self._spec(collection)
        column = "id" if spec.auto_increment else "key"
        row = self._connection.execute(
            f'SELECT {column}, value FROM "{collection}" WHERE {column} = ?',
            (key,),
        ).fetchone()
        if row is None:
            return None
        return self._decode(spec, row)

    def get_all(self, collection: str) -> list[dict[str, object]]:
        """Return every value in key order."""
        spec = self._spec(collection)
        column = "id" if spec.auto_increment else "key"
        rows = self._connection.execute(
            f'SELECT {column}, value FROM "{collection}" ORDER BY {column}'
        ).fetchall()
        return [self._decode(spec, row) for row in rows]

    def get_all_by_index(
        self, collection: str, index: str, value: object
    ) -> list[dict[str, object]]:
        """Return every value whose indexed field equals ``value``."""
        spec = self._spec(collection)
        if index not in spec.indexes:
            raise TransactionFailed(f"No index {index!r} on {collection}")
        column = "id" if spec.auto_increment else "key"
        rows = self._connection.execute(
            f'SELECT {column}, value FROM "{collection}" '
            f"WHERE json_extract(value, '$.{index}') = ? ORDER BY {column}",
            (value,),
        ).fetchall()
        return [self._decode(spec, row) for row in rows]

    def add(self, collection: str, value: dict[str, object]) -> int:
        """Insert a value into an auto-increment collection and return its id."""
        spec = self._writable(collection)
        if not spec.auto_increment:
            raise TransactionFailed(f"{collection} requires an explicit key")
        payload = {k: v for k, v in value.items() if k != "id"}
        cursor = self._connection.execute(
            f'INSERT INTO "{collection}" (value) VALUES (?)',
            (json.dumps(payload),),
        )
        return int(cursor.lastrowid)

    def put(
        self, collection: str, value: dict[str, object] | object, key: Key | None = None
    ) -> Key:
        """Insert or replace a value.

        Auto-increment collections take the key from ``value["id"]`` and insert
        a new row when it is missing. String-keyed collections need ``key``.
        """
        spec = self._writable(collection)
        if spec.auto_increment:
            if not isinstance(value, dict):
                raise TransactionFailed(f"{collection} values must be objects")
            record_id = value.get("id") if key is None else key
            if record_id is None:
                return self.add(collection, value)
            payload = {k: v for k, v in value.items() if k != "id"}
            self._connection.execute(
                f'INSERT OR REPLACE INTO "{collection}" (id, value) VALUES (?, ?)',
                (record_id, json.dumps(payload)),
            )
            return int(record_id)
        if key is None:
            raise TransactionFailed(f"{collection} requires an explicit key")
        self._connection.execute(
            f'INSERT OR REPLACE INTO "{collection}" (key, value) VALUES (?, ?)',
            (str(key), json.dumps(value)),
        )
        return str(key)

    def delete(self, collection: str, key: Key) -> None:
        """Delete a value by key; missing keys are ignored."""
        spec = self._writable(collection)
        column = "id" if spec.auto_increment else "key"
        self._connection.execute(
            f'DELETE FROM "{collection}" WHERE {column} = ?',
            (key,),
        )

    def _spec(self, collection: str) -> CollectionSpec:
        spec = self._collections.get(collection)
        if spec is None:
            raise TransactionFailed(f"{collection} is not part of this transaction")
        return spec

    def _writable(self, collection: str) -> CollectionSpec:
        if self._mode != "readwrite":
            raise TransactionFailed("Transaction is read-only")
        return self._spec(collection)

    @staticmethod
    def _decode(spec: CollectionSpec, row: tuple[object, str]) -> dict[str, object]:
        value = json.loads(row[1])
        if spec.auto_increment:
            return {**value, "id": row[0]}
        return value


@dataclass
class StoreHandle:
    """An open domain database."""

    name: str
    version: int
    connection: sqlite3.Connection
    collections: dict[str, CollectionSpec]

    @property
    def collection_names(self) -> frozenset[str]:
        """Return the names of all collections in the database."""
        return frozenset(self.collections)

    @contextmanager
    def transaction(
        self, *collections: str, mode: TransactionMode = "readonly"
    ) -> Iterator[Transaction]:
        """Run a transaction scoped to ``collections``.

        Commits on normal exit and rolls back when the block raises.
        """
        unknown = [name for name in collections if name not in self.collections]
        if unknown:
            raise TransactionFailed(f"Unknown collections in {self.name}: {unknown}")
        scoped = {name: self.collections[name] for name in collections}
        try:
            self.connection.execute(
                "BEGIN IMMEDIATE" if mode == "readwrite" else "BEGIN"
            )
        except sqlite3.Error as exc:
            raise TransactionFailed(str(exc)) from exc
        try:
            yield Transaction(self.connection, scoped, mode)
        except sqlite3.Error as exc:
            self.connection.rollback()
            raise TransactionFailed(str(exc)) from exc
        except BaseException:
            self.connection.rollback()
            raise
        try:
            self.connection.commit()
        except sqlite3.Error as exc:
            self.connection.rollback()
            raise TransactionFailed(str(exc)) from exc

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def open_store(
    path: Path | str, name: str, version: int, upgrade: UpgradeCallback
) -> StoreHandle:
    """Open or create a versioned domain database.

    ``upgrade`` runs in one transaction only when the stored version is lower
    than ``version``. Opening a database stored at a newer version fails.
    """
    if version < 1:
        raise ValueError("Database version must be a positive integer")
    location = str(path)
    try:
        if location != ":memory:":
            Path(location).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(location, isolation_level=None, check_same_thread=False)
    except (OSError, sqlite3.Error) as exc:
        raise StorageUnavailable(f"Cannot open {name}: {exc}") from exc

    try:
        stored_version = int(conn.execute("PRAGMA user_version").fetchone()[0])
        if stored_version > version:
            raise StorageUnavailable(
                f"{name} is at version {stored_version}, newer than {version}"
            )
        if stored_version < version:
            conn.execute("BEGIN IMMEDIATE")
            try:
                schema = SchemaUpgrade(
                    connection=conn,
                    old_version=stored_version,
                    new_version=version,
                    _collections=_read_collections(conn),
                )
                upgrade(schema)
                conn.execute(f"PRAGMA user_version = {int(version)}")
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
            _logger.info(
                "Upgraded %s from version %s to %s", name, stored_version, version
            )
        collections = _read_collections(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StorageUnavailable(f"Cannot open {name}: {exc}") from exc
    except BaseException:
        conn.close()
        raise

    _logger.info("Opened %s at version %s", name, version)
    return StoreHandle(
        name=name, version=version, connection=conn, collections=collections
    )
