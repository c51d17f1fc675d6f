"""Error taxonomy for the local data stores and backup protocol."""

from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class StorageError(RuntimeError):
    """Base class for embedded database failures."""


class StorageUnavailable(StorageError):
    """Raised when a domain database cannot be opened."""


class TransactionFailed(StorageError):
    """Raised when a read or write against a collection is rejected."""


class MalformedImportDocument(ValueError):
    """Raised when a backup document does not decode into a known snapshot."""


# Receives the record that could not be written and the storage error.
FailureHandler = Callable[[T, TransactionFailed], None]
