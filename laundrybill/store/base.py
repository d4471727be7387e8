from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from laundrybill.errors import InternalError

Record = dict[str, Any]
T = TypeVar("T")

PARTITION_KEY = "pk"
SORT_KEY = "sk"
INDEX_PARTITION_KEY = "gsi1pk"
INDEX_SORT_KEY = "gsi1sk"
TTL_ATTRIBUTE = "expiresAt"


class StoreError(InternalError):
    default_message = "Storage request failed"


class BatchTooLargeError(ValueError):
    pass


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


class KeyValueStore(ABC):
    """Single-table document store addressed by partition + sort key.

    Atomicity holds per single record and per ``batch_write`` call only.
    """

    max_batch_size = 25

    @abstractmethod
    def get(self, pk: str, sk: str) -> Record | None:
        """Return the record stored under the key, or None."""
        ...

    @abstractmethod
    def put(self, record: Record) -> None:
        """Insert or fully replace the record identified by its pk/sk."""
        ...

    @abstractmethod
    def delete(self, pk: str, sk: str) -> None:
        """Remove the record. Deleting a missing key is not an error."""
        ...

    @abstractmethod
    def query(self, pk: str, sk_prefix: str | None = None) -> list[Record]:
        """All records in a partition, ordered by sort key."""
        ...

    @abstractmethod
    def query_index(self, index_pk: str, limit: int | None = None) -> list[Record]:
        """Reverse lookup through the secondary index."""
        ...

    @abstractmethod
    def batch_write(
        self,
        puts: Sequence[Record] = (),
        deletes: Sequence[tuple[str, str]] = (),
    ) -> None:
        """Apply up to ``max_batch_size`` puts and deletes in one call."""
        ...

    def _check_batch_size(self, puts: Sequence[Record], deletes: Sequence[tuple[str, str]]) -> None:
        size = len(puts) + len(deletes)
        if size > self.max_batch_size:
            raise BatchTooLargeError(f"Batch of {size} requests exceeds the limit of {self.max_batch_size}")
