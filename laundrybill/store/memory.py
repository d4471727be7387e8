from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Sequence

from laundrybill.store.base import (
    INDEX_PARTITION_KEY,
    INDEX_SORT_KEY,
    PARTITION_KEY,
    SORT_KEY,
    KeyValueStore,
    Record,
)

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """Process-local store for development and tests.

    Mirrors the DynamoDB semantics the services rely on: whole-record puts,
    sort-key ordered queries, and an index over ``gsi1pk``/``gsi1sk``. TTL
    attributes are stored but never enforced, as with DynamoDB's lazy sweeper.
    """

    def __init__(self, max_batch_size: int = 25) -> None:
        self.max_batch_size = max_batch_size
        self._records: dict[tuple[str, str], Record] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, pk: str, sk: str) -> Record | None:
        with self._lock:
            record = self._records.get((pk, sk))
            return copy.deepcopy(record) if record is not None else None

    def put(self, record: Record) -> None:
        key = (record[PARTITION_KEY], record[SORT_KEY])
        with self._lock:
            self._records[key] = copy.deepcopy(record)
        logger.debug("put %s / %s", *key)

    def delete(self, pk: str, sk: str) -> None:
        with self._lock:
            self._records.pop((pk, sk), None)
        logger.debug("delete %s / %s", pk, sk)

    def query(self, pk: str, sk_prefix: str | None = None) -> list[Record]:
        with self._lock:
            matches = [
                copy.deepcopy(record)
                for (record_pk, record_sk), record in self._records.items()
                if record_pk == pk and (sk_prefix is None or record_sk.startswith(sk_prefix))
            ]
        return sorted(matches, key=lambda r: r[SORT_KEY])

    def query_index(self, index_pk: str, limit: int | None = None) -> list[Record]:
        with self._lock:
            matches = [
                copy.deepcopy(record)
                for record in self._records.values()
                if record.get(INDEX_PARTITION_KEY) == index_pk
            ]
        matches.sort(key=lambda r: r.get(INDEX_SORT_KEY, ""))
        return matches[:limit] if limit is not None else matches

    def batch_write(
        self,
        puts: Sequence[Record] = (),
        deletes: Sequence[tuple[str, str]] = (),
    ) -> None:
        self._check_batch_size(puts, deletes)
        with self._lock:
            for record in puts:
                self._records[(record[PARTITION_KEY], record[SORT_KEY])] = copy.deepcopy(record)
            for key in deletes:
                self._records.pop(key, None)
        logger.debug("batch_write puts=%d deletes=%d", len(puts), len(deletes))
