"""Root conftest — in-memory store, fault injection and service fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from laundrybill.models.customer import Customer
from laundrybill.repositories.keyvalue import (
    KeyValueBillRepository,
    KeyValueCustomerRepository,
    KeyValueSessionRepository,
)
from laundrybill.services.bill_service import BillService
from laundrybill.services.customer_service import CustomerService
from laundrybill.services.session_service import SessionService
from laundrybill.settings import Settings
from laundrybill.store.base import Record, StoreError
from laundrybill.store.memory import MemoryStore

TEST_PASSCODE = "open-sesame"


class FaultyStore(MemoryStore):
    """MemoryStore that raises StoreError for calls matching a registered predicate.

    ``fail_put(record)``, ``fail_batch(puts, deletes)`` and ``fail_delete(pk, sk)``
    decide per call; the batch that fails is not applied.
    """

    def __init__(self, max_batch_size: int = 25) -> None:
        super().__init__(max_batch_size=max_batch_size)
        self.fail_put: Callable[[Record], bool] | None = None
        self.fail_batch: Callable[[Sequence[Record], Sequence[tuple[str, str]]], bool] | None = None
        self.fail_delete: Callable[[str, str], bool] | None = None

    def put(self, record: Record) -> None:
        if self.fail_put is not None and self.fail_put(record):
            raise StoreError()
        super().put(record)

    def delete(self, pk: str, sk: str) -> None:
        if self.fail_delete is not None and self.fail_delete(pk, sk):
            raise StoreError()
        super().delete(pk, sk)

    def batch_write(self, puts: Sequence[Record] = (), deletes: Sequence[tuple[str, str]] = ()) -> None:
        if self.fail_batch is not None and self.fail_batch(puts, deletes):
            raise StoreError()
        super().batch_write(puts=puts, deletes=deletes)


def is_summary(record: Record) -> bool:
    return record.get("entityType") == "BILL"


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, admin_passcode=TEST_PASSCODE)


@pytest.fixture()
def store() -> FaultyStore:
    return FaultyStore()


@pytest.fixture()
def small_batch_store() -> FaultyStore:
    """Store with a batch cap of 2 so multi-chunk writes are easy to trigger."""
    return FaultyStore(max_batch_size=2)


@pytest.fixture()
def customer_repo(store):
    return KeyValueCustomerRepository(store)


@pytest.fixture()
def bill_repo(store):
    return KeyValueBillRepository(store)


@pytest.fixture()
def session_repo(store):
    return KeyValueSessionRepository(store)


@pytest.fixture()
def bill_service(bill_repo, customer_repo, settings) -> BillService:
    return BillService(bill_repo, customer_repo, settings)


@pytest.fixture()
def customer_service(customer_repo, bill_repo) -> CustomerService:
    return CustomerService(customer_repo, bill_repo)


@pytest.fixture()
def session_service(session_repo, settings) -> SessionService:
    return SessionService(session_repo, settings)


@pytest.fixture()
def customer(customer_service) -> Customer:
    return customer_service.create_customer("Asha", "9000000001", "12 MG Road")


def _sample_items(**overrides) -> list[dict]:
    items = [
        {"name": "Shirt", "quantity": 2, "pricePerUnit": 50, "service": "Wash"},
        {"name": "Pants", "quantity": 1, "pricePerUnit": 80},
    ]
    if overrides:
        items[0] = {**items[0], **overrides}
    return items


@pytest.fixture()
def sample_items():
    return _sample_items
