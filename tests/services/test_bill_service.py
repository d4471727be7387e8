import logging
import time
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from laundrybill.constants import UTC
from laundrybill.errors import NotFoundError, ValidationError
from laundrybill.repositories.keyvalue import KeyValueBillRepository, KeyValueCustomerRepository
from laundrybill.services.bill_service import PDF_NOT_IMPLEMENTED_MESSAGE, BillService
from laundrybill.services.customer_service import CustomerService
from laundrybill.store.base import StoreError
from tests.conftest import is_summary

CUSTOMER_RECORDS = 2  # profile + listing


def _items(*names, price=10):
    return [{"itemId": name.lower(), "name": name, "quantity": 1, "pricePerUnit": price} for name in names]


class TestCreateBill:
    def test_creates_summary_and_items(self, bill_service, customer, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items(), 60, "2025-04-10T00:00:00Z")

        assert detail.bill.customer_id == customer.id
        assert detail.bill.total_amount == 180
        assert detail.bill.paid_amount == 60
        assert detail.bill.balance_due == 120
        assert detail.bill.due_date == "2025-04-10T00:00:00.000Z"
        assert detail.bill.created_at == detail.bill.updated_at
        assert [i.name for i in detail.items] == ["Shirt", "Pants"]

        stored = bill_service.get_bill(detail.bill.bill_id)
        assert stored.bill == detail.bill
        assert [i.item_id for i in stored.items] == [i.item_id for i in detail.items]

    def test_paid_defaults_to_zero(self, bill_service, customer, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items())
        assert detail.bill.paid_amount == 0
        assert detail.bill.due_date is None

    def test_empty_bill(self, bill_service, customer):
        detail = bill_service.create_bill(customer.id, [])
        assert detail.bill.total_amount == 0
        assert detail.items == []

    def test_expiry_set_from_ttl(self, bill_service, customer, sample_items, settings):
        before = int(time.time())
        detail = bill_service.create_bill(customer.id, sample_items())
        assert before + settings.bill_ttl_seconds <= detail.bill.expires_at
        assert detail.bill.expires_at <= int(time.time()) + settings.bill_ttl_seconds
        assert all(i.expires_at == detail.bill.expires_at for i in detail.items)

    def test_unknown_customer(self, bill_service, store, sample_items):
        with pytest.raises(NotFoundError, match="Customer not found"):
            bill_service.create_bill("nobody", sample_items())
        assert len(store) == 0

    def test_invalid_item_writes_nothing(self, bill_service, customer, store, sample_items):
        with pytest.raises(ValidationError, match=r"items\[0\]\.quantity"):
            bill_service.create_bill(customer.id, sample_items(quantity=0))
        assert len(store) == CUSTOMER_RECORDS

    def test_overpayment_rejected(self, bill_service, customer, store, sample_items):
        with pytest.raises(ValidationError, match="cannot exceed"):
            bill_service.create_bill(customer.id, sample_items(), 500)
        assert len(store) == CUSTOMER_RECORDS

    def test_summary_failure_removes_items(self, bill_service, customer, store, sample_items):
        store.fail_put = is_summary

        with pytest.raises(StoreError):
            bill_service.create_bill(customer.id, sample_items())

        assert len(store) == CUSTOMER_RECORDS
        assert bill_service.list_bills(customer.id) == []

    def test_rollback_removes_items_without_reading_them_back(
        self, bill_service, bill_repo, customer, store, sample_items, monkeypatch
    ):
        store.fail_put = is_summary
        # a lagging read returns none of the items just written
        monkeypatch.setattr(bill_repo, "list_items", lambda bill_id: [])

        with pytest.raises(StoreError):
            bill_service.create_bill(customer.id, sample_items())

        assert len(store) == CUSTOMER_RECORDS

    def test_items_failure_leaves_no_summary(self, bill_service, customer, store, sample_items):
        store.fail_batch = lambda puts, deletes: bool(puts)

        with pytest.raises(StoreError):
            bill_service.create_bill(customer.id, sample_items())

        assert len(store) == CUSTOMER_RECORDS

    def test_failing_compensation_still_raises_original(self, bill_service, customer, store, sample_items, caplog):
        store.fail_put = is_summary
        store.fail_batch = lambda puts, deletes: bool(deletes)

        with caplog.at_level(logging.ERROR, logger="laundrybill.services.compensation"):
            with pytest.raises(StoreError):
                bill_service.create_bill(customer.id, sample_items())

        assert "Compensation step failed" in caplog.text
        assert "delete written items" in caplog.text


class TestUpsertBill:
    def test_creates_when_absent(self, bill_service, customer, sample_items):
        detail, created = bill_service.upsert_bill("B1", customer.id, sample_items(), 100)
        assert created is True
        assert detail.bill.bill_id == "B1"
        assert detail.bill.total_amount == 180
        assert detail.bill.paid_amount == 100

    def test_create_requires_customer_id(self, bill_service, sample_items):
        with pytest.raises(ValidationError, match="customerId is required"):
            bill_service.upsert_bill("B1", None, sample_items())

    def test_create_requires_existing_customer(self, bill_service, store, sample_items):
        with pytest.raises(NotFoundError, match="Customer not found"):
            bill_service.upsert_bill("B1", "ghost", sample_items())
        assert len(store) == 0

    def test_replace_swaps_item_set(self, bill_service, customer, sample_items):
        first, _ = bill_service.upsert_bill("B1", customer.id, sample_items(), 100)

        detail, created = bill_service.upsert_bill("B1", customer.id, _items("Saree", "Blouse", "Dupatta"))

        assert created is False
        assert detail.bill.total_amount == 30
        stored = bill_service.get_bill("B1")
        assert [i.name for i in stored.items] == ["Saree", "Blouse", "Dupatta"]
        assert stored.bill.created_at == first.bill.created_at

    def test_replace_keeps_paid_and_due_date_when_omitted(self, bill_service, customer, sample_items):
        bill_service.upsert_bill("B1", customer.id, sample_items(), 20, "2025-04-10T00:00:00Z")

        detail, _ = bill_service.upsert_bill("B1", None, _items("Saree", "Blouse"))

        assert detail.bill.paid_amount == 20
        assert detail.bill.due_date == "2025-04-10T00:00:00.000Z"

    def test_replace_null_due_date_clears_it(self, bill_service, customer, sample_items):
        bill_service.upsert_bill("B1", customer.id, sample_items(), 0, "2025-04-10T00:00:00Z")

        detail, _ = bill_service.upsert_bill("B1", None, sample_items(), 0, None)

        assert detail.bill.due_date is None

    def test_replace_rejects_paid_above_new_total(self, bill_service, customer, sample_items):
        bill_service.upsert_bill("B1", customer.id, sample_items(), 150)

        with pytest.raises(ValidationError, match="cannot exceed"):
            bill_service.upsert_bill("B1", None, _items("Tie"))

        assert bill_service.get_summary("B1").paid_amount == 150
        assert len(bill_service.get_bill("B1").items) == 2

    def test_replace_ignores_other_customer_id(self, bill_service, customer_service, customer, sample_items):
        other = customer_service.create_customer("Ravi", "9000000002")
        bill_service.upsert_bill("B1", customer.id, sample_items())

        detail, created = bill_service.upsert_bill("B1", other.id, sample_items())

        assert created is False
        assert detail.bill.customer_id == customer.id
        assert bill_service.list_bills(other.id) == []

    def test_upsert_is_idempotent(self, bill_service, customer, store):
        payload = _items("Shirt", "Pants")
        bill_service.upsert_bill("B1", customer.id, payload, 5)
        count = len(store)

        detail, created = bill_service.upsert_bill("B1", customer.id, payload, 5)

        assert created is False
        assert len(store) == count
        assert [i.item_id for i in bill_service.get_bill("B1").items] == ["shirt", "pants"]
        assert detail.bill.total_amount == 20

    def test_summary_failure_restores_previous_bill(self, bill_service, customer, store, sample_items):
        before, _ = bill_service.upsert_bill("B1", customer.id, sample_items(), 100)
        store.fail_put = lambda record: is_summary(record) and record["totalAmount"] == 30

        with pytest.raises(StoreError):
            bill_service.upsert_bill("B1", customer.id, _items("Saree", "Blouse", "Dupatta"))

        after = bill_service.get_bill("B1")
        assert after.bill == before.bill
        assert [i.item_id for i in after.items] == [i.item_id for i in before.items]
        assert [i.name for i in after.items] == ["Shirt", "Pants"]

    def test_partial_chunk_failure_restores_previous_items(self, small_batch_store, settings):
        bill_repo = KeyValueBillRepository(small_batch_store)
        customer_repo = KeyValueCustomerRepository(small_batch_store)
        service = BillService(bill_repo, customer_repo, settings)
        owner = CustomerService(customer_repo, bill_repo).create_customer("Asha", "9000000001")
        before, _ = service.upsert_bill("B1", owner.id, _items("Old1", "Old2", "Old3"))

        written = []

        def fail_second_chunk(puts, deletes):
            if puts and puts[0].get("entityType") == "BILL_ITEM" and puts[0]["name"].startswith("New"):
                written.append(len(puts))
                return len(written) == 2
            return False

        small_batch_store.fail_batch = fail_second_chunk

        with pytest.raises(StoreError):
            service.upsert_bill("B1", owner.id, _items("New1", "New2", "New3", "New4", "New5"))

        after = service.get_bill("B1")
        assert after.bill == before.bill
        assert [i.name for i in after.items] == ["Old1", "Old2", "Old3"]

    def test_new_bill_rollback_does_not_depend_on_reads(
        self, bill_service, bill_repo, customer, store, sample_items, monkeypatch
    ):
        store.fail_put = is_summary
        monkeypatch.setattr(bill_repo, "list_items", lambda bill_id: [])

        with pytest.raises(StoreError):
            bill_service.upsert_bill("B1", customer.id, sample_items())

        assert len(store) == CUSTOMER_RECORDS

    def test_new_bill_failure_leaves_nothing(self, bill_service, customer, store, sample_items):
        store.fail_put = is_summary

        with pytest.raises(StoreError):
            bill_service.upsert_bill("B1", customer.id, sample_items())

        assert len(store) == CUSTOMER_RECORDS
        with pytest.raises(NotFoundError):
            bill_service.get_bill("B1")


class TestReadBills:
    def test_get_unknown_bill(self, bill_service):
        with pytest.raises(NotFoundError, match="Bill not found"):
            bill_service.get_bill("missing")

    def test_items_keep_insertion_order(self, bill_service, customer):
        names = ["Zari Saree", "Apron", "Muffler", "Blazer"]
        detail = bill_service.create_bill(customer.id, [{"name": n, "quantity": 1} for n in names])
        assert [i.name for i in bill_service.get_bill(detail.bill.bill_id).items] == names

    def test_list_bills_newest_first(self, bill_service, customer, sample_items):
        start = datetime(2025, 4, 1, tzinfo=UTC)
        stamps = iter(start + timedelta(minutes=n) for n in range(10))
        with patch("laundrybill.services.bill_service.utc_now", side_effect=lambda: next(stamps)):
            first = bill_service.create_bill(customer.id, sample_items())
            second = bill_service.create_bill(customer.id, sample_items())
            third, _ = bill_service.upsert_bill("B3", customer.id, sample_items())

        listed = bill_service.list_bills(customer.id)
        assert [b.bill_id for b in listed] == ["B3", second.bill.bill_id, first.bill.bill_id]
        assert third.bill.created_at == "2025-04-01T00:02:00.000Z"

    def test_list_bills_unknown_customer(self, bill_service):
        with pytest.raises(NotFoundError, match="Customer not found"):
            bill_service.list_bills("ghost")

    def test_list_bills_is_scoped_to_customer(self, bill_service, customer_service, customer, sample_items):
        other = customer_service.create_customer("Ravi", "9000000002")
        bill_service.create_bill(customer.id, sample_items())
        bill_service.create_bill(other.id, sample_items())

        assert len(bill_service.list_bills(customer.id)) == 1
        assert len(bill_service.list_bills(other.id)) == 1


class TestDeleteBill:
    def test_removes_summary_and_items(self, bill_service, customer, store, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items())

        bill_service.delete_bill(detail.bill.bill_id)

        assert len(store) == CUSTOMER_RECORDS
        with pytest.raises(NotFoundError):
            bill_service.get_bill(detail.bill.bill_id)

    def test_second_delete_is_not_found(self, bill_service, customer, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items())
        bill_service.delete_bill(detail.bill.bill_id)

        with pytest.raises(NotFoundError):
            bill_service.delete_bill(detail.bill.bill_id)

    def test_item_failure_after_summary_hides_bill(self, bill_service, customer, store, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items())
        store.fail_batch = lambda puts, deletes: bool(deletes)

        with pytest.raises(StoreError):
            bill_service.delete_bill(detail.bill.bill_id)

        with pytest.raises(NotFoundError):
            bill_service.get_bill(detail.bill.bill_id)


class TestInvoicePdf:
    def test_placeholder_message(self, bill_service, customer, sample_items):
        detail = bill_service.create_bill(customer.id, sample_items())
        assert bill_service.get_invoice_pdf(detail.bill.bill_id) == PDF_NOT_IMPLEMENTED_MESSAGE

    def test_unknown_bill(self, bill_service):
        with pytest.raises(NotFoundError):
            bill_service.get_invoice_pdf("missing")
