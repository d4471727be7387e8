from __future__ import annotations

import logging
from collections.abc import Sequence

from laundrybill.constants import (
    BILL_PREFIX,
    CUSTOMERS_PARTITION,
    PROFILE_SORT_KEY,
    SESSION_PARTITION,
    SUMMARY_INDEX_SORT_KEY,
    EntityType,
    bill_key,
    customer_pk,
    item_sk,
    phone_key,
    token_sk,
)
from laundrybill.models.bill import BillItem, BillSummary
from laundrybill.models.customer import Customer
from laundrybill.models.session import Session
from laundrybill.repositories.base import BillRepository, CustomerRepository, SessionRepository
from laundrybill.store.base import (
    INDEX_PARTITION_KEY,
    INDEX_SORT_KEY,
    PARTITION_KEY,
    SORT_KEY,
    KeyValueStore,
    Record,
    chunked,
)

logger = logging.getLogger(__name__)


class _KeyValueRepository:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _batch_put(self, records: Sequence[Record]) -> None:
        for chunk in chunked(records, self.store.max_batch_size):
            self.store.batch_write(puts=chunk)

    def _batch_delete(self, keys: Sequence[tuple[str, str]]) -> None:
        for chunk in chunked(keys, self.store.max_batch_size):
            self.store.batch_write(deletes=chunk)


class KeyValueCustomerRepository(_KeyValueRepository, CustomerRepository):
    @staticmethod
    def _record_to_customer(record: Record) -> Customer:
        return Customer(
            id=record["customerId"],
            name=record.get("name", ""),
            phone=record.get("phone", ""),
            address=record.get("address", ""),
            created_at=record.get("createdAt"),
        )

    @staticmethod
    def _attributes(customer: Customer) -> Record:
        return {
            "customerId": customer.id,
            "name": customer.name,
            "phone": customer.phone,
            "address": customer.address,
            "createdAt": customer.created_at,
            "entityType": EntityType.CUSTOMER,
        }

    def create(self, customer: Customer) -> Customer:
        profile = {
            PARTITION_KEY: customer_pk(customer.id),
            SORT_KEY: PROFILE_SORT_KEY,
            INDEX_PARTITION_KEY: phone_key(customer.phone),
            INDEX_SORT_KEY: customer_pk(customer.id),
            **self._attributes(customer),
        }
        listing = {
            PARTITION_KEY: CUSTOMERS_PARTITION,
            SORT_KEY: customer_pk(customer.id),
            **self._attributes(customer),
        }
        self.store.batch_write(puts=[profile, listing])
        return customer

    def get_by_id(self, customer_id: str) -> Customer | None:
        record = self.store.get(customer_pk(customer_id), PROFILE_SORT_KEY)
        if record is None:
            return None
        return self._record_to_customer(record)

    def get_by_phone(self, phone: str) -> Customer | None:
        records = self.store.query_index(phone_key(phone), limit=1)
        if not records or not records[0].get("customerId"):
            return None
        return self._record_to_customer(records[0])

    def list_all(self) -> list[Customer]:
        records = self.store.query(CUSTOMERS_PARTITION)
        return [self._record_to_customer(r) for r in records]

    def list_bill_ids(self, customer_id: str) -> list[str]:
        records = self.store.query(customer_pk(customer_id))
        bill_ids = []
        for record in records:
            if not record[SORT_KEY].startswith(BILL_PREFIX):
                continue
            bill_ids.append(record.get("billId") or record[SORT_KEY][len(BILL_PREFIX) :])
        return bill_ids

    def delete(self, customer_id: str, bill_ids: Sequence[str] = ()) -> None:
        keys = [
            (customer_pk(customer_id), PROFILE_SORT_KEY),
            (CUSTOMERS_PARTITION, customer_pk(customer_id)),
        ]
        keys.extend((customer_pk(customer_id), bill_key(bill_id)) for bill_id in bill_ids)
        self._batch_delete(keys)


class KeyValueBillRepository(_KeyValueRepository, BillRepository):
    @staticmethod
    def _record_to_summary(record: Record) -> BillSummary:
        return BillSummary(
            bill_id=record["billId"],
            customer_id=record["customerId"],
            total_amount=record.get("totalAmount", 0),
            paid_amount=record.get("paidAmount", record.get("payedAmount", 0)),
            due_date=record.get("dueDate"),
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            expires_at=record.get("expiresAt"),
        )

    @staticmethod
    def _record_to_item(record: Record) -> BillItem:
        return BillItem(
            item_id=record["itemId"],
            name=record["name"],
            quantity=record["quantity"],
            price_per_unit=record["pricePerUnit"],
            service=record.get("service"),
            position=record.get("position", 0),
            created_at=record.get("createdAt"),
            expires_at=record.get("expiresAt"),
        )

    def get_summary(self, bill_id: str) -> BillSummary | None:
        records = self.store.query_index(bill_key(bill_id), limit=1)
        if not records:
            return None
        return self._record_to_summary(records[0])

    def list_summaries(self, customer_id: str) -> list[BillSummary]:
        records = self.store.query(customer_pk(customer_id), sk_prefix=BILL_PREFIX)
        return [self._record_to_summary(r) for r in records]

    def put_summary(self, summary: BillSummary) -> None:
        self.store.put(
            {
                PARTITION_KEY: customer_pk(summary.customer_id),
                SORT_KEY: bill_key(summary.bill_id),
                INDEX_PARTITION_KEY: bill_key(summary.bill_id),
                INDEX_SORT_KEY: SUMMARY_INDEX_SORT_KEY,
                "billId": summary.bill_id,
                "customerId": summary.customer_id,
                "totalAmount": summary.total_amount,
                "paidAmount": summary.paid_amount,
                "dueDate": summary.due_date,
                "createdAt": summary.created_at,
                "updatedAt": summary.updated_at,
                "expiresAt": summary.expires_at,
                "entityType": EntityType.BILL,
            }
        )
        logger.debug("Summary stored for bill %s", summary.bill_id)

    def delete_summary(self, customer_id: str, bill_id: str) -> None:
        self.store.delete(customer_pk(customer_id), bill_key(bill_id))

    def list_items(self, bill_id: str) -> list[BillItem]:
        records = self.store.query(bill_key(bill_id))
        items = [self._record_to_item(r) for r in records]
        items.sort(key=lambda item: item.position)
        return items

    def put_items(self, bill_id: str, customer_id: str, items: Sequence[BillItem]) -> None:
        records = [
            {
                PARTITION_KEY: bill_key(bill_id),
                SORT_KEY: item_sk(item.item_id),
                "itemId": item.item_id,
                "billId": bill_id,
                "customerId": customer_id,
                "name": item.name,
                "quantity": item.quantity,
                "pricePerUnit": item.price_per_unit,
                "service": item.service,
                "position": item.position,
                "createdAt": item.created_at,
                "expiresAt": item.expires_at,
                "entityType": EntityType.BILL_ITEM,
            }
            for item in items
        ]
        self._batch_put(records)
        logger.debug("Stored %d items for bill %s", len(records), bill_id)

    def delete_items(self, bill_id: str, items: Sequence[BillItem] | None = None) -> None:
        if items is None:
            items = self.list_items(bill_id)
        keys = [(bill_key(bill_id), item_sk(item.item_id)) for item in items]
        self._batch_delete(keys)
        logger.debug("Deleted %d items for bill %s", len(keys), bill_id)


class KeyValueSessionRepository(_KeyValueRepository, SessionRepository):
    def create(self, session: Session) -> Session:
        self.store.put(
            {
                PARTITION_KEY: SESSION_PARTITION,
                SORT_KEY: token_sk(session.token_hash),
                "sessionToken": session.token_hash,
                "username": session.username,
                "createdAt": session.created_at,
                "expiresAt": session.expires_at,
                "entityType": EntityType.SESSION,
            }
        )
        return session

    def get(self, token_hash: str) -> Session | None:
        record = self.store.get(SESSION_PARTITION, token_sk(token_hash))
        if record is None:
            return None
        return Session(
            token_hash=token_hash,
            username=record.get("username", ""),
            created_at=record.get("createdAt"),
            expires_at=record.get("expiresAt"),
        )

    def delete(self, token_hash: str) -> None:
        self.store.delete(SESSION_PARTITION, token_sk(token_hash))
