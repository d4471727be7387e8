from __future__ import annotations

import logging
from typing import Any

from ulid import ULID

from laundrybill.constants import to_iso, utc_now
from laundrybill.errors import ConflictError, NotFoundError, ValidationError
from laundrybill.models.customer import Customer
from laundrybill.repositories.base import BillRepository, CustomerRepository

logger = logging.getLogger(__name__)


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class CustomerService:
    def __init__(self, customer_repo: CustomerRepository, bill_repo: BillRepository) -> None:
        self.customer_repo = customer_repo
        self.bill_repo = bill_repo

    def create_customer(self, name: Any, phone: Any, address: Any = "") -> Customer:
        name = _clean(name)
        phone = _clean(phone)
        if not name or not phone:
            logger.warning("Customer create rejected: missing name or phone")
            raise ValidationError("name and phone are required")

        if self.customer_repo.get_by_phone(phone) is not None:
            logger.warning("Customer create rejected: phone %s already registered", phone)
            raise ConflictError("Phone number already exists")

        customer = Customer(
            id=str(ULID()),
            name=name,
            phone=phone,
            address=_clean(address),
            created_at=to_iso(utc_now()),
        )
        result = self.customer_repo.create(customer)
        logger.info("Customer created: id=%s", result.id)
        return result

    def list_customers(self) -> list[Customer]:
        result = self.customer_repo.list_all()
        result.sort(key=lambda c: c.created_at or "", reverse=True)
        logger.debug("Listed %d customers", len(result))
        return result

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.customer_repo.get_by_id(customer_id)
        if customer is None:
            logger.debug("get_customer id=%s found=False", customer_id)
            raise NotFoundError("Customer not found")
        return customer

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer with all of its bills and their items.

        Runs forward only: if a later step fails, bills already removed stay
        removed and the customer profile may survive with fewer bills.
        """
        self.get_customer(customer_id)
        bill_ids = self.customer_repo.list_bill_ids(customer_id)
        for bill_id in bill_ids:
            self.bill_repo.delete_items(bill_id)
        self.customer_repo.delete(customer_id, bill_ids)
        logger.info("Customer %s deleted with %d bill(s)", customer_id, len(bill_ids))
