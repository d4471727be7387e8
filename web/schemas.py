"""JSON response shapes. Field names go out in camelCase."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from laundrybill.models.bill import BillDetail, BillItem, BillSummary, Number
from laundrybill.models.customer import Customer


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageOut(CamelModel):
    message: str


class LoginOut(CamelModel):
    token: str
    expires_at: int | None
    username: str


class VerifyOut(CamelModel):
    authenticated: bool
    username: str
    expires_at: int | None


class CustomerOut(CamelModel):
    customer_id: str
    name: str
    phone: str
    address: str
    created_at: str | None

    @classmethod
    def from_customer(cls, customer: Customer) -> CustomerOut:
        return cls(
            customer_id=customer.id,
            name=customer.name,
            phone=customer.phone,
            address=customer.address,
            created_at=customer.created_at,
        )


class CustomerListOut(CamelModel):
    items: list[CustomerOut]


class BillSummaryOut(CamelModel):
    bill_id: str
    customer_id: str
    total_amount: Number
    paid_amount: Number
    due_date: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_summary(cls, summary: BillSummary) -> BillSummaryOut:
        return cls(
            bill_id=summary.bill_id,
            customer_id=summary.customer_id,
            total_amount=summary.total_amount,
            paid_amount=summary.paid_amount,
            due_date=summary.due_date,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class BillSummaryListOut(CamelModel):
    items: list[BillSummaryOut]


class BillItemOut(CamelModel):
    item_id: str
    name: str
    quantity: Number
    price_per_unit: Number
    service: str | None
    created_at: str | None

    @classmethod
    def from_item(cls, item: BillItem) -> BillItemOut:
        return cls(
            item_id=item.item_id,
            name=item.name,
            quantity=item.quantity,
            price_per_unit=item.price_per_unit,
            service=item.service,
            created_at=item.created_at,
        )


class BillOut(CamelModel):
    bill: BillSummaryOut
    items: list[BillItemOut]

    @classmethod
    def from_detail(cls, detail: BillDetail) -> BillOut:
        return cls(
            bill=BillSummaryOut.from_summary(detail.bill),
            items=[BillItemOut.from_item(item) for item in detail.items],
        )


class PdfOut(CamelModel):
    message: str
    bill_id: str
