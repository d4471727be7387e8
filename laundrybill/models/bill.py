from __future__ import annotations

from pydantic import BaseModel

Number = int | float


class BillItem(BaseModel):
    item_id: str
    name: str
    quantity: Number
    price_per_unit: Number
    service: str | None = None
    position: int = 0
    created_at: str | None = None
    expires_at: int | None = None  # epoch seconds, store TTL

    @property
    def line_total(self) -> Number:
        return self.quantity * self.price_per_unit


class BillSummary(BaseModel):
    bill_id: str
    customer_id: str
    total_amount: Number = 0
    paid_amount: Number = 0
    due_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    expires_at: int | None = None

    @property
    def balance_due(self) -> Number:
        return self.total_amount - self.paid_amount


class BillDetail(BaseModel):
    bill: BillSummary
    items: list[BillItem] = []
