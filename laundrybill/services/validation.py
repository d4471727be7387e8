"""Parse-and-validate boundary for bill payloads.

Raw request values go in, frozen models come out. Every rejection is a
``ValidationError`` naming the offending field; nothing is silently coerced
or dropped.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from ulid import ULID

from laundrybill.constants import UTC, to_iso
from laundrybill.errors import ValidationError
from laundrybill.models.bill import Number


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Marks a field the client left out of the body, as opposed to sending null.
MISSING: Any = _Missing()


class NormalizedItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str
    name: str
    quantity: Number
    price_per_unit: Number
    service: str | None = None


class BillDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[NormalizedItem, ...]
    total_amount: Number
    paid_amount: Number
    due_date: str | None = None


def to_number(value: Any) -> Number | None:
    """Coerce a JSON scalar to int/float. Returns None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _is_finite(value: Number | None) -> bool:
    if value is None:
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def normalize_items(raw_items: Any) -> list[NormalizedItem]:
    if not isinstance(raw_items, (list, tuple)):
        raise ValidationError("items must be an array")

    items: list[NormalizedItem] = []
    seen_ids: set[str] = set()
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raw = {}

        name = raw.get("name")
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise ValidationError(f"items[{index}].name is required")

        quantity = to_number(raw.get("quantity"))
        if not _is_finite(quantity) or quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be greater than 0")

        raw_price = raw.get("pricePerUnit")
        price = 0 if raw_price is None else to_number(raw_price)
        if not _is_finite(price) or price < 0:
            raise ValidationError(f"items[{index}].pricePerUnit must be zero or positive")

        service = raw.get("service")
        service = (str(service).strip() or None) if service else None

        raw_id = raw.get("itemId")
        item_id = str(raw_id).strip() if raw_id else ""
        if not item_id:
            item_id = str(ULID())
        if item_id in seen_ids:
            raise ValidationError(f"items[{index}].itemId is duplicated")
        seen_ids.add(item_id)

        items.append(
            NormalizedItem(
                item_id=item_id,
                name=name,
                quantity=quantity,
                price_per_unit=price,
                service=service,
            )
        )
    return items


def compute_total(items: list[NormalizedItem] | tuple[NormalizedItem, ...]) -> Number:
    return sum((item.quantity * item.price_per_unit for item in items), 0)


def validate_paid_amount(raw: Any, total: Number) -> Number:
    if raw is None or raw is MISSING:
        return 0
    paid = to_number(raw)
    if not _is_finite(paid) or paid < 0:
        raise ValidationError("paidAmount must be zero or positive")
    if paid > total:
        raise ValidationError("paidAmount cannot exceed total amount")
    return paid


def validate_due_date(raw: Any) -> str | None:
    """Normalize a due date to a UTC ISO 8601 instant; None means no due date."""
    if raw is None or raw is MISSING or raw == "":
        return None
    if not isinstance(raw, str):
        raise ValidationError("dueDate must be an ISO 8601 datetime")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("dueDate must be an ISO 8601 datetime") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return to_iso(parsed)


def build_draft(
    items_raw: Any,
    paid_amount_raw: Any = MISSING,
    due_date_raw: Any = MISSING,
    *,
    default_paid: Number = 0,
    default_due_date: str | None = None,
) -> BillDraft:
    """Validate a complete bill payload against its freshly computed total.

    An omitted or null ``paid_amount_raw`` falls back to ``default_paid``; an
    omitted ``due_date_raw`` falls back to ``default_due_date`` while an
    explicit null clears it.
    """
    if items_raw is None or items_raw is MISSING:
        items_raw = []
    items = normalize_items(items_raw)
    total = compute_total(items)

    if paid_amount_raw is MISSING or paid_amount_raw is None:
        paid_amount_raw = default_paid
    paid = validate_paid_amount(paid_amount_raw, total)

    if due_date_raw is MISSING:
        due_date_raw = default_due_date
    due_date = validate_due_date(due_date_raw)

    return BillDraft(items=tuple(items), total_amount=total, paid_amount=paid, due_date=due_date)
