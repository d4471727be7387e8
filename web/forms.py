"""Helpers for pulling typed fields out of decoded JSON request bodies."""

from __future__ import annotations

from typing import Any

from laundrybill.errors import ValidationError
from laundrybill.services.validation import MISSING


def paid_amount_field(body: dict[str, Any]) -> Any:
    """``paidAmount``, falling back to the legacy ``payedAmount`` spelling."""
    if "paidAmount" in body:
        return body["paidAmount"]
    return body.get("payedAmount", MISSING)


def customer_id_field(body: dict[str, Any]) -> str | None:
    value = body.get("customerId")
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("customerId must be a string")
    return value.strip() or None
