from __future__ import annotations

from pydantic import BaseModel


class Customer(BaseModel):
    id: str
    name: str
    phone: str
    address: str = ""
    created_at: str | None = None
