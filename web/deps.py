from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request

from laundrybill.errors import ValidationError
from laundrybill.models.session import Session
from laundrybill.repositories.keyvalue import (
    KeyValueBillRepository,
    KeyValueCustomerRepository,
    KeyValueSessionRepository,
)
from laundrybill.services.bill_service import BillService
from laundrybill.services.customer_service import CustomerService
from laundrybill.services.session_service import SessionService, bearer_token
from laundrybill.settings import Settings, settings
from laundrybill.store import factory as store_factory
from laundrybill.store.base import KeyValueStore

logger = logging.getLogger(__name__)

_store: KeyValueStore | None = None


def get_settings() -> Settings:
    return settings


def get_store() -> KeyValueStore:
    """Process-wide store handle, created on first use."""
    global _store
    if _store is None:
        _store = store_factory.get_store(get_settings())
    return _store


def get_customer_service(request: Request) -> CustomerService:
    store = get_store()
    return CustomerService(KeyValueCustomerRepository(store), KeyValueBillRepository(store))


def get_bill_service(request: Request) -> BillService:
    store = get_store()
    return BillService(
        KeyValueBillRepository(store),
        KeyValueCustomerRepository(store),
        get_settings(),
    )


def get_session_service(request: Request) -> SessionService:
    return SessionService(KeyValueSessionRepository(get_store()), get_settings())


def require_session(request: Request) -> Session:
    """Route dependency: the caller must present a live bearer session."""
    token = bearer_token(request.headers.get("authorization"))
    session = get_session_service(request).verify(token)
    request.state.session = session
    return session


async def read_json(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; an empty body reads as {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        logger.warning("Invalid JSON body on %s %s", request.method, request.url.path)
        raise ValidationError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body
