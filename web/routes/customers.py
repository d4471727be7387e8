from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from laundrybill.services.validation import MISSING
from web.deps import get_bill_service, get_customer_service, read_json, require_session
from web.forms import paid_amount_field
from web.schemas import BillOut, BillSummaryListOut, BillSummaryOut, CustomerListOut, CustomerOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", dependencies=[Depends(require_session)])


@router.get("", response_model=CustomerListOut)
async def customer_list(request: Request):
    customers = get_customer_service(request).list_customers()
    return CustomerListOut(items=[CustomerOut.from_customer(c) for c in customers])


@router.post("", response_model=CustomerOut, status_code=201)
async def customer_create(request: Request):
    body = await read_json(request)
    customer = get_customer_service(request).create_customer(
        body.get("name"),
        body.get("phone"),
        body.get("address", ""),
    )
    logger.info("POST /customers — created %s", customer.id)
    return CustomerOut.from_customer(customer)


@router.get("/{customer_id}", response_model=CustomerOut)
async def customer_detail(request: Request, customer_id: str):
    return CustomerOut.from_customer(get_customer_service(request).get_customer(customer_id))


@router.delete("/{customer_id}", status_code=204)
async def customer_delete(request: Request, customer_id: str):
    logger.info("DELETE /customers/%s — cascading delete", customer_id)
    get_customer_service(request).delete_customer(customer_id)
    return Response(status_code=204)


@router.get("/{customer_id}/bills", response_model=BillSummaryListOut)
async def customer_bills(request: Request, customer_id: str):
    summaries = get_bill_service(request).list_bills(customer_id)
    return BillSummaryListOut(items=[BillSummaryOut.from_summary(s) for s in summaries])


@router.post("/{customer_id}/bills", response_model=BillOut, status_code=201)
async def customer_bill_create(request: Request, customer_id: str):
    body = await read_json(request)
    detail = get_bill_service(request).create_bill(
        customer_id,
        body.get("items", MISSING),
        paid_amount_field(body),
        body.get("dueDate", MISSING),
    )
    logger.info("POST /customers/%s/bills — created %s", customer_id, detail.bill.bill_id)
    return BillOut.from_detail(detail)
