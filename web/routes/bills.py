from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from laundrybill.services.validation import MISSING
from web.deps import get_bill_service, read_json, require_session
from web.forms import customer_id_field, paid_amount_field
from web.schemas import BillOut, PdfOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bills", dependencies=[Depends(require_session)])


@router.put("/{bill_id}", response_model=BillOut)
async def bill_upsert(request: Request, response: Response, bill_id: str):
    body = await read_json(request)
    detail, created = get_bill_service(request).upsert_bill(
        bill_id,
        customer_id_field(body),
        body.get("items", MISSING),
        paid_amount_field(body),
        body.get("dueDate", MISSING),
    )
    response.status_code = 201 if created else 200
    logger.info("PUT /bills/%s — %s", bill_id, "created" if created else "replaced")
    return BillOut.from_detail(detail)


@router.get("/{bill_id}", response_model=BillOut)
async def bill_detail(request: Request, bill_id: str):
    return BillOut.from_detail(get_bill_service(request).get_bill(bill_id))


@router.delete("/{bill_id}", status_code=204)
async def bill_delete(request: Request, bill_id: str):
    get_bill_service(request).delete_bill(bill_id)
    logger.info("DELETE /bills/%s", bill_id)
    return Response(status_code=204)


@router.get("/{bill_id}/pdf", response_model=PdfOut)
async def bill_pdf(request: Request, bill_id: str):
    message = get_bill_service(request).get_invoice_pdf(bill_id)
    return PdfOut(message=message, bill_id=bill_id)
