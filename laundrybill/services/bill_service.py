from __future__ import annotations

import logging
import time
from typing import Any

from ulid import ULID

from laundrybill.constants import to_iso, utc_now
from laundrybill.errors import NotFoundError, ValidationError
from laundrybill.models.bill import BillDetail, BillItem, BillSummary
from laundrybill.models.customer import Customer
from laundrybill.repositories.base import BillRepository, CustomerRepository
from laundrybill.services.compensation import Compensation
from laundrybill.services.validation import MISSING, BillDraft, build_draft
from laundrybill.settings import Settings

logger = logging.getLogger(__name__)

PDF_NOT_IMPLEMENTED_MESSAGE = "PDF generation not yet implemented. Integrate wkhtmltopdf or another renderer."


class BillService:
    """Keeps a bill's summary record and its item records consistent.

    Items are always written before the summary: the summary is the record
    readers look a bill up by, so it acts as the commit marker. Replacing a
    bill rewrites the whole item set; clients always send the complete list.
    """

    def __init__(
        self,
        bill_repo: BillRepository,
        customer_repo: CustomerRepository,
        settings: Settings,
    ) -> None:
        self.bill_repo = bill_repo
        self.customer_repo = customer_repo
        self.settings = settings

    def _expires_at(self) -> int:
        return int(time.time()) + self.settings.bill_ttl_seconds

    def _require_customer(self, customer_id: str) -> Customer:
        customer = self.customer_repo.get_by_id(customer_id)
        if customer is None:
            logger.warning("Customer not found: id=%s", customer_id)
            raise NotFoundError("Customer not found")
        return customer

    @staticmethod
    def _materialize(draft: BillDraft, timestamp: str, expires_at: int) -> list[BillItem]:
        return [
            BillItem(
                item_id=item.item_id,
                name=item.name,
                quantity=item.quantity,
                price_per_unit=item.price_per_unit,
                service=item.service,
                position=position,
                created_at=timestamp,
                expires_at=expires_at,
            )
            for position, item in enumerate(draft.items)
        ]

    def create_bill(
        self,
        customer_id: str,
        items_raw: Any,
        paid_amount_raw: Any = MISSING,
        due_date_raw: Any = MISSING,
    ) -> BillDetail:
        self._require_customer(customer_id)
        draft = build_draft(items_raw, paid_amount_raw, due_date_raw)

        bill_id = str(ULID())
        timestamp = to_iso(utc_now())
        expires_at = self._expires_at()
        items = self._materialize(draft, timestamp, expires_at)
        summary = BillSummary(
            bill_id=bill_id,
            customer_id=customer_id,
            total_amount=draft.total_amount,
            paid_amount=draft.paid_amount,
            due_date=draft.due_date,
            created_at=timestamp,
            updated_at=timestamp,
            expires_at=expires_at,
        )

        with Compensation(f"create bill {bill_id}") as saga:
            saga.push("delete written items", lambda: self.bill_repo.delete_items(bill_id, items))
            self.bill_repo.put_items(bill_id, customer_id, items)
            saga.push("delete summary", lambda: self.bill_repo.delete_summary(customer_id, bill_id))
            self.bill_repo.put_summary(summary)

        logger.info(
            "Bill created: id=%s, customer=%s, items=%d, total=%s",
            bill_id,
            customer_id,
            len(items),
            summary.total_amount,
        )
        return BillDetail(bill=summary, items=items)

    def upsert_bill(
        self,
        bill_id: str,
        customer_id: str | None,
        items_raw: Any,
        paid_amount_raw: Any = MISSING,
        due_date_raw: Any = MISSING,
    ) -> tuple[BillDetail, bool]:
        """Create the bill if absent, otherwise replace its items and summary.

        Returns the stored bill and whether it was newly created. An existing
        bill keeps its owner; a ``customer_id`` sent for it is ignored.
        """
        existing = self.bill_repo.get_summary(bill_id)

        if existing is None:
            if not customer_id:
                raise ValidationError("customerId is required")
            self._require_customer(customer_id)
            owner_id = customer_id
            draft = build_draft(items_raw, paid_amount_raw, due_date_raw)
        else:
            owner_id = existing.customer_id
            if customer_id and customer_id != owner_id:
                logger.info("Ignoring customerId=%s for bill %s owned by %s", customer_id, bill_id, owner_id)
            draft = build_draft(
                items_raw,
                paid_amount_raw,
                due_date_raw,
                default_paid=existing.paid_amount,
                default_due_date=existing.due_date,
            )

        now = to_iso(utc_now())
        created_at = existing.created_at if existing is not None and existing.created_at else now
        expires_at = self._expires_at()
        previous_items = self.bill_repo.list_items(bill_id) if existing is not None else []
        items = self._materialize(draft, now, expires_at)
        summary = BillSummary(
            bill_id=bill_id,
            customer_id=owner_id,
            total_amount=draft.total_amount,
            paid_amount=draft.paid_amount,
            due_date=draft.due_date,
            created_at=created_at,
            updated_at=now,
            expires_at=expires_at,
        )

        with Compensation(f"upsert bill {bill_id}") as saga:
            if existing is not None:
                saga.push(
                    "restore previous items",
                    lambda: self.bill_repo.put_items(bill_id, owner_id, previous_items),
                )
                self.bill_repo.delete_items(bill_id, previous_items)
            saga.push("delete written items", lambda: self.bill_repo.delete_items(bill_id, items))
            self.bill_repo.put_items(bill_id, owner_id, items)
            if existing is not None:
                saga.push("restore previous summary", lambda: self.bill_repo.put_summary(existing))
            else:
                saga.push("delete summary", lambda: self.bill_repo.delete_summary(owner_id, bill_id))
            self.bill_repo.put_summary(summary)

        created = existing is None
        logger.info(
            "Bill %s: id=%s, customer=%s, items=%d (was %d), total=%s",
            "created" if created else "replaced",
            bill_id,
            owner_id,
            len(items),
            len(previous_items),
            summary.total_amount,
        )
        return BillDetail(bill=summary, items=items), created

    def get_summary(self, bill_id: str) -> BillSummary:
        summary = self.bill_repo.get_summary(bill_id)
        if summary is None:
            logger.debug("get_summary id=%s found=False", bill_id)
            raise NotFoundError("Bill not found")
        return summary

    def get_bill(self, bill_id: str) -> BillDetail:
        summary = self.get_summary(bill_id)
        items = self.bill_repo.list_items(bill_id)
        logger.debug("get_bill id=%s items=%d", bill_id, len(items))
        return BillDetail(bill=summary, items=items)

    def list_bills(self, customer_id: str) -> list[BillSummary]:
        self._require_customer(customer_id)
        result = self.bill_repo.list_summaries(customer_id)
        result.sort(key=lambda s: s.created_at or "", reverse=True)
        logger.debug("Listed %d bills for customer=%s", len(result), customer_id)
        return result

    def delete_bill(self, bill_id: str) -> None:
        summary = self.get_summary(bill_id)
        self.bill_repo.delete_summary(summary.customer_id, bill_id)
        self.bill_repo.delete_items(bill_id)
        logger.info("Bill %s deleted (customer=%s)", bill_id, summary.customer_id)

    def get_invoice_pdf(self, bill_id: str) -> str:
        self.get_summary(bill_id)
        return PDF_NOT_IMPLEMENTED_MESSAGE
