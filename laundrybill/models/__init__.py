from laundrybill.models.bill import BillDetail, BillItem, BillSummary
from laundrybill.models.customer import Customer
from laundrybill.models.session import Session

__all__ = ["BillDetail", "BillItem", "BillSummary", "Customer", "Session"]
