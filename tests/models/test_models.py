from laundrybill.models import BillDetail, BillItem, BillSummary, Customer, Session


class TestBillItem:
    def test_line_total(self):
        item = BillItem(item_id="1", name="Shirt", quantity=3, price_per_unit=12.5)
        assert item.line_total == 37.5

    def test_defaults(self):
        item = BillItem(item_id="1", name="Shirt", quantity=1, price_per_unit=0)
        assert item.service is None
        assert item.position == 0
        assert item.expires_at is None


class TestBillSummary:
    def test_balance_due(self):
        summary = BillSummary(bill_id="B1", customer_id="C1", total_amount=180, paid_amount=100)
        assert summary.balance_due == 80

    def test_defaults(self):
        summary = BillSummary(bill_id="B1", customer_id="C1")
        assert summary.total_amount == 0
        assert summary.paid_amount == 0
        assert summary.due_date is None

    def test_integer_amounts_stay_integers(self):
        summary = BillSummary(bill_id="B1", customer_id="C1", total_amount=180, paid_amount=0)
        assert isinstance(summary.total_amount, int)


class TestBillDetail:
    def test_items_default_empty(self):
        detail = BillDetail(bill=BillSummary(bill_id="B1", customer_id="C1"))
        assert detail.items == []


class TestCustomer:
    def test_address_default(self):
        assert Customer(id="C1", name="Asha", phone="1").address == ""


class TestSession:
    def test_is_expired(self):
        session = Session(token_hash="h", username="admin", expires_at=100)
        assert session.is_expired(101)
        assert not session.is_expired(100)
        assert not session.is_expired(50)

    def test_no_expiry_never_expires(self):
        assert not Session(token_hash="h", username="admin").is_expired(10**12)
