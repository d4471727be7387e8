from abc import ABC, abstractmethod
from collections.abc import Sequence

from laundrybill.models.bill import BillItem, BillSummary
from laundrybill.models.customer import Customer
from laundrybill.models.session import Session


class CustomerRepository(ABC):
    @abstractmethod
    def create(self, customer: Customer) -> Customer: ...

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None: ...

    @abstractmethod
    def get_by_phone(self, phone: str) -> Customer | None: ...

    @abstractmethod
    def list_all(self) -> list[Customer]: ...

    @abstractmethod
    def list_bill_ids(self, customer_id: str) -> list[str]: ...

    @abstractmethod
    def delete(self, customer_id: str, bill_ids: Sequence[str] = ()) -> None: ...


class BillRepository(ABC):
    @abstractmethod
    def get_summary(self, bill_id: str) -> BillSummary | None: ...

    @abstractmethod
    def list_summaries(self, customer_id: str) -> list[BillSummary]: ...

    @abstractmethod
    def put_summary(self, summary: BillSummary) -> None: ...

    @abstractmethod
    def delete_summary(self, customer_id: str, bill_id: str) -> None: ...

    @abstractmethod
    def list_items(self, bill_id: str) -> list[BillItem]: ...

    @abstractmethod
    def put_items(self, bill_id: str, customer_id: str, items: Sequence[BillItem]) -> None: ...

    @abstractmethod
    def delete_items(self, bill_id: str, items: Sequence[BillItem] | None = None) -> None: ...


class SessionRepository(ABC):
    @abstractmethod
    def create(self, session: Session) -> Session: ...

    @abstractmethod
    def get(self, token_hash: str) -> Session | None: ...

    @abstractmethod
    def delete(self, token_hash: str) -> None: ...
