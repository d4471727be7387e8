from laundrybill.repositories.base import BillRepository, CustomerRepository, SessionRepository
from laundrybill.store.base import KeyValueStore


def get_customer_repository(store: KeyValueStore) -> CustomerRepository:
    from laundrybill.repositories.keyvalue import KeyValueCustomerRepository

    return KeyValueCustomerRepository(store)


def get_bill_repository(store: KeyValueStore) -> BillRepository:
    from laundrybill.repositories.keyvalue import KeyValueBillRepository

    return KeyValueBillRepository(store)


def get_session_repository(store: KeyValueStore) -> SessionRepository:
    from laundrybill.repositories.keyvalue import KeyValueSessionRepository

    return KeyValueSessionRepository(store)
