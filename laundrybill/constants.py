from datetime import datetime, timezone

UTC = timezone.utc

CUSTOMERS_PARTITION = "CUSTOMERS"
SESSION_PARTITION = "SESSION"
PROFILE_SORT_KEY = "PROFILE"
SUMMARY_INDEX_SORT_KEY = "SUMMARY"

CUSTOMER_PREFIX = "CUSTOMER#"
BILL_PREFIX = "BILL#"
ITEM_PREFIX = "ITEM#"
PHONE_PREFIX = "PHONE#"
TOKEN_PREFIX = "TOKEN#"


class EntityType:
    CUSTOMER = "CUSTOMER"
    BILL = "BILL"
    BILL_ITEM = "BILL_ITEM"
    SESSION = "SESSION"


def customer_pk(customer_id: str) -> str:
    return f"{CUSTOMER_PREFIX}{customer_id}"


def bill_key(bill_id: str) -> str:
    return f"{BILL_PREFIX}{bill_id}"


def item_sk(item_id: str) -> str:
    return f"{ITEM_PREFIX}{item_id}"


def phone_key(phone: str) -> str:
    return f"{PHONE_PREFIX}{phone}"


def token_sk(token_hash: str) -> str:
    return f"{TOKEN_PREFIX}{token_hash}"


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_iso(value: datetime) -> str:
    """Render an instant as ``2025-04-10T12:00:00.000Z``."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
