import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_BILL_TTL_DAYS = 30


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LAUNDRY_", extra="ignore")

    table_name: str = "BillingAppTable"
    index_name: str = "gsi1"

    store_backend: str = "memory"

    aws_region: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    dynamodb_endpoint_url: str = ""

    bill_ttl_days: float = DEFAULT_BILL_TTL_DAYS
    session_duration_seconds: int = 24 * 60 * 60
    batch_write_limit: int = 25  # DynamoDB BatchWriteItem cap

    admin_passcode: str = ""
    admin_username: str = "admin"

    log_level: str = "INFO"
    log_json: bool = False

    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("bill_ttl_days")
    @classmethod
    def _positive_ttl(cls, value: float) -> float:
        if value <= 0:
            logger.warning("Ignoring non-positive bill_ttl_days=%s, using %d", value, DEFAULT_BILL_TTL_DAYS)
            return DEFAULT_BILL_TTL_DAYS
        return value

    @property
    def bill_ttl_seconds(self) -> int:
        return max(1, round(self.bill_ttl_days * 24 * 60 * 60))

    def passcode_configured(self) -> bool:
        if not self.admin_passcode:
            logger.error("LAUNDRY_ADMIN_PASSCODE is not set, login is disabled")
            return False
        return True


settings = Settings()
