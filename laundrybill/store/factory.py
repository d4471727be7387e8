import logging

from laundrybill.settings import Settings
from laundrybill.store.base import KeyValueStore

logger = logging.getLogger(__name__)


def get_store(settings: Settings) -> KeyValueStore:
    backend = settings.store_backend

    if backend == "memory":
        from laundrybill.store.memory import MemoryStore

        logger.info("Using store backend: memory")
        return MemoryStore(max_batch_size=settings.batch_write_limit)

    if backend == "dynamodb":
        from laundrybill.store.dynamodb import DynamoDBStore

        logger.info("Using store backend: dynamodb table=%s", settings.table_name)
        return DynamoDBStore(
            table_name=settings.table_name,
            index_name=settings.index_name,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            endpoint_url=settings.dynamodb_endpoint_url,
            max_batch_size=settings.batch_write_limit,
        )

    raise ValueError(f"Unsupported store backend: {backend}")
