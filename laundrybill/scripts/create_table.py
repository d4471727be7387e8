"""Create the DynamoDB table, its reverse-lookup index and the TTL setting.

Usage:
    python -m laundrybill.scripts.create_table
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ClientError
from rich.console import Console

from laundrybill.logging import configure_logging
from laundrybill.settings import Settings, settings
from laundrybill.store.base import (
    INDEX_PARTITION_KEY,
    INDEX_SORT_KEY,
    PARTITION_KEY,
    SORT_KEY,
    TTL_ATTRIBUTE,
)

logger = logging.getLogger(__name__)
console = Console()


def table_definition(config: Settings) -> dict:
    return {
        "TableName": config.table_name,
        "BillingMode": "PAY_PER_REQUEST",
        "AttributeDefinitions": [
            {"AttributeName": name, "AttributeType": "S"}
            for name in (PARTITION_KEY, SORT_KEY, INDEX_PARTITION_KEY, INDEX_SORT_KEY)
        ],
        "KeySchema": [
            {"AttributeName": PARTITION_KEY, "KeyType": "HASH"},
            {"AttributeName": SORT_KEY, "KeyType": "RANGE"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": config.index_name,
                "KeySchema": [
                    {"AttributeName": INDEX_PARTITION_KEY, "KeyType": "HASH"},
                    {"AttributeName": INDEX_SORT_KEY, "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    }


def _client(config: Settings):
    client_kwargs: dict = {"service_name": "dynamodb"}
    if config.aws_region:
        client_kwargs["region_name"] = config.aws_region
    if config.aws_access_key_id and config.aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = config.aws_access_key_id
        client_kwargs["aws_secret_access_key"] = config.aws_secret_access_key
    if config.dynamodb_endpoint_url:
        client_kwargs["endpoint_url"] = config.dynamodb_endpoint_url
    return boto3.client(**client_kwargs)


def create_table(config: Settings) -> bool:
    """Create the table if needed. Returns False when it already existed."""
    client = _client(config)
    try:
        client.create_table(**table_definition(config))
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") == "ResourceInUseException":
            logger.info("Table %s already exists", config.table_name)
            return False
        raise
    client.get_waiter("table_exists").wait(TableName=config.table_name)
    client.update_time_to_live(
        TableName=config.table_name,
        TimeToLiveSpecification={"Enabled": True, "AttributeName": TTL_ATTRIBUTE},
    )
    logger.info("Table %s created with TTL on %s", config.table_name, TTL_ATTRIBUTE)
    return True


def main() -> None:
    configure_logging()
    created = create_table(settings)
    if created:
        console.print(f"[green]Created table[/green] [bold]{settings.table_name}[/bold]")
    else:
        console.print(f"[yellow]Table[/yellow] [bold]{settings.table_name}[/bold] [yellow]already exists[/yellow]")


if __name__ == "__main__":
    main()
