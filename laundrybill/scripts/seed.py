"""Seed the configured store with demo customers and bills.

Usage:
    python -m laundrybill.scripts.seed
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from faker import Faker
from rich.console import Console
from rich.table import Table

from laundrybill.constants import UTC, to_iso
from laundrybill.errors import ConflictError
from laundrybill.logging import configure_logging
from laundrybill.models.customer import Customer
from laundrybill.repositories.factory import get_bill_repository, get_customer_repository
from laundrybill.services.bill_service import BillService
from laundrybill.services.customer_service import CustomerService
from laundrybill.settings import settings
from laundrybill.store.base import KeyValueStore
from laundrybill.store.factory import get_store

console = Console()
fake = Faker("en_IN")

NUM_CUSTOMERS = 8

SERVICE_TYPES = [
    "Dry cleaning",
    "Wash and Iron",
    "Iron only",
    "Iron Urgent",
    "Alteration Only",
    "Leather care",
]

# (garment, base price per unit)
GARMENTS = [
    ("Shirt", 50),
    ("T-Shirt", 40),
    ("Pants", 60),
    ("Jeans", 70),
    ("Kurta", 80),
    ("Blazer", 250),
    ("Suit (2 pcs)", 400),
    ("Saree", 200),
    ("Blouse", 60),
    ("Lehenga", 600),
    ("Bedsheet", 120),
    ("Curtain", 150),
]


def _create_customers(customer_service: CustomerService) -> list[Customer]:
    console.print("[cyan]Creating customers...[/cyan]")
    customers: list[Customer] = []
    while len(customers) < NUM_CUSTOMERS:
        phone = f"9{random.randint(0, 999_999_999):09d}"
        try:
            customer = customer_service.create_customer(fake.name(), phone, fake.address().replace("\n", ", "))
        except ConflictError:
            continue
        customers.append(customer)
        console.print(f"  [bold]{customer.name}[/bold] ({customer.phone})")
    console.print(f"[green]{len(customers)} customers created.[/green]\n")
    return customers


def _random_items() -> list[dict]:
    items = []
    for garment, price in random.sample(GARMENTS, k=random.randint(1, 4)):
        items.append(
            {
                "name": garment,
                "quantity": random.randint(1, 5),
                "pricePerUnit": price,
                "service": random.choice(SERVICE_TYPES),
            }
        )
    return items


def _create_bills(bill_service: BillService, customers: list[Customer]) -> int:
    console.print("[cyan]Creating bills...[/cyan]")

    table = Table(title="Bills created")
    table.add_column("Customer", style="bold")
    table.add_column("Items", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Paid", justify="right")
    table.add_column("Due Date")

    total_bills = 0
    now = datetime.now(UTC)
    for customer in customers:
        for _ in range(random.randint(1, 3)):
            items = _random_items()
            total = sum(i["quantity"] * i["pricePerUnit"] for i in items)
            paid = random.choice([0, total, round(total / 2)])
            due_date = to_iso(now + timedelta(days=random.randint(1, 10)))
            detail = bill_service.create_bill(customer.id, items, paid, due_date)
            table.add_row(
                customer.name,
                str(len(detail.items)),
                f"{detail.bill.total_amount:.2f}",
                f"{detail.bill.paid_amount:.2f}",
                detail.bill.due_date or "-",
            )
            total_bills += 1

    console.print(table)
    console.print(f"\n[green]{total_bills} bills created.[/green]\n")
    return total_bills


def seed(store: KeyValueStore) -> tuple[int, int]:
    customer_repo = get_customer_repository(store)
    bill_repo = get_bill_repository(store)
    customer_service = CustomerService(customer_repo, bill_repo)
    bill_service = BillService(bill_repo, customer_repo, settings)

    customers = _create_customers(customer_service)
    bills = _create_bills(bill_service, customers)
    return len(customers), bills


def main() -> None:
    configure_logging()
    console.print("[bold magenta]Laundry Billing — Store Seeder[/bold magenta]")
    console.print("=" * 40)
    if settings.store_backend == "memory":
        console.print("[yellow]store_backend=memory: seeded data lives only in this process.[/yellow]")

    customers, bills = seed(get_store(settings))
    console.print(f"[bold green]Done:[/bold green] {customers} customers, {bills} bills.")


if __name__ == "__main__":
    main()
