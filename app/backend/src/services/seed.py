"""Utilities for seeding development data."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.backend.src.models import (
    CementType,
    Customer,
    Factory,
    Payable,
    Purchase,
    Receivable,
    Sale,
)
from app.backend.src.models.debt import (
    DEBT_STATUS_CURRENT,
    DEBT_STATUS_OVERDUE,
)
from app.backend.src.services.date_windows import business_now

CEMENT_TYPES = [
    ("PCB30", "Xi măng PCB30", "Xi măng Portland hỗn hợp PCB30"),
    ("PCB40", "Xi măng PCB40", "Xi măng Portland hỗn hợp PCB40"),
    ("PC40", "Xi măng PC40", "Xi măng Portland PC40"),
    ("PC50", "Xi măng PC50", "Xi măng Portland PC50"),
]

FACTORIES = [
    ("XUAN_THANH", "Xi măng Xuân Thành", "Xuân Thành, Hà Tĩnh"),
    ("CHINFON", "Xi măng Chinfon", "Thủy Nguyên, Hải Phòng"),
    ("VICEM_HP", "Xi măng Vicem Hải Phòng", "Minh Đức, Hải Phòng"),
]

CUSTOMERS = [
    ("KH001", "Công ty Bê tông Hải Phòng", "BT Hải Phòng", "Hải Phòng"),
    ("KH002", "Trạm trộn Kiến An", "TT Kiến An", "Hải Phòng"),
    ("KH003", "Công ty Bê tông Hải Dương", "BT Hải Dương", "Hải Dương"),
    ("KH004", "Trạm trộn An Lão", "TT An Lão", "Hải Phòng"),
    ("KH005", "Công ty Xây dựng Quảng Ninh", "XD Quảng Ninh", "Quảng Ninh"),
    ("KH006", "Trạm trộn Thủy Nguyên", "TT Thủy Nguyên", "Hải Phòng"),
]


@dataclass
class SeedResult:
    """Counts of the records created by :func:`seed_demo_data`."""

    cement_types: int
    factories: int
    customers: int
    sales: int
    purchases: int
    receivables: int
    payables: int


def _sample_date(rng: random.Random, now: datetime, max_days_back: int) -> datetime:
    return now - timedelta(days=rng.randrange(max_days_back), hours=rng.randrange(10))


def seed_demo_data(
    session: Session,
    *,
    now: datetime | None = None,
    seed: int = 2024,
    sale_count: int = 150,
    purchase_count: int = 100,
) -> SeedResult:
    """Populate an empty database with three months of demo trade.

    Unpaid sales and purchases produce receivables and payables whose status
    reflects their due date relative to ``now``.
    """

    rng = random.Random(seed)
    now = now or business_now()

    cement_types = [
        CementType(code=code, name=name, description=description)
        for code, name, description in CEMENT_TYPES
    ]
    factories = [
        Factory(code=code, name=name, address=address, payment_terms=45)
        for code, name, address in FACTORIES
    ]
    customers = [
        Customer(
            code=code,
            company_name=name,
            short_name=short_name,
            province=province,
            customer_type="MIXING_STATION",
            credit_limit=Decimal("2000000000"),
            payment_terms=30,
            phone=f"09{rng.randrange(10**8):08d}",
            created_at=now - timedelta(days=365),
        )
        for code, name, short_name, province in CUSTOMERS
    ]
    session.add_all([*cement_types, *factories, *customers])
    session.flush()

    purchases: list[Purchase] = []
    for index in range(purchase_count):
        quantity = Decimal(rng.randrange(28, 33))
        unit_price = Decimal(rng.randrange(1_250_000, 1_300_000, 1000))
        purchase_date = _sample_date(rng, now, 90)
        purchases.append(
            Purchase(
                purchase_code=f"PN-{purchase_date:%Y%m%d}-{index + 1:04d}",
                purchase_date=purchase_date,
                factory_id=rng.choice(factories).id,
                cement_type_id=rng.choice(cement_types).id,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=quantity * unit_price,
                payment_status="PAID" if rng.random() > 0.4 else "UNPAID",
            )
        )

    sales: list[Sale] = []
    # The last customer never buys so the inactivity report has something to show.
    buyers = customers[:-1]
    for index in range(sale_count):
        quantity = Decimal(rng.randrange(28, 33))
        unit_price = Decimal(rng.randrange(1_380_000, 1_430_000, 1000))
        sale_date = _sample_date(rng, now, 90)
        roll = rng.random()
        payment_status = "PAID" if roll > 0.5 else "PARTIAL" if roll > 0.25 else "UNPAID"
        sales.append(
            Sale(
                sale_code=f"PX-{sale_date:%Y%m%d}-{index + 1:04d}",
                sale_date=sale_date,
                customer_id=rng.choice(buyers).id,
                cement_type_id=rng.choice(cement_types).id,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=quantity * unit_price,
                payment_status=payment_status,
            )
        )
    session.add_all([*purchases, *sales])
    session.flush()

    terms = {customer.id: customer.payment_terms for customer in customers}
    receivables: list[Receivable] = []
    for sale in sales:
        if sale.payment_status == "PAID":
            continue
        due_date = sale.sale_date + timedelta(days=terms[sale.customer_id])
        paid = Decimal("0")
        if sale.payment_status == "PARTIAL":
            ratio = Decimal(rng.randrange(20, 70)) / Decimal(100)
            paid = (sale.total_amount * ratio).quantize(Decimal("1"))
        receivables.append(
            Receivable(
                customer_id=sale.customer_id,
                transaction_date=sale.sale_date,
                due_date=due_date,
                original_amount=sale.total_amount,
                paid_amount=paid,
                remaining_amount=sale.total_amount - paid,
                status=DEBT_STATUS_OVERDUE if due_date < now else DEBT_STATUS_CURRENT,
            )
        )

    factory_terms = {factory.id: factory.payment_terms for factory in factories}
    payables: list[Payable] = []
    for purchase in purchases:
        if purchase.payment_status != "UNPAID":
            continue
        due_date = purchase.purchase_date + timedelta(days=factory_terms[purchase.factory_id])
        payables.append(
            Payable(
                factory_id=purchase.factory_id,
                transaction_date=purchase.purchase_date,
                due_date=due_date,
                original_amount=purchase.total_amount,
                paid_amount=Decimal("0"),
                remaining_amount=purchase.total_amount,
                status=DEBT_STATUS_OVERDUE if due_date < now else DEBT_STATUS_CURRENT,
            )
        )
    session.add_all([*receivables, *payables])
    session.flush()

    return SeedResult(
        cement_types=len(cement_types),
        factories=len(factories),
        customers=len(customers),
        sales=len(sales),
        purchases=len(purchases),
        receivables=len(receivables),
        payables=len(payables),
    )


__all__ = ["SeedResult", "seed_demo_data"]
