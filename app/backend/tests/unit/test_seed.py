"""Tests for the demo data seeder."""

from __future__ import annotations

import asyncio
from datetime import datetime

from sqlalchemy import select

from app.backend.src.models import Sale
from app.backend.src.schemas.assistant import Intent
from app.backend.src.services.query_assistant import resolve
from app.backend.src.services.seed import CUSTOMERS, FACTORIES, seed_demo_data

NOW = datetime(2026, 3, 15, 10, 30)


def test_seeded_data_is_consistent_with_assistant_views(db, store) -> None:
    created = seed_demo_data(db, now=NOW, sale_count=40, purchase_count=30)
    db.commit()

    assert created.customers == len(CUSTOMERS)
    assert created.factories == len(FACTORIES)
    assert store.outstanding_receivables().count == created.receivables
    assert store.outstanding_payables().count == created.payables

    stock = asyncio.run(resolve(Intent.STOCK_STATUS, NOW, store=store)).data
    assert stock.current_stock == stock.total_purchased - stock.total_sold
    assert sum(row.stock for row in stock.by_type) == stock.current_stock

    summary = asyncio.run(resolve(Intent.GENERAL, NOW, store=store)).data.summary
    assert summary.customers == len(CUSTOMERS)
    assert summary.factories == len(FACTORIES)

    inactive = asyncio.run(resolve(Intent.INACTIVE_CUSTOMERS, NOW, store=store)).data
    assert CUSTOMERS[-1][1] in {row.name for row in inactive.inactive_customers}


def test_seeding_is_deterministic(db) -> None:
    def _snapshot():
        result = seed_demo_data(db, now=NOW, sale_count=10, purchase_count=5)
        sales = db.scalars(select(Sale).order_by(Sale.sale_code)).all()
        return result, [(sale.sale_code, sale.customer_id, sale.total_amount) for sale in sales]

    first = _snapshot()
    db.rollback()
    second = _snapshot()

    assert first == second
