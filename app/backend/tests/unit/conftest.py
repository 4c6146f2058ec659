"""Shared fixtures for the query assistant tests."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

# Configure environment before application imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_assistant.db")
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from sqlalchemy.orm import Session

from app.backend.src.db.base import Base
from app.backend.src.db.session import build_engine, build_session_factory
from app.backend.src.models import (
    CementType,
    Customer,
    Factory,
    Payable,
    Purchase,
    Receivable,
    Sale,
)
from app.backend.src.services.query_store import SqlAlchemyAssistantStore


@pytest.fixture()
def session_factory(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'assistant.db'}")
    Base.metadata.create_all(engine)
    yield build_session_factory(engine)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def store(session_factory) -> SqlAlchemyAssistantStore:
    return SqlAlchemyAssistantStore(session_factory)


@pytest.fixture()
def db(session_factory):
    """Session used to build fixture rows; tests commit before reading through the store."""

    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()


class Fixtures:
    """Small builders for read-model rows."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def cement_type(self, code: str) -> CementType:
        row = CementType(code=code, name=f"Xi măng {code}")
        self.session.add(row)
        self.session.flush()
        return row

    def customer(
        self,
        name: str,
        *,
        phone: str | None = None,
        created_at: datetime = datetime(2025, 1, 1),
        is_active: bool = True,
        customer_type: str = "MIXING_STATION",
    ) -> Customer:
        row = Customer(
            company_name=name,
            phone=phone,
            created_at=created_at,
            is_active=is_active,
            customer_type=customer_type,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def factory(self, name: str, *, is_active: bool = True) -> Factory:
        row = Factory(code=f"F{self._next()}", name=name, is_active=is_active)
        self.session.add(row)
        self.session.flush()
        return row

    def sale(
        self,
        customer: Customer,
        cement_type: CementType,
        *,
        on: datetime,
        quantity: str,
        total: str,
    ) -> Sale:
        row = Sale(
            sale_code=f"PX-{self._next():04d}",
            sale_date=on,
            customer_id=customer.id,
            cement_type_id=cement_type.id,
            quantity=Decimal(quantity),
            unit_price=Decimal(total) / Decimal(quantity),
            total_amount=Decimal(total),
        )
        self.session.add(row)
        self.session.flush()
        return row

    def purchase(
        self,
        factory: Factory,
        cement_type: CementType,
        *,
        on: datetime,
        quantity: str,
        total: str = "0",
    ) -> Purchase:
        row = Purchase(
            purchase_code=f"PN-{self._next():04d}",
            purchase_date=on,
            factory_id=factory.id,
            cement_type_id=cement_type.id,
            quantity=Decimal(quantity),
            unit_price=Decimal("0"),
            total_amount=Decimal(total),
        )
        self.session.add(row)
        self.session.flush()
        return row

    def receivable(
        self,
        customer: Customer,
        *,
        remaining: str,
        due: datetime,
        status: str = "CURRENT",
    ) -> Receivable:
        row = Receivable(
            customer_id=customer.id,
            transaction_date=due,
            due_date=due,
            original_amount=Decimal(remaining),
            paid_amount=Decimal("0"),
            remaining_amount=Decimal(remaining),
            status=status,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def payable(
        self,
        factory: Factory,
        *,
        remaining: str,
        due: datetime,
        status: str = "CURRENT",
    ) -> Payable:
        row = Payable(
            factory_id=factory.id,
            transaction_date=due,
            due_date=due,
            original_amount=Decimal(remaining),
            paid_amount=Decimal("0"),
            remaining_amount=Decimal(remaining),
            status=status,
        )
        self.session.add(row)
        self.session.flush()
        return row


@pytest.fixture()
def make(db) -> Fixtures:
    return Fixtures(db)
