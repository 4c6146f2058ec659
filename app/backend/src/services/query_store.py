"""Read-only aggregate queries backing the business query assistant."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol, TypeVar

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.backend.src.core.exceptions import DataUnavailable
from app.backend.src.models import (
    CementType,
    Customer,
    Factory,
    Payable,
    Purchase,
    Receivable,
    Sale,
)
from app.backend.src.models.debt import DEBT_STATUS_PAID
from app.backend.src.services.date_windows import DateWindow
from app.backend.src.services.money import to_decimal

LOGGER = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DebtTotals:
    amount: Decimal
    count: int


@dataclass(frozen=True)
class TradeTotals:
    amount: Decimal
    quantity: Decimal
    count: int


@dataclass(frozen=True)
class OpenReceivable:
    """A non-paid receivable joined with its customer."""

    receivable_id: int
    customer_id: int
    customer_name: str
    phone: str | None
    remaining_amount: Decimal
    due_date: datetime
    status: str


@dataclass(frozen=True)
class TypeTotals:
    cement_type_id: int
    code: str
    quantity: Decimal
    amount: Decimal


@dataclass(frozen=True)
class CustomerTradeTotals:
    customer_id: int
    customer_name: str
    amount: Decimal
    quantity: Decimal


@dataclass(frozen=True)
class CustomerRecord:
    customer_id: int
    name: str
    phone: str | None
    contact_person: str | None
    customer_type: str
    created_at: datetime
    is_active: bool


@dataclass(frozen=True)
class CustomerActivity:
    customer_id: int
    name: str
    phone: str | None
    last_purchase: datetime | None


class AssistantStore(Protocol):
    """Aggregate views the assistant reads; every method may raise DataUnavailable."""

    def open_receivables(
        self, customer_ids: Sequence[int] | None = None
    ) -> list[OpenReceivable]: ...

    def overdue_receivables(self, now: datetime) -> list[OpenReceivable]: ...

    def outstanding_receivables(self) -> DebtTotals: ...

    def outstanding_payables(self) -> DebtTotals: ...

    def sales_totals(self, window: DateWindow | None = None) -> TradeTotals: ...

    def purchase_totals(self, window: DateWindow | None = None) -> TradeTotals: ...

    def sales_by_cement_type(self, window: DateWindow | None = None) -> list[TypeTotals]: ...

    def purchases_by_cement_type(
        self, window: DateWindow | None = None
    ) -> list[TypeTotals]: ...

    def sales_by_customer(
        self, window: DateWindow | None = None, customer_ids: Sequence[int] | None = None
    ) -> list[CustomerTradeTotals]: ...

    def last_sale_dates(self, customer_ids: Sequence[int]) -> dict[int, datetime]: ...

    def list_customers(self, *, active_only: bool = True) -> list[CustomerRecord]: ...

    def customers_created_in(self, window: DateWindow) -> list[CustomerRecord]: ...

    def customers_without_sales_since(
        self, since: datetime, limit: int
    ) -> list[CustomerActivity]: ...

    def count_active_customers(self) -> int: ...

    def count_active_factories(self) -> int: ...


def _within(column, window: DateWindow | None) -> list:
    if window is None:
        return []
    return [column >= window.start, column < window.end]


def _customer_record(customer: Customer) -> CustomerRecord:
    return CustomerRecord(
        customer_id=customer.id,
        name=customer.company_name,
        phone=customer.phone,
        contact_person=customer.contact_person,
        customer_type=customer.customer_type,
        created_at=customer.created_at,
        is_active=bool(customer.is_active),
    )


class SqlAlchemyAssistantStore:
    """:class:`AssistantStore` backed by the SQLAlchemy read models.

    Each method opens its own session so independent reads can run
    concurrently in worker threads.
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        if session_factory is None:
            from app.backend.src.db import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    def _read(self, operation: str, query: Callable[[Session], T]) -> T:
        try:
            with self._session_factory() as session:
                return query(session)
        except SQLAlchemyError as exc:
            LOGGER.warning(
                "assistant_store_query_failed",
                operation=operation,
                error=str(exc),
            )
            raise DataUnavailable(operation) from exc

    # Debts ---------------------------------------------------------------

    def open_receivables(
        self, customer_ids: Sequence[int] | None = None
    ) -> list[OpenReceivable]:
        stmt = (
            select(
                Receivable.id,
                Customer.id,
                Customer.company_name,
                Customer.phone,
                Receivable.remaining_amount,
                Receivable.due_date,
                Receivable.status,
            )
            .join(Customer, Receivable.customer_id == Customer.id)
            .where(Receivable.status != DEBT_STATUS_PAID)
            .order_by(Customer.id.asc(), Receivable.id.asc())
        )
        if customer_ids is not None:
            stmt = stmt.where(Customer.id.in_(list(customer_ids)))

        def _query(session: Session) -> list[OpenReceivable]:
            return [
                OpenReceivable(
                    receivable_id=row[0],
                    customer_id=row[1],
                    customer_name=row[2],
                    phone=row[3],
                    remaining_amount=to_decimal(row[4]),
                    due_date=row[5],
                    status=row[6],
                )
                for row in session.execute(stmt)
            ]

        return self._read("open_receivables", _query)

    def overdue_receivables(self, now: datetime) -> list[OpenReceivable]:
        stmt = (
            select(
                Receivable.id,
                Customer.id,
                Customer.company_name,
                Customer.phone,
                Receivable.remaining_amount,
                Receivable.due_date,
                Receivable.status,
            )
            .join(Customer, Receivable.customer_id == Customer.id)
            .where(Receivable.status != DEBT_STATUS_PAID, Receivable.due_date < now)
            .order_by(Receivable.remaining_amount.desc(), Receivable.id.asc())
        )

        def _query(session: Session) -> list[OpenReceivable]:
            return [
                OpenReceivable(
                    receivable_id=row[0],
                    customer_id=row[1],
                    customer_name=row[2],
                    phone=row[3],
                    remaining_amount=to_decimal(row[4]),
                    due_date=row[5],
                    status=row[6],
                )
                for row in session.execute(stmt)
            ]

        return self._read("overdue_receivables", _query)

    def _outstanding(self, operation: str, model) -> DebtTotals:
        stmt = select(
            func.coalesce(func.sum(model.remaining_amount), 0),
            func.count(model.id),
        ).where(model.status != DEBT_STATUS_PAID)

        def _query(session: Session) -> DebtTotals:
            amount, count = session.execute(stmt).one()
            return DebtTotals(amount=to_decimal(amount), count=int(count or 0))

        return self._read(operation, _query)

    def outstanding_receivables(self) -> DebtTotals:
        return self._outstanding("outstanding_receivables", Receivable)

    def outstanding_payables(self) -> DebtTotals:
        return self._outstanding("outstanding_payables", Payable)

    # Trade ---------------------------------------------------------------

    def _trade_totals(self, operation: str, model, date_column, window) -> TradeTotals:
        stmt = select(
            func.coalesce(func.sum(model.total_amount), 0),
            func.coalesce(func.sum(model.quantity), 0),
            func.count(model.id),
        ).where(*_within(date_column, window))

        def _query(session: Session) -> TradeTotals:
            amount, quantity, count = session.execute(stmt).one()
            return TradeTotals(
                amount=to_decimal(amount),
                quantity=to_decimal(quantity),
                count=int(count or 0),
            )

        return self._read(operation, _query)

    def sales_totals(self, window: DateWindow | None = None) -> TradeTotals:
        return self._trade_totals("sales_totals", Sale, Sale.sale_date, window)

    def purchase_totals(self, window: DateWindow | None = None) -> TradeTotals:
        return self._trade_totals(
            "purchase_totals", Purchase, Purchase.purchase_date, window
        )

    def _by_cement_type(self, operation: str, model, date_column, window) -> list[TypeTotals]:
        stmt = (
            select(
                CementType.id,
                CementType.code,
                func.coalesce(func.sum(model.quantity), 0),
                func.coalesce(func.sum(model.total_amount), 0),
            )
            .select_from(model)
            .join(CementType, model.cement_type_id == CementType.id)
            .where(*_within(date_column, window))
            .group_by(CementType.id, CementType.code)
            .order_by(CementType.id.asc())
        )

        def _query(session: Session) -> list[TypeTotals]:
            return [
                TypeTotals(
                    cement_type_id=row[0],
                    code=row[1],
                    quantity=to_decimal(row[2]),
                    amount=to_decimal(row[3]),
                )
                for row in session.execute(stmt)
            ]

        return self._read(operation, _query)

    def sales_by_cement_type(self, window: DateWindow | None = None) -> list[TypeTotals]:
        return self._by_cement_type("sales_by_cement_type", Sale, Sale.sale_date, window)

    def purchases_by_cement_type(
        self, window: DateWindow | None = None
    ) -> list[TypeTotals]:
        return self._by_cement_type(
            "purchases_by_cement_type", Purchase, Purchase.purchase_date, window
        )

    def sales_by_customer(
        self, window: DateWindow | None = None, customer_ids: Sequence[int] | None = None
    ) -> list[CustomerTradeTotals]:
        stmt = (
            select(
                Customer.id,
                Customer.company_name,
                func.coalesce(func.sum(Sale.total_amount), 0),
                func.coalesce(func.sum(Sale.quantity), 0),
            )
            .join(Sale, Sale.customer_id == Customer.id)
            .where(*_within(Sale.sale_date, window))
            .group_by(Customer.id, Customer.company_name)
            .order_by(Customer.id.asc())
        )
        if customer_ids is not None:
            stmt = stmt.where(Customer.id.in_(list(customer_ids)))

        def _query(session: Session) -> list[CustomerTradeTotals]:
            return [
                CustomerTradeTotals(
                    customer_id=row[0],
                    customer_name=row[1],
                    amount=to_decimal(row[2]),
                    quantity=to_decimal(row[3]),
                )
                for row in session.execute(stmt)
            ]

        return self._read("sales_by_customer", _query)

    def last_sale_dates(self, customer_ids: Sequence[int]) -> dict[int, datetime]:
        stmt = (
            select(Sale.customer_id, func.max(Sale.sale_date))
            .where(Sale.customer_id.in_(list(customer_ids)))
            .group_by(Sale.customer_id)
        )

        def _query(session: Session) -> dict[int, datetime]:
            return {row[0]: row[1] for row in session.execute(stmt) if row[1] is not None}

        return self._read("last_sale_dates", _query)

    # Customers -----------------------------------------------------------

    def list_customers(self, *, active_only: bool = True) -> list[CustomerRecord]:
        stmt = select(Customer).order_by(Customer.id.asc())
        if active_only:
            stmt = stmt.where(Customer.is_active.is_(True))

        def _query(session: Session) -> list[CustomerRecord]:
            return [_customer_record(customer) for customer in session.scalars(stmt)]

        return self._read("list_customers", _query)

    def customers_created_in(self, window: DateWindow) -> list[CustomerRecord]:
        stmt = (
            select(Customer)
            .where(*_within(Customer.created_at, window))
            .order_by(Customer.created_at.desc(), Customer.id.desc())
        )

        def _query(session: Session) -> list[CustomerRecord]:
            return [_customer_record(customer) for customer in session.scalars(stmt)]

        return self._read("customers_created_in", _query)

    def customers_without_sales_since(
        self, since: datetime, limit: int
    ) -> list[CustomerActivity]:
        last_sale = (
            select(
                Sale.customer_id.label("customer_id"),
                func.max(Sale.sale_date).label("last_sale"),
            )
            .group_by(Sale.customer_id)
            .subquery()
        )
        stmt = (
            select(
                Customer.id,
                Customer.company_name,
                Customer.phone,
                last_sale.c.last_sale,
            )
            .outerjoin(last_sale, last_sale.c.customer_id == Customer.id)
            .where(
                Customer.is_active.is_(True),
                or_(last_sale.c.last_sale.is_(None), last_sale.c.last_sale < since),
            )
            .order_by(Customer.id.asc())
            .limit(limit)
        )

        def _query(session: Session) -> list[CustomerActivity]:
            return [
                CustomerActivity(
                    customer_id=row[0],
                    name=row[1],
                    phone=row[2],
                    last_purchase=row[3],
                )
                for row in session.execute(stmt)
            ]

        return self._read("customers_without_sales_since", _query)

    def count_active_customers(self) -> int:
        stmt = select(func.count(Customer.id)).where(Customer.is_active.is_(True))
        return self._read("count_active_customers", lambda session: int(session.scalar(stmt) or 0))

    def count_active_factories(self) -> int:
        stmt = select(func.count(Factory.id)).where(Factory.is_active.is_(True))
        return self._read("count_active_factories", lambda session: int(session.scalar(stmt) or 0))


__all__ = [
    "AssistantStore",
    "CustomerActivity",
    "CustomerRecord",
    "CustomerTradeTotals",
    "DebtTotals",
    "OpenReceivable",
    "SqlAlchemyAssistantStore",
    "TradeTotals",
    "TypeTotals",
]
