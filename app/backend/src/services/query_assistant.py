"""Dispatch classified business questions to read-only aggregation handlers."""

from __future__ import annotations

import asyncio
import re
import time
import unicodedata
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog

from app.backend.src.agents.intent_classifier import classify
from app.backend.src.core.config import Settings, get_settings
from app.backend.src.core.exceptions import DataUnavailable
from app.backend.src.schemas.assistant import (
    BusinessSummary,
    CustomerDebt,
    CustomerDebtData,
    CustomerDebtResult,
    CustomerInfoData,
    CustomerInfoResult,
    CustomerProfile,
    Debtor,
    GeneralData,
    GeneralResult,
    InactiveCustomer,
    InactiveCustomersData,
    InactiveCustomersResult,
    Intent,
    MonthlyPurchasesData,
    MonthlyPurchasesResult,
    MonthlySalesData,
    MonthlySalesResult,
    NewCustomer,
    NewCustomersData,
    NewCustomersResult,
    OpenDebt,
    OverdueDebt,
    OverdueDebtsData,
    OverdueDebtsResult,
    PeriodSales,
    QueryResult,
    SalesComparisonData,
    SalesComparisonResult,
    StockStatusData,
    StockStatusResult,
    TopCustomer,
    TopCustomersData,
    TopCustomersResult,
    TopDebtorsData,
    TopDebtorsResult,
    TotalPayablesData,
    TotalPayablesResult,
    TotalReceivablesData,
    TotalReceivablesResult,
    TypeSales,
    TypeStock,
    YearlySalesData,
    YearlySalesResult,
)
from app.backend.src.services import metrics
from app.backend.src.services.date_windows import (
    month_to_date,
    normalize_reference,
    previous_month,
    shift_months,
    year_to_date,
)
from app.backend.src.services.money import ZERO, percent_change
from app.backend.src.services.query_store import (
    AssistantStore,
    CustomerRecord,
    OpenReceivable,
    SqlAlchemyAssistantStore,
)

LOGGER = structlog.get_logger(__name__)

TOP_LIMIT = 10
INACTIVE_MONTHS = 3
INACTIVE_LIMIT = 20


@dataclass(frozen=True)
class _Request:
    store: AssistantStore
    now: datetime
    query: str


Handler = Callable[[_Request], Awaitable[QueryResult]]
HANDLERS: dict[Intent, Handler] = {}


def _handles(intent: Intent) -> Callable[[Handler], Handler]:
    def _register(handler: Handler) -> Handler:
        HANDLERS[intent] = handler
        return handler

    return _register


async def _fetch(call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking store read in a worker thread."""

    return await asyncio.to_thread(call, *args, **kwargs)


def _is_overdue(due_date: datetime, now: datetime) -> bool:
    return due_date < now


def _days_overdue(due_date: datetime, now: datetime) -> int:
    """Whole days past due, rounded up."""

    delta = now - due_date
    return -(-delta // timedelta(days=1))


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).lower()


def _name_appears(name: str, folded_query: str) -> bool:
    pattern = rf"(?<!\w){re.escape(_fold(name))}(?!\w)"
    return re.search(pattern, folded_query) is not None


def _mentioned_customers(customers: Sequence[CustomerRecord], query: str) -> list[CustomerRecord]:
    """Customers whose company name appears as whole words in the question."""

    folded = _fold(query)
    return [c for c in customers if c.name and _name_appears(c.name, folded)]


def _summarize_debts(
    receivables: Sequence[OpenReceivable], now: datetime
) -> dict[int, dict[str, Any]]:
    """Group open receivables per customer in first-seen order."""

    grouped: dict[int, dict[str, Any]] = {}
    for item in receivables:
        entry = grouped.setdefault(
            item.customer_id,
            {
                "customer_id": item.customer_id,
                "name": item.customer_name,
                "phone": item.phone,
                "total_debt": ZERO,
                "overdue_count": 0,
                "receivables": [],
            },
        )
        entry["total_debt"] += item.remaining_amount
        if _is_overdue(item.due_date, now):
            entry["overdue_count"] += 1
        entry["receivables"].append(item)
    return grouped


# Debts -----------------------------------------------------------------------


@_handles(Intent.TOP_DEBTORS)
async def _top_debtors(request: _Request) -> TopDebtorsResult:
    receivables = await _fetch(request.store.open_receivables)
    grouped = _summarize_debts(receivables, request.now)
    ranked = sorted(
        grouped.values(),
        key=lambda entry: (-entry["total_debt"], entry["customer_id"]),
    )
    debtors = [
        Debtor(
            customer_id=entry["customer_id"],
            name=entry["name"],
            phone=entry["phone"],
            total_debt=entry["total_debt"],
            overdue_count=entry["overdue_count"],
        )
        for entry in ranked[:TOP_LIMIT]
    ]
    return TopDebtorsResult(data=TopDebtorsData(top_debtors=debtors))


@_handles(Intent.OVERDUE_DEBTS)
async def _overdue_debts(request: _Request) -> OverdueDebtsResult:
    now = request.now
    receivables = await _fetch(request.store.overdue_receivables, now)
    ordered = sorted(
        (item for item in receivables if _is_overdue(item.due_date, now)),
        key=lambda item: (-item.remaining_amount, item.receivable_id),
    )
    debts = [
        OverdueDebt(
            receivable_id=item.receivable_id,
            customer=item.customer_name,
            phone=item.phone,
            amount=item.remaining_amount,
            due_date=item.due_date,
            days_overdue=_days_overdue(item.due_date, now),
        )
        for item in ordered
    ]
    total = sum((debt.amount for debt in debts), ZERO)
    return OverdueDebtsResult(
        data=OverdueDebtsData(overdue_debts=debts, total_overdue=total, count=len(debts))
    )


@_handles(Intent.TOTAL_RECEIVABLES)
async def _total_receivables(request: _Request) -> TotalReceivablesResult:
    totals = await _fetch(request.store.outstanding_receivables)
    return TotalReceivablesResult(
        data=TotalReceivablesData(total_receivables=totals.amount, count=totals.count)
    )


@_handles(Intent.TOTAL_PAYABLES)
async def _total_payables(request: _Request) -> TotalPayablesResult:
    totals = await _fetch(request.store.outstanding_payables)
    return TotalPayablesResult(
        data=TotalPayablesData(total_payables=totals.amount, count=totals.count)
    )


@_handles(Intent.CUSTOMER_DEBT)
async def _customer_debt(request: _Request) -> CustomerDebtResult:
    customers = await _fetch(request.store.list_customers, active_only=False)
    mentioned = _mentioned_customers(customers, request.query)
    if not mentioned:
        return CustomerDebtResult(data=CustomerDebtData(customers=[]))

    ids = [customer.customer_id for customer in mentioned]
    receivables = await _fetch(request.store.open_receivables, ids)
    grouped = _summarize_debts(receivables, request.now)

    entries: list[CustomerDebt] = []
    for customer in mentioned:
        summary = grouped.get(customer.customer_id)
        open_items = summary["receivables"] if summary else []
        entries.append(
            CustomerDebt(
                customer_id=customer.customer_id,
                name=customer.name,
                phone=customer.phone,
                total_debt=summary["total_debt"] if summary else ZERO,
                overdue_count=summary["overdue_count"] if summary else 0,
                receivables=[
                    OpenDebt(
                        receivable_id=item.receivable_id,
                        amount=item.remaining_amount,
                        due_date=item.due_date,
                        status=item.status,
                        is_overdue=_is_overdue(item.due_date, request.now),
                    )
                    for item in open_items
                ],
            )
        )
    return CustomerDebtResult(data=CustomerDebtData(customers=entries))


# Sales and purchases -----------------------------------------------------------


@_handles(Intent.MONTHLY_SALES)
async def _monthly_sales(request: _Request) -> MonthlySalesResult:
    window = month_to_date(request.now)
    totals, by_type = await asyncio.gather(
        _fetch(request.store.sales_totals, window),
        _fetch(request.store.sales_by_cement_type, window),
    )
    return MonthlySalesResult(
        data=MonthlySalesData(
            total_revenue=totals.amount,
            total_quantity=totals.quantity,
            order_count=totals.count,
            by_type=[
                TypeSales(type=row.code, quantity=row.quantity, revenue=row.amount)
                for row in by_type
            ],
        )
    )


@_handles(Intent.YEARLY_SALES)
async def _yearly_sales(request: _Request) -> YearlySalesResult:
    totals = await _fetch(request.store.sales_totals, year_to_date(request.now))
    return YearlySalesResult(
        data=YearlySalesData(
            total_revenue=totals.amount,
            total_quantity=totals.quantity,
            order_count=totals.count,
        )
    )


@_handles(Intent.SALES_COMPARISON)
async def _sales_comparison(request: _Request) -> SalesComparisonResult:
    current, previous = await asyncio.gather(
        _fetch(request.store.sales_totals, month_to_date(request.now)),
        _fetch(request.store.sales_totals, previous_month(request.now)),
    )
    return SalesComparisonResult(
        data=SalesComparisonData(
            current_month=PeriodSales(revenue=current.amount, quantity=current.quantity),
            last_month=PeriodSales(revenue=previous.amount, quantity=previous.quantity),
            growth=percent_change(current.amount, previous.amount),
        )
    )


@_handles(Intent.TOP_CUSTOMERS)
async def _top_customers(request: _Request) -> TopCustomersResult:
    rows = await _fetch(request.store.sales_by_customer, year_to_date(request.now))
    ranked = sorted(rows, key=lambda row: (-row.amount, row.customer_id))
    return TopCustomersResult(
        data=TopCustomersData(
            top_customers=[
                TopCustomer(
                    customer_id=row.customer_id,
                    name=row.customer_name,
                    total_purchases=row.amount,
                    total_quantity=row.quantity,
                )
                for row in ranked[:TOP_LIMIT]
            ]
        )
    )


@_handles(Intent.MONTHLY_PURCHASES)
async def _monthly_purchases(request: _Request) -> MonthlyPurchasesResult:
    totals = await _fetch(request.store.purchase_totals, month_to_date(request.now))
    return MonthlyPurchasesResult(
        data=MonthlyPurchasesData(
            total_spent=totals.amount,
            total_quantity=totals.quantity,
            order_count=totals.count,
        )
    )


@_handles(Intent.STOCK_STATUS)
async def _stock_status(request: _Request) -> StockStatusResult:
    purchased_rows, sold_rows = await asyncio.gather(
        _fetch(request.store.purchases_by_cement_type),
        _fetch(request.store.sales_by_cement_type),
    )

    codes: dict[int, str] = {}
    purchased: dict[int, Any] = {}
    sold: dict[int, Any] = {}
    for row in purchased_rows:
        codes[row.cement_type_id] = row.code
        purchased[row.cement_type_id] = row.quantity
    for row in sold_rows:
        codes[row.cement_type_id] = row.code
        sold[row.cement_type_id] = row.quantity

    by_type: list[TypeStock] = []
    for type_id in sorted(codes):
        bought = purchased.get(type_id, ZERO)
        delivered = sold.get(type_id, ZERO)
        if bought == ZERO and delivered == ZERO:
            continue
        by_type.append(
            TypeStock(
                type=codes[type_id],
                purchased=bought,
                sold=delivered,
                stock=bought - delivered,
            )
        )

    total_purchased = sum((row.purchased for row in by_type), ZERO)
    total_sold = sum((row.sold for row in by_type), ZERO)
    return StockStatusResult(
        data=StockStatusData(
            current_stock=total_purchased - total_sold,
            total_purchased=total_purchased,
            total_sold=total_sold,
            by_type=by_type,
        )
    )


# Customers ---------------------------------------------------------------------


@_handles(Intent.CUSTOMER_INFO)
async def _customer_info(request: _Request) -> CustomerInfoResult:
    customers = await _fetch(request.store.list_customers, active_only=False)
    mentioned = _mentioned_customers(customers, request.query)
    if not mentioned:
        return CustomerInfoResult(data=CustomerInfoData(customers=[]))

    ids = [customer.customer_id for customer in mentioned]
    year_rows, last_sales = await asyncio.gather(
        _fetch(request.store.sales_by_customer, year_to_date(request.now), ids),
        _fetch(request.store.last_sale_dates, ids),
    )
    year_totals = {row.customer_id: row for row in year_rows}

    profiles: list[CustomerProfile] = []
    for customer in mentioned:
        totals = year_totals.get(customer.customer_id)
        profiles.append(
            CustomerProfile(
                customer_id=customer.customer_id,
                name=customer.name,
                phone=customer.phone,
                contact_person=customer.contact_person,
                type=customer.customer_type,
                created_at=customer.created_at,
                is_active=customer.is_active,
                year_purchases=totals.amount if totals else ZERO,
                year_quantity=totals.quantity if totals else ZERO,
                last_purchase=last_sales.get(customer.customer_id),
            )
        )
    return CustomerInfoResult(data=CustomerInfoData(customers=profiles))


@_handles(Intent.INACTIVE_CUSTOMERS)
async def _inactive_customers(request: _Request) -> InactiveCustomersResult:
    since = shift_months(request.now, -INACTIVE_MONTHS)
    rows = await _fetch(request.store.customers_without_sales_since, since, INACTIVE_LIMIT)
    return InactiveCustomersResult(
        data=InactiveCustomersData(
            inactive_customers=[
                InactiveCustomer(
                    customer_id=row.customer_id,
                    name=row.name,
                    phone=row.phone,
                    last_purchase=row.last_purchase,
                )
                for row in rows
            ]
        )
    )


@_handles(Intent.NEW_CUSTOMERS)
async def _new_customers(request: _Request) -> NewCustomersResult:
    rows = await _fetch(request.store.customers_created_in, month_to_date(request.now))
    customers = [
        NewCustomer(
            customer_id=row.customer_id,
            name=row.name,
            type=row.customer_type,
            created_at=row.created_at,
        )
        for row in rows
    ]
    return NewCustomersResult(data=NewCustomersData(new_customers=customers, count=len(customers)))


@_handles(Intent.GENERAL)
async def _general(request: _Request) -> GeneralResult:
    store = request.store
    customers, factories, receivables, payables, sales = await asyncio.gather(
        _fetch(store.count_active_customers),
        _fetch(store.count_active_factories),
        _fetch(store.outstanding_receivables),
        _fetch(store.outstanding_payables),
        _fetch(store.sales_totals, month_to_date(request.now)),
    )
    return GeneralResult(
        data=GeneralData(
            summary=BusinessSummary(
                customers=customers,
                factories=factories,
                total_receivables=receivables.amount,
                total_payables=payables.amount,
                monthly_revenue=sales.amount,
                monthly_quantity=sales.quantity,
            )
        )
    )


# Entry points --------------------------------------------------------------------


async def resolve(
    intent: Intent | str,
    now: datetime,
    *,
    store: AssistantStore | None = None,
    query: str | None = None,
    settings: Settings | None = None,
) -> QueryResult:
    """Run the aggregation handler for ``intent`` relative to ``now``.

    Raises:
        InvalidTimeReference: ``now`` is not a datetime.
        DataUnavailable: a store read failed or the handler timed out.
    """

    settings = settings or get_settings()
    reference = normalize_reference(now, settings.business_timezone)
    intent = Intent(intent)
    handler = HANDLERS[intent]
    request = _Request(
        store=store if store is not None else SqlAlchemyAssistantStore(),
        now=reference,
        query=query or "",
    )

    started = time.monotonic()
    outcome = "error"
    try:
        result = await asyncio.wait_for(
            handler(request), timeout=settings.query_timeout_seconds
        )
        outcome = "ok"
        return result
    except asyncio.TimeoutError as exc:
        LOGGER.warning(
            "assistant_handler_timeout",
            intent=intent.value,
            timeout_seconds=settings.query_timeout_seconds,
        )
        raise DataUnavailable(
            intent.value,
            f"Aggregation for '{intent.value}' timed out after "
            f"{settings.query_timeout_seconds}s.",
        ) from exc
    finally:
        elapsed = time.monotonic() - started
        metrics.assistant_queries_total.labels(intent=intent.value, outcome=outcome).inc()
        metrics.assistant_query_seconds.labels(intent=intent.value).observe(elapsed)
        LOGGER.info(
            "assistant_handler_finished",
            intent=intent.value,
            outcome=outcome,
            duration_ms=round(elapsed * 1000, 2),
        )


async def process_query(
    query: str,
    now: datetime,
    *,
    store: AssistantStore | None = None,
    settings: Settings | None = None,
) -> QueryResult:
    """Classify ``query`` and resolve its intent."""

    intent = classify(query)
    LOGGER.info("assistant_intent_classified", intent=intent.value)
    return await resolve(intent, now, store=store, query=query, settings=settings)


__all__ = [
    "HANDLERS",
    "INACTIVE_LIMIT",
    "INACTIVE_MONTHS",
    "TOP_LIMIT",
    "process_query",
    "resolve",
]
