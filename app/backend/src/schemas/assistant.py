"""Result schemas returned by the business query assistant."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class Intent(str, Enum):
    """Closed set of question categories the assistant can answer."""

    TOP_DEBTORS = "top_debtors"
    CUSTOMER_DEBT = "customer_debt"
    OVERDUE_DEBTS = "overdue_debts"
    TOTAL_RECEIVABLES = "total_receivables"
    TOTAL_PAYABLES = "total_payables"
    MONTHLY_SALES = "monthly_sales"
    YEARLY_SALES = "yearly_sales"
    SALES_COMPARISON = "sales_comparison"
    TOP_CUSTOMERS = "top_customers"
    CUSTOMER_INFO = "customer_info"
    STOCK_STATUS = "stock_status"
    MONTHLY_PURCHASES = "monthly_purchases"
    INACTIVE_CUSTOMERS = "inactive_customers"
    NEW_CUSTOMERS = "new_customers"
    GENERAL = "general"


# Payloads -----------------------------------------------------------------


class Debtor(BaseModel):
    customer_id: int
    name: str
    phone: str | None = None
    total_debt: Decimal
    overdue_count: int


class TopDebtorsData(BaseModel):
    top_debtors: list[Debtor]


class OpenDebt(BaseModel):
    receivable_id: int
    amount: Decimal
    due_date: datetime
    status: str
    is_overdue: bool


class CustomerDebt(BaseModel):
    customer_id: int
    name: str
    phone: str | None = None
    total_debt: Decimal
    overdue_count: int
    receivables: list[OpenDebt]


class CustomerDebtData(BaseModel):
    customers: list[CustomerDebt]


class OverdueDebt(BaseModel):
    receivable_id: int
    customer: str
    phone: str | None = None
    amount: Decimal
    due_date: datetime
    days_overdue: int


class OverdueDebtsData(BaseModel):
    overdue_debts: list[OverdueDebt]
    total_overdue: Decimal
    count: int


class TotalReceivablesData(BaseModel):
    total_receivables: Decimal
    count: int


class TotalPayablesData(BaseModel):
    total_payables: Decimal
    count: int


class TypeSales(BaseModel):
    type: str
    quantity: Decimal
    revenue: Decimal


class MonthlySalesData(BaseModel):
    total_revenue: Decimal
    total_quantity: Decimal
    order_count: int
    by_type: list[TypeSales]


class YearlySalesData(BaseModel):
    total_revenue: Decimal
    total_quantity: Decimal
    order_count: int


class PeriodSales(BaseModel):
    revenue: Decimal
    quantity: Decimal


class SalesComparisonData(BaseModel):
    current_month: PeriodSales
    last_month: PeriodSales
    growth: Decimal = Field(description="Percent change of revenue, one decimal place.")


class TopCustomer(BaseModel):
    customer_id: int
    name: str
    total_purchases: Decimal
    total_quantity: Decimal


class TopCustomersData(BaseModel):
    top_customers: list[TopCustomer]


class CustomerProfile(BaseModel):
    customer_id: int
    name: str
    phone: str | None = None
    contact_person: str | None = None
    type: str
    created_at: datetime
    is_active: bool
    year_purchases: Decimal
    year_quantity: Decimal
    last_purchase: datetime | None = None


class CustomerInfoData(BaseModel):
    customers: list[CustomerProfile]


class TypeStock(BaseModel):
    type: str
    purchased: Decimal
    sold: Decimal
    stock: Decimal


class StockStatusData(BaseModel):
    current_stock: Decimal
    total_purchased: Decimal
    total_sold: Decimal
    by_type: list[TypeStock]


class MonthlyPurchasesData(BaseModel):
    total_spent: Decimal
    total_quantity: Decimal
    order_count: int


class InactiveCustomer(BaseModel):
    customer_id: int
    name: str
    phone: str | None = None
    last_purchase: datetime | None = None


class InactiveCustomersData(BaseModel):
    inactive_customers: list[InactiveCustomer]


class NewCustomer(BaseModel):
    customer_id: int
    name: str
    type: str
    created_at: datetime


class NewCustomersData(BaseModel):
    new_customers: list[NewCustomer]
    count: int


class BusinessSummary(BaseModel):
    customers: int
    factories: int
    total_receivables: Decimal
    total_payables: Decimal
    monthly_revenue: Decimal
    monthly_quantity: Decimal


class GeneralData(BaseModel):
    summary: BusinessSummary


# Tagged results -------------------------------------------------------------


class TopDebtorsResult(BaseModel):
    intent: Literal[Intent.TOP_DEBTORS] = Intent.TOP_DEBTORS
    data: TopDebtorsData


class CustomerDebtResult(BaseModel):
    intent: Literal[Intent.CUSTOMER_DEBT] = Intent.CUSTOMER_DEBT
    data: CustomerDebtData


class OverdueDebtsResult(BaseModel):
    intent: Literal[Intent.OVERDUE_DEBTS] = Intent.OVERDUE_DEBTS
    data: OverdueDebtsData


class TotalReceivablesResult(BaseModel):
    intent: Literal[Intent.TOTAL_RECEIVABLES] = Intent.TOTAL_RECEIVABLES
    data: TotalReceivablesData


class TotalPayablesResult(BaseModel):
    intent: Literal[Intent.TOTAL_PAYABLES] = Intent.TOTAL_PAYABLES
    data: TotalPayablesData


class MonthlySalesResult(BaseModel):
    intent: Literal[Intent.MONTHLY_SALES] = Intent.MONTHLY_SALES
    data: MonthlySalesData


class YearlySalesResult(BaseModel):
    intent: Literal[Intent.YEARLY_SALES] = Intent.YEARLY_SALES
    data: YearlySalesData


class SalesComparisonResult(BaseModel):
    intent: Literal[Intent.SALES_COMPARISON] = Intent.SALES_COMPARISON
    data: SalesComparisonData


class TopCustomersResult(BaseModel):
    intent: Literal[Intent.TOP_CUSTOMERS] = Intent.TOP_CUSTOMERS
    data: TopCustomersData


class CustomerInfoResult(BaseModel):
    intent: Literal[Intent.CUSTOMER_INFO] = Intent.CUSTOMER_INFO
    data: CustomerInfoData


class StockStatusResult(BaseModel):
    intent: Literal[Intent.STOCK_STATUS] = Intent.STOCK_STATUS
    data: StockStatusData


class MonthlyPurchasesResult(BaseModel):
    intent: Literal[Intent.MONTHLY_PURCHASES] = Intent.MONTHLY_PURCHASES
    data: MonthlyPurchasesData


class InactiveCustomersResult(BaseModel):
    intent: Literal[Intent.INACTIVE_CUSTOMERS] = Intent.INACTIVE_CUSTOMERS
    data: InactiveCustomersData


class NewCustomersResult(BaseModel):
    intent: Literal[Intent.NEW_CUSTOMERS] = Intent.NEW_CUSTOMERS
    data: NewCustomersData


class GeneralResult(BaseModel):
    intent: Literal[Intent.GENERAL] = Intent.GENERAL
    data: GeneralData


QueryResult = Annotated[
    Union[
        TopDebtorsResult,
        CustomerDebtResult,
        OverdueDebtsResult,
        TotalReceivablesResult,
        TotalPayablesResult,
        MonthlySalesResult,
        YearlySalesResult,
        SalesComparisonResult,
        TopCustomersResult,
        CustomerInfoResult,
        StockStatusResult,
        MonthlyPurchasesResult,
        InactiveCustomersResult,
        NewCustomersResult,
        GeneralResult,
    ],
    Field(discriminator="intent"),
]

QUERY_RESULT_ADAPTER: TypeAdapter[QueryResult] = TypeAdapter(QueryResult)


class AssistantQueryRequest(BaseModel):
    """Request payload for the assistant endpoint."""

    query: str | None = Field(default=None, description="Free-text business question")


__all__ = [
    "AssistantQueryRequest",
    "Intent",
    "QUERY_RESULT_ADAPTER",
    "QueryResult",
]
