"""Handler tests for the business query assistant against SQLite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal

from app.backend.src.schemas.assistant import Intent
from app.backend.src.services.query_assistant import process_query, resolve

NOW = datetime(2026, 3, 15, 10, 30)


def _resolve(intent: Intent, store, **kwargs):
    return asyncio.run(resolve(intent, NOW, store=store, **kwargs))


def test_total_receivables_sums_open_amounts(db, make, store) -> None:
    customer = make.customer("Công ty A")
    make.receivable(customer, remaining="1000000", due=NOW + timedelta(days=5))
    make.receivable(customer, remaining="2500000", due=NOW - timedelta(days=5), status="OVERDUE")
    make.receivable(customer, remaining="9999999", due=NOW, status="PAID")
    db.commit()

    result = _resolve(Intent.TOTAL_RECEIVABLES, store)

    assert result.intent == Intent.TOTAL_RECEIVABLES
    assert result.data.total_receivables == Decimal("3500000")
    assert result.data.count == 2


def test_total_payables_without_records_is_zero(store) -> None:
    result = _resolve(Intent.TOTAL_PAYABLES, store)

    assert result.data.total_payables == Decimal("0")
    assert result.data.count == 0


def test_total_payables_ignores_paid(db, make, store) -> None:
    factory = make.factory("Xi măng Chinfon")
    make.payable(factory, remaining="700000000", due=NOW + timedelta(days=10))
    make.payable(factory, remaining="100", due=NOW, status="PAID")
    db.commit()

    result = _resolve(Intent.TOTAL_PAYABLES, store)

    assert result.data.total_payables == Decimal("700000000")
    assert result.data.count == 1


def test_top_debtors_empty_when_nothing_is_owed(store) -> None:
    result = _resolve(Intent.TOP_DEBTORS, store)

    assert result.intent == Intent.TOP_DEBTORS
    assert result.data.top_debtors == []


def test_top_debtors_ranks_limits_and_breaks_ties_by_customer(db, make, store) -> None:
    customers = [make.customer(f"Khách {index:02d}") for index in range(12)]
    for index, customer in enumerate(customers):
        # Amounts 100..1200 with customers 4 and 5 tied at 500.
        amount = 500 if index in (4, 5) else (index + 1) * 100
        make.receivable(customer, remaining=str(amount), due=NOW + timedelta(days=3))
    make.receivable(customers[0], remaining="50", due=NOW - timedelta(days=1), status="OVERDUE")
    make.receivable(customers[0], remaining="75", due=NOW - timedelta(days=2))
    db.commit()

    debtors = _resolve(Intent.TOP_DEBTORS, store).data.top_debtors

    assert len(debtors) == 10
    totals = [debtor.total_debt for debtor in debtors]
    assert totals == sorted(totals, reverse=True)
    assert debtors[0].name == "Khách 11"
    tied = [debtor for debtor in debtors if debtor.total_debt == Decimal("500")]
    assert [debtor.customer_id for debtor in tied] == sorted(d.customer_id for d in tied)
    assert "Khách 00" not in {debtor.name for debtor in debtors}


def test_top_debtors_counts_overdue_by_due_date(db, make, store) -> None:
    customer = make.customer("Trạm trộn Kiến An", phone="0912345678")
    make.receivable(customer, remaining="300", due=NOW - timedelta(days=1))
    make.receivable(customer, remaining="200", due=NOW - timedelta(days=40), status="OVERDUE")
    make.receivable(customer, remaining="100", due=NOW + timedelta(days=1))
    db.commit()

    (debtor,) = _resolve(Intent.TOP_DEBTORS, store).data.top_debtors

    assert debtor.total_debt == Decimal("600")
    assert debtor.overdue_count == 2
    assert debtor.phone == "0912345678"


def test_overdue_debts_lists_amounts_days_and_total(db, make, store) -> None:
    first = make.customer("Công ty A", phone="0900000001")
    second = make.customer("Công ty B")
    make.receivable(first, remaining="1000000", due=NOW - timedelta(days=10), status="OVERDUE")
    make.receivable(second, remaining="4000000", due=NOW - timedelta(hours=1), status="OVERDUE")
    make.receivable(second, remaining="500000", due=NOW + timedelta(days=1))
    make.receivable(first, remaining="8000000", due=NOW - timedelta(days=90), status="PAID")
    db.commit()

    data = _resolve(Intent.OVERDUE_DEBTS, store).data

    assert data.count == 2
    assert data.total_overdue == Decimal("5000000")
    assert [debt.amount for debt in data.overdue_debts] == [Decimal("4000000"), Decimal("1000000")]
    assert data.overdue_debts[0].customer == "Công ty B"
    assert data.overdue_debts[0].days_overdue == 1
    assert data.overdue_debts[1].days_overdue == 10
    assert data.overdue_debts[1].phone == "0900000001"


def test_overdue_days_round_up_partial_days(db, make, store) -> None:
    customer = make.customer("Công ty A")
    make.receivable(customer, remaining="10", due=NOW - timedelta(days=2, hours=3))
    db.commit()

    (debt,) = _resolve(Intent.OVERDUE_DEBTS, store).data.overdue_debts

    assert debt.days_overdue == 3


def test_monthly_sales_totals_and_breakdown(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    pcb40 = make.cement_type("PCB40")
    customer = make.customer("Công ty A")
    make.sale(customer, pcb30, on=datetime(2026, 3, 1), quantity="30", total="42000000")
    make.sale(customer, pcb40, on=datetime(2026, 3, 10), quantity="28.5", total="40000000")
    make.sale(customer, pcb40, on=datetime(2026, 3, 14), quantity="31", total="43000000")
    make.sale(customer, pcb30, on=datetime(2026, 2, 28, 23), quantity="29", total="41000000")
    make.sale(customer, pcb30, on=NOW + timedelta(hours=1), quantity="30", total="42000000")
    db.commit()

    data = _resolve(Intent.MONTHLY_SALES, store).data

    assert data.total_revenue == Decimal("125000000")
    assert data.total_quantity == Decimal("89.5")
    assert data.order_count == 3
    by_type = {row.type: row for row in data.by_type}
    assert by_type["PCB30"].quantity == Decimal("30")
    assert by_type["PCB40"].quantity == Decimal("59.5")
    assert by_type["PCB40"].revenue == Decimal("83000000")


def test_yearly_sales_starts_on_january_first(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    customer = make.customer("Công ty A")
    make.sale(customer, pcb30, on=datetime(2026, 1, 1), quantity="30", total="42000000")
    make.sale(customer, pcb30, on=datetime(2025, 12, 31, 23), quantity="30", total="42000000")
    db.commit()

    data = _resolve(Intent.YEARLY_SALES, store).data

    assert data.total_revenue == Decimal("42000000")
    assert data.order_count == 1


def test_sales_comparison_growth(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    customer = make.customer("Công ty A")
    make.sale(customer, pcb30, on=datetime(2026, 2, 3), quantity="40", total="40000000")
    make.sale(customer, pcb30, on=datetime(2026, 3, 2), quantity="50", total="50000000")
    db.commit()

    data = _resolve(Intent.SALES_COMPARISON, store).data

    assert data.current_month.revenue == Decimal("50000000")
    assert data.last_month.revenue == Decimal("40000000")
    assert data.last_month.quantity == Decimal("40")
    assert data.growth == Decimal("25.0")


def test_sales_comparison_without_previous_month_reports_zero_growth(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    customer = make.customer("Công ty A")
    make.sale(customer, pcb30, on=datetime(2026, 3, 2), quantity="50", total="50000000")
    db.commit()

    data = _resolve(Intent.SALES_COMPARISON, store).data

    assert data.current_month.revenue == Decimal("50000000")
    assert data.last_month.revenue == Decimal("0")
    assert data.growth == Decimal("0")


def test_top_customers_uses_year_to_date(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    big = make.customer("Công ty Lớn")
    small = make.customer("Công ty Nhỏ")
    make.sale(small, pcb30, on=datetime(2026, 2, 1), quantity="10", total="10000000")
    make.sale(big, pcb30, on=datetime(2026, 1, 5), quantity="30", total="30000000")
    make.sale(big, pcb30, on=datetime(2026, 3, 5), quantity="30", total="30000000")
    make.sale(small, pcb30, on=datetime(2025, 11, 1), quantity="99", total="99000000")
    db.commit()

    top = _resolve(Intent.TOP_CUSTOMERS, store).data.top_customers

    assert [row.name for row in top] == ["Công ty Lớn", "Công ty Nhỏ"]
    assert top[0].total_purchases == Decimal("60000000")
    assert top[0].total_quantity == Decimal("60")
    assert top[1].total_purchases == Decimal("10000000")


def test_stock_status_per_type_and_overall(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    pcb40 = make.cement_type("PCB40")
    make.cement_type("PC50")
    factory = make.factory("Xi măng Chinfon")
    customer = make.customer("Công ty A")
    make.purchase(factory, pcb30, on=datetime(2025, 6, 1), quantity="100")
    make.purchase(factory, pcb30, on=datetime(2026, 3, 1), quantity="60.5")
    make.purchase(factory, pcb40, on=datetime(2026, 3, 1), quantity="30")
    make.sale(customer, pcb30, on=datetime(2026, 3, 2), quantity="90", total="1")
    make.sale(customer, pcb40, on=datetime(2026, 3, 3), quantity="45", total="1")
    db.commit()

    data = _resolve(Intent.STOCK_STATUS, store).data

    by_type = {row.type: row for row in data.by_type}
    assert set(by_type) == {"PCB30", "PCB40"}
    assert by_type["PCB30"].stock == Decimal("70.5")
    assert by_type["PCB40"].stock == Decimal("-15")
    for row in data.by_type:
        assert row.stock == row.purchased - row.sold
    assert data.current_stock == sum((row.stock for row in data.by_type), Decimal("0"))
    assert data.total_purchased == Decimal("190.5")
    assert data.total_sold == Decimal("135")


def test_monthly_purchases(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    factory = make.factory("Xi măng Chinfon")
    make.purchase(factory, pcb30, on=datetime(2026, 3, 5), quantity="30", total="37500000")
    make.purchase(factory, pcb30, on=datetime(2026, 2, 25), quantity="30", total="37500000")
    db.commit()

    data = _resolve(Intent.MONTHLY_PURCHASES, store).data

    assert data.total_spent == Decimal("37500000")
    assert data.total_quantity == Decimal("30")
    assert data.order_count == 1


def test_inactive_customers_include_never_bought(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    recent = make.customer("Khách Gần Đây")
    stale = make.customer("Khách Lâu Năm")
    never = make.customer("Khách Chưa Mua")
    retired = make.customer("Khách Ngừng", is_active=False)
    make.sale(recent, pcb30, on=datetime(2026, 1, 20), quantity="1", total="1")
    make.sale(stale, pcb30, on=datetime(2025, 12, 14), quantity="1", total="1")
    db.commit()

    rows = _resolve(Intent.INACTIVE_CUSTOMERS, store).data.inactive_customers

    assert [row.name for row in rows] == ["Khách Lâu Năm", "Khách Chưa Mua"]
    assert rows[0].last_purchase == datetime(2025, 12, 14)
    assert rows[1].last_purchase is None
    assert retired.id not in {row.customer_id for row in rows}


def test_new_customers_this_month_newest_first(db, make, store) -> None:
    make.customer("Khách Cũ", created_at=datetime(2026, 2, 27))
    make.customer("Khách Mới 1", created_at=datetime(2026, 3, 2))
    make.customer("Khách Mới 2", created_at=datetime(2026, 3, 12), customer_type="CONTRACTOR")
    db.commit()

    data = _resolve(Intent.NEW_CUSTOMERS, store).data

    assert data.count == 2
    assert [row.name for row in data.new_customers] == ["Khách Mới 2", "Khách Mới 1"]
    assert data.new_customers[0].type == "CONTRACTOR"


def test_customer_debt_matches_names_in_question(db, make, store) -> None:
    kien_an = make.customer("Trạm trộn Kiến An")
    make.customer("Công ty Bê tông Hải Phòng")
    make.receivable(kien_an, remaining="2000000", due=NOW - timedelta(days=3))
    make.receivable(kien_an, remaining="1000000", due=NOW + timedelta(days=3))
    db.commit()

    result = asyncio.run(
        process_query("Khách trạm trộn kiến an còn nợ bao nhiêu?", NOW, store=store)
    )

    assert result.intent == Intent.CUSTOMER_DEBT
    (entry,) = result.data.customers
    assert entry.name == "Trạm trộn Kiến An"
    assert entry.total_debt == Decimal("3000000")
    assert entry.overdue_count == 1
    assert [item.is_overdue for item in entry.receivables] == [True, False]


def test_customer_debt_ignores_names_inside_other_words(db, make, store) -> None:
    make.customer("An")
    bao_anh = make.customer("Bảo Anh")
    make.receivable(bao_anh, remaining="500000", due=NOW + timedelta(days=5))
    db.commit()

    result = asyncio.run(
        process_query("Khách Bảo Anh còn nợ bao nhiêu?", NOW, store=store)
    )

    assert result.intent == Intent.CUSTOMER_DEBT
    assert [entry.name for entry in result.data.customers] == ["Bảo Anh"]


def test_debt_due_exactly_now_is_not_overdue(db, make, store) -> None:
    customer = make.customer("Trạm trộn Kiến An")
    make.receivable(customer, remaining="1000000", due=NOW)
    db.commit()

    overdue = _resolve(Intent.OVERDUE_DEBTS, store).data
    (debtor,) = _resolve(Intent.TOP_DEBTORS, store).data.top_debtors

    assert overdue.count == 0
    assert overdue.overdue_debts == []
    assert debtor.overdue_count == 0


def test_customer_debt_without_a_known_name_is_empty(db, make, store) -> None:
    make.customer("Trạm trộn Kiến An")
    db.commit()

    result = _resolve(Intent.CUSTOMER_DEBT, store, query="ông Tư nợ bao nhiêu")

    assert result.data.customers == []


def test_customer_info_reports_profile_and_activity(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    customer = make.customer("Trạm trộn An Lão", phone="0987654321")
    make.sale(customer, pcb30, on=datetime(2025, 12, 1), quantity="30", total="42000000")
    make.sale(customer, pcb30, on=datetime(2026, 2, 1), quantity="28", total="39200000")
    db.commit()

    result = asyncio.run(
        process_query("Thông tin khách Trạm trộn An Lão", NOW, store=store)
    )

    assert result.intent == Intent.CUSTOMER_INFO
    (profile,) = result.data.customers
    assert profile.phone == "0987654321"
    assert profile.year_purchases == Decimal("39200000")
    assert profile.year_quantity == Decimal("28")
    assert profile.last_purchase == datetime(2026, 2, 1)


def test_general_summary_bundle(db, make, store) -> None:
    pcb30 = make.cement_type("PCB30")
    customer = make.customer("Công ty A")
    make.customer("Công ty B", is_active=False)
    factory = make.factory("Xi măng Chinfon")
    make.factory("Nhà máy cũ", is_active=False)
    make.receivable(customer, remaining="1500000", due=NOW)
    make.payable(factory, remaining="2500000", due=NOW)
    make.sale(customer, pcb30, on=datetime(2026, 3, 3), quantity="30", total="42000000")
    db.commit()

    result = asyncio.run(process_query("Xin chào", NOW, store=store))

    assert result.intent == Intent.GENERAL
    summary = result.data.summary
    assert summary.customers == 1
    assert summary.factories == 1
    assert summary.total_receivables == Decimal("1500000")
    assert summary.total_payables == Decimal("2500000")
    assert summary.monthly_revenue == Decimal("42000000")
    assert summary.monthly_quantity == Decimal("30")


def test_scenario_questions_route_to_expected_handlers(store) -> None:
    for query, expected in (
        ("Ai đang nợ tôi nhiều nhất?", Intent.TOP_DEBTORS),
        ("Tháng này bán được bao nhiêu tấn?", Intent.MONTHLY_SALES),
        ("Còn bao nhiêu tấn xi măng trong kho?", Intent.STOCK_STATUS),
    ):
        result = asyncio.run(process_query(query, NOW, store=store))
        assert result.intent == expected
