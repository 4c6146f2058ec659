"""Receivable and payable models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base

DEBT_STATUS_CURRENT = "CURRENT"
DEBT_STATUS_OVERDUE = "OVERDUE"
DEBT_STATUS_PAID = "PAID"


class Receivable(Base):
    """An amount a customer still owes the business."""

    __tablename__ = "receivables"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    original_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=0)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=DEBT_STATUS_CURRENT, index=True
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="receivables")


class Payable(Base):
    """An amount the business still owes a factory."""

    __tablename__ = "payables"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    factory_id: Mapped[int] = mapped_column(
        ForeignKey("factories.id"), nullable=False, index=True
    )
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    original_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=0)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=DEBT_STATUS_CURRENT, index=True
    )

    factory: Mapped["Factory"] = relationship("Factory", back_populates="payables")


__all__ = [
    "DEBT_STATUS_CURRENT",
    "DEBT_STATUS_OVERDUE",
    "DEBT_STATUS_PAID",
    "Payable",
    "Receivable",
]
