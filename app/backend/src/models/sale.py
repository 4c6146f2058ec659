"""Sale (outbound delivery) model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class Sale(Base):
    """A delivery of cement to a customer."""

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sale_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    sale_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    cement_type_id: Mapped[int] = mapped_column(
        ForeignKey("cement_types.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="UNPAID")

    customer: Mapped["Customer"] = relationship("Customer", back_populates="sales")
    cement_type: Mapped["CementType"] = relationship("CementType", back_populates="sales")


__all__ = ["Sale"]
