"""Customer model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base
from app.backend.src.services.date_windows import business_now


class Customer(Base):
    """Represents a buyer, usually a concrete mixing station."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    short_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="MIXING_STATION"
    )
    credit_limit: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    payment_terms: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=business_now, nullable=False
    )

    sales: Mapped[list["Sale"]] = relationship("Sale", back_populates="customer")
    receivables: Mapped[list["Receivable"]] = relationship(
        "Receivable", back_populates="customer"
    )


__all__ = ["Customer"]
