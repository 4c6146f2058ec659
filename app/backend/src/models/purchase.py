"""Purchase (inbound delivery) model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class Purchase(Base):
    """A load of cement bought from a factory."""

    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    purchase_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    factory_id: Mapped[int] = mapped_column(
        ForeignKey("factories.id"), nullable=False, index=True
    )
    cement_type_id: Mapped[int] = mapped_column(
        ForeignKey("cement_types.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="UNPAID")

    factory: Mapped["Factory"] = relationship("Factory", back_populates="purchases")
    cement_type: Mapped["CementType"] = relationship("CementType", back_populates="purchases")


__all__ = ["Purchase"]
