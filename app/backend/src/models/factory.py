"""Cement factory (supplier) model."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class Factory(Base):
    """Represents a cement plant the business buys from."""

    __tablename__ = "factories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_terms: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    purchases: Mapped[list["Purchase"]] = relationship("Purchase", back_populates="factory")
    payables: Mapped[list["Payable"]] = relationship("Payable", back_populates="factory")


__all__ = ["Factory"]
