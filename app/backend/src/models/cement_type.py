"""Cement type model."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.db.base import Base


class CementType(Base):
    """A grade of bulk cement such as PCB30 or PC50."""

    __tablename__ = "cement_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    sales: Mapped[list["Sale"]] = relationship("Sale", back_populates="cement_type")
    purchases: Mapped[list["Purchase"]] = relationship(
        "Purchase", back_populates="cement_type"
    )


__all__ = ["CementType"]
