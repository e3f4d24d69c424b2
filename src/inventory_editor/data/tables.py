"""SQLAlchemy table model backing the product store."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .records import ProductRecord


def _new_product_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    """Database persistence model for products.

    ``row_id`` is an internal surrogate key that also breaks ``created_at`` ties
    so the list order stays newest-first when two rows share a timestamp.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    )

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(32), unique=True, index=True, nullable=False, default=_new_product_id
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            title=self.title,
            quantity=self.quantity,
            created_at=self.created_at,
        )
