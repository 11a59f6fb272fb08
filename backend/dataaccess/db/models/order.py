"""
Order model: a line of product purchased by a user.

`Order.user` is a lookup reference to the owning user; ownership runs the
other way through `User.orders`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dataaccess.core.constants import (
    MIN_QUANTITY,
    PRICE_PRECISION,
    PRICE_SCALE,
    PRODUCT_MAX_LENGTH,
)
from dataaccess.db.models.base import Base

if TYPE_CHECKING:
    from dataaccess.db.models.user import User


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("length(product) > 0", name="product_not_empty"),
        CheckConstraint(f"quantity >= {MIN_QUANTITY}", name="quantity_positive"),
        CheckConstraint("price > 0", name="price_positive"),
    )

    order_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product: Mapped[str] = mapped_column(String(PRODUCT_MAX_LENGTH), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_PRECISION, PRICE_SCALE, asdecimal=True), nullable=False
    )

    user: Mapped[User] = relationship(back_populates="orders")

    def __repr__(self) -> str:
        return (
            f"<Order order_id={self.order_id} user_id={self.user_id} "
            f"{self.product} x{self.quantity} @ {self.price}>"
        )
