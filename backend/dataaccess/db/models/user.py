"""
User model, the owner of orders.

Deleting a user deletes all of its orders, both through the ORM cascade
and through `ON DELETE CASCADE` on `orders.user_id`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from dataaccess.core.constants import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH
from dataaccess.db.models.base import Base, normalize_email

if TYPE_CHECKING:
    from dataaccess.db.models.order import Order


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("length(first_name) > 0", name="first_name_not_empty"),
        CheckConstraint("length(last_name) > 0", name="last_name_not_empty"),
        CheckConstraint("length(email) > 0", name="email_not_empty"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    first_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    last_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), unique=True, nullable=False
    )
    # Lower-cased copy of `email`; the unique index makes uniqueness case-insensitive
    email_normalized: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), unique=True, nullable=False, index=True
    )

    orders: Mapped[list[Order]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Order.order_id",
    )

    @validates("email")
    def _sync_email_normalized(self, key: str, value: str | None) -> str | None:
        self.email_normalized = normalize_email(value) if value is not None else None
        return value

    def __repr__(self) -> str:
        return f"<User id={self.id} {self.email}>"
