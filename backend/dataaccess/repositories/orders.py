"""
Order repository containing all data-access operations for the orders table.

Repository rules:
- An order may only point at an existing user, checked on create and on
  any change of ``user_id``
- Orders handed back to callers always have ``Order.user`` loaded
- Methods flush, but never commit
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from sqlalchemy import exists, inspect, select
from sqlalchemy.orm import selectinload

from dataaccess.core.constants import MIN_QUANTITY, PRICE_SCALE, PRODUCT_MAX_LENGTH
from dataaccess.core.logging import get_logger
from dataaccess.db.models.order import Order
from dataaccess.db.models.user import User
from dataaccess.repositories.base import (
    AbstractOrderRepository,
    SessionRepository,
    committed_value,
)
from dataaccess.repositories.errors import InvalidArgumentError, NotFoundError

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("user_id", "product", "quantity", "price")


class OrderRepository(SessionRepository, AbstractOrderRepository):
    """CRUD for orders plus user-reference validation."""

    entity_name = "order"

    async def get_all(self) -> list[Order]:
        stmt = select(Order).options(selectinload(Order.user)).order_by(Order.order_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_user_id(self, user_id: int) -> list[Order]:
        """List a user's orders; empty when the user has none or does not exist."""
        self._require_positive_id(user_id, "user_id")
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.user))
            .order_by(Order.order_id)
        )
        result = await self.session.execute(stmt)
        orders = list(result.scalars().all())
        logger.debug("Orders fetched for user", user_id=user_id, count=len(orders))
        return orders

    async def get_by_id(self, order_id: int) -> Order | None:
        self._require_positive_id(order_id, "order_id")
        stmt = (
            select(Order)
            .where(Order.order_id == order_id)
            .options(selectinload(Order.user))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, order: Order) -> Order:
        """Insert a new order for an existing user; the store assigns its id."""
        self._require_entity(order, Order, "order")
        self._validate_fields(order)

        owner = await self.session.get(User, order.user_id)
        if owner is None:
            logger.warning("Rejected order for missing user", user_id=order.user_id)
            raise NotFoundError(
                f"User with ID {order.user_id} not found",
                entity_id=order.user_id,
                entity="user",
            )

        order.user = owner
        self.session.add(order)
        await self.session.flush()
        logger.info("Order created", order_id=order.order_id, user_id=owner.id)
        return order

    async def update(self, order: Order) -> Order:
        """
        Overwrite user id, product, quantity and price of an existing order.

        When `order` is the tracked instance and the new user does not exist,
        its unflushed edits are reloaded from the store.  A rejected field
        validation leaves them in place; roll the session back then.
        """
        self._require_entity(order, Order, "order")
        self._validate_fields(order)

        # `order` may be the tracked instance itself, already carrying unflushed edits
        with self.session.no_autoflush:
            existing = (
                await self.get_by_id(order.order_id)
                if order.order_id is not None and order.order_id > 0
                else None
            )
        if existing is None:
            logger.warning("Rejected update of missing order", order_id=order.order_id)
            raise NotFoundError(
                f"Order with ID {order.order_id} not found",
                entity_id=order.order_id,
                entity=self.entity_name,
            )

        if committed_value(existing, "user_id") != order.user_id:
            with self.session.no_autoflush:
                owner = await self.session.get(User, order.user_id)
            if owner is None:
                missing_user_id = order.user_id
                logger.warning(
                    "Rejected order move to missing user",
                    order_id=existing.order_id,
                    user_id=missing_user_id,
                )
                await self._discard_edits(existing, order, _EDITABLE_FIELDS)
                raise NotFoundError(
                    f"User with ID {missing_user_id} not found",
                    entity_id=missing_user_id,
                    entity="user",
                )
            existing.user = owner

        existing.user_id = order.user_id
        existing.product = order.product
        existing.quantity = order.quantity
        existing.price = order.price

        await self.session.flush()
        logger.info("Order updated", order_id=existing.order_id, user_id=existing.user_id)
        return existing

    async def delete(self, order_id: int) -> bool:
        """Hard-delete an order. Returns True if a row was deleted."""
        self._require_positive_id(order_id, "order_id")

        order = await self.session.get(Order, order_id)
        if order is None:
            return False

        await self.session.delete(order)
        await self.session.flush()

        deleted = inspect(order).deleted
        if deleted:
            logger.info("Order deleted", order_id=order_id)
        return deleted

    async def exists(self, order_id: int) -> bool:
        if order_id is None or order_id <= 0:
            return False
        stmt = select(exists().where(Order.order_id == order_id))
        return bool(await self.session.scalar(stmt))

    # ── Internal helpers ──────────────────────

    def _validate_fields(self, order: Order) -> None:
        if order.user_id is None:
            raise InvalidArgumentError(
                "user_id is required", argument="user_id", entity=self.entity_name
            )

        product = order.product
        if not isinstance(product, str) or not product.strip():
            raise InvalidArgumentError(
                "product is required", argument="product", entity=self.entity_name
            )
        if len(product) > PRODUCT_MAX_LENGTH:
            raise InvalidArgumentError(
                f"product exceeds {PRODUCT_MAX_LENGTH} characters",
                argument="product",
                entity=self.entity_name,
            )

        quantity = order.quantity
        # bool is an int subclass but never a quantity
        if (
            not isinstance(quantity, int)
            or isinstance(quantity, bool)
            or quantity < MIN_QUANTITY
        ):
            raise InvalidArgumentError(
                f"quantity must be at least {MIN_QUANTITY}",
                argument="quantity",
                entity=self.entity_name,
            )

        order.price = self._coerce_price(order.price)

    def _coerce_price(self, value: object) -> Decimal:
        """Decimal price with at most two fractional digits, strictly positive."""
        if value is None or isinstance(value, bool):
            raise InvalidArgumentError(
                "price is required", argument="price", entity=self.entity_name
            )
        try:
            price = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise InvalidArgumentError(
                f"price is not a number: {value!r}", argument="price", entity=self.entity_name
            ) from None

        if not price.is_finite() or price <= 0:
            raise InvalidArgumentError(
                "price must be greater than 0", argument="price", entity=self.entity_name
            )
        try:
            amount = price.quantize(Decimal(1).scaleb(-PRICE_SCALE))
        except InvalidOperation:
            raise InvalidArgumentError(
                f"price is out of range: {value!r}", argument="price", entity=self.entity_name
            ) from None
        # Trailing zeros are fine; only the amount must fit in cents
        if amount != price:
            raise InvalidArgumentError(
                f"price allows at most {PRICE_SCALE} decimal places",
                argument="price",
                entity=self.entity_name,
            )
        return amount
