"""
Repository contracts and shared argument checks.

Every repository receives an ``AsyncSession`` in its constructor and uses
it as the unit of work for the whole logical request.  Repositories flush,
but never commit; the transaction boundary belongs to the caller
(see ``dataaccess.db.session.session_scope``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from dataaccess.db.models.order import Order
from dataaccess.db.models.user import User
from dataaccess.repositories.errors import InvalidArgumentError


def committed_value(entity: object, key: str) -> Any:
    """Value of `key` as last loaded from the store, ignoring unflushed edits."""
    history = inspect(entity).attrs[key].history
    if history.deleted:
        return history.deleted[0]
    return getattr(entity, key)


class SessionRepository:
    """Holds the session shared by every concrete repository."""

    entity_name: str = "entity"

    def __init__(self, session: AsyncSession) -> None:
        if session is None:
            raise InvalidArgumentError(
                "A database session is required", argument="session"
            )
        self.session = session

    async def _discard_edits(
        self, existing: object, incoming: object, attributes: Sequence[str]
    ) -> None:
        """Reload `attributes` from the store when the caller passed the tracked instance."""
        if existing is incoming:
            with self.session.no_autoflush:
                await self.session.refresh(existing, attribute_names=list(attributes))

    def _require_positive_id(self, value: int, argument: str = "id") -> None:
        if value is None or value <= 0:
            raise InvalidArgumentError(
                f"Invalid {self.entity_name} ID: {value}",
                argument=argument,
                entity=self.entity_name,
            )

    def _require_entity(self, entity: object, expected: type, argument: str) -> None:
        if entity is None:
            raise InvalidArgumentError(
                f"{argument} cannot be None",
                argument=argument,
                entity=self.entity_name,
            )
        if not isinstance(entity, expected):
            raise InvalidArgumentError(
                f"{argument} must be a {expected.__name__}, got {type(entity).__name__}",
                argument=argument,
                entity=self.entity_name,
            )


class AbstractUserRepository(ABC):
    """Contract for user persistence."""

    @abstractmethod
    async def get_all(self) -> Sequence[User]:
        """Return every user."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:
        """
        Get a user by primary key.

        Raises:
            InvalidArgumentError: ``user_id <= 0``.
        """

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """
        Get a user by email, compared case-insensitively.

        Raises:
            InvalidArgumentError: email is None, empty or whitespace.
        """

    @abstractmethod
    async def add(self, user: User) -> User:
        """
        Persist a new user and return it with its generated id.

        Raises:
            InvalidArgumentError: user is None or has invalid fields.
            ConflictError: the email is already taken.
        """

    @abstractmethod
    async def update(self, user: User) -> User:
        """
        Copy first name, last name and email onto the stored user.

        Raises:
            InvalidArgumentError: user is None or has invalid fields.
            NotFoundError: no user with ``user.id``.
            ConflictError: the new email belongs to another user.
        """

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        """Delete a user and its orders. False when there is nothing to delete."""

    @abstractmethod
    async def exists(self, user_id: int) -> bool:
        """True when a user with this id exists; False for ``user_id <= 0``."""

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        """True when any user has this email; False for blank input."""


class AbstractOrderRepository(ABC):
    """Contract for order persistence."""

    @abstractmethod
    async def get_all(self) -> Sequence[Order]:
        """Return every order with its user attached."""

    @abstractmethod
    async def get_by_user_id(self, user_id: int) -> Sequence[Order]:
        """
        Return the orders of one user, possibly none.

        Raises:
            InvalidArgumentError: ``user_id <= 0``.
        """

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Order | None:
        """
        Get an order, with its user attached, by primary key.

        Raises:
            InvalidArgumentError: ``order_id <= 0``.
        """

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """
        Persist a new order and return it with its generated id.

        Raises:
            InvalidArgumentError: order is None or has invalid fields.
            NotFoundError: ``order.user_id`` does not reference a user.
        """

    @abstractmethod
    async def update(self, order: Order) -> Order:
        """
        Copy user id, product, quantity and price onto the stored order.

        Raises:
            InvalidArgumentError: order is None or has invalid fields.
            NotFoundError: no order with ``order.order_id``, or the new
                ``user_id`` does not reference a user.
        """

    @abstractmethod
    async def delete(self, order_id: int) -> bool:
        """Delete an order. False when there is nothing to delete."""

    @abstractmethod
    async def exists(self, order_id: int) -> bool:
        """True when an order with this id exists; False for ``order_id <= 0``."""
