"""
User repository containing all data-access operations for the users table.

Repository rules:
- Every method validates its arguments before touching the session
- Email uniqueness is checked on the normalized (lower-cased) key
- Methods flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import exists, inspect, select

from dataaccess.core.constants import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH
from dataaccess.core.logging import get_logger
from dataaccess.db.models.base import normalize_email
from dataaccess.db.models.user import User
from dataaccess.repositories.base import (
    AbstractUserRepository,
    SessionRepository,
    committed_value,
)
from dataaccess.repositories.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)

logger = get_logger(__name__)

_EDITABLE_FIELDS = ("first_name", "last_name", "email", "email_normalized")


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class UserRepository(SessionRepository, AbstractUserRepository):
    """CRUD for users plus email-uniqueness and existence checks."""

    entity_name = "user"

    async def get_all(self) -> list[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def get_by_id(self, user_id: int) -> User | None:
        """Fetch a user by primary key."""
        self._require_positive_id(user_id, "user_id")
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive)."""
        if _is_blank(email):
            raise InvalidArgumentError(
                "Email cannot be null or empty", argument="email", entity=self.entity_name
            )
        stmt = select(User).where(User.email_normalized == normalize_email(email))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, user: User) -> User:
        """Insert a new user; the store assigns its id."""
        self._require_entity(user, User, "user")
        self._validate_fields(user)

        if await self.email_exists(user.email):
            logger.warning("Rejected duplicate email on create", email=user.email)
            raise ConflictError(
                f"Email {user.email} already exists",
                field="email",
                value=user.email,
                entity=self.entity_name,
            )

        self.session.add(user)
        await self.session.flush()
        logger.info("User created", user_id=user.id)
        return user

    async def update(self, user: User) -> User:
        """
        Overwrite first name, last name and email of an existing user.

        When `user` is the tracked instance and the update is rejected as a
        conflict, its unflushed edits are reloaded from the store.  A rejected
        field validation leaves them in place; roll the session back then.
        """
        self._require_entity(user, User, "user")
        self._validate_fields(user)

        # `user` may be the tracked instance itself, already carrying unflushed edits
        with self.session.no_autoflush:
            existing = await self.session.get(User, user.id) if user.id else None
        if existing is None:
            logger.warning("Rejected update of missing user", user_id=user.id)
            raise NotFoundError(
                f"User with ID {user.id} not found",
                entity_id=user.id,
                entity=self.entity_name,
            )

        with self.session.no_autoflush:
            email_taken = committed_value(existing, "email") != user.email and (
                await self._email_taken_by_other(user.email, existing.id)
            )
        if email_taken:
            new_email = user.email
            logger.warning(
                "Rejected duplicate email on update", user_id=existing.id, email=new_email
            )
            await self._discard_edits(existing, user, _EDITABLE_FIELDS)
            raise ConflictError(
                f"Email {new_email} already exists",
                field="email",
                value=new_email,
                entity=self.entity_name,
            )

        existing.first_name = user.first_name
        existing.last_name = user.last_name
        existing.email = user.email

        await self.session.flush()
        logger.info("User updated", user_id=existing.id)
        return existing

    async def delete(self, user_id: int) -> bool:
        """Hard-delete a user and its orders. Returns True if a row was deleted."""
        self._require_positive_id(user_id, "user_id")

        user = await self.session.get(User, user_id)
        if user is None:
            return False

        order_count = len(await user.awaitable_attrs.orders)
        await self.session.delete(user)
        await self.session.flush()

        deleted = inspect(user).deleted
        if deleted:
            logger.info("User deleted", user_id=user_id, cascaded_orders=order_count)
        return deleted

    async def exists(self, user_id: int) -> bool:
        if user_id is None or user_id <= 0:
            return False
        stmt = select(exists().where(User.id == user_id))
        return bool(await self.session.scalar(stmt))

    async def email_exists(self, email: str) -> bool:
        if _is_blank(email):
            return False
        stmt = select(exists().where(User.email_normalized == normalize_email(email)))
        return bool(await self.session.scalar(stmt))

    # ── Internal helpers ──────────────────────

    async def _email_taken_by_other(self, email: str, user_id: int) -> bool:
        stmt = select(
            exists().where(
                User.email_normalized == normalize_email(email),
                User.id != user_id,
            )
        )
        return bool(await self.session.scalar(stmt))

    def _validate_fields(self, user: User) -> None:
        for name, max_length in (
            ("first_name", NAME_MAX_LENGTH),
            ("last_name", NAME_MAX_LENGTH),
            ("email", EMAIL_MAX_LENGTH),
        ):
            value = getattr(user, name)
            if not isinstance(value, str) or _is_blank(value):
                raise InvalidArgumentError(
                    f"{name} is required", argument=name, entity=self.entity_name
                )
            if len(value) > max_length:
                raise InvalidArgumentError(
                    f"{name} exceeds {max_length} characters",
                    argument=name,
                    entity=self.entity_name,
                )
