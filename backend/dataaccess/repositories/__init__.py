"""
Repositories package — data-access layer.

Each repository file handles all DB operations for one domain entity.
Repositories do NOT handle transport concerns or business logic beyond
basic data integrity (argument checks, email uniqueness, user references).

Convention:
    - One file per aggregate (users.py, orders.py)
    - Every repository takes an `AsyncSession` in its constructor
    - Use `flush()` internally; the session commit/rollback is handled
      by `dataaccess.db.session.session_scope`
"""

from dataaccess.repositories.base import AbstractOrderRepository, AbstractUserRepository
from dataaccess.repositories.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    RepositoryError,
)
from dataaccess.repositories.orders import OrderRepository
from dataaccess.repositories.users import UserRepository

__all__ = [
    "AbstractOrderRepository",
    "AbstractUserRepository",
    "ConflictError",
    "InvalidArgumentError",
    "NotFoundError",
    "OrderRepository",
    "RepositoryError",
    "UserRepository",
]
