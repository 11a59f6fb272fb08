"""
Seed demo users and orders for development.
Run: python -m scripts.seed_demo  (from backend/)
"""

import asyncio
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from dataaccess.core.logging import get_logger, setup_logging
from dataaccess.db.models import Order, User
from dataaccess.db.session import init_models, session_scope
from dataaccess.repositories import OrderRepository, UserRepository

logger = get_logger(__name__)


SEED_USERS = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john@example.com",
        "orders": [
            {"product": "Keyboard", "quantity": 1, "price": Decimal("49.99")},
            {"product": "USB-C Cable", "quantity": 3, "price": Decimal("9.50")},
        ],
    },
    {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane@example.com",
        "orders": [
            {"product": "Monitor", "quantity": 2, "price": Decimal("189.00")},
        ],
    },
    {
        "first_name": "Sam",
        "last_name": "Lee",
        "email": "sam@example.com",
        "orders": [],
    },
]


async def seed(session: AsyncSession) -> list[User]:
    """Insert seed users and their orders, skipping emails already present."""
    users = UserRepository(session)
    orders = OrderRepository(session)

    created: list[User] = []
    for data in SEED_USERS:
        if await users.email_exists(data["email"]):
            logger.info("Seed user already present", email=data["email"])
            continue

        user = await users.add(
            User(
                first_name=data["first_name"],
                last_name=data["last_name"],
                email=data["email"],
            )
        )
        for line in data["orders"]:
            await orders.add(Order(user_id=user.id, **line))
        created.append(user)
        logger.info("Seeded user", email=user.email, orders=len(data["orders"]))

    return created


async def main() -> None:
    setup_logging()
    await init_models()
    async with session_scope() as session:
        created = await seed(session)
    logger.info("Seeding finished", users=len(created))


if __name__ == "__main__":
    asyncio.run(main())
