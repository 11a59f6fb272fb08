"""
Models package — re-exports Base and all models.

Import models here so `Base.metadata` picks up every table automatically.

When adding a new model:
    1. Create `dataaccess/db/models/<table_name>.py`
    2. Import it here
"""

from dataaccess.db.models.base import Base
from dataaccess.db.models.order import Order
from dataaccess.db.models.user import User

__all__ = [
    "Base",
    "Order",
    "User",
]
