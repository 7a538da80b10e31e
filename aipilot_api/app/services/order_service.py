"""
Business logic for checkout orders.

An order is created in ``pending`` state when a Stripe Checkout
session is opened and moves to ``completed`` once the session is
confirmed as paid.  ``complete_order`` only transitions orders that
are not yet completed and grants the credits in the same transaction,
so credits are granted at most once per order.
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..core.db import get_connection
from ..schemas.payment import OrderRead
from .exceptions import UserNotFoundError

logger = logging.getLogger(__name__)

ORDER_STATUSES = {"pending", "completed", "failed"}

_ORDER_COLUMNS = "id, user_id, amount, currency, status, stripe_session_id, price_id, created_at, updated_at"


def _row_to_order(row: sqlite3.Row) -> OrderRead:
    return OrderRead(
        id=row["id"],
        user_id=row["user_id"],
        amount=row["amount"],
        currency=row["currency"],
        status=row["status"],
        stripe_session_id=row["stripe_session_id"],
        price_id=row["price_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class OrderService:
    """Persistence of Stripe Checkout orders."""

    @classmethod
    async def create_checkout_order(
        cls,
        user_id: str,
        amount: Optional[int],
        currency: Optional[str],
        stripe_session_id: str,
        price_id: str,
        status: str = "pending",
    ) -> OrderRead:
        if status not in ORDER_STATUSES:
            raise ValueError(f"Unknown order status: {status}")
        now = datetime.now(timezone.utc).isoformat()
        order_id = str(uuid.uuid4())
        conn = get_connection()
        try:
            conn.execute(
                f"INSERT INTO orders ({_ORDER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (order_id, user_id, amount, currency, status, stripe_session_id, price_id, now, now),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Created order %s for user %s (session %s)", order_id, user_id, stripe_session_id)
        return OrderRead(
            id=order_id,
            user_id=user_id,
            amount=amount,
            currency=currency,
            status=status,
            stripe_session_id=stripe_session_id,
            price_id=price_id,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    async def get_order_by_user_session_id(cls, user_id: str, session_id: str) -> Optional[OrderRead]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {_ORDER_COLUMNS} FROM orders WHERE user_id = ? AND stripe_session_id = ?",
                (user_id, session_id),
            ).fetchone()
            return _row_to_order(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def complete_order(cls, order_id: str, user_id: str, credits: int) -> bool:
        """Mark the order completed and add ``credits`` to its owner.

        Both updates share one transaction.  Returns ``False`` and
        changes nothing if the order was already completed; raises
        ``UserNotFoundError`` (and changes nothing) if the owner is gone.
        """
        now = datetime.now(timezone.utc).isoformat()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE orders SET status = 'completed', updated_at = ? WHERE id = ? AND status != 'completed'",
                (now, order_id),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False
            cursor.execute("UPDATE users SET credits = credits + ? WHERE id = ?", (credits, user_id))
            if cursor.rowcount == 0:
                raise UserNotFoundError(user_id)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Order %s completed, %s credits added to user %s", order_id, credits, user_id)
        return True
