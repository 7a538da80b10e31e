"""
Stripe Checkout integration.

``create_checkout_session`` opens a one-item Checkout session for a
price and records a pending order.  ``confirm_checkout_session`` checks
with Stripe that the session is paid and belongs to the caller, then
completes the order and grants the credits configured for its price.

Stripe calls are blocking, so they run in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, List, Tuple

import stripe

from ..core.config import settings
from ..schemas.payment import CheckoutSessionRead, OrderRead
from ..schemas.user import UserRecord
from .exceptions import OrderAlreadyCompletedError, OrderNotFoundError, PaymentIncompleteError
from .order_service import OrderService
from .user_service import UserService

logger = logging.getLogger(__name__)

WECHAT_PAY_SUPPORTED_CURRENCIES = {
    "aud", "cny", "cad", "chf", "eur", "dkk", "nok",
    "sek", "gbp", "hkd", "jpy", "sgd", "usd",
}


def is_wechat_pay_supported(currency: str) -> bool:
    return currency.lower() in WECHAT_PAY_SUPPORTED_CURRENCIES


def payment_methods_for(currency: str) -> Tuple[List[str], Dict[str, Any]]:
    """Return ``(payment_method_types, payment_method_options)`` for a currency."""
    types = ["card", "alipay"]
    options: Dict[str, Any] = {}
    if is_wechat_pay_supported(currency):
        types.append("wechat_pay")
        options["wechat_pay"] = {"client": "web"}
    return types, options


class PaymentService:
    """Creates and confirms Stripe Checkout sessions."""

    @staticmethod
    def _configure() -> None:
        stripe.api_key = settings.stripe_secret_key
        stripe.api_version = settings.stripe_api_version

    @classmethod
    def _retrieve_price(cls, price_id: str) -> Any:
        cls._configure()
        return stripe.Price.retrieve(price_id)

    @classmethod
    def _create_session(cls, params: Dict[str, Any]) -> Any:
        cls._configure()
        return stripe.checkout.Session.create(**params)

    @classmethod
    def _retrieve_session(cls, session_id: str) -> Any:
        cls._configure()
        return stripe.checkout.Session.retrieve(session_id)

    @classmethod
    async def create_checkout_session(
        cls,
        user_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionRead:
        """Open a Checkout session and store a pending order.

        ``stripe.InvalidRequestError`` (unknown price, bad URL, ...)
        propagates to the caller.
        """
        price = await asyncio.to_thread(cls._retrieve_price, price_id)
        method_types, method_options = payment_methods_for(price.currency)
        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": method_types,
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": user_id,
        }
        if method_options:
            params["payment_method_options"] = method_options
        session = await asyncio.to_thread(cls._create_session, params)
        logger.info("Created checkout session %s for user %s, price %s", session.id, user_id, price_id)

        await OrderService.create_checkout_order(
            user_id=user_id,
            amount=session.amount_total,
            currency=session.currency,
            stripe_session_id=session.id,
            price_id=price_id,
        )
        return CheckoutSessionRead(
            session_id=session.id,
            session_url=session.url,
            amount=session.amount_total,
            currency=session.currency,
        )

    @staticmethod
    def credits_for_price(price_id: str) -> int:
        return settings.price_credits.get(price_id, 0)

    @classmethod
    async def confirm_checkout_session(cls, user_id: str, session_id: str) -> Tuple[OrderRead, int, UserRecord]:
        """Complete a paid session and grant its credits.

        Returns ``(order, credits_granted, updated_user)``.

        Raises
        ------
        PaymentIncompleteError
            Stripe does not report the session as paid.
        PermissionError
            The session was opened by another user.
        OrderNotFoundError
            No order was recorded for this user and session.
        OrderAlreadyCompletedError
            The credits for this order were already granted.
        """
        session = await asyncio.to_thread(cls._retrieve_session, session_id)
        if session.payment_status != "paid":
            raise PaymentIncompleteError(session_id)
        if session.client_reference_id != user_id:
            logger.warning("User %s tried to confirm session %s of %s", user_id, session_id, session.client_reference_id)
            raise PermissionError(session_id)

        order = await OrderService.get_order_by_user_session_id(user_id, session_id)
        if not order:
            raise OrderNotFoundError(session_id)
        credits = cls.credits_for_price(order.price_id or "")
        if credits == 0:
            logger.warning("No credit mapping for price %s (order %s)", order.price_id, order.id)
        if not await OrderService.complete_order(order.id, user_id, credits):
            raise OrderAlreadyCompletedError(order.id)
        user = await UserService.get_user_by_id(user_id)
        return order.model_copy(update={"status": "completed"}), credits, user
