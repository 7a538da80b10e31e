"""
Pydantic models for Stripe Checkout orders.

Amounts are in the currency's minor unit, as reported by Stripe.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class CheckoutSessionCreate(CamelModel):
    price_id: Optional[str] = Field(None, examples=["price_1QATNvRr4aL1KjAOIPYp5Yxo"])
    success_url: Optional[str] = Field(None, examples=["https://aiia.cc/payment/success"])
    cancel_url: Optional[str] = Field(None, examples=["https://aiia.cc/payment/cancel"])


class CheckoutSessionRead(CamelModel):
    session_id: str
    session_url: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None


class CheckoutSessionConfirm(CamelModel):
    session_id: Optional[str] = None


class CheckoutConfirmation(CamelModel):
    message: str
    order_id: str
    credits: int
    total_credits: int


class OrderRead(CamelModel):
    id: str
    user_id: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    status: str = Field("pending", examples=["pending"])
    stripe_session_id: str
    price_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
