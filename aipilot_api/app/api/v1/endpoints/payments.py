"""
Stripe Checkout endpoints for API v1.

Buying credits is a two step flow: the client opens a Checkout session
with ``create-checkout-session`` and redirects the user to Stripe; once
Stripe redirects back to ``successUrl`` the client calls
``confirm-checkout-session`` which grants the purchased credits.
"""

import logging
from typing import Dict

import stripe
from fastapi import APIRouter, Depends, Request, status

from aipilot_api.app.core.i18n import translate
from aipilot_api.app.core.rate_limit import authenticated_user
from aipilot_api.app.core.responses import ApiError, ErrorCode, success
from aipilot_api.app.schemas.payment import (
    CheckoutConfirmation,
    CheckoutSessionConfirm,
    CheckoutSessionCreate,
)
from aipilot_api.app.services.exceptions import (
    OrderAlreadyCompletedError,
    OrderNotFoundError,
    PaymentIncompleteError,
    UserNotFoundError,
)
from aipilot_api.app.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutSessionCreate,
    request: Request,
    current_user: Dict = Depends(authenticated_user()),
):
    """Open a Stripe Checkout session for ``priceId``."""
    if not body.price_id or not body.success_url or not body.cancel_url:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_parameters"), ErrorCode.INVALID_INPUT)
    try:
        session = await PaymentService.create_checkout_session(
            current_user["sub"], body.price_id, body.success_url, body.cancel_url
        )
    except stripe.InvalidRequestError as e:
        logger.warning("Stripe rejected checkout session for price %s: %s", body.price_id, e.user_message or e)
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.user_message or str(e), ErrorCode.INVALID_INPUT)
    return success(session)


@router.post("/confirm-checkout-session")
async def confirm_checkout_session(
    body: CheckoutSessionConfirm,
    request: Request,
    current_user: Dict = Depends(authenticated_user()),
):
    """Grant the credits of a paid Checkout session."""
    if not body.session_id:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_parameters"), ErrorCode.INVALID_INPUT)
    try:
        order, credits, user = await PaymentService.confirm_checkout_session(current_user["sub"], body.session_id)
    except stripe.InvalidRequestError as e:
        logger.warning("Stripe rejected session %s: %s", body.session_id, e)
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "stripe_invalid_request"), ErrorCode.INVALID_INPUT)
    except PaymentIncompleteError:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "payment_incomplete"), ErrorCode.PAYMENT_FAILED)
    except PermissionError:
        raise ApiError(status.HTTP_403_FORBIDDEN, translate(request, "unauthorized_access"), ErrorCode.FORBIDDEN)
    except OrderNotFoundError:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "order_not_found"), ErrorCode.ORDER_NOT_FOUND)
    except UserNotFoundError:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "user_not_found"), ErrorCode.USER_NOT_FOUND)
    except OrderAlreadyCompletedError:
        raise ApiError(
            status.HTTP_409_CONFLICT,
            translate(request, "order_already_completed"),
            ErrorCode.ORDER_ALREADY_COMPLETED,
        )
    return success(
        CheckoutConfirmation(
            message=translate(request, "payment_confirmed"),
            order_id=order.id,
            credits=credits,
            total_credits=user.credits,
        )
    )
