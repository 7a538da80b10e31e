"""
Per-route request limiting.

Counters are kept by ``limits`` in process memory, one fixed window per
key.  The key is ``<user id or "anonymous">:<method>:<url>`` so each
user gets a separate budget for every endpoint.  Use ``rate_limit()``
as a route dependency *after* ``get_current_user`` so the subject is
known.
"""

import logging
from typing import Callable, Dict, Optional

from fastapi import Depends, Request, status
from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from .config import settings
from .i18n import translate
from .responses import ApiError, ErrorCode
from .security import get_current_user

logger = logging.getLogger(__name__)

storage = MemoryStorage()
limiter = FixedWindowRateLimiter(storage)


def general_api_rate_limit() -> RateLimitItem:
    return RateLimitItemPerSecond(settings.rate_limit_max, settings.rate_limit_window_seconds)


def rate_limit(options: Optional[RateLimitItem] = None) -> Callable[[Request], None]:
    """Dependency factory enforcing ``options`` (default: the general API limit)."""

    def _rate_limit_dependency(request: Request) -> None:
        user = getattr(request.state, "user", None) or {}
        user_id = user.get("sub") or "anonymous"
        key = f"{user_id}:{request.method}:{request.url}"
        if not limiter.hit(options or general_api_rate_limit(), key):
            logger.warning("Rate limit exceeded for user: %s", user_id)
            raise ApiError(
                status.HTTP_429_TOO_MANY_REQUESTS,
                translate(request, "rate_limit_exceeded"),
                ErrorCode.RATE_LIMIT_EXCEEDED,
            )

    return _rate_limit_dependency


def authenticated_user(options: Optional[RateLimitItem] = None) -> Callable[..., Dict]:
    """Dependency factory: validate the access token, then apply the rate limit.

    Use via ``Depends(authenticated_user())``; the token claims are
    returned to the endpoint.
    """
    check = rate_limit(options)

    def _authenticated_dependency(request: Request, current_user: Dict = Depends(get_current_user)) -> Dict:
        check(request)
        return current_user

    return _authenticated_dependency
