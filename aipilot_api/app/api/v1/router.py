"""
Top-level router for version 1 of the API.

The public paths are flat (``/api/v1/userLogin``,
``/api/v1/startInterview``, ...) because existing clients call them
that way, so the domain routers are included without a prefix.
"""

from fastapi import APIRouter

from .endpoints import ai, cv, interviews, payments, users

router = APIRouter()

router.include_router(users.router, tags=["users"])
router.include_router(interviews.router, tags=["interviews"])
router.include_router(ai.router, tags=["ai"])
router.include_router(cv.router, tags=["cv"])
router.include_router(payments.router, tags=["payments"])
