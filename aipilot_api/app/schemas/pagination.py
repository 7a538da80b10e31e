"""
Pagination parameters and metadata.

``parse_pagination_params`` is lenient: anything that does not parse
as an integer falls back to the default instead of failing the
request.
"""

import math
from typing import Optional

from .base import CamelModel

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PaginationParams(CamelModel):
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationResult(CamelModel):
    current_page: int
    total_pages: int
    page_size: int
    total_items: int


def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def parse_pagination_params(page: Optional[str] = None, limit: Optional[str] = None) -> PaginationParams:
    """Clamp ``page`` to >= 1 and ``limit`` to 1..100."""
    return PaginationParams(
        page=max(1, _to_int(page, 1)),
        limit=min(MAX_PAGE_SIZE, max(1, _to_int(limit, DEFAULT_PAGE_SIZE))),
    )


def calculate_pagination(total_items: int, params: PaginationParams) -> PaginationResult:
    return PaginationResult(
        current_page=params.page,
        total_pages=math.ceil(total_items / params.limit),
        page_size=params.limit,
        total_items=total_items,
    )
