"""Pagination for list endpoints.

Every paginated route reads `page` and `limit` from the query string through
resolve_pagination() and answers with the same envelope:

    {"data": [...], "pagination": {"page", "limit", "total", "totalPages"}}

Malformed values fall back to the defaults rather than failing the request;
out-of-range values are clamped. The public API stays permissive, and every
endpoint applies the same policy.
"""

import math
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Sequence, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Keeps skip within a signed 64-bit OFFSET for any limit.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT + 1

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)


def _to_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def resolve_pagination(raw: Mapping[str, Any]) -> Pagination:
    """Parse `page`/`limit` from raw query parameters into bounded integers."""
    page = min(MAX_PAGE, max(1, _to_int(raw.get("page"), DEFAULT_PAGE)))
    limit = min(MAX_LIMIT, max(1, _to_int(raw.get("limit"), DEFAULT_LIMIT)))
    return Pagination(page=page, limit=limit)


def get_pagination(request: Request) -> Pagination:
    """FastAPI dependency."""
    return resolve_pagination(request.query_params)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)


class Page(BaseModel, Generic[T]):
    """Response envelope for paginated lists."""

    data: list[T]
    pagination: PaginationMeta


def paginate(items: Sequence[Any], total: int, pagination: Pagination) -> dict:
    """Build the envelope for a page of results."""
    return {
        "data": list(items),
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "total": total,
            "total_pages": pagination.total_pages(total),
        },
    }
