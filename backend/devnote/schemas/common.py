"""
DevNote Backend - Shared Response Schemas
=========================================

What:  Paging envelope, error body, health payload and the UTC timestamp
       type shared by all routes.
"""

import math
from datetime import datetime, timezone
from typing import Annotated, Generic, List, Optional, Sequence, TypeVar

from pydantic import AfterValidator, BaseModel, Field

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; stored times are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Timestamps in responses always carry an explicit UTC offset ("...Z")
UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class Page(BaseModel, Generic[T]):
    """
    One page of a list endpoint.

    `current_page` is 1-based, matching the `page` query parameter.

    Example:
        {
            "content": [...],
            "total_elements": 42,
            "total_pages": 9,
            "current_page": 2,
            "has_next": true,
            "has_previous": true
        }
    """

    content: List[T] = Field(description="Items on this page")
    total_elements: int = Field(description="Items across all pages")
    total_pages: int = Field(description="Number of pages at this page size")
    current_page: int = Field(description="1-based index of this page")
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, items: Sequence[T], total: int, page: int, size: int) -> "Page[T]":
        total_pages = math.ceil(total / size) if size else 0
        return cls(
            content=list(items),
            total_elements=total,
            total_pages=total_pages,
            current_page=page,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class ErrorResponse(BaseModel):
    """
    Error body returned by every global exception handler.

    Example:
        {
            "error": "forbidden",
            "message": "favorites list is private",
            "details": {"resource": "favorites", "username": "alice"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
