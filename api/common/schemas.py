"""
This module defines common Pydantic models used across the API modules.
These models represent the shared response envelope and pagination shapes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypeVar, Generic, List, Any, Dict

from pydantic import BaseModel, field_validator

ADMIN_ROLE = "admin"
WHOLESALE_ROLE = "wholesale"
CUSTOMER_ROLE = "customer"


class TimestampMixin:
    """
    A mixin that adds created and updated timestamp fields to models.
    Firestore hands back datetimes; cached or client-sent values arrive as ISO strings.
    """
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @field_validator('createdAt', 'updatedAt', mode='before')
    @classmethod
    def parse_datetime(cls, value):
        """Accept datetimes, Firestore timestamps and ISO-8601 strings."""
        if value is None or isinstance(value, datetime):
            return value

        # Firestore DatetimeWithNanoseconds and friends
        if hasattr(value, 'timestamp') and not isinstance(value, str):
            return datetime.fromtimestamp(value.timestamp())

        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                try:
                    return datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
                except ValueError:
                    pass

        # Let Pydantic report anything we could not parse
        return value


class JSendStatus(str, Enum):
    """
    JSend status values.
    """
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


T = TypeVar('T')


class PaginationResponse(BaseModel, Generic[T]):
    """
    A generic model for paginated responses.
    """
    items: List[T]
    total: int
    page: int
    size: int
    pages: int


class JSendResponse(BaseModel, Generic[T]):
    """
    Base JSend response format as per https://github.com/omniti-labs/jsend
    """
    status: JSendStatus
    data: Optional[T] = None
    message: Optional[str] = None
    code: Optional[int] = None  # For error responses

    @classmethod
    def success(cls, data: Any = None) -> 'JSendResponse':
        """Create a success response with data"""
        return cls(status=JSendStatus.SUCCESS, data=data)

    @classmethod
    def fail(cls, data: Dict[str, Any]) -> 'JSendResponse':
        """Create a fail response with validation errors or other data-related failures"""
        return cls(status=JSendStatus.FAIL, data=data)

    @classmethod
    def error(cls, message: str, code: Optional[int] = None, data: Any = None) -> 'JSendResponse':
        """Create an error response for system or unexpected errors"""
        return cls(status=JSendStatus.ERROR, message=message, code=code, data=data)


def paginate(items: List[Any], page: int, size: int) -> Dict[str, Any]:
    """
    Slice an in-memory list into the fields of a PaginationResponse.

    Args:
        items: Full, already ordered result list
        page: Page number (starts at 1)
        size: Items per page

    Returns:
        dict with items, total, page, size and pages
    """
    total = len(items)
    start_index = (page - 1) * size
    pages = (total + size - 1) // size if size > 0 else 0
    return {
        "items": items[start_index:start_index + size],
        "total": total,
        "page": page,
        "size": size,
        "pages": pages,
    }
