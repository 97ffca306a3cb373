"""
Shared schema pieces: status enums, pagination and patch helpers.
"""

import math
from enum import Enum
from typing import Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ProjectStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class ServiceTypeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaginationMeta(BaseModel):
    page: int = Field(..., examples=[1])
    page_size: int = Field(..., examples=[10])
    total: int = Field(..., examples=[42])
    total_pages: int = Field(..., examples=[5])


class Page(BaseModel, Generic[T]):
    """A page of results with its pagination metadata."""

    data: List[T]
    meta: PaginationMeta


def build_page(items: List[Any], page: int, page_size: int, total: int) -> Dict[str, Any]:
    """Assemble the ``{"data", "meta"}`` response body for a listing."""
    total_pages = math.ceil(total / page_size) if total else 0
    return {
        "data": items,
        "meta": {
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": total_pages,
        },
    }


def changed_fields(update: BaseModel) -> Dict[str, Any]:
    """Fields explicitly present in a patch payload.

    Omitted fields and explicit ``null`` values are both treated as
    "leave unchanged".  Falsy values such as ``0`` or ``False`` are kept.
    """
    data = update.model_dump(exclude_unset=True, mode="json")
    return {key: value for key, value in data.items() if value is not None}
