"""Pydantic models and enums for the ShopScope admin API."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ProductStatus(str, Enum):
    ACTIVE = "active"
    PUBLISHED = "published"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"
    DRAFT = "draft"
    ARCHIVED = "archived"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    MODERATOR = "moderator"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


# Keys a list payload has been seen to nest its records under.
RECORD_LIST_KEYS: tuple[str, ...] = (
    "data", "products", "orders", "users", "results", "items",
)


def extract_records(data: Any) -> list[dict[str, Any]]:
    """Pull the record list out of whatever shape ``data`` came back in."""
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if not isinstance(data, dict):
        return []
    for key in RECORD_LIST_KEYS:
        if isinstance(data.get(key), list):
            return [r for r in data[key] if isinstance(r, dict)]
    for value in data.values():
        if isinstance(value, list):
            return [r for r in value if isinstance(r, dict)]
    if "id" in data or "_id" in data:
        return [data]
    return []


def error_message(payload: Any, default: str) -> str:
    """Best human-readable error out of an API payload."""
    if not isinstance(payload, dict):
        return default
    err = payload.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str) and err:
        return err
    if payload.get("message"):
        return str(payload["message"])
    return default


class Pagination(BaseModel):
    """Server-side pagination block of a list response."""
    page: int = 1
    limit: int = 0
    total: int = 0
    pages: int = 1


def _pagination(payload: dict[str, Any], page_limit: int) -> Pagination | None:
    raw = payload.get("pagination")
    if isinstance(raw, dict):
        return Pagination.model_validate(raw)
    if isinstance(payload.get("total"), int):
        total = payload["total"]
        return Pagination(
            page=int(payload.get("page", 1) or 1),
            limit=page_limit,
            total=total,
            pages=max(1, math.ceil(total / page_limit)),
        )
    return None


class FetchResponse(BaseModel):
    """Envelope of a collection fetch."""
    success: bool
    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination | None = None
    error: str | None = None

    @classmethod
    def from_payload(cls, payload: Any, limit: int = 0) -> FetchResponse:
        if not isinstance(payload, dict):
            return cls(success=False, error="Unexpected response from server")
        if not payload.get("success", False):
            return cls(success=False, error=error_message(payload, "Request failed"))

        records = extract_records(payload.get("data"))
        try:
            pagination = _pagination(payload, limit or len(records) or 1)
        except (ValidationError, ValueError, TypeError) as exc:
            logger.warning("Malformed pagination in list response: %s", exc)
            return cls.failure("Unexpected response from server")
        return cls(success=True, data=records, pagination=pagination)

    @classmethod
    def failure(cls, message: str) -> FetchResponse:
        return cls(success=False, error=message)


class MutationResponse(BaseModel):
    """Envelope of a single-record update or delete."""
    success: bool
    error: str | None = None
    data: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> MutationResponse:
        if not isinstance(payload, dict):
            return cls(success=False, error="Unexpected response from server")
        if not payload.get("success", False):
            return cls(success=False, error=error_message(payload, "Request failed"))
        data = payload.get("data")
        return cls(success=True, data=data if isinstance(data, dict) else None)
