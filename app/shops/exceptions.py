"""
Shop-specific exceptions for Shopify operations.

Exception Hierarchy:
    ShopError (base for the shops domain)
    ├── InvalidShopDomain - Malformed shop identifier (ValidationError)
    ├── NotAuthenticated - No stored session for the shop (PermissionDeniedError)
    └── UpstreamError - Shopify call failed (ExternalServiceError)
        └── OrderNotFound - Order or status page missing (NotFoundError)

Each class also inherits the matching core exception so views can map
responses on the generic category (validation, permission, external)
without knowing about Shopify.

Usage:
    from shops.exceptions import NotAuthenticated, UpstreamError

    try:
        order = ShopifyAdapter.get_order(shop, order_id)
    except OrderNotFound:
        ...
    except UpstreamError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


class ShopError(BaseApplicationError):
    """Base exception for all shop operations."""

    default_error_code: str = "SHOP_ERROR"


class InvalidShopDomain(ShopError, ValidationError):
    """
    Raised when a shop identifier is missing or malformed.

    Example:
        raise InvalidShopDomain(
            "Invalid shop domain",
            details={"shop": "not a domain"}
        )
    """

    default_error_code: str = "INVALID_SHOP"


class NotAuthenticated(ShopError, PermissionDeniedError):
    """
    Raised when no session is stored for the requested shop.

    This is an onboarding/configuration problem: the shop never installed
    the app, or its session was removed.
    """

    default_error_code: str = "NOT_AUTHENTICATED"


class UpstreamError(ShopError, ExternalServiceError):
    """
    Raised when a Shopify API call fails.

    Provides common attributes for Shopify error handling:
    - status_code: HTTP status returned by Shopify (None for network errors)
    - is_retryable: Whether the same call could succeed later

    Callers never retry automatically; is_retryable is informational
    and logged.
    """

    default_error_code: str = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        is_retryable: bool = False,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code
        self.is_retryable = is_retryable


class OrderNotFound(UpstreamError, NotFoundError):
    """
    Raised when Shopify has no such order, or no status page for it.

    Example:
        raise OrderNotFound(
            f"Order {order_id} not found",
            status_code=404,
            details={"order_id": order_id}
        )
    """

    default_error_code: str = "ORDER_NOT_FOUND"


__all__ = [
    "ShopError",
    "InvalidShopDomain",
    "NotAuthenticated",
    "UpstreamError",
    "OrderNotFound",
]
