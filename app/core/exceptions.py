"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ExternalServiceError - Third-party service failures

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Invalid shop domain")

    # Raise with error code for client handling
    raise ValidationError("Quantity must be positive", error_code="INVALID_QUANTITY")

    # Raise with additional details
    raise ValidationError(
        "Validation failed",
        error_code="VALIDATION_ERROR",
        details={"variant_id": ["Required"], "quantity": ["Must be an integer"]}
    )

    # Convert to dict for logging or a JSON response
    try:
        ...
    except BaseApplicationError as e:
        logger.warning("Request rejected", extra=e.to_dict())

Note:
    These exceptions are for domain/business logic errors.
    DRF serializers handle field-level request validation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)

    Example:
        try:
            order = ShopifyAdapter.get_order(shop, order_id)
        except NotFoundError as e:
            logger.warning(f"Order not found: {e.error_code}")
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Order not found",
                "error_code": "ORDER_NOT_FOUND",
                "details": {"order_id": "123"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Invalid field formats (shop domain, amounts, etc.)
    - Missing required fields
    - Business rule violations

    Example:
        raise ValidationError(
            "Validation failed",
            error_code="VALIDATION_ERROR",
            details={"quantity": ["Must be a positive integer"]}
        )

    Note:
        For request parsing, use DRF serializer validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for:
    - Database record not found
    - External resource not found (e.g. a Shopify order)

    Example:
        raise NotFoundError(
            f"Order {order_id} not found",
            error_code="ORDER_NOT_FOUND",
            details={"order_id": order_id}
        )
    """

    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller lacks permission for an operation.

    Use for:
    - Missing credentials for a tenant
    - Unauthorized resource access

    Example:
        if session is None:
            raise PermissionDeniedError(
                "Shop is not authenticated",
                error_code="NOT_AUTHENTICATED",
                details={"shop": shop}
            )
    """

    default_error_code: str = "PERMISSION_DENIED"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Third-party API failures (Shopify, Fygaro)
    - Network timeouts
    - Unexpected external service responses

    Example:
        try:
            session.post(url, json=payload, timeout=timeout)
        except requests.RequestException as e:
            raise ExternalServiceError(
                "Order platform unavailable",
                error_code="SHOPIFY_ERROR",
                details={"service": "shopify", "original_error": str(e)}
            )

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
