"""
Shopify Admin API adapter for order operations.

This module provides the ShopifyAdapter class which encapsulates all
Shopify API interactions. All order platform calls should go through this
adapter to ensure consistent error handling, timeouts, per-shop session
lookup, and observability.

Features:
- Per-shop session resolution through the configured SessionStore
- Configurable timeouts on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics

Configuration (via settings):
- SHOPIFY_API_VERSION: Admin API version (default: 2026-01)
- SHOPIFY_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- PAYMENT_GATEWAY_NAME: Gateway recorded on transactions (default: fygaro)

Usage:
    from shops.adapters import OrderDraft, ShopifyAdapter

    order = ShopifyAdapter.create_order(
        "example.myshopify.com",
        OrderDraft(
            line_items=[{"variant_id": 4455, "quantity": 1}],
            email="buyer@example.com",
        ),
    )

    ShopifyAdapter.record_paid_transaction(
        "example.myshopify.com", order.id, "65.00", "USD"
    )

Note:
    None of these calls retry. record_paid_transaction is not idempotent:
    callers must check the order is still pending right before calling it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests
from django.conf import settings

from shops.exceptions import NotAuthenticated, OrderNotFound, UpstreamError
from shops.sessions import get_session_store, normalize_shop_domain

if TYPE_CHECKING:
    from shops.sessions import ShopSessionData


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class OrderAddress:
    """
    Shipping or billing address for a new order.

    Empty fields are left out of the request so Shopify does not store
    blank strings.
    """

    first_name: str | None = None
    last_name: str | None = None
    address1: str | None = None
    city: str | None = None
    zip: str | None = None
    country: str | None = None
    phone: str | None = None

    def to_payload(self) -> dict[str, str]:
        return {key: value for key, value in self.__dict__.items() if value}

    def is_empty(self) -> bool:
        return not self.to_payload()


@dataclass
class OrderDraft:
    """
    Parameters for creating a pending Shopify order.

    Attributes:
        line_items: Shopify line items (at least variant_id and quantity)
        email: Buyer email
        shipping_address: Shipping address (optional)
        billing_address: Billing address (optional)
        note: Order note shown to staff (optional)
        customer_id: Existing Shopify customer to attach (optional)
    """

    line_items: list[dict[str, Any]]
    email: str | None = None
    shipping_address: OrderAddress = field(default_factory=OrderAddress)
    billing_address: OrderAddress = field(default_factory=OrderAddress)
    note: str | None = None
    customer_id: int | None = None

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.line_items:
            raise ValueError("line_items must not be empty")

    def to_payload(self) -> dict[str, Any]:
        """Build the REST body for POST orders.json."""
        order: dict[str, Any] = {
            "line_items": self.line_items,
            "financial_status": "pending",
        }
        if self.email:
            order["email"] = self.email
        if not self.shipping_address.is_empty():
            order["shipping_address"] = self.shipping_address.to_payload()
        if not self.billing_address.is_empty():
            order["billing_address"] = self.billing_address.to_payload()
        if self.note:
            order["note"] = self.note
        if self.customer_id is not None:
            order["customer"] = {"id": self.customer_id}
        return {"order": order}


@dataclass
class ShopifyOrder:
    """
    Order as returned by the Shopify REST API.

    Attributes:
        id: Order ID as a string (Shopify returns an integer)
        name: Human readable order name (e.g. "#1001")
        total_price: Order total, two-decimal string (e.g. "50.00")
        currency: ISO 4217 currency code
        financial_status: Raw Shopify financial status ("pending", "paid", ...)
        email: Buyer email
        note: Order note
        raw_response: Full order dict (for debugging)
    """

    id: str
    total_price: str
    currency: str
    financial_status: str
    name: str = ""
    email: str | None = None
    note: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> ShopifyOrder:
        return cls(
            id=str(data["id"]),
            total_price=str(data["total_price"]),
            currency=data["currency"],
            financial_status=data.get("financial_status") or "",
            name=data.get("name") or "",
            email=data.get("email"),
            note=data.get("note"),
            raw_response=data,
        )


STATUS_PAGE_QUERY = """
query getOrderStatusPage($id: ID!) {
  order(id: $id) {
    statusPageUrl
  }
}
"""


def order_gid(order_id: str) -> str:
    """Return the GraphQL global ID for a REST order ID."""
    return f"gid://shopify/Order/{order_id}"


# =============================================================================
# Shopify Adapter
# =============================================================================


class ShopifyAdapter:
    """
    Adapter for Shopify Admin API operations.

    All methods are class methods - no instance state is maintained.
    Every call resolves the shop's session first and fails with
    NotAuthenticated if none is stored.

    Usage:
        order = ShopifyAdapter.get_order(shop, "450789469")
        url = ShopifyAdapter.resolve_status_page_url(shop, "450789469")
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _timeout() -> int:
        return getattr(settings, "SHOPIFY_API_TIMEOUT_SECONDS", 10)

    @staticmethod
    def _base_url(shop: str) -> str:
        return f"https://{shop}/admin/api/{settings.SHOPIFY_API_VERSION}"

    @classmethod
    def get_session(cls, shop: str) -> ShopSessionData:
        """
        Load the stored session for a shop.

        Args:
            shop: Shop domain (normalized before lookup)

        Returns:
            The shop's session

        Raises:
            InvalidShopDomain: Shop identifier is malformed
            NotAuthenticated: No session stored for the shop
        """
        shop = normalize_shop_domain(shop)
        session = get_session_store().load(shop)
        if session is None:
            cls.get_logger().warning(
                "No session stored for shop",
                extra={"shop": shop},
            )
            raise NotAuthenticated(
                "Shop not authenticated",
                details={"shop": shop},
            )
        return session

    # =========================================================================
    # Core Operations
    # =========================================================================

    @classmethod
    def create_order(cls, shop: str, draft: OrderDraft) -> ShopifyOrder:
        """
        Create an order with financial_status "pending".

        Args:
            shop: Shop domain
            draft: Order contents

        Returns:
            ShopifyOrder for the created order

        Raises:
            NotAuthenticated: No session for the shop
            UpstreamError: Shopify rejected the order or was unreachable
        """
        data = cls._request(
            shop,
            "POST",
            "orders.json",
            operation="create_order",
            json=draft.to_payload(),
            log_extra={"line_item_count": len(draft.line_items)},
        )
        order = cls._parse_order(data, "create_order")

        cls.get_logger().info(
            "Created pending order",
            extra={
                "shop": shop,
                "order_id": order.id,
                "order_name": order.name,
                "total_price": order.total_price,
                "currency": order.currency,
            },
        )
        return order

    @classmethod
    def get_order(cls, shop: str, order_id: str) -> ShopifyOrder:
        """
        Fetch an order by REST ID.

        Args:
            shop: Shop domain
            order_id: Shopify order ID

        Returns:
            ShopifyOrder with the current financial status

        Raises:
            NotAuthenticated: No session for the shop
            OrderNotFound: Shopify returned 404
            UpstreamError: Any other failure
        """
        data = cls._request(
            shop,
            "GET",
            f"orders/{order_id}.json",
            operation="get_order",
            log_extra={"order_id": order_id},
        )
        return cls._parse_order(data, "get_order")

    @classmethod
    def record_paid_transaction(
        cls,
        shop: str,
        order_id: str,
        amount: str,
        currency: str,
    ) -> dict[str, Any]:
        """
        Record a successful sale transaction, which marks the order paid.

        Args:
            shop: Shop domain
            order_id: Shopify order ID
            amount: Amount received, two-decimal string
            currency: ISO 4217 currency code

        Returns:
            The created transaction dict

        Raises:
            NotAuthenticated: No session for the shop
            OrderNotFound: Shopify returned 404
            UpstreamError: Any other failure
        """
        payload = {
            "transaction": {
                "kind": "sale",
                "status": "success",
                "amount": amount,
                "currency": currency,
                "gateway": getattr(settings, "PAYMENT_GATEWAY_NAME", "fygaro"),
            }
        }
        data = cls._request(
            shop,
            "POST",
            f"orders/{order_id}/transactions.json",
            operation="record_paid_transaction",
            json=payload,
            log_extra={"order_id": order_id, "amount": amount, "currency": currency},
        )
        transaction = data.get("transaction") or {}

        cls.get_logger().info(
            "Recorded paid transaction",
            extra={
                "shop": shop,
                "order_id": order_id,
                "transaction_id": transaction.get("id"),
                "amount": amount,
                "currency": currency,
            },
        )
        return transaction

    @classmethod
    def resolve_status_page_url(cls, shop: str, order_id: str) -> str:
        """
        Look up the buyer-facing order status page.

        Args:
            shop: Shop domain
            order_id: Shopify order ID

        Returns:
            Absolute status page URL

        Raises:
            NotAuthenticated: No session for the shop
            OrderNotFound: No such order, or no status page yet
            UpstreamError: GraphQL errors or transport failure
        """
        data = cls._request(
            shop,
            "POST",
            "graphql.json",
            operation="resolve_status_page_url",
            json={
                "query": STATUS_PAGE_QUERY,
                "variables": {"id": order_gid(order_id)},
            },
            log_extra={"order_id": order_id},
        )

        if data.get("errors"):
            cls.get_logger().error(
                "GraphQL errors from Shopify",
                extra={"shop": shop, "order_id": order_id, "errors": data["errors"]},
            )
            raise UpstreamError(
                "Shopify GraphQL query failed",
                error_code="SHOPIFY_GRAPHQL_ERROR",
                details={"errors": data["errors"]},
            )

        order = (data.get("data") or {}).get("order") or {}
        status_page_url = order.get("statusPageUrl")
        if not status_page_url:
            raise OrderNotFound(
                f"No status page for order {order_id}",
                details={"order_id": order_id},
            )
        return status_page_url

    # =========================================================================
    # HTTP
    # =========================================================================

    @classmethod
    def _request(
        cls,
        shop: str,
        method: str,
        path: str,
        operation: str,
        json: dict[str, Any] | None = None,
        log_extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Perform one authenticated Admin API call and return the JSON body.

        Raises:
            NotAuthenticated: No session for the shop
            UpstreamError: Transport failure, non-2xx status, or invalid JSON
        """
        session = cls.get_session(shop)
        logger = cls.get_logger()

        log_context = {
            "operation": operation,
            "shop": session.shop,
            **(log_extra or {}),
        }

        start_time = time.time()
        logger.debug("Starting Shopify operation", extra=log_context)

        try:
            response = requests.request(
                method,
                f"{cls._base_url(session.shop)}/{path}",
                headers={
                    "X-Shopify-Access-Token": session.access_token,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                json=json,
                timeout=cls._timeout(),
            )
        except requests.Timeout as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Shopify request timed out",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise UpstreamError(
                "Shopify request timed out",
                error_code="SHOPIFY_TIMEOUT",
                is_retryable=True,
            ) from e
        except requests.RequestException as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Connection error to Shopify",
                extra={**log_context, "duration_ms": duration_ms},
                exc_info=True,
            )
            raise UpstreamError(
                "Could not connect to Shopify",
                error_code="SHOPIFY_UNAVAILABLE",
                is_retryable=True,
            ) from e

        duration_ms = (time.time() - start_time) * 1000

        if not response.ok:
            cls._handle_error_response(response, log_context, duration_ms)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "Invalid JSON from Shopify",
                extra={**log_context, "status_code": response.status_code},
            )
            raise UpstreamError(
                "Invalid response from Shopify",
                error_code="SHOPIFY_INVALID_RESPONSE",
                status_code=response.status_code,
            ) from e

        logger.debug(
            "Shopify operation completed",
            extra={
                **log_context,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return data if isinstance(data, dict) else {}

    @classmethod
    def _parse_order(cls, data: dict[str, Any], operation: str) -> ShopifyOrder:
        try:
            return ShopifyOrder.from_response(data["order"])
        except (KeyError, TypeError) as e:
            cls.get_logger().error(
                "Order missing from Shopify response",
                extra={"operation": operation},
            )
            raise UpstreamError(
                "Invalid order response from Shopify",
                error_code="SHOPIFY_INVALID_RESPONSE",
            ) from e

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_error_response(
        cls,
        response: requests.Response,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate a non-2xx Shopify response to a domain exception.

        Raises:
            OrderNotFound: 404
            UpstreamError: Every other status, with is_retryable set for
                429 and 5xx
        """
        logger = cls.get_logger()
        status_code = response.status_code
        log_context = {
            **log_context,
            "status_code": status_code,
            "duration_ms": duration_ms,
        }

        try:
            errors = response.json().get("errors")
        except (ValueError, AttributeError):
            errors = None
        details = {"errors": errors} if errors else {}

        if status_code == 404:
            logger.warning("Shopify resource not found", extra=log_context)
            raise OrderNotFound(
                "Order not found",
                status_code=status_code,
                details=details,
            )

        if status_code in (401, 403):
            logger.critical(
                "Shopify rejected the access token - check the shop session",
                extra=log_context,
            )
            raise UpstreamError(
                "Shopify authentication failed",
                error_code="SHOPIFY_UNAUTHORIZED",
                status_code=status_code,
                details=details,
            )

        if status_code == 422:
            logger.error(
                "Shopify rejected the request",
                extra={**log_context, "errors": errors},
            )
            raise UpstreamError(
                "Shopify rejected the request",
                error_code="SHOPIFY_UNPROCESSABLE",
                status_code=status_code,
                details=details,
            )

        if status_code == 429:
            logger.warning("Rate limited by Shopify", extra=log_context)
            raise UpstreamError(
                "Shopify rate limit exceeded",
                error_code="SHOPIFY_RATE_LIMITED",
                status_code=status_code,
                is_retryable=True,
                details=details,
            )

        if status_code >= 500:
            logger.error("Shopify server error", extra=log_context)
            raise UpstreamError(
                "Shopify service error",
                error_code="SHOPIFY_UNAVAILABLE",
                status_code=status_code,
                is_retryable=True,
                details=details,
            )

        logger.error(
            f"Unexpected status from Shopify: {status_code}",
            extra=log_context,
        )
        raise UpstreamError(
            f"Unexpected Shopify response: {status_code}",
            status_code=status_code,
            details=details,
        )
