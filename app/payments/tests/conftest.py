"""
Pytest fixtures for payment tests.

This module provides fixtures for orders in each financial state, signed
webhook deliveries, and a mocked Shopify adapter.

Usage:
    def test_marks_paid(mock_adapter, pending_order, signed_webhook):
        mock_adapter.get_order.return_value = pending_order
        raw_body, headers = signed_webhook({"order_reference": pending_order.id, ...})
"""

import json
import time
from unittest.mock import patch

import pytest

from payments.signing import compute_webhook_signature
from shops.adapters import ShopifyOrder
from shops.sessions import ShopSessionData, get_session_store


SHOP = "example.myshopify.com"
ORDER_ID = "450789469"


# =============================================================================
# Shop Fixtures
# =============================================================================


@pytest.fixture
def shop():
    """Normalized shop domain used across payment tests."""
    return SHOP


@pytest.fixture
def shop_session(shop):
    """Store a session for the test shop."""
    session = ShopSessionData(shop=shop, access_token="shpat_test_token_1234")
    get_session_store().store(session)
    return session


# =============================================================================
# Order Fixtures
# =============================================================================


@pytest.fixture
def make_order():
    """Create a ShopifyOrder."""

    def _create(
        id: str = ORDER_ID,
        total_price: str = "50.00",
        currency: str = "USD",
        financial_status: str = "pending",
    ) -> ShopifyOrder:
        return ShopifyOrder(
            id=id,
            total_price=total_price,
            currency=currency,
            financial_status=financial_status,
            name="#1001",
        )

    return _create


@pytest.fixture
def pending_order(make_order):
    """Order awaiting payment, total 50.00 USD (charged 65.00)."""
    return make_order()


@pytest.fixture
def paid_order(make_order):
    """Order already paid."""
    return make_order(financial_status="paid")


# =============================================================================
# Adapter Fixtures
# =============================================================================


@pytest.fixture
def mock_adapter():
    """Patch the Shopify adapter used by the reconciliation service."""
    with patch("payments.services.reconciliation_service.ShopifyAdapter") as adapter:
        yield adapter


# =============================================================================
# Webhook Fixtures
# =============================================================================


@pytest.fixture
def webhook_payload():
    """Build a webhook body for the test order."""

    def _create(amount: str = "65.00", currency: str = "USD", **overrides) -> dict:
        payload = {
            "order_reference": ORDER_ID,
            "amount": amount,
            "currency": currency,
            "shop": SHOP,
        }
        payload.update(overrides)
        return {key: value for key, value in payload.items() if value is not None}

    return _create


@pytest.fixture
def signed_webhook(settings):
    """
    Sign a webhook body the way Fygaro does.

    Returns (raw_body, headers) where headers holds Fygaro-Signature and
    Fygaro-Key-ID.
    """

    def _sign(payload, secret: str | None = None, key_id: str = "fyg_key_test", timestamp: int | None = None):
        raw_body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        timestamp = int(time.time()) if timestamp is None else timestamp
        signature = compute_webhook_signature(raw_body, secret or settings.FYGARO_SECRET, timestamp)
        headers = {
            "Fygaro-Signature": f"t={timestamp},v1={signature}",
            "Fygaro-Key-ID": key_id,
        }
        return raw_body, headers

    return _sign
