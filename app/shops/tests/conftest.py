"""
Pytest fixtures for shop tests.

Sections:
    - Shop Session Fixtures
    - Mock Shopify HTTP Fixtures
    - Shopify Response Data
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from shops.sessions import ShopSessionData, get_session_store


SHOP = "example.myshopify.com"
ACCESS_TOKEN = "shpat_test_token_1234"


# =============================================================================
# Shop Session Fixtures
# =============================================================================


@pytest.fixture
def shop():
    """Normalized shop domain used across shop tests."""
    return SHOP


@pytest.fixture
def shop_session(shop):
    """Store a session for the test shop in the configured store."""
    session = ShopSessionData(shop=shop, access_token=ACCESS_TOKEN, scope="write_orders")
    get_session_store().store(session)
    return session


# =============================================================================
# Mock Shopify HTTP Fixtures
# =============================================================================


def make_response(status_code: int = 200, json_data=None, json_error: bool = False):
    """Build a mock requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = {} if json_data is None else json_data
    return response


@pytest.fixture
def mock_request():
    """Patch the HTTP call made by ShopifyAdapter."""
    with patch("shops.adapters.shopify_adapter.requests.request") as request:
        yield request


# =============================================================================
# Shopify Response Data
# =============================================================================


@pytest.fixture
def order_data():
    """Create a Shopify REST order dict."""

    def _create(
        id: int = 450789469,
        total_price: str = "50.00",
        currency: str = "USD",
        financial_status: str = "pending",
        **extra,
    ) -> dict:
        return {
            "id": id,
            "name": "#1001",
            "email": "buyer@example.com",
            "total_price": total_price,
            "currency": currency,
            "financial_status": financial_status,
            "note": None,
            **extra,
        }

    return _create
