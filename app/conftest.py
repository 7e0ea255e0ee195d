"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

TEST_FYGARO_API_KEY = "fyg_key_test"
TEST_FYGARO_SECRET = "fygaro-test-secret-0123456789abcdef"
TEST_FYGARO_BUTTON_URL = "https://fygaro.example/en/pb/test-button/"


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full pay → webhook journeys)
    - test_views.py, test_reconciliation_service.py, etc. → integration
    - test_pricing.py, test_signing.py, test_sessions.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    # Filename patterns for each category
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_admin.py",
        "test_reconciliation_service.py",
        "test_shopify_adapter.py",
    ]

    unit_patterns = [
        "test_pricing.py",
        "test_signing.py",
        "test_sessions.py",
        "test_services.py",
        "test_checks.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filepath = str(item.fspath)
        filename = filepath.split("/")[-1]

        # Check patterns in priority order
        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def payment_settings(settings):
    """
    Deterministic gateway settings and a fresh in-memory session store.

    Changing SHOP_SESSION_STORE resets the shared store instance, so each
    test starts with no shop sessions.
    """
    settings.SHOP_SESSION_STORE = "shops.sessions.InMemorySessionStore"
    settings.DEFAULT_SHOP = ""
    settings.FYGARO_API_KEY = TEST_FYGARO_API_KEY
    settings.FYGARO_SECRET = TEST_FYGARO_SECRET
    settings.FYGARO_BUTTON_URL = TEST_FYGARO_BUTTON_URL
    settings.FYGARO_WEBHOOK_SECRETS = []
    settings.FYGARO_WEBHOOK_KEY_IDS = []
    settings.FYGARO_WEBHOOK_TOLERANCE_SECONDS = 300
    settings.PAYMENT_GATEWAY_NAME = "fygaro"
    settings.PAYMENT_SURCHARGE_THRESHOLD = "200"
    settings.PAYMENT_SURCHARGE_AMOUNT = "15"
    settings.PAYMENT_CONFIRM_FALLBACK_URL = ""
    return settings
