"""
Shops app configuration.

This app provides:
- ShopSession storage (offline access tokens per shop)
- Pluggable session stores (database, cache, in-memory)
- ShopifyAdapter for order REST/GraphQL calls
"""

from django.apps import AppConfig


class ShopsConfig(AppConfig):
    """Configuration for the shops application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "shops"
    verbose_name = "Shops"

    def ready(self):
        """Connect signal receivers."""
        from shops import signals  # noqa: F401
