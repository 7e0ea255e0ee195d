"""
ShopSession model storing Shopify credentials per shop.

A session is the credential bundle the app needs to call the Admin API on
behalf of one shop: the shop's myshopify.com domain and its offline
access token. Sessions are written by whatever provisions the app
(the OAuth install flow, the Django admin, a deploy script) and only read
by the payment flow.

Usage:
    from shops.models import ShopSession

    ShopSession.objects.update_or_create(
        shop="example.myshopify.com",
        defaults={"access_token": "shpat_xxx", "scope": "read_orders,write_orders"},
    )
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ShopSession(UUIDPrimaryKeyMixin, BaseModel):
    """
    Offline Admin API session for a single shop.

    Fields:
        shop: Normalized shop domain (e.g. "example.myshopify.com")
        access_token: Offline Admin API access token
        scope: Comma separated scopes granted at install time

    Note:
        One row per shop. Re-installing the app overwrites the token.
    """

    shop = models.CharField(
        max_length=255,
        unique=True,
        help_text="Shop domain, e.g. example.myshopify.com",
    )

    access_token = models.CharField(
        max_length=255,
        help_text="Offline Admin API access token",
    )

    scope = models.CharField(
        max_length=512,
        blank=True,
        default="",
        help_text="Comma separated access scopes",
    )

    class Meta:
        ordering = ["shop"]
        verbose_name = "Shop session"
        verbose_name_plural = "Shop sessions"

    def __str__(self) -> str:
        return self.shop
