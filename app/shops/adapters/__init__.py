"""
Shopify adapters.

Usage:
    from shops.adapters import OrderDraft, ShopifyAdapter
"""

from shops.adapters.shopify_adapter import (
    OrderAddress,
    OrderDraft,
    ShopifyAdapter,
    ShopifyOrder,
    order_gid,
)

__all__ = [
    "OrderAddress",
    "OrderDraft",
    "ShopifyAdapter",
    "ShopifyOrder",
    "order_gid",
]
