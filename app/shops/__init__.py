"""
Shops app: per-tenant Shopify sessions and the Shopify order adapter.

Everything that talks to the Shopify Admin API lives here. The payments
app depends on this app, never the other way around.
"""
