"""
Payments app: bridges Shopify orders to the Fygaro hosted payment button.

Flow:
    /pay      create a pending order, sign the amount, redirect to Fygaro
    /confirm  send the buyer back to the order status page
    /webhook  verify Fygaro's notification and mark the order paid
"""
