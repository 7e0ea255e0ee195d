"""
URL configuration for the payments app.

Routes:
    - GET /pay - Start a payment
    - GET /confirm - Return from the payment button
    - POST /webhook - Fygaro webhook endpoint

Included at the site root (no trailing slashes) so the gateway's
configured URLs stay stable.

Usage:
    # In config/urls.py
    path("", include("payments.urls")),
"""

from django.urls import path

from payments.views import confirm, pay, webhook

app_name = "payments"

urlpatterns = [
    path("pay", pay, name="pay"),
    path("confirm", confirm, name="confirm"),
    # Webhook endpoints
    path("webhook", webhook, name="webhook"),
]
