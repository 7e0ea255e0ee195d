"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /admin/                        - Django admin interface (shop sessions)
    /health/                       - Health check endpoint (for load balancers, Docker)
    /pay                           - Create a pending order and redirect to Fygaro
    /confirm                       - Buyer return from Fygaro, redirect to status page
    /webhook                       - Fygaro payment notification (POST)

Payment routes are mounted at the root because the paths are registered
with Fygaro and linked from the storefront theme.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path

from core.views import health_check

urlpatterns = [
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # Payments (pay, confirm, webhook)
    path("", include("payments.urls")),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Payment Bridge Admin"
admin.site.site_title = "Admin Portal"
admin.site.index_title = "Shop sessions"
