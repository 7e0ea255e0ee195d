"""
Payments app configuration.

This app provides the payment reconciliation flow including:
- Signed payment request tokens and webhook signature checks
- Amount normalization (surcharge below the threshold)
- Pay, confirm and webhook endpoints
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"

    def ready(self):
        """Register system checks."""
        from payments import checks  # noqa: F401
