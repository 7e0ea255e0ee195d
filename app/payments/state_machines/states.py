"""
State enums for the payment flow.

Orders live in Shopify, so there is no local state machine. The only
state the flow reads is the order's financial status, mapped once at the
boundary:

Order Financial Status:
    pending → paid (exactly once, by the webhook)
    anything else → other (never touched)

Webhook Outcome:
    processed          transaction recorded, order now paid
    already_processed  order was not pending, nothing recorded
"""

from django.db import models


class FinancialStatus(models.TextChoices):
    """
    Financial status of a Shopify order, as seen by the payment flow.

    Shopify reports more statuses (authorized, partially_paid, refunded,
    voided, ...). They all map to OTHER, which the webhook treats like
    PAID: no transaction is recorded.
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    OTHER = "other", "Other"

    @classmethod
    def from_platform(cls, value: str | None) -> "FinancialStatus":
        """Map a raw Shopify financial_status string."""
        if value == cls.PENDING.value:
            return cls.PENDING
        if value == cls.PAID.value:
            return cls.PAID
        return cls.OTHER


class WebhookOutcome(models.TextChoices):
    """Result of a verified webhook delivery."""

    PROCESSED = "processed", "Webhook processed"
    ALREADY_PROCESSED = "already_processed", "Already processed"
