"""
Payment-specific exceptions for the reconciliation flow.

Exception Hierarchy:
    PaymentError (base for the payments domain)
    ├── InvalidInput - Malformed request or payload (ValidationError)
    └── WebhookRejected - Webhook refused, nothing recorded
        ├── InvalidSignature - Signature, key id or timestamp check failed
        ├── MissingReference - Verified payload has no order reference
        └── AmountMismatch - Paid amount/currency differs from the order

Shopify failures are raised by the shops app (NotAuthenticated,
UpstreamError, OrderNotFound) and pass through unchanged.

An order that is no longer pending is not an error: the webhook returns
WebhookOutcome.ALREADY_PROCESSED.

Usage:
    from payments.exceptions import AmountMismatch, WebhookRejected

    try:
        outcome = ReconciliationService.process_webhook(...)
    except WebhookRejected as e:
        return HttpResponse(e.response_message, status=400)
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError, ValidationError


class PaymentError(BaseApplicationError):
    """Base exception for all payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class InvalidInput(PaymentError, ValidationError):
    """
    Raised when request parameters or a payload fail validation.

    Example:
        raise InvalidInput(
            "Invalid payment request",
            details={"errors": {"quantity": ["Ensure this value is greater than or equal to 1."]}}
        )
    """

    default_error_code: str = "INVALID_INPUT"


class WebhookRejected(PaymentError):
    """
    Base for webhook deliveries that are refused.

    Attributes:
        response_message: Plain text returned to the gateway. Never
            includes the internal message or details.
    """

    default_error_code: str = "WEBHOOK_REJECTED"
    response_message: str = "Webhook failed"


class InvalidSignature(WebhookRejected):
    """
    Raised when a signature cannot be verified.

    Covers missing or malformed headers, unknown key ids, stale
    timestamps, and signatures that match none of the configured secrets.
    Also used for payment request tokens.
    """

    default_error_code: str = "INVALID_SIGNATURE"
    response_message: str = "Invalid signature"


class MissingReference(WebhookRejected):
    """Raised when a verified webhook carries no order reference."""

    default_error_code: str = "MISSING_REFERENCE"
    response_message: str = "Missing order reference"


class AmountMismatch(WebhookRejected):
    """
    Raised when the paid amount or currency does not match the order.

    Example:
        raise AmountMismatch(
            "Paid amount does not match order",
            details={"expected": "214.99", "received": "200.00"}
        )
    """

    default_error_code: str = "AMOUNT_MISMATCH"
    response_message: str = "Amount mismatch"


__all__ = [
    "PaymentError",
    "InvalidInput",
    "WebhookRejected",
    "InvalidSignature",
    "MissingReference",
    "AmountMismatch",
]
