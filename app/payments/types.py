"""
Data types for the payment flow.

This module defines dataclasses passed between the views, the
reconciliation service and the Shopify adapter.

Types:
    PayRequest: Validated /pay parameters
    PaymentRedirect: Where to send the buyer after /pay
    WebhookNotification: Validated webhook payload

Usage:
    from payments.types import PayRequest

    pay_request = PayRequest.from_query(request.GET)
    draft = pay_request.to_order_draft()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from payments.exceptions import InvalidInput, MissingReference
from payments.serializers import ADDRESS_FIELDS, PayRequestSerializer, WebhookPayloadSerializer
from shops.adapters import OrderAddress, OrderDraft

if TYPE_CHECKING:
    from collections.abc import Mapping


def _flatten_errors(errors: Mapping[str, Any]) -> dict[str, list[str]]:
    return {
        name: [str(message) for message in (messages if isinstance(messages, list) else [messages])]
        for name, messages in errors.items()
    }


@dataclass
class PayRequest:
    """
    Validated /pay request.

    Attributes:
        shop: Normalized shop domain
        line_items: Shopify line items, at least one
        email: Buyer email
        shipping_address: Shipping address
        billing_address: Billing address
        note: Order comment
        customer_id: Existing Shopify customer
    """

    shop: str
    line_items: list[dict[str, int]]
    email: str | None = None
    shipping_address: OrderAddress = field(default_factory=OrderAddress)
    billing_address: OrderAddress = field(default_factory=OrderAddress)
    note: str | None = None
    customer_id: int | None = None

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> PayRequest:
        """
        Validate raw query parameters.

        Raises:
            InvalidInput: With field errors in details["errors"]
        """
        serializer = PayRequestSerializer(data=params)
        if not serializer.is_valid():
            raise InvalidInput(
                "Invalid payment request",
                details={"errors": _flatten_errors(serializer.errors)},
            )

        data = serializer.validated_data
        return cls(
            shop=data["shop"],
            line_items=data["line_items"],
            email=data.get("email") or None,
            shipping_address=OrderAddress(
                **{name: data.get(name) or None for name in ADDRESS_FIELDS}
            ),
            billing_address=OrderAddress(
                **{name: data.get(f"billing_{name}") or None for name in ADDRESS_FIELDS}
            ),
            note=data.get("order_comment") or None,
            customer_id=data.get("customer_id"),
        )

    def to_order_draft(self) -> OrderDraft:
        return OrderDraft(
            line_items=self.line_items,
            email=self.email,
            shipping_address=self.shipping_address,
            billing_address=self.billing_address,
            note=self.note,
            customer_id=self.customer_id,
        )


@dataclass
class PaymentRedirect:
    """
    Result of a successful /pay.

    Attributes:
        url: Payment button URL with the signed token
        token: Signed payment request token
        order_id: Shopify order ID (the order reference)
        amount: Normalized amount that was signed
        currency: Order currency
    """

    url: str
    token: str
    order_id: str
    amount: str
    currency: str


@dataclass
class WebhookNotification:
    """
    Verified webhook payload.

    Attributes:
        order_reference: Shopify order ID
        amount: Amount paid, exactly as sent
        currency: Currency paid
        shop: Shop domain from the payload, if any
        raw_payload: Full decoded body
    """

    order_reference: str
    amount: str
    currency: str
    shop: str | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> WebhookNotification:
        """
        Validate a verified payload.

        Raises:
            MissingReference: Neither order_reference nor customReference set
            InvalidInput: Any other field is missing or malformed
        """
        references = (payload.get("order_reference"), payload.get("customReference"))
        if not any(str(ref).strip() for ref in references if ref is not None):
            raise MissingReference("Webhook payload has no order reference")

        serializer = WebhookPayloadSerializer(data=payload)
        if not serializer.is_valid():
            raise InvalidInput(
                "Invalid webhook payload",
                details={"errors": _flatten_errors(serializer.errors)},
            )

        data = serializer.validated_data
        return cls(
            order_reference=data["order_reference"],
            amount=data["amount"],
            currency=data["currency"],
            shop=data.get("shop") or None,
            raw_payload=payload,
        )
