"""
DRF serializers for payments app.

This module provides serializers for:
- /pay query parameters (order contents, buyer, addresses)
- /webhook payloads (after the signature has been verified)

Related files:
    - types.py: PayRequest, WebhookNotification built from validated data
    - services/reconciliation_service.py: Consumers

Usage:
    serializer = PayRequestSerializer(data=request.GET)
    if serializer.is_valid():
        line_items = serializer.validated_data["line_items"]
"""

from __future__ import annotations

import json

from rest_framework import serializers

from shops.exceptions import InvalidShopDomain
from shops.sessions import normalize_shop_domain

ADDRESS_FIELDS = ("first_name", "last_name", "address1", "city", "zip", "country", "phone")


def _address_field():
    return serializers.CharField(required=False, allow_blank=True, max_length=255)


class PayRequestSerializer(serializers.Serializer):
    """
    Serializer for /pay query parameters.

    Fields:
        shop: Shop domain (normalized)
        email: Buyer email
        variant_id: Single product variant (with quantity)
        quantity: Units of variant_id
        line_items: JSON list of {"variant_id", "quantity"} (overrides
            variant_id/quantity when present)
        customer_id: Existing Shopify customer
        first_name ... phone: Shipping address
        billing_first_name ... billing_phone: Billing address
        order_comment: Note attached to the order

    Validated data always contains line_items as a list of dicts with
    positive integer variant_id and quantity.
    """

    shop = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    variant_id = serializers.IntegerField(required=False, min_value=1)
    quantity = serializers.IntegerField(required=False, min_value=1)
    line_items = serializers.CharField(required=False, allow_blank=True)
    customer_id = serializers.IntegerField(required=False, min_value=1)

    first_name = _address_field()
    last_name = _address_field()
    address1 = _address_field()
    city = _address_field()
    zip = _address_field()
    country = _address_field()
    phone = _address_field()

    billing_first_name = _address_field()
    billing_last_name = _address_field()
    billing_address1 = _address_field()
    billing_city = _address_field()
    billing_zip = _address_field()
    billing_country = _address_field()
    billing_phone = _address_field()

    order_comment = serializers.CharField(required=False, allow_blank=True, max_length=5000)

    def validate_shop(self, value: str) -> str:
        try:
            return normalize_shop_domain(value)
        except InvalidShopDomain as e:
            raise serializers.ValidationError(e.message) from e

    def validate_line_items(self, value: str) -> list[dict[str, int]] | None:
        """Parse the JSON line item list."""
        if not value:
            return None

        try:
            items = json.loads(value)
        except ValueError as e:
            raise serializers.ValidationError("Must be a JSON list.") from e

        if not isinstance(items, list) or not items:
            raise serializers.ValidationError("Must be a non-empty JSON list.")

        return [self._clean_line_item(item) for item in items]

    @staticmethod
    def _clean_line_item(item) -> dict[str, int]:
        if not isinstance(item, dict):
            raise serializers.ValidationError("Each line item must be an object.")

        cleaned = {}
        for key in ("variant_id", "quantity"):
            value = item.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise serializers.ValidationError(f"{key} must be a positive integer.")
            try:
                number = int(value)
            except ValueError as e:
                raise serializers.ValidationError(f"{key} must be a positive integer.") from e
            if number < 1:
                raise serializers.ValidationError(f"{key} must be a positive integer.")
            cleaned[key] = number
        return cleaned

    def validate(self, attrs: dict) -> dict:
        """Resolve line_items from either form."""
        if not attrs.get("line_items"):
            variant_id = attrs.get("variant_id")
            quantity = attrs.get("quantity")
            if variant_id is None or quantity is None:
                raise serializers.ValidationError(
                    "Provide line_items, or variant_id and quantity."
                )
            attrs["line_items"] = [{"variant_id": variant_id, "quantity": quantity}]
        return attrs


class WebhookPayloadSerializer(serializers.Serializer):
    """
    Serializer for verified webhook payloads.

    Fields:
        order_reference: Shopify order ID (alias: customReference)
        amount: Amount paid, compared as an exact string
        currency: ISO 4217 currency code
        shop: Shop domain (optional)

    The reference check happens before this serializer runs so a missing
    reference is reported as such.
    """

    order_reference = serializers.CharField(required=False, allow_blank=True, max_length=64)
    customReference = serializers.CharField(required=False, allow_blank=True, max_length=64)
    amount = serializers.CharField(max_length=32)
    currency = serializers.CharField(max_length=3, min_length=3)
    shop = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs: dict) -> dict:
        reference = attrs.get("order_reference") or attrs.pop("customReference", "")
        attrs.pop("customReference", None)
        if not reference.isdigit():
            raise serializers.ValidationError({"order_reference": "Must be a numeric order ID."})
        attrs["order_reference"] = reference
        return attrs
