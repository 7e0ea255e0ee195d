"""
Reconciliation service linking Shopify orders to Fygaro payments.

This module provides the ReconciliationService which drives the three
stages of a payment:

Stages:
    1. initiate_payment: create a pending Shopify order, normalize its
       total, sign a payment request and build the button redirect
    2. confirm_return: find the order status page for a returning buyer
       (never changes financial state)
    3. process_webhook: verify the gateway notification, check the order
       is still pending and the amount matches, then record the sale

Guarantees:
    - An order goes pending → paid at most once per observed pending state
    - The amount checked at the webhook is computed exactly like the
      amount signed at /pay (payments.pricing.normalize_amount)
    - Nothing in a webhook body is trusted until its signature is verified

Known race:
    Two deliveries for the same order that arrive together can both read
    "pending" before either records its transaction, and both record.
    Shopify is the only store of payment state, so there is no local lock.

Usage:
    from payments.services import ReconciliationService

    result = ReconciliationService.initiate_payment(request.GET)
    if result.success:
        return HttpResponseRedirect(result.data.url)

    outcome = ReconciliationService.process_webhook(
        request.body, signature_header, key_id_header
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from django.conf import settings

from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult

from payments.checks import is_absolute_http_url
from payments.exceptions import AmountMismatch, InvalidInput
from payments.pricing import normalize_amount
from payments.signing import sign_payment_request, verify_webhook_signature
from payments.state_machines import FinancialStatus, WebhookOutcome
from payments.types import PaymentRedirect, PayRequest, WebhookNotification
from shops.adapters import ShopifyAdapter
from shops.exceptions import InvalidShopDomain
from shops.sessions import get_session_store, normalize_shop_domain

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any


class ReconciliationService(BaseService):
    """
    Service for the pay / confirm / webhook flow.

    All methods are class methods - no instance state is maintained.
    Shopify is the source of truth for order state; the service only
    reads it and records a transaction when the webhook allows it.
    """

    # =========================================================================
    # Stage 1: Initiate
    # =========================================================================

    @classmethod
    def initiate_payment(cls, params: Mapping[str, Any]) -> ServiceResult[PaymentRedirect]:
        """
        Create a pending order and build the payment button redirect.

        Args:
            params: Raw /pay query parameters

        Returns:
            ServiceResult with PaymentRedirect on success. On failure
            error_code is INVALID_INPUT, NOT_AUTHENTICATED, NOT_CONFIGURED,
            or the upstream error code.

        Example:
            result = ReconciliationService.initiate_payment(
                {"shop": "example.myshopify.com", "variant_id": "4455", "quantity": "1"}
            )
            result.data.url  # "https://fygaro.example/button?jwt=eyJ..."
        """
        logger = cls.get_logger()

        try:
            pay_request = PayRequest.from_query(params)
        except InvalidInput as e:
            logger.info("Rejected payment request", extra=e.to_dict())
            return ServiceResult.failure(
                e.message,
                error_code=e.error_code,
                errors=e.details.get("errors"),
            )

        log_context = {
            "shop": pay_request.shop,
            "line_item_count": len(pay_request.line_items),
        }

        if not is_absolute_http_url(settings.FYGARO_BUTTON_URL):
            logger.error("FYGARO_BUTTON_URL is not an absolute URL", extra=log_context)
            return ServiceResult.failure(
                "Payment button not configured", error_code="NOT_CONFIGURED"
            )

        try:
            order = ShopifyAdapter.create_order(pay_request.shop, pay_request.to_order_draft())
            amount = normalize_amount(order.total_price)
        except BaseApplicationError as e:
            logger.warning(
                "Payment initialization failed",
                extra={**log_context, "error_code": e.error_code, "error": e.message},
            )
            return ServiceResult.failure(e.message, error_code=e.error_code)

        token = sign_payment_request(
            {
                "amount": amount,
                "currency": order.currency,
                "order_reference": order.id,
            },
            secret=settings.FYGARO_SECRET,
            key_id=settings.FYGARO_API_KEY,
        )
        url = f"{settings.FYGARO_BUTTON_URL}?{urlencode({'jwt': token})}"

        logger.info(
            "Payment initiated",
            extra={
                **log_context,
                "order_id": order.id,
                "total_price": order.total_price,
                "amount": amount,
                "currency": order.currency,
            },
        )

        return ServiceResult.success(
            PaymentRedirect(
                url=url,
                token=token,
                order_id=order.id,
                amount=amount,
                currency=order.currency,
            )
        )

    # =========================================================================
    # Stage 2: Confirm
    # =========================================================================

    @classmethod
    def confirm_return(cls, shop: str | None, order_reference: str | None) -> str:
        """
        Resolve where to send a buyer returning from the gateway.

        Never raises: any failure falls back to fallback_url(shop).

        Args:
            shop: Shop domain from the return URL
            order_reference: Shopify order ID from the return URL

        Returns:
            Order status page URL, or the fallback
        """
        logger = cls.get_logger()

        if not shop or not order_reference or not str(order_reference).isdigit():
            logger.warning(
                "Confirm request missing shop or order reference",
                extra={"shop": shop, "order_reference": order_reference},
            )
            return cls.fallback_url(shop)

        try:
            shop = normalize_shop_domain(shop)
            url = ShopifyAdapter.resolve_status_page_url(shop, str(order_reference))
        except BaseApplicationError as e:
            logger.warning(
                "Could not resolve order status page",
                extra={
                    "shop": shop,
                    "order_reference": order_reference,
                    "error_code": e.error_code,
                },
            )
            return cls.fallback_url(shop)
        except Exception:
            logger.error(
                "Unexpected error resolving order status page",
                extra={"shop": shop, "order_reference": order_reference},
                exc_info=True,
            )
            return cls.fallback_url(shop)

        logger.info(
            "Resolved order status page",
            extra={"shop": shop, "order_reference": order_reference},
        )
        return url

    @classmethod
    def fallback_url(cls, shop: str | None) -> str:
        """
        PAYMENT_CONFIRM_FALLBACK_URL when set, otherwise the account
        orders page of a shop with a stored session, otherwise "/".

        The shop comes from the query string, so only installed shops
        are ever used as a redirect host.
        """
        configured = getattr(settings, "PAYMENT_CONFIRM_FALLBACK_URL", "")
        if configured:
            return configured

        try:
            shop = normalize_shop_domain(shop)
            session = get_session_store().load(shop)
        except InvalidShopDomain:
            return "/"
        except Exception:
            cls.get_logger().error(
                "Could not load shop session for fallback",
                extra={"shop": shop},
                exc_info=True,
            )
            return "/"

        if session is None:
            return "/"
        return f"https://{shop}/account/orders"

    # =========================================================================
    # Stage 3: Webhook
    # =========================================================================

    @classmethod
    def process_webhook(
        cls,
        raw_body: bytes,
        signature_header: str,
        key_id_header: str,
        shop_hint: str | None = None,
    ) -> WebhookOutcome:
        """
        Verify a payment notification and mark the order paid.

        Steps:
            1. Verify signature, key id and timestamp
            2. Validate the payload
            3. Resolve the shop (payload, then shop_hint, then DEFAULT_SHOP)
            4. Fetch the order
            5. Stop if the order is no longer pending
            6. Compare amount and currency with the normalized order total
            7. Record the sale transaction

        Args:
            raw_body: Request body exactly as received
            signature_header: Fygaro-Signature header
            key_id_header: Fygaro-Key-ID header
            shop_hint: Shop from the webhook URL query string

        Returns:
            WebhookOutcome.PROCESSED or WebhookOutcome.ALREADY_PROCESSED

        Raises:
            InvalidSignature: Verification failed
            MissingReference: No order reference in the payload
            InvalidInput: Malformed payload or unresolvable shop
            AmountMismatch: Amount or currency differs from the order
            NotAuthenticated: No session for the shop
            UpstreamError: Shopify call failed
        """
        logger = cls.get_logger()

        payload = verify_webhook_signature(
            raw_body,
            signature_header,
            key_id_header,
            secrets=cls._webhook_secrets(),
            tolerance=settings.FYGARO_WEBHOOK_TOLERANCE_SECONDS,
            accepted_key_ids=settings.FYGARO_WEBHOOK_KEY_IDS,
        )
        notification = WebhookNotification.from_payload(payload)
        shop = cls._resolve_webhook_shop(notification.shop, shop_hint)

        log_context = {
            "shop": shop,
            "order_id": notification.order_reference,
            "key_id": key_id_header,
        }

        order = ShopifyAdapter.get_order(shop, notification.order_reference)
        status = FinancialStatus.from_platform(order.financial_status)

        if status != FinancialStatus.PENDING:
            logger.info(
                "Order already processed, skipping",
                extra={**log_context, "financial_status": order.financial_status},
            )
            return WebhookOutcome.ALREADY_PROCESSED

        expected_amount = normalize_amount(order.total_price)
        if expected_amount != notification.amount or order.currency != notification.currency:
            logger.warning(
                "Webhook amount mismatch",
                extra={
                    **log_context,
                    "expected_amount": expected_amount,
                    "expected_currency": order.currency,
                    "received_amount": notification.amount,
                    "received_currency": notification.currency,
                },
            )
            raise AmountMismatch(
                "Paid amount does not match order",
                details={
                    "expected": f"{expected_amount} {order.currency}",
                    "received": f"{notification.amount} {notification.currency}",
                },
            )

        ShopifyAdapter.record_paid_transaction(
            shop,
            order.id,
            notification.amount,
            notification.currency,
        )

        logger.info(
            "Order marked paid",
            extra={**log_context, "amount": notification.amount, "currency": notification.currency},
        )
        return WebhookOutcome.PROCESSED

    @staticmethod
    def _webhook_secrets() -> list[str]:
        secrets = list(getattr(settings, "FYGARO_WEBHOOK_SECRETS", []) or [])
        if not secrets and settings.FYGARO_SECRET:
            secrets = [settings.FYGARO_SECRET]
        return secrets

    @staticmethod
    def _resolve_webhook_shop(payload_shop: str | None, shop_hint: str | None) -> str:
        for candidate in (payload_shop, shop_hint, getattr(settings, "DEFAULT_SHOP", "")):
            if candidate:
                try:
                    return normalize_shop_domain(candidate)
                except InvalidShopDomain as e:
                    raise InvalidInput(e.message, details=e.details) from e
        raise InvalidInput("Webhook shop could not be resolved")
