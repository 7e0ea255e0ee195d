"""
Payment endpoints.

Routes:
    GET  /pay      Create a pending order and redirect to the payment button
    GET  /confirm  Redirect a returning buyer to the order status page
    POST /webhook  Receive Fygaro payment notifications

Responses are plain text or redirects. Callers only ever see generic
messages; details go to the log.
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse, HttpResponseRedirect
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import BaseApplicationError
from payments.exceptions import WebhookRejected
from payments.services import ReconciliationService
from payments.state_machines import WebhookOutcome


logger = logging.getLogger(__name__)

# error_code → (status, body) for /pay failures; anything else is a 500
PAY_ERROR_RESPONSES = {
    "INVALID_INPUT": (400, "Invalid payment request"),
    "INVALID_SHOP": (400, "Invalid payment request"),
    "NOT_AUTHENTICATED": (401, "Shop not authenticated"),
}
PAY_FAILED_RESPONSE = (500, "Payment initialization failed")


@require_GET
def pay(request: HttpRequest) -> HttpResponse:
    """
    Start a payment.

    Returns:
        HttpResponse with status:
        - 302: Redirect to the payment button with a signed token
        - 400: Invalid parameters
        - 401: Shop has no stored session
        - 500: Order creation or signing failed
    """
    try:
        result = ReconciliationService.initiate_payment(request.GET)
    except Exception as e:
        logger.error(
            f"Unexpected error initiating payment: {type(e).__name__}",
            exc_info=True,
        )
        status, body = PAY_FAILED_RESPONSE
        return HttpResponse(body, status=status, content_type="text/plain")

    if result.success:
        return HttpResponseRedirect(result.data.url)

    status, body = PAY_ERROR_RESPONSES.get(result.error_code, PAY_FAILED_RESPONSE)
    return HttpResponse(body, status=status, content_type="text/plain")


@require_GET
def confirm(request: HttpRequest) -> HttpResponse:
    """
    Send a buyer returning from the gateway to their order.

    Always redirects: to the order status page when it can be resolved,
    otherwise to the account page of an installed shop (or "/").
    """
    order_reference = request.GET.get("order_reference") or request.GET.get("customReference")
    url = ReconciliationService.confirm_return(request.GET.get("shop"), order_reference)
    return HttpResponseRedirect(url)


@csrf_exempt
@require_POST
def webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive a Fygaro payment notification.

    Security:
    - The body is only read after the HMAC signature is verified
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - Orders that are no longer pending return 200 "Already processed"
      without recording anything

    Returns:
        HttpResponse with status:
        - 200: "Webhook processed" or "Already processed"
        - 400: "Invalid signature", "Missing order reference",
          "Amount mismatch" or "Webhook failed"
    """
    try:
        outcome = ReconciliationService.process_webhook(
            request.body,
            request.headers.get("Fygaro-Signature", ""),
            request.headers.get("Fygaro-Key-ID", ""),
            shop_hint=request.GET.get("shop"),
        )
    except WebhookRejected as e:
        logger.warning(
            "Webhook rejected",
            extra={"error_code": e.error_code, "error": e.message},
        )
        return HttpResponse(e.response_message, status=400, content_type="text/plain")
    except BaseApplicationError as e:
        logger.error(
            "Webhook processing failed",
            extra={"error_code": e.error_code, "error": e.message},
        )
        return HttpResponse("Webhook failed", status=400, content_type="text/plain")
    except Exception as e:
        logger.error(
            f"Unexpected error processing webhook: {type(e).__name__}",
            exc_info=True,
        )
        return HttpResponse("Webhook failed", status=400, content_type="text/plain")

    if outcome == WebhookOutcome.ALREADY_PROCESSED:
        return HttpResponse("Already processed", status=200, content_type="text/plain")
    return HttpResponse("Webhook processed", status=200, content_type="text/plain")
