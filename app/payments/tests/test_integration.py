"""
End-to-end tests for the pay → webhook journey.

Only the HTTP layer to Shopify is mocked; sessions, adapter, service
and views all run for real.
"""

from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

from payments.signing import verify_payment_request
from payments.tests.conftest import ORDER_ID, SHOP
from shops.tests.conftest import make_response


def _order(financial_status="pending"):
    return {
        "order": {
            "id": int(ORDER_ID),
            "name": "#1001",
            "total_price": "50.00",
            "currency": "USD",
            "financial_status": financial_status,
        }
    }


class TestPaymentJourney:
    """Full journey across /pay and /webhook."""

    def test_pay_then_webhook(self, client, settings, shop_session, signed_webhook):
        """Should sign 65.00 for a 50.00 order and mark it paid once."""
        with patch("shops.adapters.shopify_adapter.requests.request") as request:
            request.return_value = make_response(201, _order())

            response = client.get("/pay", {"shop": SHOP, "variant_id": "4455", "quantity": "1"})

        assert response.status_code == 302
        token = parse_qs(urlparse(response["Location"]).query)["jwt"][0]
        claims = verify_payment_request(token, [settings.FYGARO_SECRET], key_id=settings.FYGARO_API_KEY)
        assert claims == {"amount": "65.00", "currency": "USD", "order_reference": ORDER_ID}

        raw_body, headers = signed_webhook({**claims, "shop": SHOP})

        with patch("shops.adapters.shopify_adapter.requests.request") as request:
            request.side_effect = [
                make_response(200, _order()),
                make_response(201, {"transaction": {"id": 1, "kind": "sale", "status": "success"}}),
            ]

            response = client.post("/webhook", data=raw_body, content_type="application/json", headers=headers)

        assert response.status_code == 200
        assert response.content == b"Webhook processed"
        transaction_call = request.call_args_list[1]
        assert transaction_call.args[1].endswith(f"/orders/{ORDER_ID}/transactions.json")
        assert transaction_call.kwargs["json"]["transaction"]["amount"] == "65.00"

        with patch("shops.adapters.shopify_adapter.requests.request") as request:
            request.return_value = make_response(200, _order(financial_status="paid"))

            response = client.post("/webhook", data=raw_body, content_type="application/json", headers=headers)

        assert response.content == b"Already processed"
        assert request.call_count == 1

    def test_pay_without_session(self, client):
        """Should return 401 without calling Shopify."""
        with patch("shops.adapters.shopify_adapter.requests.request") as request:
            response = client.get("/pay", {"shop": SHOP, "variant_id": "4455", "quantity": "1"})

        assert response.status_code == 401
        request.assert_not_called()
