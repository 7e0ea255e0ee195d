"""
Signed request codec for the Fygaro payment button.

Two schemes are used:

Payment request token (outbound):
    HS256 JWT with header {"alg": "HS256", "typ": "JWT", "kid": <api key>}
    and claims {"amount", "currency", "order_reference"}. Signed with the
    merchant secret; the button rejects tampered amounts.

Webhook signature (inbound):
    Fygaro-Signature: t=<unix timestamp>,v1=<hex hmac>[,v1=<hex hmac>]
    Fygaro-Key-ID: <key id>

    Each v1 is HMAC-SHA256(secret, "<t>." + raw body). Several v1 values
    and several secrets may be present while a secret is being rotated.

All functions are pure: no settings, no I/O. Secrets and tolerances are
passed in by the caller.

Usage:
    from payments.signing import sign_payment_request, verify_webhook_signature

    token = sign_payment_request(
        {"amount": "65.00", "currency": "USD", "order_reference": "4501"},
        secret=settings.FYGARO_SECRET,
        key_id=settings.FYGARO_API_KEY,
    )

    payload = verify_webhook_signature(
        request.body,
        request.headers.get("Fygaro-Signature", ""),
        request.headers.get("Fygaro-Key-ID", ""),
        secrets=["whsec_new", "whsec_old"],
    )
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import TYPE_CHECKING, Any

import jwt

from payments.exceptions import InvalidSignature

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("amount", "currency", "order_reference")
DEFAULT_TOLERANCE_SECONDS = 300


# =============================================================================
# Payment Request Token
# =============================================================================


def sign_payment_request(
    claims: Mapping[str, Any],
    secret: str,
    key_id: str,
    issued_at: bool = False,
) -> str:
    """
    Sign the claims the payment button needs.

    The token carries no iat by default; the gateway treats it as valid
    until used. Two signings of the same claims are therefore identical,
    but callers must not rely on that.

    Args:
        claims: Must contain amount, currency and order_reference
        secret: Merchant signing secret
        key_id: Merchant API key, sent as the kid header
        issued_at: Add an iat claim

    Returns:
        Compact JWT string

    Raises:
        ValueError: A required claim is missing or empty
    """
    missing = [name for name in REQUIRED_CLAIMS if claims.get(name) in (None, "")]
    if missing:
        raise ValueError(f"Missing payment claims: {', '.join(missing)}")

    payload = dict(claims)
    if issued_at:
        payload["iat"] = int(time.time())

    return jwt.encode(
        payload,
        secret,
        algorithm=ALGORITHM,
        headers={"kid": key_id, "typ": "JWT"},
    )


def verify_payment_request(
    token: str,
    secrets: Iterable[str],
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    key_id: str | None = None,
) -> dict[str, Any]:
    """
    Verify a payment request token.

    Args:
        token: Compact JWT
        secrets: Accepted secrets, newest first
        tolerance: Maximum age in seconds when the token has an iat
        key_id: Expected kid header (not checked when None)

    Returns:
        The verified claims

    Raises:
        InvalidSignature: Wrong algorithm, unknown kid, no matching
            secret, stale iat, or missing claims
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise InvalidSignature("Malformed payment token") from e

    if header.get("alg") != ALGORITHM:
        raise InvalidSignature(
            "Unsupported token algorithm",
            details={"alg": header.get("alg")},
        )

    if key_id is not None and header.get("kid") != key_id:
        raise InvalidSignature("Unknown token key id", details={"kid": header.get("kid")})

    claims = None
    for secret in secrets:
        try:
            claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
        except jwt.InvalidSignatureError:
            continue
        except jwt.InvalidTokenError as e:
            raise InvalidSignature("Invalid payment token") from e
        break

    if claims is None:
        raise InvalidSignature("Payment token signature mismatch")

    issued = claims.get("iat")
    if issued is not None and time.time() - issued > tolerance:
        raise InvalidSignature(
            "Payment token expired",
            details={"iat": issued, "tolerance": tolerance},
        )

    missing = [name for name in REQUIRED_CLAIMS if name not in claims]
    if missing:
        raise InvalidSignature("Payment token missing claims", details={"missing": missing})

    return claims


# =============================================================================
# Webhook Signature
# =============================================================================


def compute_webhook_signature(raw_body: bytes, secret: str, timestamp: int) -> str:
    """Return the hex HMAC-SHA256 of "<timestamp>." + raw_body."""
    message = f"{timestamp}.".encode() + raw_body
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def parse_signature_header(signature_header: str) -> tuple[int, list[str]]:
    """
    Split a Fygaro-Signature header into its timestamp and v1 signatures.

    Unknown keys are ignored.

    Raises:
        InvalidSignature: No timestamp, non-integer timestamp, or no v1
    """
    timestamp = None
    signatures: list[str] = []

    for part in signature_header.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as e:
                raise InvalidSignature("Malformed signature timestamp") from e
        elif key == "v1" and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise InvalidSignature("Malformed signature header")

    return timestamp, signatures


def verify_webhook_signature(
    raw_body: bytes,
    signature_header: str,
    key_id_header: str,
    secrets: Iterable[str],
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    accepted_key_ids: Iterable[str] | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """
    Verify a webhook delivery and return its JSON body.

    The body is only parsed after the signature matches.

    Args:
        raw_body: Request body exactly as received
        signature_header: Fygaro-Signature header value
        key_id_header: Fygaro-Key-ID header value
        secrets: Accepted secrets, newest first
        tolerance: Allowed clock difference in seconds, both directions
        accepted_key_ids: Allowed key ids (any non-empty id when empty)
        now: Current unix time (defaults to time.time())

    Returns:
        The decoded JSON object

    Raises:
        InvalidSignature: On any failed check, or a body that is not a
            JSON object
    """
    if not signature_header:
        raise InvalidSignature("Missing signature header")

    if not key_id_header:
        raise InvalidSignature("Missing key id header")

    accepted = list(accepted_key_ids or [])
    if accepted and key_id_header not in accepted:
        raise InvalidSignature("Unknown key id", details={"key_id": key_id_header})

    timestamp, signatures = parse_signature_header(signature_header)

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance:
        raise InvalidSignature(
            "Signature timestamp outside tolerance",
            details={"timestamp": timestamp, "tolerance": tolerance},
        )

    matched = False
    for secret in secrets:
        if not secret:
            continue
        expected = compute_webhook_signature(raw_body, secret, timestamp)
        # no early exit
        for signature in signatures:
            if hmac.compare_digest(expected, signature):
                matched = True

    if not matched:
        raise InvalidSignature("Signature mismatch", details={"key_id": key_id_header})

    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        raise InvalidSignature("Webhook body is not valid JSON") from e

    if not isinstance(payload, dict):
        raise InvalidSignature("Webhook body is not a JSON object")

    logger.debug(
        "Webhook signature verified",
        extra={"key_id": key_id_header, "timestamp": timestamp},
    )
    return payload
