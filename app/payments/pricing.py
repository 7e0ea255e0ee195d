"""
Amount normalization.

Orders below PAYMENT_SURCHARGE_THRESHOLD get PAYMENT_SURCHARGE_AMOUNT
added before they are charged. The same function produces the signed
amount at /pay and the expected amount at /webhook, so both always agree.

    normalize_amount("50.00")  == "65.00"
    normalize_amount("199.99") == "214.99"
    normalize_amount("200.00") == "200.00"

Not idempotent below the threshold: normalize_amount("165.00") is
"180.00". Always pass the order's own total, never a normalized value.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings

from payments.exceptions import InvalidInput

if TYPE_CHECKING:
    from typing import Any

CENTS = Decimal("0.01")


def _setting_amount(name: str, default: str) -> Decimal:
    return Decimal(str(getattr(settings, name, default)))


def parse_amount(raw_amount: Any) -> Decimal:
    """
    Parse a money value without going through float.

    Raises:
        InvalidInput: Empty, non-numeric, non-finite or negative value
    """
    if raw_amount is None or isinstance(raw_amount, bool):
        raise InvalidInput("Amount is required")

    try:
        amount = Decimal(str(raw_amount).strip())
    except InvalidOperation as e:
        raise InvalidInput("Amount is not a number", details={"amount": str(raw_amount)}) from e

    if not amount.is_finite():
        raise InvalidInput("Amount is not finite", details={"amount": str(raw_amount)})

    if amount < 0:
        raise InvalidInput("Amount is negative", details={"amount": str(raw_amount)})

    return amount


def normalize_amount(raw_amount: Any) -> str:
    """
    Apply the small-order surcharge and format with two decimals.

    Args:
        raw_amount: Order total as a string, int or Decimal

    Returns:
        Two-decimal string, e.g. "65.00"

    Raises:
        InvalidInput: If raw_amount is not a valid non-negative number
    """
    amount = parse_amount(raw_amount)

    threshold = _setting_amount("PAYMENT_SURCHARGE_THRESHOLD", "200")
    if amount < threshold:
        amount += _setting_amount("PAYMENT_SURCHARGE_AMOUNT", "15")

    try:
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidInput("Amount is out of range", details={"amount": str(raw_amount)}) from e

    return format(amount, "f")
