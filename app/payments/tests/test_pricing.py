"""
Tests for amount normalization.
"""

from decimal import Decimal

import pytest

from payments.exceptions import InvalidInput
from payments.pricing import normalize_amount


class TestNormalizeAmount:
    """Tests for normalize_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("50.00", "65.00"),
            ("199.99", "214.99"),
            ("200.00", "200.00"),
            ("200", "200.00"),
            ("0.00", "15.00"),
            ("1234.5", "1234.50"),
            ("10.005", "25.01"),
            (" 99.10 ", "114.10"),
            (150, "165.00"),
            (Decimal("250.125"), "250.13"),
        ],
    )
    def test_examples(self, raw, expected):
        """Should add the surcharge below 200 and format two decimals."""
        assert normalize_amount(raw) == expected

    def test_not_idempotent_below_threshold(self):
        """Should add the surcharge again when given a normalized value."""
        once = normalize_amount("150.00")

        assert once == "165.00"
        assert normalize_amount(once) == "180.00"

    def test_idempotent_at_or_above_threshold(self):
        """Should leave values at or above the threshold unchanged."""
        once = normalize_amount("185.00")

        assert once == "200.00"
        assert normalize_amount(once) == "200.00"

    def test_no_float_drift(self):
        """Should not show binary float artifacts."""
        assert normalize_amount("0.10") == "15.10"
        assert normalize_amount("184.99") == "199.99"

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "Infinity", "-1.00", True, "1,000.00"])
    def test_invalid(self, raw):
        """Should reject values that are not a non-negative number."""
        with pytest.raises(InvalidInput):
            normalize_amount(raw)

    def test_threshold_and_surcharge_from_settings(self, settings):
        """Should read the threshold and surcharge from settings."""
        settings.PAYMENT_SURCHARGE_THRESHOLD = "100"
        settings.PAYMENT_SURCHARGE_AMOUNT = "5.50"

        assert normalize_amount("99.99") == "105.49"
        assert normalize_amount("150.00") == "150.00"
