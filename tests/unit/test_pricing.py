"""Unit tests for order total calculation."""

from decimal import Decimal

import pytest

from storefront.services.pricing import calculate_totals


@pytest.mark.unit
class TestCalculateTotals:
    """Test suite for calculate_totals."""

    def test_small_order_pays_delivery(self) -> None:
        """Test tax and flat fee on a subtotal under the threshold."""
        totals = calculate_totals(Decimal("28.50"))

        assert totals.subtotal == Decimal("28.50")
        assert totals.tax == Decimal("2.28")
        assert totals.delivery_fee == Decimal("5.99")
        assert totals.total == Decimal("36.77")

    def test_fee_charged_at_exact_threshold(self) -> None:
        """Test the fee is still charged when the subtotal equals 50.00."""
        totals = calculate_totals(Decimal("50.00"))

        assert totals.delivery_fee == Decimal("5.99")
        assert totals.tax == Decimal("4.00")
        assert totals.total == Decimal("59.99")

    def test_fee_waived_above_threshold(self) -> None:
        """Test free delivery once the subtotal is strictly greater than 50.00."""
        totals = calculate_totals(Decimal("50.01"))

        assert totals.delivery_fee == Decimal("0.00")
        assert totals.total == totals.subtotal + totals.tax

    def test_tax_quantized_to_cents(self) -> None:
        """Test tax is rounded to two places."""
        assert calculate_totals(Decimal("10.56")).tax == Decimal("0.84")  # 0.8448
        assert calculate_totals(Decimal("10.69")).tax == Decimal("0.86")  # 0.8552
        assert calculate_totals(Decimal("0.0625")).subtotal == Decimal("0.06")

    def test_tax_rounds_half_up(self) -> None:
        """Test a half cent of tax rounds up."""
        totals = calculate_totals(Decimal("10.00"), tax_rate=Decimal("0.0625"))

        assert totals.tax == Decimal("0.63")  # 0.625

    def test_total_is_sum_of_parts(self) -> None:
        """Test total always equals subtotal + tax + fee."""
        for raw in ["0.00", "3.50", "49.99", "50.00", "120.75"]:
            totals = calculate_totals(Decimal(raw))
            assert totals.total == totals.subtotal + totals.tax + totals.delivery_fee

    def test_overrides(self) -> None:
        """Test explicit rate, threshold and fee take precedence over settings."""
        totals = calculate_totals(
            Decimal("20.00"),
            tax_rate=Decimal("0.10"),
            free_delivery_threshold=Decimal("15.00"),
            delivery_fee=Decimal("3.00"),
        )

        assert totals.tax == Decimal("2.00")
        assert totals.delivery_fee == Decimal("0.00")
        assert totals.total == Decimal("22.00")
