from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.config import settings

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    total: Decimal


def calculate_totals(
    subtotal: Decimal,
    tax_rate: Decimal | None = None,
    free_delivery_threshold: Decimal | None = None,
    delivery_fee: Decimal | None = None,
) -> OrderTotals:
    """
    Derive tax, delivery fee and total from a subtotal.

    Tax is rounded half-up to the cent. The delivery fee is waived only when the
    subtotal is strictly greater than the threshold.
    """
    tax_rate = settings.tax_rate if tax_rate is None else tax_rate
    threshold = (
        settings.free_delivery_threshold
        if free_delivery_threshold is None
        else free_delivery_threshold
    )
    flat_fee = settings.delivery_fee if delivery_fee is None else delivery_fee

    subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
    tax = (subtotal * tax_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    fee = Decimal("0.00") if subtotal > threshold else flat_fee.quantize(CENTS)
    return OrderTotals(subtotal=subtotal, tax=tax, delivery_fee=fee, total=subtotal + tax + fee)
