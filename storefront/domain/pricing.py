# storefront/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def unit_price_after_discount(price, discount) -> Decimal:
    price = Decimal(str(price))
    discount = Decimal(str(discount or 0))
    return price * (HUNDRED - discount) / HUNDRED


def line_total(price, discount, quantity: int) -> Decimal:
    """price * (1 - discount/100) * quantity, rounded to cents. Display only."""
    return to_money(unit_price_after_discount(price, discount) * quantity)


def cart_totals(lines: Iterable, shipping) -> Tuple[Decimal, Decimal]:
    """Return (subtotal, total) for objects exposing price/discount/quantity.

    Lines are summed unrounded; only the subtotal is rounded to cents.
    """
    exact = sum(
        (unit_price_after_discount(line.price, line.discount) * line.quantity for line in lines),
        Decimal("0"),
    )
    subtotal = to_money(exact)
    return subtotal, to_money(subtotal + to_money(shipping or 0))
