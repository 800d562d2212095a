"""
Pricing calculator: pure functions over quantity/unit-price pairs.

Nothing here touches the database or converts currency. Invalid input is
reported as an ``(None, error)`` tuple rather than raised, so callers decide
how to surface it before any write happens.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from .enums import ErrorMessages

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# Column limits: PositiveIntegerField, DecimalField(12, 2) and DecimalField(14, 2)
MAX_QUANTITY = 2147483647
MAX_UNIT_PRICE = Decimal('9999999999.99')
MAX_TOTAL = Decimal('999999999999.99')
HALF_CENT = Decimal('0.005')


def to_money(value) -> Decimal:
    """Round to the currency's minor unit (2 decimals, half-up)"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_line(quantity, unit_price) -> Tuple[bool, Optional[str]]:
    """Check one quantity/unit-price pair"""
    try:
        quantity = Decimal(str(quantity))
        unit_price = Decimal(str(unit_price))
    except (InvalidOperation, TypeError, ValueError):
        return False, "Quantity and unit price must be numbers"
    if not (quantity.is_finite() and unit_price.is_finite()):
        return False, "Quantity and unit price must be numbers"

    if quantity < 0:
        return False, ErrorMessages.NEGATIVE_QUANTITY
    if quantity > MAX_QUANTITY:
        return False, ErrorMessages.QUANTITY_TOO_LARGE.format(limit=MAX_QUANTITY)
    if unit_price < 0:
        return False, ErrorMessages.NEGATIVE_PRICE
    if unit_price >= MAX_UNIT_PRICE + HALF_CENT:
        return False, ErrorMessages.PRICE_TOO_LARGE.format(limit=MAX_UNIT_PRICE)
    return True, None


def line_total(quantity, unit_price) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    quantity x unit_price, rounded to cents.

    The unit price is rounded to cents first, as it is stored, so a line
    total always equals quantity x stored unit price.
    """
    is_valid, error = validate_line(quantity, unit_price)
    if not is_valid:
        return None, error
    total = to_money(Decimal(str(quantity)) * to_money(unit_price))
    if total > MAX_TOTAL:
        return None, ErrorMessages.TOTAL_TOO_LARGE.format(limit=MAX_TOTAL)
    return total, None


def version_total(items: Iterable) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    Sum of line totals.

    ``items`` may hold mappings with ``quantity``/``unit_price`` keys or
    objects with those attributes. The first invalid line aborts the sum.
    """
    total = ZERO
    for item in items:
        if isinstance(item, dict):
            quantity, unit_price = item.get('quantity'), item.get('unit_price')
        else:
            quantity, unit_price = item.quantity, item.unit_price
        amount, error = line_total(quantity, unit_price)
        if error:
            return None, error
        total += amount
    if total > MAX_TOTAL:
        return None, ErrorMessages.TOTAL_TOO_LARGE.format(limit=MAX_TOTAL)
    return to_money(total), None
