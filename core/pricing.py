"""
Line item checks and totals shared by quotes, sales and purchase orders.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable, List, Tuple

CENTS = Decimal('0.01')


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(lines: Iterable[Tuple[Decimal, int]], discount_percent=0) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Compute (subtotal, discount, total) for (unit_price, quantity) lines.

    subtotal = sum(unit_price * quantity)
    discount = subtotal * discount_percent / 100, rounded to cents
    total = subtotal - discount
    """
    subtotal = sum((Decimal(price) * quantity for price, quantity in lines), Decimal('0.00'))
    subtotal = to_money(subtotal)
    discount = to_money(subtotal * Decimal(str(discount_percent or 0)) / 100)
    return subtotal, discount, subtotal - discount


def parse_discount_percent(value, error_class) -> Decimal:
    """Return the discount percent as a Decimal in [0, 100]."""
    try:
        percent = Decimal(str(value if value not in (None, '') else 0))
    except (InvalidOperation, ValueError):
        raise error_class("Discount must be a number")
    if percent < 0 or percent > 100:
        raise error_class("Discount must be between 0 and 100 percent")
    return percent


def validate_line_items(items: List[Dict], error_class, label: str = 'Order') -> None:
    """
    Validate line item structure.

    Args:
        items: List of dicts with 'product_id' and 'quantity'
        error_class: Exception class raised on the first problem
        label: Document name used in messages ("Quote", "Sale", ...)
    """
    if not items:
        raise error_class(f"{label} must contain at least one item")

    seen_products = set()
    for idx, item in enumerate(items):
        if 'product_id' not in item:
            raise error_class(f"Item {idx}: missing 'product_id'")
        if 'quantity' not in item:
            raise error_class(f"Item {idx}: missing 'quantity'")

        product_id = item['product_id']
        quantity = item['quantity']

        if not isinstance(quantity, int) or quantity < 1:
            raise error_class(f"Item {idx}: quantity must be a positive integer")

        if product_id in seen_products:
            raise error_class(f"Item {idx}: duplicate product_id {product_id}")
        seen_products.add(product_id)
