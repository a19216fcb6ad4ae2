"""
Sales Service Layer - Atomic sale creation.

Every sale is written in one transaction:
1. Validate customer, payment method and cart before any write
2. Resolve (or create) the client
3. Insert the Sale, then one SaleItem per cart line
4. Take each line's quantity out of stock with a conditional decrement
5. If any decrement fails, the whole sale rolls back
"""
import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from django.db import transaction
from django.utils import timezone

from core.operator import Operator
from core.pricing import compute_totals, parse_discount_percent, validate_line_items
from directory.services import ClientNotFoundError, resolve_customer
from inventory.models import Product
from inventory.services import decrement_stock, queue_low_stock_check
from .models import Sale, SaleItem

logger = logging.getLogger(__name__)

COUNTER_PAYMENT_METHODS = (
    Sale.PaymentMethod.CASH,
    Sale.PaymentMethod.CARD,
    Sale.PaymentMethod.TRANSFER,
)


class SaleValidationError(Exception):
    """Raised when a sale cannot be recorded as requested."""
    pass


def write_sale(operator: Operator, header: Dict, lines: List[Tuple[Product, int, Decimal]]) -> Sale:
    """
    Insert a sale with its items and take the quantities out of stock.

    Must run inside the caller's transaction.atomic() block; an
    InsufficientStockError from any line rolls back everything written.

    Args:
        operator: Who records the sale
        header: Sale fields (client, client_name, client_phone, subtotal,
            discount, total, payment_method, notes, date, quote)
        lines: (product, quantity, unit_price) tuples

    Raises:
        InsufficientStockError: If a product no longer has enough stock
    """
    sale = Sale.objects.create(created_by_id=operator.user_id, **header)

    SaleItem.objects.bulk_create([
        SaleItem(
            sale=sale,
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            line_total=unit_price * quantity
        )
        for product, quantity, unit_price in lines
    ])

    # Lock rows in product id order to prevent deadlocks
    for product, quantity, _ in sorted(lines, key=lambda line: line[0].pk):
        decrement_stock(product.pk, quantity)
        logger.debug(f"Sale #{sale.id}: took {quantity} of {product.sku} out of stock")

    queue_low_stock_check(product.pk for product, _, _ in lines)
    return sale


def create_sale(
    operator: Operator,
    customer: Dict,
    cart: List[Dict],
    payment_method: str,
    discount_percent=0,
    notes: str = '',
    date=None,
) -> Sale:
    """
    Record a point-of-sale transaction.

    Args:
        operator: Who records the sale
        customer: Dict with 'name' and optional 'phone', 'email',
            'client_id' and 'create_client'
        cart: List of dicts with 'product_id' and 'quantity'
        payment_method: cash, card or transfer
        discount_percent: 0-100, applied to the subtotal
        notes: Free text
        date: Business date, today by default

    Returns:
        The created Sale

    Raises:
        SaleValidationError: If the request is invalid (nothing is written)
        InsufficientStockError: If a product lacks stock (nothing is written)
    """
    if not payment_method:
        raise SaleValidationError("Payment method is required")
    if payment_method not in COUNTER_PAYMENT_METHODS:
        raise SaleValidationError(f"Invalid payment method: {payment_method}")
    validate_line_items(cart, SaleValidationError, label='Sale')
    percent = parse_discount_percent(discount_percent, SaleValidationError)

    with transaction.atomic():
        try:
            client, client_name, client_phone = resolve_customer(customer)
        except ClientNotFoundError as e:
            raise SaleValidationError(str(e))
        if not client_name:
            raise SaleValidationError("Customer name is required")

        product_ids = [item['product_id'] for item in cart]
        products = Product.objects.in_bulk(product_ids)
        missing = set(product_ids) - set(products.keys())
        if missing:
            raise SaleValidationError(f"Products not found: {sorted(missing)}")

        lines = [
            (products[item['product_id']], item['quantity'], products[item['product_id']].price)
            for item in cart
        ]
        subtotal, discount, total = compute_totals(
            [(price, quantity) for _, quantity, price in lines], percent
        )

        sale = write_sale(operator, {
            'client': client,
            'client_name': client_name,
            'client_phone': client_phone,
            'subtotal': subtotal,
            'discount': discount,
            'total': total,
            'payment_method': payment_method,
            'notes': (notes or '').strip(),
            'date': date or timezone.localdate(),
        }, lines)

    logger.info(
        f"Sale #{sale.id} recorded by {operator.name}: {len(lines)} items, "
        f"total ${total} ({payment_method})"
    )
    return sale


def delete_sale(sale: Sale) -> None:
    """
    Delete a sale and its items. Stock is not restored.
    """
    sale_id = sale.id
    with transaction.atomic():
        sale.items.all().delete()
        sale.delete()
    logger.info(f"Deleted sale #{sale_id}")
