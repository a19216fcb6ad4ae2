"""
Purchase Order Service Layer - order creation and status lifecycle.

Creation is atomic:
1. Validate supplier and items before any write
2. Insert the order in PENDING status
3. Insert the items and store the computed total

Status changes lock the order row, check the transition table and stamp
received_date when the order is RECEIVED. With
PURCHASE_ORDER_RECEIPT_RESTOCKS enabled, receiving also adds each line's
quantity to stock in the same transaction.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.operator import Operator
from core.pricing import to_money, validate_line_items
from directory.models import Supplier
from inventory.models import Product
from inventory.services import increment_stock
from .models import PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    PurchaseOrder.Status.PENDING: {PurchaseOrder.Status.SHIPPED, PurchaseOrder.Status.CANCELLED},
    PurchaseOrder.Status.SHIPPED: {PurchaseOrder.Status.RECEIVED, PurchaseOrder.Status.CANCELLED},
    PurchaseOrder.Status.RECEIVED: set(),
    PurchaseOrder.Status.CANCELLED: set(),
}


class PurchaseOrderValidationError(Exception):
    """Raised when purchase order validation fails."""
    pass


class PurchaseOrderStateError(Exception):
    """Raised when a status transition is not allowed."""
    def __init__(self, order_id: int, current: str, requested: str):
        self.order_id = order_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change purchase order #{order_id} from {current} to {requested}"
        )


def _unit_cost(item: Dict, product: Product, idx: int) -> Decimal:
    value = item.get('unit_cost')
    if value in (None, ''):
        return product.cost
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise PurchaseOrderValidationError(f"Item {idx}: unit cost must be a number")
    if cost < 0:
        raise PurchaseOrderValidationError(f"Item {idx}: unit cost cannot be negative")
    return to_money(cost)


def create_purchase_order(
    operator: Operator,
    supplier_id: Optional[int],
    items: List[Dict],
    notes: str = '',
    expected_date=None,
) -> PurchaseOrder:
    """
    Create a PENDING purchase order.

    Args:
        operator: Who places the order
        supplier_id: Supplier to order from
        items: List of dicts with 'product_id', 'quantity' and optional
            'unit_cost' (defaults to the product's cost)
        notes: Free text
        expected_date: Expected delivery date

    Returns:
        The created PurchaseOrder

    Raises:
        PurchaseOrderValidationError: If validation fails (nothing is written)
    """
    if not supplier_id:
        raise PurchaseOrderValidationError("Supplier is required")
    validate_line_items(items, PurchaseOrderValidationError, label='Purchase order')

    try:
        supplier = Supplier.objects.get(id=supplier_id)
    except Supplier.DoesNotExist:
        raise PurchaseOrderValidationError(f"Supplier {supplier_id} not found")

    product_ids = [item['product_id'] for item in items]
    products = Product.objects.in_bulk(product_ids)
    missing_products = set(product_ids) - set(products.keys())
    if missing_products:
        raise PurchaseOrderValidationError(f"Products not found: {sorted(missing_products)}")

    lines = []
    for idx, item in enumerate(items):
        product = products[item['product_id']]
        lines.append((product, item['quantity'], _unit_cost(item, product, idx)))

    with transaction.atomic():
        order = PurchaseOrder.objects.create(
            supplier=supplier,
            status=PurchaseOrder.Status.PENDING,
            notes=(notes or '').strip(),
            expected_date=expected_date,
            created_by_id=operator.user_id
        )

        PurchaseOrderItem.objects.bulk_create([
            PurchaseOrderItem(order=order, product=product, quantity=quantity, unit_cost=unit_cost)
            for product, quantity, unit_cost in lines
        ])

        order.total = sum((unit_cost * quantity for _, quantity, unit_cost in lines), Decimal('0.00'))
        order.save(update_fields=['total', 'updated_at'])

    logger.info(
        f"Purchase order #{order.id} placed with {supplier.name} by {operator.name}: "
        f"{len(lines)} items, total ${order.total}"
    )
    return order


def update_order_status(order: PurchaseOrder, new_status: str) -> PurchaseOrder:
    """
    Advance a purchase order's status.

    received_date is stamped exactly when new_status is RECEIVED; other
    transitions leave it untouched.

    Raises:
        PurchaseOrderStateError: If the transition is not allowed
    """
    with transaction.atomic():
        locked = PurchaseOrder.objects.select_for_update().get(pk=order.pk)
        if new_status not in ALLOWED_TRANSITIONS.get(locked.status, set()):
            logger.warning(
                f"Purchase order #{locked.pk}: illegal transition {locked.status} -> {new_status}"
            )
            raise PurchaseOrderStateError(locked.pk, locked.status, new_status)

        previous = locked.status
        locked.status = new_status
        update_fields = ['status', 'updated_at']
        if new_status == PurchaseOrder.Status.RECEIVED:
            locked.received_date = timezone.now()
            update_fields.append('received_date')
        locked.save(update_fields=update_fields)

        if new_status == PurchaseOrder.Status.RECEIVED and settings.PURCHASE_ORDER_RECEIPT_RESTOCKS:
            _restock(locked)

    logger.info(f"Purchase order #{locked.pk} status changed: {previous} -> {new_status}")
    return locked


def _restock(order: PurchaseOrder) -> None:
    for item in order.items.exclude(product__isnull=True).order_by('product_id'):
        increment_stock(item.product_id, item.quantity)
        logger.debug(f"Purchase order #{order.pk}: added {item.quantity} to product {item.product_id}")


def pending_order_count() -> int:
    return PurchaseOrder.objects.filter(status=PurchaseOrder.Status.PENDING).count()
