"""
Purchase Order Models - supplier orders and their line items.

Order Status Flow:
    PENDING -> SHIPPED | CANCELLED
    SHIPPED -> RECEIVED | CANCELLED

RECEIVED and CANCELLED are terminal. received_date is stamped on the
transition to RECEIVED and never cleared.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from directory.models import Supplier
from inventory.models import Product


class PurchaseOrder(models.Model):
    """
    Order placed with a supplier.

    Status:
        - PENDING: Created, not yet dispatched by the supplier
        - SHIPPED: On its way
        - RECEIVED: Delivered; received_date is set
        - CANCELLED: Will not be delivered
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SHIPPED = 'shipped', 'Shipped'
        RECEIVED = 'received', 'Received'
        CANCELLED = 'cancelled', 'Cancelled'

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        help_text="Supplier the order is placed with"
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Current order status"
    )
    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of unit_cost * quantity over the items"
    )
    notes = models.TextField(blank=True, default='')
    expected_date = models.DateField(null=True, blank=True, help_text="Expected delivery date")
    received_date = models.DateTimeField(null=True, blank=True, help_text="When the order was received")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_orders'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Purchase Order'
        verbose_name_plural = 'Purchase Orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['supplier', 'status'], name='po_supplier_status_idx'),
            models.Index(fields=['status', 'created_at'], name='po_status_created_idx'),
        ]

    def __str__(self):
        return f"Purchase Order #{self.id} - {self.supplier.name} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status in (self.Status.PENDING, self.Status.SHIPPED)

    @property
    def item_count(self) -> int:
        return self.items.count()


class PurchaseOrderItem(models.Model):
    """
    A product line on a purchase order, at the agreed unit cost.
    """
    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent purchase order"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name='purchase_order_items',
        help_text="Ordered product variant"
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity ordered"
    )
    unit_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Cost per unit agreed with the supplier"
    )

    class Meta:
        verbose_name = 'Purchase Order Item'
        verbose_name_plural = 'Purchase Order Items'
        ordering = ['id']

    def __str__(self):
        name = self.product.name if self.product else 'Unknown product'
        return f"{self.quantity}x {name} @ ${self.unit_cost}"

    @property
    def subtotal(self) -> Decimal:
        """Calculate item subtotal."""
        return self.quantity * self.unit_cost
