"""
Sales Models - Sale and SaleItem ledger entries.

A sale is written either directly at the point of sale or by converting an
approved quote. Creating a sale takes its quantities out of stock; deleting
it does not put them back.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from directory.models import Client
from inventory.models import Product


class Sale(models.Model):
    """
    Sale entity. Totals satisfy total = subtotal - discount.

    Payment method:
        - CASH / CARD / TRANSFER: Paid at the counter
        - PENDING: Not yet paid; used for sales converted from quotes
    """

    class PaymentMethod(models.TextChoices):
        CASH = 'cash', 'Cash'
        CARD = 'card', 'Card'
        TRANSFER = 'transfer', 'Transfer'
        PENDING = 'pending', 'Pending'

    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales',
        help_text="Linked client record, if any"
    )
    client_name = models.CharField(max_length=200, help_text="Customer name at sale time")
    client_phone = models.CharField(max_length=50, blank=True, default='')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Discount amount"
    )
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        db_index=True
    )
    notes = models.TextField(blank=True, default='')
    date = models.DateField(
        default=timezone.localdate,
        db_index=True,
        help_text="Business date the sale is reported under"
    )
    quote = models.OneToOneField(
        'quotes.Quote',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sale',
        help_text="Quote this sale was converted from"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Sale'
        verbose_name_plural = 'Sales'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['date', 'payment_method'], name='sale_date_payment_idx'),
        ]

    def __str__(self):
        return f"Sale #{self.id} - {self.client_name} (${self.total})"

    @property
    def item_count(self) -> int:
        return self.items.count()


class SaleItem(models.Model):
    """
    A product line on a sale. line_total = quantity * unit_price.
    """
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent sale"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name='sale_items',
        help_text="Sold product variant"
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity sold"
    )
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Price per unit at time of sale"
    )
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = 'Sale Item'
        verbose_name_plural = 'Sale Items'
        ordering = ['id']

    def __str__(self):
        name = self.product.name if self.product else 'Unknown product'
        return f"{self.quantity}x {name} @ ${self.unit_price}"
