"""
Quote Models - Price proposals for clients, convertible to sales.

Quote Status Flow:
    DRAFT -> SENT
    SENT -> APPROVED | REJECTED
    APPROVED -> CONVERTED (only through quotes.services.convert_to_sale)

REJECTED and CONVERTED are terminal. Only DRAFT quotes can be edited.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from directory.models import Client
from inventory.models import Product


class Quote(models.Model):
    """
    Quote entity. Totals satisfy total = subtotal - discount.

    Client name/phone/email are denormalized so the quote still prints
    correctly after the client record changes.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        SENT = 'sent', 'Sent'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        CONVERTED = 'converted', 'Converted'

    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quotes',
        help_text="Linked client record, if any"
    )
    client_name = models.CharField(max_length=200, help_text="Client name at quote time")
    client_phone = models.CharField(max_length=50, blank=True, default='')
    client_email = models.EmailField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
        help_text="Current quote status"
    )
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Discount amount"
    )
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    valid_until = models.DateField(help_text="Last day the quoted prices hold")
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quotes'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Quote'
        verbose_name_plural = 'Quotes'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='quote_status_created_idx'),
        ]

    def __str__(self):
        return f"Quote #{self.id} - {self.client_name} ({self.status})"

    @property
    def is_editable(self) -> bool:
        return self.status == self.Status.DRAFT

    @property
    def discount_percent(self) -> Decimal:
        if not self.subtotal:
            return Decimal('0')
        return (self.discount / self.subtotal * 100).quantize(Decimal('0.01'))


class QuoteItem(models.Model):
    """
    A product line on a quote.

    unit_price is the product price when the line was written; later price
    changes do not affect the quote.
    """
    quote = models.ForeignKey(
        Quote,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent quote"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name='quote_items',
        help_text="Quoted product variant"
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity quoted"
    )
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Price per unit at time of quote"
    )

    class Meta:
        verbose_name = 'Quote Item'
        verbose_name_plural = 'Quote Items'
        ordering = ['id']

    def __str__(self):
        name = self.product.name if self.product else 'Unknown product'
        return f"{self.quantity}x {name} @ ${self.unit_price}"

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price
