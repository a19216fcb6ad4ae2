"""
Expense Models - operating costs of the business.

Each expense gets a sequence_number (highest existing + 1) when recorded,
used as the human-facing expense number.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Expense(models.Model):

    class Category(models.TextChoices):
        RENT = 'rent', 'Rent'
        TAXES = 'taxes', 'Taxes'
        PAYROLL = 'payroll', 'Payroll'
        SERVICES = 'services', 'Services'
        MATERIALS = 'materials', 'Materials'
        MARKETING = 'marketing', 'Marketing'
        OTHER = 'other', 'Other'

    class PaymentMethod(models.TextChoices):
        CASH = 'cash', 'Cash'
        TRANSFER = 'transfer', 'Transfer'
        CARD = 'card', 'Card'
        CHECK = 'check', 'Check'

    sequence_number = models.PositiveIntegerField(
        unique=True,
        help_text="Human-facing expense number"
    )
    date = models.DateField(default=timezone.localdate, db_index=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        db_index=True
    )
    description = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    provider = models.CharField(max_length=200, blank=True, default='', help_text="Who was paid")
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH
    )
    receipt_ref = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text="Invoice or receipt number"
    )
    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Expense'
        verbose_name_plural = 'Expenses'
        ordering = ['-date', '-sequence_number']
        indexes = [
            models.Index(fields=['category', 'date'], name='expense_category_date_idx'),
        ]

    def __str__(self):
        return f"Expense #{self.sequence_number} - {self.description} (${self.amount})"
