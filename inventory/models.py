"""
Inventory Models - Catalog entities for the back office.

Models:
    - Category: Product categorization
    - Product: One stocked size/color variant of a logical product.
      Variants of the same logical product share name, description,
      price, cost, category and base_sku; each carries its own sku,
      size, color and stock figures.
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .sku import variant_key


class Category(models.Model):
    """
    Product category for organizing products.
    """
    name = models.CharField(
        max_length=100,
        unique=True,
        db_index=True,
        help_text="Unique category name"
    )
    description = models.TextField(
        blank=True,
        default='',
        help_text="Optional category description"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A single size/color variant of a logical product.

    The sku is derived from base_sku + size + color (see inventory.sku) and
    is unique across the catalog. Stock is only decremented through
    inventory.services.decrement_stock, which refuses to go below zero.
    """
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Product name shared by all variants"
    )
    description = models.TextField(
        blank=True,
        default='',
        help_text="Optional product description"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Sale price"
    )
    cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Purchase cost, used for profit reports"
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='products',
        help_text="Product category"
    )
    base_sku = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Identifier shared by all variants of the product"
    )
    sku = models.CharField(
        max_length=128,
        unique=True,
        help_text="Variant SKU: base SKU + size + color"
    )
    size = models.CharField(max_length=30)
    color = models.CharField(max_length=50)
    stock = models.IntegerField(
        default=0,
        help_text="Units on hand"
    )
    stock_minimum = models.PositiveIntegerField(
        default=0,
        help_text="Threshold for low stock alerts"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['name', 'size', 'color']
        indexes = [
            models.Index(fields=['category', 'name'], name='product_category_name_idx'),
            models.Index(fields=['stock'], name='product_stock_idx'),
        ]

    def __str__(self):
        return f"{self.name} {self.size}/{self.color} ({self.sku})"

    @property
    def variant_key(self):
        return variant_key(self.size, self.color)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.stock_minimum

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock <= 0

    @property
    def markup_percent(self) -> Decimal:
        """Markup over cost, 0 when the product has no cost."""
        if not self.cost:
            return Decimal('0')
        return ((self.price - self.cost) / self.cost * 100).quantize(Decimal('0.1'))
