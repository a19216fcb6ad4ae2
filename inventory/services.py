"""
Catalog Service Layer - variant saves, category guards and stock movements.

Saving a product writes all of its variants as one unit:
1. Validate shared fields and every variant before touching the database
2. Lock the current variant rows of the product
3. Reconcile by (size, color): update matches in place, insert new
   combinations, delete combinations no longer present
4. Commit everything in a single transaction

Stock is decremented with a conditional UPDATE (stock >= quantity) so two
concurrent sales can never take the same last unit.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .models import Category, Product
from .sku import extract_base_sku, generate_variant_sku, variant_key

logger = logging.getLogger(__name__)


class ProductValidationError(Exception):
    """Raised when a product or one of its variants is invalid."""
    pass


class CategoryInUseError(Exception):
    """Raised when deleting a category that still has products."""
    def __init__(self, category_name: str, product_count: int):
        self.category_name = category_name
        self.product_count = product_count
        super().__init__(
            f"Cannot delete category '{category_name}': "
            f"it has {product_count} associated product(s)"
        )


class InsufficientStockError(Exception):
    """Raised when there's not enough stock for a requested quantity."""
    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}. Available stock: {available}"
        )


# =============================================================================
# Products
# =============================================================================

def _to_decimal(value, field: str) -> Decimal:
    if value in (None, ''):
        return Decimal('0.00')
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ProductValidationError(f"{field} must be a number")
    if amount < 0:
        raise ProductValidationError(f"{field} cannot be negative")
    return amount


def validate_product(data: Dict, variants: List[Dict]) -> List[str]:
    """
    Validate a product and its variants.

    Args:
        data: Shared fields: name, sku (base SKU), category_id, ...
        variants: List of dicts with 'size', 'color', 'stock', 'stock_minimum'

    Returns:
        The generated variant SKUs, in variant order

    Raises:
        ProductValidationError: On the first violated rule
    """
    if not (data.get('name') or '').strip():
        raise ProductValidationError("Name is required")
    if not (data.get('sku') or '').strip():
        raise ProductValidationError("SKU is required")
    if not data.get('category_id'):
        raise ProductValidationError("Category is required")
    if not variants:
        raise ProductValidationError("At least one variant is required")
    if any(not (v.get('size') or '').strip() or not (v.get('color') or '').strip() for v in variants):
        raise ProductValidationError("Every variant must have a size and a color")

    skus = [generate_variant_sku(data['sku'], v['size'], v['color']) for v in variants]
    if len(skus) != len(set(skus)):
        raise ProductValidationError("Duplicate size and color combinations")

    for v in variants:
        for field in ('stock', 'stock_minimum'):
            value = v.get(field) or 0
            if not isinstance(value, int) or value < 0:
                raise ProductValidationError(f"Variant {field} must be a non-negative integer")

    return skus


def save_product(data: Dict, variants: List[Dict], current_base_sku: Optional[str] = None) -> List[Product]:
    """
    Create a product, or edit all variants of an existing one.

    Args:
        data: name, description, price, cost, category_id, sku (base SKU)
        variants: List of dicts with size, color, stock, stock_minimum
        current_base_sku: Base SKU of the product being edited, None to create

    Returns:
        The saved variant rows

    Raises:
        ProductValidationError: If validation fails or a SKU is taken
    """
    skus = validate_product(data, variants)
    base_sku = data['sku'].strip()

    try:
        category = Category.objects.get(pk=data['category_id'])
    except (Category.DoesNotExist, ValueError, TypeError):
        raise ProductValidationError(f"Category {data['category_id']} not found")

    shared = {
        'name': data['name'].strip(),
        'description': (data.get('description') or '').strip(),
        'price': _to_decimal(data.get('price'), 'Price'),
        'cost': _to_decimal(data.get('cost'), 'Cost'),
        'category': category,
        'base_sku': base_sku,
    }

    try:
        with transaction.atomic():
            existing = {}
            if current_base_sku is not None:
                rows = list(
                    Product.objects.select_for_update().filter(base_sku=current_base_sku)
                )
                if not rows:
                    raise ProductValidationError(f"Product {current_base_sku} not found")
                existing = {row.variant_key: row for row in rows}

            own_ids = [row.pk for row in existing.values()]
            if Product.objects.filter(base_sku=base_sku).exclude(pk__in=own_ids).exists():
                raise ProductValidationError(f"SKU {base_sku} is already used by another product")

            taken = sorted(
                Product.objects.filter(sku__in=skus).exclude(pk__in=own_ids).values_list('sku', flat=True)
            )
            if taken:
                raise ProductValidationError(f"SKU already in use: {', '.join(taken)}")

            desired = {variant_key(v['size'], v['color']) for v in variants}
            removed = [row.pk for key, row in existing.items() if key not in desired]
            if removed:
                Product.objects.filter(pk__in=removed).delete()

            created = []
            updated = 0
            for variant, sku in zip(variants, skus):
                fields = dict(
                    shared,
                    sku=sku,
                    size=variant['size'].strip(),
                    color=variant['color'].strip(),
                    stock=variant.get('stock') or 0,
                    stock_minimum=variant.get('stock_minimum') or 0,
                )
                row = existing.get(variant_key(variant['size'], variant['color']))
                if row is None:
                    created.append(Product(**fields))
                    continue
                for attr, value in fields.items():
                    setattr(row, attr, value)
                row.save()
                updated += 1

            Product.objects.bulk_create(created)
    except IntegrityError as e:
        logger.warning(f"Product {base_sku} rejected by the database: {e}")
        raise ProductValidationError("SKU already in use")

    logger.info(
        f"Saved product {base_sku}: {len(created)} variant(s) created, "
        f"{updated} updated, {len(removed)} removed"
    )
    return list(Product.objects.select_related('category').filter(base_sku=base_sku))


def get_product_group(base_sku: str) -> Optional[Dict]:
    """
    Load every variant of a logical product for editing.

    The base SKU is recovered from the first variant's SKU, the way the
    editing form expects it.
    """
    rows = list(Product.objects.select_related('category').filter(base_sku=base_sku))
    if not rows:
        return None

    first = rows[0]
    return {
        'sku': extract_base_sku(first.sku, first.size, first.color),
        'name': first.name,
        'description': first.description,
        'price': first.price,
        'cost': first.cost,
        'category_id': first.category_id,
        'variants': rows,
    }


def delete_product(product: Product) -> None:
    """Delete a single variant row."""
    sku = product.sku
    product.delete()
    logger.info(f"Deleted product variant {sku}")


# =============================================================================
# Categories
# =============================================================================

def delete_category(category: Category) -> None:
    """
    Delete a category that has no products.

    Raises:
        CategoryInUseError: If any product references the category
    """
    product_count = Product.objects.filter(category=category).count()
    if product_count > 0:
        logger.warning(
            f"Refused to delete category {category.name}: {product_count} product(s) attached"
        )
        raise CategoryInUseError(category.name, product_count)

    category.delete()
    logger.info(f"Deleted category {category.name}")


def category_product_count(category: Category) -> int:
    """Product count for display; database errors degrade to 0."""
    try:
        return category.products.count()
    except DatabaseError as e:
        logger.warning(f"Could not count products for category {category.pk}: {e}")
        return 0


# =============================================================================
# Stock
# =============================================================================

def decrement_stock(product_id: int, quantity: int) -> None:
    """
    Take quantity units out of stock if, and only if, enough are on hand.

    Raises:
        InsufficientStockError: If the product has fewer than quantity units
    """
    updated = Product.objects.filter(pk=product_id, stock__gte=quantity).update(
        stock=F('stock') - quantity,
        updated_at=timezone.now()
    )
    if updated:
        return

    current = Product.objects.filter(pk=product_id).values('name', 'stock').first()
    name = current['name'] if current else f"product {product_id}"
    available = current['stock'] if current else 0
    logger.warning(f"Stock decrement refused for {name}: requested {quantity}, available {available}")
    raise InsufficientStockError(product_id, name, quantity, available)


def increment_stock(product_id: int, quantity: int) -> None:
    Product.objects.filter(pk=product_id).update(
        stock=F('stock') + quantity,
        updated_at=timezone.now()
    )


def check_stock(requirements: Iterable) -> None:
    """
    Verify every (product, quantity) pair can be served, without writing.

    Raises:
        InsufficientStockError: For the first product that falls short
    """
    for product, quantity in requirements:
        if product.stock < quantity:
            raise InsufficientStockError(product.pk, product.name, quantity, product.stock)


def queue_low_stock_check(product_ids: Iterable[int]) -> None:
    """Schedule a low-stock alert check once the current transaction commits."""
    ids = sorted(set(product_ids))
    if not ids or not getattr(settings, 'LOW_STOCK_ALERTS_ENABLED', True):
        return

    def _send():
        try:
            from .tasks import notify_low_stock
            notify_low_stock.delay(ids)
        except Exception as e:
            # Alerts are best effort; the sale is already committed
            logger.error(f"Failed to queue low stock check: {e}")

    transaction.on_commit(_send)
