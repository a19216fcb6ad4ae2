"""
Quote Service Layer - quote lifecycle and conversion to a sale.

Conversion implements the check-then-write protocol atomically:
1. Lock the quote and confirm it is APPROVED
2. Check every line against current stock BEFORE any write; the first
   shortfall aborts with the product name and available stock
3. Insert the Sale (payment pending, totals copied from the quote)
4. Insert one SaleItem per QuoteItem at the quote's snapshotted price
5. Decrement stock per product with a conditional update
6. Mark the quote CONVERTED
All six steps share one transaction: a failure at any step rolls back
the steps before it.
"""
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count
from django.template.loader import render_to_string
from django.utils import timezone

from core.operator import Operator
from core.pricing import compute_totals, parse_discount_percent, validate_line_items
from directory.services import ClientNotFoundError, resolve_customer
from inventory.models import Product
from inventory.services import check_stock
from sales.models import Sale
from sales.services import write_sale
from .models import Quote, QuoteItem

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    Quote.Status.DRAFT: {Quote.Status.SENT},
    Quote.Status.SENT: {Quote.Status.APPROVED, Quote.Status.REJECTED},
    Quote.Status.APPROVED: set(),
    Quote.Status.REJECTED: set(),
    Quote.Status.CONVERTED: set(),
}


class QuoteValidationError(Exception):
    """Raised when quote data is invalid."""
    pass


class QuoteStateError(Exception):
    """Raised when an operation is not allowed in the quote's current status."""
    def __init__(self, quote_id: int, current: str, message: str):
        self.quote_id = quote_id
        self.current = current
        super().__init__(message)


def default_valid_until() -> date:
    return timezone.localdate() + timedelta(days=settings.QUOTE_VALIDITY_DAYS)


def _quote_lines(items: List[Dict]) -> List[QuoteItem]:
    """Build unsaved QuoteItems, snapshotting each product's current price."""
    validate_line_items(items, QuoteValidationError, label='Quote')

    product_ids = [item['product_id'] for item in items]
    products = Product.objects.in_bulk(product_ids)
    missing = set(product_ids) - set(products.keys())
    if missing:
        raise QuoteValidationError(f"Products not found: {sorted(missing)}")

    return [
        QuoteItem(
            product=products[item['product_id']],
            quantity=item['quantity'],
            unit_price=products[item['product_id']].price
        )
        for item in items
    ]


def _apply_header(quote: Quote, customer: Dict, lines: List[QuoteItem], discount_percent,
                  valid_until: Optional[date], notes: str) -> None:
    if valid_until is None:
        raise QuoteValidationError("Valid-until date is required")
    percent = parse_discount_percent(discount_percent, QuoteValidationError)

    try:
        client, client_name, client_phone = resolve_customer(customer)
    except ClientNotFoundError as e:
        raise QuoteValidationError(str(e))
    if not client_name:
        raise QuoteValidationError("Client name is required")

    quote.client = client
    quote.client_name = client_name
    quote.client_phone = client_phone
    quote.client_email = (customer.get('email') or (client.email if client else '')).strip()
    quote.subtotal, quote.discount, quote.total = compute_totals(
        [(line.unit_price, line.quantity) for line in lines], percent
    )
    quote.valid_until = valid_until
    quote.notes = (notes or '').strip()


def create_quote(
    operator: Operator,
    customer: Dict,
    items: List[Dict],
    discount_percent=0,
    valid_until: Optional[date] = None,
    notes: str = '',
) -> Quote:
    """
    Create a DRAFT quote.

    Args:
        operator: Who writes the quote
        customer: Dict with 'name' and optional 'phone', 'email',
            'client_id' and 'create_client'
        items: List of dicts with 'product_id' and 'quantity'
        discount_percent: 0-100, applied to the subtotal
        valid_until: Last day the prices hold
        notes: Free text

    Raises:
        QuoteValidationError: If anything is invalid (nothing is written)
    """
    with transaction.atomic():
        lines = _quote_lines(items)
        quote = Quote(status=Quote.Status.DRAFT, created_by_id=operator.user_id)
        _apply_header(quote, customer, lines, discount_percent, valid_until, notes)
        quote.save()

        for line in lines:
            line.quote = quote
        QuoteItem.objects.bulk_create(lines)

    logger.info(
        f"Quote #{quote.id} created by {operator.name} for {quote.client_name}: "
        f"{len(lines)} items, total ${quote.total}"
    )
    return quote


def update_quote(
    operator: Operator,
    quote: Quote,
    customer: Dict,
    items: List[Dict],
    discount_percent=0,
    valid_until: Optional[date] = None,
    notes: str = '',
) -> Quote:
    """
    Rewrite a DRAFT quote's header and replace its line items.

    Prices are re-snapshotted from the current catalog.

    Raises:
        QuoteStateError: If the quote is no longer a draft
        QuoteValidationError: If anything is invalid (nothing is written)
    """
    with transaction.atomic():
        locked = Quote.objects.select_for_update().get(pk=quote.pk)
        if not locked.is_editable:
            raise QuoteStateError(
                locked.pk, locked.status,
                f"Quote #{locked.pk} is {locked.status}; only draft quotes can be edited"
            )

        lines = _quote_lines(items)
        _apply_header(locked, customer, lines, discount_percent, valid_until, notes)
        locked.save()

        locked.items.all().delete()
        for line in lines:
            line.quote = locked
        QuoteItem.objects.bulk_create(lines)

    logger.info(f"Quote #{locked.id} updated by {operator.name}: total ${locked.total}")
    return locked


def change_status(quote: Quote, new_status: str) -> Quote:
    """
    Move a quote along its state machine.

    CONVERTED is only reachable through convert_to_sale.

    Raises:
        QuoteStateError: If the transition is not allowed
    """
    if new_status == Quote.Status.CONVERTED:
        raise QuoteStateError(
            quote.pk, quote.status, "Use the conversion operation to convert a quote into a sale"
        )

    with transaction.atomic():
        locked = Quote.objects.select_for_update().get(pk=quote.pk)
        if new_status not in ALLOWED_TRANSITIONS.get(locked.status, set()):
            logger.warning(f"Quote #{locked.pk}: illegal transition {locked.status} -> {new_status}")
            raise QuoteStateError(
                locked.pk, locked.status,
                f"Cannot change quote #{locked.pk} from {locked.status} to {new_status}"
            )

        previous = locked.status
        locked.status = new_status
        locked.save(update_fields=['status', 'updated_at'])

    logger.info(f"Quote #{locked.pk} status changed: {previous} -> {new_status}")
    return locked


def convert_to_sale(operator: Operator, quote: Quote) -> Sale:
    """
    Materialize an APPROVED quote as a sale and take its items out of stock.

    Returns:
        The created Sale

    Raises:
        QuoteStateError: If the quote is not APPROVED
        QuoteValidationError: If a quoted product no longer exists
        InsufficientStockError: If any line exceeds current stock; the
            quote stays APPROVED and no sale is created
    """
    with transaction.atomic():
        locked = Quote.objects.select_for_update().get(pk=quote.pk)
        if locked.status != Quote.Status.APPROVED:
            raise QuoteStateError(
                locked.pk, locked.status,
                f"Only approved quotes can be converted; quote #{locked.pk} is {locked.status}"
            )

        items = list(locked.items.select_related('product').order_by('product_id'))
        if not items:
            raise QuoteValidationError(f"Quote #{locked.pk} has no items")
        if any(item.product is None for item in items):
            raise QuoteValidationError(f"Quote #{locked.pk} references a deleted product")

        check_stock((item.product, item.quantity) for item in items)

        sale = write_sale(operator, {
            'client': locked.client,
            'client_name': locked.client_name,
            'client_phone': locked.client_phone,
            'subtotal': locked.subtotal,
            'discount': locked.discount,
            'total': locked.total,
            'payment_method': Sale.PaymentMethod.PENDING,
            'notes': f"Converted from quote #{locked.pk}",
            'date': timezone.localdate(),
            'quote': locked,
        }, [(item.product, item.quantity, item.unit_price) for item in items])

        locked.status = Quote.Status.CONVERTED
        locked.save(update_fields=['status', 'updated_at'])

    logger.info(
        f"Quote #{locked.pk} converted to sale #{sale.id} by {operator.name}: total ${sale.total}"
    )
    return sale


def delete_quote(quote: Quote) -> None:
    """Delete a quote and its items. Stock is never touched."""
    quote_id = quote.pk
    with transaction.atomic():
        quote.items.all().delete()
        quote.delete()
    logger.info(f"Deleted quote #{quote_id}")


def status_counts() -> Dict[str, int]:
    """Number of quotes in each status, zero-filled."""
    counts = {value: 0 for value in Quote.Status.values}
    for row in Quote.objects.values('status').annotate(count=Count('id')):
        counts[row['status']] = row['count']
    counts['total'] = sum(counts.values())
    return counts


def render_quote_document(quote: Quote) -> str:
    """Standalone printable HTML for a quote."""
    items = quote.items.select_related('product').all()
    return render_to_string('quotes/quote_document.html', {
        'business_name': settings.BUSINESS_NAME,
        'quote': quote,
        'items': items,
        'seller': quote.created_by.full_name if quote.created_by else '',
    })
