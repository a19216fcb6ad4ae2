"""
Celery tasks for the catalog.

Tasks:
    - notify_low_stock: Alert for variants at or below their minimum stock
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def notify_low_stock(self, product_ids):
    """
    Check the given variants after a stock-decrementing write and raise an
    alert for every one at or below its stock minimum.

    In production the alert would be mailed or pushed to the store owner;
    here it is logged.

    Args:
        product_ids: IDs of the variants whose stock just changed

    Returns:
        Dict with the alerted SKUs
    """
    from django.db.models import F
    from inventory.models import Product

    low = Product.objects.filter(
        pk__in=product_ids,
        stock__lte=F('stock_minimum')
    ).order_by('stock')

    alerts = []
    for product in low:
        logger.warning(
            f"[LOW STOCK] {product.name} {product.size}/{product.color} ({product.sku}): "
            f"{product.stock} on hand, minimum {product.stock_minimum}"
        )
        alerts.append(product.sku)

    return {
        'status': 'success',
        'checked': len(product_ids),
        'alerts': alerts
    }
