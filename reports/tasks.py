"""
Celery tasks for reporting.

Tasks:
    - generate_daily_sales_report: Summary of the previous day's sales,
      scheduled daily via Celery Beat
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task
def generate_daily_sales_report(day=None):
    """
    Generate daily sales statistics report.

    Args:
        day: ISO date to report on; defaults to yesterday

    Returns:
        Dict with sale count, revenue, gross profit and units sold
    """
    from django.utils.dateparse import parse_date
    from reports.services import dashboard_metrics, top_products

    report_day = parse_date(day) if day else timezone.localdate() - timedelta(days=1)
    date_range = (report_day, report_day)

    metrics = dashboard_metrics(date_range)
    best_sellers = top_products(date_range, limit=3)

    best_lines = [
        f"      - {row['product']}: {row['quantity']} units (${row['revenue']})"
        for row in best_sellers
    ] or ["      - none"]

    report = f"""
    ===============================================
    DAILY SALES REPORT - {report_day}
    ===============================================
    Sales: {metrics['sale_count']}
    Revenue: ${metrics['total_sales']}
    Gross Profit: ${metrics['gross_profit']} ({metrics['average_margin']}%)
    Units Sold: {metrics['units_sold']}
    Low Stock Variants: {metrics['low_stock_count']}
    Best Sellers:
{chr(10).join(best_lines)}
    ===============================================
    """

    logger.info(report)

    return {
        'date': report_day.isoformat(),
        'sale_count': metrics['sale_count'],
        'revenue': str(metrics['total_sales']),
        'gross_profit': str(metrics['gross_profit']),
        'units_sold': metrics['units_sold'],
    }
