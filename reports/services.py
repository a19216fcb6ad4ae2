"""
Reporting Service Layer - read-only aggregations over sales and the catalog.

Every report is recomputed from the database on each call; nothing is
cached or stored. Date-bounded reports take an inclusive (start, end)
range where either bound may be None.

Profit for a sale line is (unit_price - product.cost) * quantity. Lines
whose product was deleted are reported as "Unknown product" with cost 0.
"""
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.db.models import Count, F, Sum
from django.utils import timezone

from core.pricing import to_money
from inventory.models import Product
from orders.services import pending_order_count
from sales.models import Sale, SaleItem

UNKNOWN_PRODUCT = 'Unknown product'
ALLOWED_PERIODS = (7, 30, 90)

DateRange = Tuple[Optional[date], Optional[date]]


def resolve_range(days: Optional[int] = None, start: Optional[date] = None,
                  end: Optional[date] = None) -> DateRange:
    """
    Turn request parameters into an inclusive (start, end) range.

    days (7, 30 or 90) wins over explicit bounds and means the last N
    days up to and including today. No parameters means all time.
    """
    if days:
        if days not in ALLOWED_PERIODS:
            raise ValueError(f"Period must be one of {ALLOWED_PERIODS} days")
        today = timezone.localdate()
        return today - timedelta(days=days - 1), today
    return start, end


def _margin(profit: Decimal, revenue: Decimal) -> Decimal:
    if not revenue:
        return Decimal('0.00')
    return (profit / revenue * 100).quantize(Decimal('0.01'))


def _sales(date_range: DateRange):
    start, end = date_range
    queryset = Sale.objects.all()
    if start:
        queryset = queryset.filter(date__gte=start)
    if end:
        queryset = queryset.filter(date__lte=end)
    return queryset


def _sale_items(date_range: DateRange):
    start, end = date_range
    queryset = SaleItem.objects.all()
    if start:
        queryset = queryset.filter(sale__date__gte=start)
    if end:
        queryset = queryset.filter(sale__date__lte=end)
    return queryset


def _item_rows(date_range: DateRange):
    return _sale_items(date_range).values(
        'quantity', 'unit_price', 'sale__date', 'product__name', 'product__cost'
    )


def daily_sales(date_range: DateRange = (None, None)) -> List[Dict]:
    """Sales total and count per day, oldest first."""
    rows = (
        _sales(date_range)
        .values('date')
        .annotate(total=Sum('total'), count=Count('id'))
        .order_by('date')
    )
    return [
        {'date': row['date'], 'total': to_money(row['total'] or 0), 'count': row['count']}
        for row in rows
    ]


def top_products(date_range: DateRange = (None, None), limit: Optional[int] = None) -> List[Dict]:
    """
    Products by units sold, grouped by product name.

    Returns:
        Up to REPORT_TOP_N dicts with product, quantity and revenue,
        sorted by quantity descending
    """
    limit = limit or settings.REPORT_TOP_N
    grouped = defaultdict(lambda: {'quantity': 0, 'revenue': Decimal('0.00')})

    for row in _item_rows(date_range):
        entry = grouped[row['product__name'] or UNKNOWN_PRODUCT]
        entry['quantity'] += row['quantity']
        entry['revenue'] += row['unit_price'] * row['quantity']

    ranked = sorted(grouped.items(), key=lambda pair: pair[1]['quantity'], reverse=True)
    return [
        {'product': name, 'quantity': data['quantity'], 'revenue': data['revenue']}
        for name, data in ranked[:limit]
    ]


def product_profits(date_range: DateRange = (None, None), limit: Optional[int] = None) -> List[Dict]:
    """
    Profit per product, grouped by product name.

    For each product: quantity, cost_total (cost * quantity), revenue,
    profit (revenue - cost_total) and margin (profit / revenue * 100, 0
    when revenue is 0). Sorted by profit descending, top REPORT_TOP_N.
    """
    limit = limit or settings.REPORT_TOP_N
    grouped = defaultdict(lambda: {
        'quantity': 0, 'cost_total': Decimal('0.00'), 'revenue': Decimal('0.00')
    })

    for row in _item_rows(date_range):
        entry = grouped[row['product__name'] or UNKNOWN_PRODUCT]
        cost = row['product__cost'] or Decimal('0.00')
        entry['quantity'] += row['quantity']
        entry['cost_total'] += cost * row['quantity']
        entry['revenue'] += row['unit_price'] * row['quantity']

    results = []
    for name, data in grouped.items():
        profit = data['revenue'] - data['cost_total']
        results.append({
            'product': name,
            'quantity': data['quantity'],
            'cost_total': data['cost_total'],
            'revenue': data['revenue'],
            'profit': profit,
            'margin': _margin(profit, data['revenue']),
        })

    results.sort(key=lambda row: row['profit'], reverse=True)
    return results[:limit]


def daily_profit(date_range: DateRange = (None, None)) -> List[Dict]:
    """Revenue, cost, profit and margin per sale date, oldest first."""
    grouped = defaultdict(lambda: {'revenue': Decimal('0.00'), 'cost_total': Decimal('0.00')})

    for row in _item_rows(date_range):
        entry = grouped[row['sale__date']]
        cost = row['product__cost'] or Decimal('0.00')
        entry['revenue'] += row['unit_price'] * row['quantity']
        entry['cost_total'] += cost * row['quantity']

    results = []
    for day in sorted(grouped):
        data = grouped[day]
        profit = data['revenue'] - data['cost_total']
        results.append({
            'date': day,
            'revenue': data['revenue'],
            'cost_total': data['cost_total'],
            'profit': profit,
            'margin': _margin(profit, data['revenue']),
        })
    return results


def stock_alerts() -> List[Dict]:
    """Variants at or below their stock minimum, lowest stock first."""
    products = (
        Product.objects.select_related('category')
        .filter(stock__lte=F('stock_minimum'))
        .order_by('stock', 'name')
    )
    return [
        {
            'id': product.id,
            'name': product.name,
            'sku': product.sku,
            'size': product.size,
            'color': product.color,
            'stock': product.stock,
            'stock_minimum': product.stock_minimum,
            'category': product.category.name,
        }
        for product in products
    ]


def dashboard_metrics(date_range: DateRange = (None, None)) -> Dict:
    """
    Headline figures for the dashboard.

    Sales figures respect the date range; catalog and purchase order
    counts are current totals.
    """
    sales = _sales(date_range)
    totals = sales.aggregate(revenue=Sum('total'), count=Count('id'))
    revenue = to_money(totals['revenue'] or 0)
    sale_count = totals['count']

    today_total = to_money(Sale.objects.filter(date=timezone.localdate()).aggregate(
        total=Sum('total')
    )['total'] or 0)

    units_sold = 0
    line_revenue = Decimal('0.00')
    gross_profit = Decimal('0.00')
    for row in _item_rows(date_range):
        cost = row['product__cost'] or Decimal('0.00')
        units_sold += row['quantity']
        line_revenue += row['unit_price'] * row['quantity']
        gross_profit += (row['unit_price'] - cost) * row['quantity']

    average_ticket = (revenue / sale_count).quantize(Decimal('0.01')) if sale_count else Decimal('0.00')

    return {
        'total_sales': revenue,
        'sale_count': sale_count,
        'today_sales': today_total,
        'units_sold': units_sold,
        'average_ticket': average_ticket,
        'gross_profit': to_money(gross_profit),
        'average_margin': _margin(gross_profit, line_revenue),
        'product_count': Product.objects.count(),
        'low_stock_count': Product.objects.filter(stock__lte=F('stock_minimum')).count(),
        'pending_purchase_orders': pending_order_count(),
    }
