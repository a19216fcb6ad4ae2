"""
Serializers for report rows.

Reports are plain dicts built by reports.services; these only fix the
output form so money and margins come out as two-decimal strings like
every model-backed endpoint.
"""
from rest_framework import serializers


def _money():
    return serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)


def _margin():
    return serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class DailySalesSerializer(serializers.Serializer):
    date = serializers.DateField(read_only=True)
    total = _money()
    count = serializers.IntegerField(read_only=True)


class TopProductSerializer(serializers.Serializer):
    product = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    revenue = _money()


class ProductProfitSerializer(TopProductSerializer):
    cost_total = _money()
    profit = _money()
    margin = _margin()


class DailyProfitSerializer(serializers.Serializer):
    date = serializers.DateField(read_only=True)
    revenue = _money()
    cost_total = _money()
    profit = _money()
    margin = _margin()


class StockAlertSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True)
    size = serializers.CharField(read_only=True)
    color = serializers.CharField(read_only=True)
    stock = serializers.IntegerField(read_only=True)
    stock_minimum = serializers.IntegerField(read_only=True)
    category = serializers.CharField(read_only=True)


class DashboardSerializer(serializers.Serializer):
    """Headline figures; see reports.services.dashboard_metrics."""
    total_sales = _money()
    sale_count = serializers.IntegerField(read_only=True)
    today_sales = _money()
    units_sold = serializers.IntegerField(read_only=True)
    average_ticket = _money()
    gross_profit = _money()
    average_margin = _margin()
    product_count = serializers.IntegerField(read_only=True)
    low_stock_count = serializers.IntegerField(read_only=True)
    pending_purchase_orders = serializers.IntegerField(read_only=True)
