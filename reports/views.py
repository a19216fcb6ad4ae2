"""
Report API Views. All read-only.

Implements:
- GET /reports/dashboard/ - Headline metrics
- GET /reports/daily-sales/ - Sales total and count per day
- GET /reports/top-products/ - Top products by units sold
- GET /reports/product-profits/ - Top products by profit
- GET /reports/daily-profit/ - Profit and margin per day
- GET /reports/stock-alerts/ - Variants at or below minimum stock

Date-bounded reports accept either:
    - days: 7, 30 or 90 (last N days including today)
    - start / end: YYYY-MM-DD, inclusive
"""
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import (
    DailyProfitSerializer,
    DailySalesSerializer,
    DashboardSerializer,
    ProductProfitSerializer,
    StockAlertSerializer,
    TopProductSerializer,
)


def _date_range(request):
    """Return (date_range, None), or (None, error response)."""
    params = request.query_params
    try:
        days = int(params['days']) if params.get('days') else None
        start = parse_date(params['start']) if params.get('start') else None
        end = parse_date(params['end']) if params.get('end') else None
        return services.resolve_range(days=days, start=start, end=end), None
    except ValueError as e:
        return None, Response(
            {'error': 'Validation Error', 'detail': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )


class DashboardView(APIView):
    """
    GET: Total sales, today's sales, units sold, average ticket, gross
    profit, average margin, product count, low stock count and pending
    purchase orders.
    """

    def get(self, request):
        date_range, error = _date_range(request)
        if error:
            return error
        return Response(DashboardSerializer(services.dashboard_metrics(date_range)).data)


class DailySalesView(APIView):

    def get(self, request):
        date_range, error = _date_range(request)
        if error:
            return error
        return Response(DailySalesSerializer(services.daily_sales(date_range), many=True).data)


class TopProductsView(APIView):
    """
    GET: Top products by quantity sold, with revenue.
    """

    def get(self, request):
        date_range, error = _date_range(request)
        if error:
            return error
        return Response(TopProductSerializer(services.top_products(date_range), many=True).data)


class ProductProfitsView(APIView):
    """
    GET: Top products by profit, with cost, revenue and margin.
    """

    def get(self, request):
        date_range, error = _date_range(request)
        if error:
            return error
        return Response(ProductProfitSerializer(services.product_profits(date_range), many=True).data)


class DailyProfitView(APIView):

    def get(self, request):
        date_range, error = _date_range(request)
        if error:
            return error
        return Response(DailyProfitSerializer(services.daily_profit(date_range), many=True).data)


class StockAlertsView(APIView):
    """
    GET: Variants with stock at or below their minimum, lowest first.
    """

    def get(self, request):
        return Response(StockAlertSerializer(services.stock_alerts(), many=True).data)
