"""
Expense API Views.

Implements:
- GET /expenses/ - List expenses (category and date range filters) with
  the period total
- POST /expenses/ - Record an expense
- GET/PUT/PATCH/DELETE /expenses/{id}/
"""
import logging

from django.db.models import Sum
from django.utils.dateparse import parse_date
from rest_framework import generics, status
from rest_framework.response import Response

from core.operator import Operator
from core.pricing import to_money
from .models import Expense
from .serializers import ExpenseSerializer
from .services import ExpenseValidationError, record_expense

logger = logging.getLogger(__name__)


class ExpenseListCreateView(generics.ListCreateAPIView):
    """
    GET: List expenses, most recent first
    POST: Record an expense

    Query Parameters (GET):
        - category: rent, taxes, payroll, services, materials, marketing, other
        - start / end: Date range (YYYY-MM-DD, inclusive)
    """
    serializer_class = ExpenseSerializer

    def get_queryset(self):
        queryset = Expense.objects.select_related('recorded_by')
        params = self.request.query_params

        category = params.get('category', '').lower()
        if category in Expense.Category.values:
            queryset = queryset.filter(category=category)

        start = parse_date(params.get('start', ''))
        if start:
            queryset = queryset.filter(date__gte=start)
        end = parse_date(params.get('end', ''))
        if end:
            queryset = queryset.filter(date__lte=end)

        return queryset.order_by('-date', '-sequence_number')

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        total = self.filter_queryset(self.get_queryset()).aggregate(total=Sum('amount'))['total']
        response.data['period_total'] = str(to_money(total or 0))
        return response

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = record_expense(Operator.from_request(request), dict(serializer.validated_data))
        except ExpenseValidationError as e:
            logger.warning(f"Expense rejected: {e}")
            return Response(
                {'error': 'Validation Error', 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ExpenseDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Expense.objects.select_related('recorded_by')
    serializer_class = ExpenseSerializer

    def perform_destroy(self, instance):
        logger.info(f"Deleting expense #{instance.sequence_number}")
        instance.delete()
