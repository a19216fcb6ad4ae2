"""
Sale API Views.

Implements:
- GET /sales/ - List sales with optimized queries
- POST /sales/ - Record a sale with atomic stock decrement
- GET /sales/{id}/ - Sale detail with items
- DELETE /sales/{id}/ - Delete a sale (stock is not restored)
"""
import logging

from django.db.models import Q
from django.utils.dateparse import parse_date
from rest_framework import generics, status
from rest_framework.response import Response

from core.operator import Operator
from inventory.services import InsufficientStockError
from .models import Sale
from .serializers import SaleCreateSerializer, SaleListSerializer, SaleSerializer
from .services import SaleValidationError, create_sale, delete_sale

logger = logging.getLogger(__name__)


class SaleListCreateView(generics.ListCreateAPIView):
    """
    GET: List sales, newest first
    POST: Record a new sale

    Query Parameters (GET):
        - payment_method: cash, card, transfer or pending
        - start / end: Date range (YYYY-MM-DD, inclusive)
        - q: Search by client name or phone
    """

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return SaleCreateSerializer
        return SaleListSerializer

    def get_queryset(self):
        queryset = Sale.objects.prefetch_related('items')
        params = self.request.query_params

        payment_method = params.get('payment_method', '').lower()
        if payment_method in Sale.PaymentMethod.values:
            queryset = queryset.filter(payment_method=payment_method)

        start = parse_date(params.get('start', ''))
        if start:
            queryset = queryset.filter(date__gte=start)
        end = parse_date(params.get('end', ''))
        if end:
            queryset = queryset.filter(date__lte=end)

        keyword = params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(client_name__icontains=keyword) | Q(client_phone__icontains=keyword)
            )

        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        """
        Record a sale.

        Returns:
            - 201: Sale created, stock decremented
            - 400: Validation error or insufficient stock (nothing written)
        """
        serializer = SaleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            sale = create_sale(
                Operator.from_request(request),
                dict(data['customer']),
                [dict(item) for item in data['items']],
                data['payment_method'],
                discount_percent=data['discount_percent'],
                notes=data['notes'],
                date=data['date'],
            )
        except (SaleValidationError, InsufficientStockError) as e:
            logger.warning(f"Sale rejected: {e}")
            error = 'Insufficient Stock' if isinstance(e, InsufficientStockError) else 'Validation Error'
            return Response(
                {'error': error, 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )
        except Exception as e:
            logger.exception(f"Unexpected error creating sale: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error saving the sale'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        sale = Sale.objects.select_related('created_by').prefetch_related(
            'items__product'
        ).get(id=sale.id)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


class SaleDetailView(generics.RetrieveDestroyAPIView):
    """
    GET: Retrieve sale details with all items.
    DELETE: Delete the sale and its items.
    """
    serializer_class = SaleSerializer

    def get_queryset(self):
        return Sale.objects.select_related('created_by').prefetch_related(
            'items__product'
        )

    def perform_destroy(self, instance):
        delete_sale(instance)
