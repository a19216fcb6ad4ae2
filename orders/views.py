"""
Purchase Order API Views.

Implements:
- GET /purchase-orders/ - List orders with optimized queries
- POST /purchase-orders/ - Create an order with atomic transaction
- GET /purchase-orders/{id}/ - Order detail with items
- POST /purchase-orders/{id}/status/ - Advance status (administrators only)
- GET /purchase-orders/stats/ - Order counts and value per status
"""
import logging

from django.db import models
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.operator import Operator
from core.permissions import IsAdminRole
from core.pricing import to_money
from .models import PurchaseOrder
from .serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderListSerializer,
    PurchaseOrderSerializer,
    PurchaseOrderStatusSerializer,
)
from .services import (
    PurchaseOrderStateError,
    PurchaseOrderValidationError,
    create_purchase_order,
    update_order_status,
)

logger = logging.getLogger(__name__)


def _detail_queryset():
    return PurchaseOrder.objects.select_related('supplier').prefetch_related('items__product')


class PurchaseOrderListCreateView(generics.ListCreateAPIView):
    """
    GET: List all purchase orders with optimized queries
    POST: Create a new purchase order with atomic transaction handling

    Query Parameters (GET):
        - supplier_id: Filter by supplier
        - status: Filter by status (pending, shipped, received, cancelled)

    Request Body (POST):
    {
        "supplier_id": 1,
        "items": [
            {"product_id": 1, "quantity": 20, "unit_cost": "6.50"}
        ]
    }
    """

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PurchaseOrderCreateSerializer
        return PurchaseOrderListSerializer

    def get_queryset(self):
        queryset = PurchaseOrder.objects.select_related('supplier').prefetch_related('items')

        supplier_id = self.request.query_params.get('supplier_id')
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)

        status_filter = self.request.query_params.get('status', '').lower()
        if status_filter in PurchaseOrder.Status.values:
            queryset = queryset.filter(status=status_filter)

        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        """
        Create purchase order with atomic transaction handling.

        Returns:
            - 201: Order created in pending status
            - 400: Validation error
        """
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_purchase_order(
                Operator.from_request(request),
                data['supplier_id'],
                [dict(item) for item in data['items']],
                notes=data['notes'],
                expected_date=data['expected_date'],
            )
        except PurchaseOrderValidationError as e:
            logger.warning(f"Purchase order validation failed: {e}")
            return Response(
                {'error': 'Validation Error', 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )
        except Exception as e:
            logger.exception(f"Unexpected error creating purchase order: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error saving the purchase order'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        order = _detail_queryset().get(id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(generics.RetrieveAPIView):
    """
    GET: Retrieve purchase order details with all items.

    Uses prefetch_related for optimized item loading.
    """
    serializer_class = PurchaseOrderSerializer

    def get_queryset(self):
        return _detail_queryset()


class PurchaseOrderStatusView(APIView):
    """
    POST: Advance the status of a purchase order.

    Request Body:
        {"status": "shipped"}
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, pk):
        order = get_object_or_404(PurchaseOrder, pk=pk)
        serializer = PurchaseOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = update_order_status(order, serializer.validated_data['status'])
        except PurchaseOrderStateError as e:
            return Response(
                {'error': 'Invalid Status', 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )
        except Exception as e:
            logger.exception(f"Unexpected error updating purchase order #{pk}: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Error updating the purchase order'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(PurchaseOrderSerializer(_detail_queryset().get(id=order.id)).data)


class PurchaseOrderStatsView(APIView):
    """
    GET: Purchase order statistics for a supplier or overall.

    Query Parameters:
        - supplier_id: Filter stats by supplier (optional)
    """

    def get(self, request):
        queryset = PurchaseOrder.objects.all()

        supplier_id = request.query_params.get('supplier_id')
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)

        stats = queryset.aggregate(
            total_orders=Count('id'),
            pending_orders=Count('id', filter=models.Q(status=PurchaseOrder.Status.PENDING)),
            shipped_orders=Count('id', filter=models.Q(status=PurchaseOrder.Status.SHIPPED)),
            received_orders=Count('id', filter=models.Q(status=PurchaseOrder.Status.RECEIVED)),
            cancelled_orders=Count('id', filter=models.Q(status=PurchaseOrder.Status.CANCELLED)),
            open_value=Sum('total', filter=models.Q(
                status__in=[PurchaseOrder.Status.PENDING, PurchaseOrder.Status.SHIPPED]
            )),
        )

        stats['open_value'] = str(to_money(stats['open_value'] or 0))

        return Response(stats)
