"""
Client and Supplier API Views.

Implements:
- GET/POST /clients/ - List (newest first, searchable) and create clients
- GET/PUT/PATCH/DELETE /clients/{id}/
- GET/POST /suppliers/ - List and create suppliers
- GET/PUT/PATCH/DELETE /suppliers/{id}/ - Deletion is admin only and
  refused while purchase orders reference the supplier
"""
import logging

from django.db.models import Count, ProtectedError, Q
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsAdminRoleForDelete
from .models import Client, Supplier
from .serializers import ClientSerializer, SupplierSerializer

logger = logging.getLogger(__name__)


# =============================================================================
# Client Views
# =============================================================================

class ClientListCreateView(generics.ListCreateAPIView):
    """
    GET: List clients, newest first
    POST: Create a client

    Query Parameters (GET):
        - q: Search in name, phone or email
    """
    serializer_class = ClientSerializer

    def get_queryset(self):
        queryset = Client.objects.all()

        keyword = self.request.query_params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(name__icontains=keyword) |
                Q(phone__icontains=keyword) |
                Q(email__icontains=keyword)
            )

        return queryset.order_by('-created_at')


class ClientDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Client.objects.all()
    serializer_class = ClientSerializer

    def perform_destroy(self, instance):
        logger.info(f"Deleting client #{instance.pk} {instance.name}")
        instance.delete()


# =============================================================================
# Supplier Views
# =============================================================================

class SupplierListCreateView(generics.ListCreateAPIView):
    """
    GET: List suppliers with their purchase order counts
    POST: Create a supplier

    Query Parameters (GET):
        - q: Search in name, contact name or email
    """
    serializer_class = SupplierSerializer

    def get_queryset(self):
        queryset = Supplier.objects.annotate(order_count=Count('purchase_orders'))

        keyword = self.request.query_params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(name__icontains=keyword) |
                Q(contact_name__icontains=keyword) |
                Q(email__icontains=keyword)
            )

        return queryset.order_by('name')


class SupplierDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PUT/PATCH: Any authenticated operator
    DELETE: Administrators only; 409 while purchase orders exist
    """
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer
    permission_classes = [IsAuthenticated, IsAdminRoleForDelete]

    def destroy(self, request, *args, **kwargs):
        supplier = self.get_object()
        try:
            supplier.delete()
        except ProtectedError as e:
            order_count = len(e.protected_objects)
            logger.warning(
                f"Refused to delete supplier {supplier.name}: {order_count} purchase order(s) attached"
            )
            return Response(
                {
                    'error': 'Supplier In Use',
                    'detail': f"Cannot delete supplier '{supplier.name}': "
                              f"it has {order_count} associated purchase order(s)"
                },
                status=status.HTTP_409_CONFLICT
            )

        logger.info(f"Deleted supplier {supplier.name}")
        return Response(status=status.HTTP_204_NO_CONTENT)
