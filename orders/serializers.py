"""
Serializers for purchase order models.
"""
from rest_framework import serializers

from directory.serializers import SupplierMinimalSerializer
from inventory.serializers import LineItemCreateSerializer, ProductMinimalSerializer
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    """Serializer for PurchaseOrderItem with product details."""
    product = ProductMinimalSerializer(read_only=True)
    subtotal = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'quantity', 'unit_cost', 'subtotal']


class PurchaseOrderItemCreateSerializer(LineItemCreateSerializer):
    """Line item in a purchase order request; unit_cost defaults to the product cost."""
    unit_cost = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )


class PurchaseOrderSerializer(serializers.ModelSerializer):
    """
    Serializer for PurchaseOrder model with nested items.
    Uses prefetch_related for optimized queries.
    """
    supplier = SupplierMinimalSerializer(read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'supplier', 'status', 'total', 'notes',
            'expected_date', 'received_date', 'items', 'is_open',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PurchaseOrderListSerializer(serializers.ModelSerializer):
    """
    Optimized serializer for listing purchase orders.
    Uses select_related for supplier data.
    """
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'supplier_name', 'status', 'total',
            'expected_date', 'received_date', 'item_count', 'created_at'
        ]

    def get_item_count(self, obj):
        # Use prefetched items count if available
        if hasattr(obj, '_prefetched_objects_cache') and 'items' in obj._prefetched_objects_cache:
            return len(obj.items.all())
        return obj.items.count()


class PurchaseOrderCreateSerializer(serializers.Serializer):
    """
    Serializer for creating purchase orders via POST /purchase-orders/

    Request format:
    {
        "supplier_id": 1,
        "items": [
            {"product_id": 1, "quantity": 20, "unit_cost": "6.50"},
            {"product_id": 3, "quantity": 10}
        ],
        "expected_date": "2026-11-01",
        "notes": ""
    }
    """
    supplier_id = serializers.IntegerField(min_value=1)
    items = PurchaseOrderItemCreateSerializer(many=True)
    expected_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(allow_blank=True, required=False, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")

        # Check for duplicate products
        product_ids = [item['product_id'] for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Duplicate products in order items")

        return value


class PurchaseOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.Status.choices)
