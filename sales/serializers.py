"""
Serializers for sale models.
"""
from rest_framework import serializers

from directory.serializers import CustomerInputSerializer
from inventory.serializers import LineItemCreateSerializer, ProductMinimalSerializer
from .models import Sale, SaleItem
from .services import COUNTER_PAYMENT_METHODS


class SaleItemSerializer(serializers.ModelSerializer):
    """Serializer for SaleItem with product details."""
    product = ProductMinimalSerializer(read_only=True)

    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'line_total']


class SaleSerializer(serializers.ModelSerializer):
    """
    Serializer for Sale model with nested items.
    Uses prefetch_related for optimized queries.
    """
    items = SaleItemSerializer(many=True, read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            'id', 'date', 'client', 'client_name', 'client_phone',
            'subtotal', 'discount', 'total', 'payment_method', 'notes',
            'quote', 'items', 'created_by_name', 'created_at'
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.full_name if obj.created_by else None


class SaleListSerializer(serializers.ModelSerializer):
    """Optimized serializer for listing sales."""
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            'id', 'date', 'client_name', 'payment_method',
            'total', 'item_count', 'quote', 'created_at'
        ]

    def get_item_count(self, obj):
        # Use prefetched items count if available
        if hasattr(obj, '_prefetched_objects_cache') and 'items' in obj._prefetched_objects_cache:
            return len(obj.items.all())
        return obj.items.count()


class SaleCreateSerializer(serializers.Serializer):
    """
    Serializer for creating sales via POST /sales/

    Request format:
    {
        "customer": {"name": "Ana Diaz", "phone": "555-0101"},
        "items": [
            {"product_id": 1, "quantity": 2},
            {"product_id": 3, "quantity": 1}
        ],
        "payment_method": "cash",
        "discount_percent": "5",
        "notes": ""
    }
    """
    customer = CustomerInputSerializer()
    items = LineItemCreateSerializer(many=True)
    payment_method = serializers.ChoiceField(choices=[(m.value, m.label) for m in COUNTER_PAYMENT_METHODS])
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0
    )
    notes = serializers.CharField(allow_blank=True, required=False, default='')
    date = serializers.DateField(required=False, allow_null=True, default=None)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")

        product_ids = [item['product_id'] for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Duplicate products in sale items")

        return value
