"""
Serializers for quote models.
"""
from rest_framework import serializers

from directory.serializers import CustomerInputSerializer
from inventory.serializers import LineItemCreateSerializer, ProductMinimalSerializer
from .models import Quote, QuoteItem


class QuoteItemSerializer(serializers.ModelSerializer):
    """Serializer for QuoteItem with product details."""
    product = ProductMinimalSerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = QuoteItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'line_total']


class QuoteSerializer(serializers.ModelSerializer):
    """
    Serializer for Quote model with nested items.
    Uses prefetch_related for optimized queries.
    """
    items = QuoteItemSerializer(many=True, read_only=True)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    is_editable = serializers.BooleanField(read_only=True)
    created_by_name = serializers.SerializerMethodField()
    sale_id = serializers.SerializerMethodField()

    class Meta:
        model = Quote
        fields = [
            'id', 'client', 'client_name', 'client_phone', 'client_email',
            'status', 'subtotal', 'discount', 'discount_percent', 'total',
            'valid_until', 'notes', 'items', 'is_editable',
            'created_by_name', 'sale_id', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.full_name if obj.created_by else None

    def get_sale_id(self, obj):
        sale = getattr(obj, 'sale', None)
        return sale.id if sale else None


class QuoteListSerializer(serializers.ModelSerializer):
    """Optimized serializer for listing quotes."""
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Quote
        fields = [
            'id', 'client_name', 'client_phone', 'status',
            'total', 'valid_until', 'item_count', 'created_at'
        ]

    def get_item_count(self, obj):
        # Use prefetched items count if available
        if hasattr(obj, '_prefetched_objects_cache') and 'items' in obj._prefetched_objects_cache:
            return len(obj.items.all())
        return obj.items.count()


class QuoteWriteSerializer(serializers.Serializer):
    """
    Serializer for creating or editing quotes.

    Request format:
    {
        "customer": {"name": "Ana Diaz", "phone": "555-0101", "create_client": true},
        "items": [
            {"product_id": 1, "quantity": 2},
            {"product_id": 3, "quantity": 1}
        ],
        "discount_percent": "10",
        "valid_until": "2026-12-31",
        "notes": ""
    }

    valid_until defaults to today + QUOTE_VALIDITY_DAYS.
    """
    customer = CustomerInputSerializer()
    items = LineItemCreateSerializer(many=True)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0
    )
    valid_until = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(allow_blank=True, required=False, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")

        product_ids = [item['product_id'] for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Duplicate products in quote items")

        return value


class QuoteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Quote.Status.choices)
