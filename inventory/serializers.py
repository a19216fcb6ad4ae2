"""
Serializers for catalog models.
Provides data validation and JSON conversion for API endpoints.
"""
from rest_framework import serializers

from .models import Category, Product
from .services import category_product_count


class CategorySerializer(serializers.ModelSerializer):
    """Serializer for Category model."""
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'product_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        return category_product_count(obj)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_description(self, value):
        return (value or '').strip()


class CategoryMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for nested category representation."""
    class Meta:
        model = Category
        fields = ['id', 'name']


class ProductSerializer(serializers.ModelSerializer):
    """Serializer for a single variant row with nested category."""
    category = CategoryMinimalSerializer(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    markup_percent = serializers.DecimalField(max_digits=8, decimal_places=1, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'price', 'cost', 'markup_percent',
            'category', 'base_sku', 'sku', 'size', 'color',
            'stock', 'stock_minimum', 'is_low_stock',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProductMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for autocomplete and nested representations."""
    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'size', 'color', 'price', 'stock']


class VariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'sku', 'size', 'color', 'stock', 'stock_minimum']


class VariantInputSerializer(serializers.Serializer):
    """One size/color combination in a product save request."""
    size = serializers.CharField(allow_blank=True, max_length=30)
    color = serializers.CharField(allow_blank=True, max_length=50)
    stock = serializers.IntegerField(min_value=0, default=0)
    stock_minimum = serializers.IntegerField(min_value=0, default=0)


class ProductGroupWriteSerializer(serializers.Serializer):
    """
    Serializer for creating or editing a product with all its variants.

    Request format:
    {
        "name": "Basic T-Shirt",
        "description": "",
        "price": "15.00",
        "cost": "8.00",
        "category_id": 1,
        "sku": "TSH01",
        "variants": [
            {"size": "M", "color": "Black", "stock": 10, "stock_minimum": 2},
            {"size": "L", "color": "Black", "stock": 5, "stock_minimum": 2}
        ]
    }

    Business rules (required fields, duplicate combinations) are enforced
    by inventory.services.validate_product so every caller gets them.
    """
    name = serializers.CharField(allow_blank=True, max_length=200)
    description = serializers.CharField(allow_blank=True, required=False, default='')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    cost = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    category_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    sku = serializers.CharField(allow_blank=True, max_length=64)
    variants = VariantInputSerializer(many=True)


class ProductGroupSerializer(serializers.Serializer):
    """Read representation of a logical product and its variants."""
    sku = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    category_id = serializers.IntegerField()
    variants = VariantSerializer(many=True)


class LineItemCreateSerializer(serializers.Serializer):
    """A product and quantity in a quote, sale or purchase order request."""
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
