"""
Serializers for client and supplier records.
"""
from rest_framework import serializers

from .models import Client, Supplier


class ClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'city',
            'postal_code', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class ClientMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ['id', 'name', 'phone']


class SupplierSerializer(serializers.ModelSerializer):
    order_count = serializers.SerializerMethodField()

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'contact_name', 'email', 'phone', 'address',
            'notes', 'order_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_order_count(self, obj):
        # Annotated by SupplierListCreateView; detail views fall back to a query
        count = getattr(obj, 'order_count', None)
        if count is None:
            count = obj.purchase_orders.count()
        return count

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class SupplierMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name']


class CustomerInputSerializer(serializers.Serializer):
    """
    Who a quote or sale is for.

    Either reference an existing client with client_id, or give a name
    (and optionally phone/email); with create_client the name is saved as
    a new Client first.
    """
    client_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    name = serializers.CharField(allow_blank=True, max_length=200, required=False, default='')
    phone = serializers.CharField(allow_blank=True, max_length=50, required=False, default='')
    email = serializers.EmailField(allow_blank=True, required=False, default='')
    create_client = serializers.BooleanField(required=False, default=False)
