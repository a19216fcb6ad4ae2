"""
Serializers for expenses.
"""
from rest_framework import serializers

from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    recorded_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id', 'sequence_number', 'date', 'category', 'description',
            'amount', 'provider', 'payment_method', 'receipt_ref', 'notes',
            'recorded_by_name', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'sequence_number', 'created_at', 'updated_at']

    def get_recorded_by_name(self, obj):
        return obj.recorded_by.full_name if obj.recorded_by else None

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Description is required")
        return value
